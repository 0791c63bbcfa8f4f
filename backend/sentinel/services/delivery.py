"""Report delivery and command listening over Telegram.

Outbound: send with a fixed number of sequential attempts.
Inbound: getUpdates long polling with a cursor that always moves past
every update it has seen, whether or not the update was acted on.
"""

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from sentinel.clients.telegram import TelegramAPIError, TelegramClient, Update

logger = logging.getLogger(__name__)

# Type alias for the command callback
CommandCallback = Callable[[], Awaitable[None]]

# Errors that trigger a retry (transport and protocol alike)
DELIVERY_ERRORS = (httpx.HTTPError, TelegramAPIError)


class DeliveryService:
    """
    Send reports to one chat and listen for one command from it.

    The cursor (`offset`) is owned by `listen()`; nothing else writes it.
    `send_with_retry()` keeps no state between calls and may be used
    from the scheduler and the poll loop at the same time.
    """

    def __init__(
        self,
        client: TelegramClient,
        chat_id: str,
        command: str,
        ack_text: str = "⏳ Fetching live data, please wait...",
        max_attempts: int = 3,
        poll_timeout: int = 30,
        retry_delay: float = 5.0,
    ):
        self.client = client
        self.chat_id = str(chat_id)
        self.command = command
        self.ack_text = ack_text
        self.max_attempts = max_attempts
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.offset = 0

    async def send(self, text: str) -> None:
        """Send one message, single attempt."""
        await self.client.send_message(self.chat_id, text)

    async def send_with_retry(self, text: str, max_attempts: int | None = None) -> None:
        """
        Send a message, retrying immediately on failure.

        Attempts are strictly sequential and capped at `max_attempts`.
        Returns on the first success; after the last failed attempt the
        last error is raised.
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {attempts}")

        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                await self.send(text)
                if attempt > 1:
                    logger.info("Message sent on attempt %d/%d", attempt, attempts)
                return
            except DELIVERY_ERRORS as e:
                last_error = e
                logger.warning("Send attempt %d/%d failed: %s", attempt, attempts, e)

        raise last_error

    async def skip_backlog(self) -> int:
        """Move the cursor past updates that piled up while offline.

        Fetches only the most recent pending update without blocking and
        discards it. On failure the cursor stays at 0.
        """
        try:
            updates = await self.client.get_updates(offset=-1, timeout=0)
        except DELIVERY_ERRORS as e:
            logger.warning("Failed to skip old updates: %s", e)
            return self.offset

        if updates:
            self.offset = max(self.offset, updates[-1].update_id + 1)
            logger.info("Skipped backlog, starting at update %d", self.offset)
        return self.offset

    async def listen(self, stop: asyncio.Event, on_command: CommandCallback) -> None:
        """
        Long-poll for commands until `stop` is set.

        `stop` is checked before each fetch; a fetch already in flight
        is allowed to finish (at most `poll_timeout` seconds).
        """
        await self.skip_backlog()
        logger.info("Telegram polling started, waiting for '%s'", self.command)

        while not stop.is_set():
            try:
                updates = await self.client.get_updates(
                    offset=self.offset, timeout=self.poll_timeout
                )
            except DELIVERY_ERRORS as e:
                logger.warning("Failed to fetch Telegram updates: %s", e)
                await self._wait(stop, self.retry_delay)
                continue

            await self.process_updates(updates, on_command)

        logger.info("Telegram polling stopped")

    async def process_updates(
        self, updates: list[Update], on_command: CommandCallback
    ) -> None:
        """Advance the cursor past a batch and dispatch matching commands."""
        for update in updates:
            # Always advance, or a filtered update is redelivered forever
            self.offset = max(self.offset, update.update_id + 1)

            message = update.message
            if message is None or not message.text:
                continue
            if str(message.chat.id) != self.chat_id:
                logger.debug("Ignoring update %d from chat %s", update.update_id, message.chat.id)
                continue
            if message.text != self.command:
                continue

            logger.info("Received command: %s", self.command)
            await self._dispatch(on_command)

    async def _dispatch(self, on_command: CommandCallback) -> None:
        try:
            await self.send(self.ack_text)
        except DELIVERY_ERRORS as e:
            logger.warning("Failed to acknowledge command: %s", e)

        try:
            await on_command()
        except Exception:
            logger.exception("Command callback failed")

    @staticmethod
    async def _wait(stop: asyncio.Event, delay: float) -> None:
        """Sleep for `delay` seconds, returning early if `stop` is set."""
        try:
            await asyncio.wait_for(stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
