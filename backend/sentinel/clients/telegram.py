"""Telegram Bot API client for sending reports and long polling commands."""

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError


class TelegramAPIError(Exception):
    """Telegram answered, but not with a usable `ok: true` payload."""


class Chat(BaseModel):
    id: int


class Message(BaseModel):
    chat: Chat
    text: str | None = None


class Update(BaseModel):
    """A single getUpdates entry. Non-message updates have message=None."""

    update_id: int
    message: Message | None = None


class TelegramClient:
    """Async Telegram Bot API client, optionally routed through a proxy."""

    BASE_URL = "https://api.telegram.org"

    # Extra HTTP time on top of the server-side long-poll window
    POLL_GRACE = 10.0

    def __init__(
        self,
        bot_token: str,
        proxy: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.bot_token = bot_token
        self.proxy = proxy
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{self.BASE_URL}/bot{self.bot_token}",
                timeout=self.timeout,
                proxy=self.proxy,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Call a Bot API method and return its `result`."""
        client = await self._get_client()
        response = await client.request(
            method,
            endpoint,
            params=params,
            json=json,
            timeout=timeout if timeout is not None else self.timeout,
        )
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as e:
            raise TelegramAPIError(f"{endpoint}: undecodable response: {e}") from e

        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description") if isinstance(body, dict) else None
            raise TelegramAPIError(f"{endpoint}: not ok ({description or 'no description'})")
        if "result" not in body:
            raise TelegramAPIError(f"{endpoint}: missing result")
        return body["result"]

    async def send_message(
        self, chat_id: str, text: str, parse_mode: str | None = "Markdown"
    ) -> None:
        """Send a text message. Markdown markers are passed through verbatim."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        await self._request("POST", "/sendMessage", json=payload)

    async def get_updates(self, offset: int, timeout: int = 0) -> list[Update]:
        """
        Fetch pending updates.

        Args:
            offset: First update id to return; -1 returns only the latest one
            timeout: Server-side long-poll window in seconds (0 = return at once)

        Returns:
            Updates in ascending update_id order
        """
        result = await self._request(
            "GET",
            "/getUpdates",
            params={"offset": offset, "timeout": timeout},
            timeout=timeout + self.POLL_GRACE,
        )
        try:
            return [Update.model_validate(item) for item in result]
        except (TypeError, ValidationError) as e:
            raise TelegramAPIError(f"/getUpdates: malformed result: {e}") from e
