"""Tests for outbound retry and the inbound long-poll loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from sentinel.clients.telegram import Chat, Message, TelegramAPIError, Update
from sentinel.services.delivery import DeliveryService

CHAT_ID = "42"
COMMAND = "/advice"


def make_update(update_id: int, text: str | None = COMMAND, chat_id: int = 42) -> Update:
    return Update(update_id=update_id, message=Message(chat=Chat(id=chat_id), text=text))


@pytest.fixture
def client():
    client = MagicMock()
    client.send_message = AsyncMock()
    client.get_updates = AsyncMock(return_value=[])
    return client


@pytest.fixture
def service(client):
    return DeliveryService(
        client=client,
        chat_id=CHAT_ID,
        command=COMMAND,
        ack_text="working on it",
        max_attempts=3,
        poll_timeout=30,
        retry_delay=0,
    )


class TestSendWithRetry:
    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, service, client):
        await service.send_with_retry("hello")

        client.send_message.assert_awaited_once_with(CHAT_ID, "hello")

    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds(self, service, client):
        client.send_message.side_effect = [
            httpx.ConnectError("down"),
            TelegramAPIError("not ok"),
            None,
        ]

        result = await service.send_with_retry("hello", 3)

        assert result is None
        assert client.send_message.await_count == 3

    @pytest.mark.asyncio
    async def test_always_failing_raises_last_error(self, service, client):
        errors = [httpx.ConnectError("one"), httpx.ReadTimeout("two"), TelegramAPIError("three")]
        client.send_message.side_effect = errors

        with pytest.raises(TelegramAPIError, match="three"):
            await service.send_with_retry("hello", 3)

        assert client.send_message.await_count == 3

    @pytest.mark.asyncio
    async def test_stops_after_success(self, service, client):
        client.send_message.side_effect = [httpx.ConnectError("down"), None, None, None]

        await service.send_with_retry("hello", 5)

        assert client.send_message.await_count == 2

    @pytest.mark.asyncio
    async def test_uses_configured_attempts_by_default(self, service, client):
        client.send_message.side_effect = httpx.ConnectError("down")

        with pytest.raises(httpx.ConnectError):
            await service.send_with_retry("hello")

        assert client.send_message.await_count == 3

    @pytest.mark.asyncio
    async def test_invalid_attempts(self, service):
        with pytest.raises(ValueError, match="max_attempts"):
            await service.send_with_retry("hello", 0)

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_retried(self, service, client):
        client.send_message.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            await service.send_with_retry("hello", 3)

        assert client.send_message.await_count == 1


class TestSkipBacklog:
    @pytest.mark.asyncio
    async def test_skips_past_latest_update(self, service, client):
        client.get_updates.return_value = [make_update(105)]

        offset = await service.skip_backlog()

        assert offset == 106
        assert service.offset == 106
        client.get_updates.assert_awaited_once_with(offset=-1, timeout=0)

    @pytest.mark.asyncio
    async def test_empty_backlog_keeps_zero(self, service, client):
        assert await service.skip_backlog() == 0

    @pytest.mark.asyncio
    async def test_failure_keeps_zero(self, service, client):
        client.get_updates.side_effect = httpx.ConnectError("down")

        assert await service.skip_backlog() == 0


class TestProcessUpdates:
    @pytest.mark.asyncio
    async def test_cursor_advances_past_filtered_updates(self, service):
        on_command = AsyncMock()
        updates = [
            make_update(10, text=None),
            make_update(11, chat_id=999),
            make_update(12, text="hello"),
            Update(update_id=13),
        ]

        await service.process_updates(updates, on_command)

        assert service.offset == 14
        on_command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cursor_is_max_plus_one(self, service):
        await service.process_updates([make_update(7, text="x"), make_update(9, text="y")], AsyncMock())
        assert service.offset == 10

    @pytest.mark.asyncio
    async def test_cursor_never_moves_backwards(self, service):
        service.offset = 50
        await service.process_updates([make_update(20, text="x")], AsyncMock())
        assert service.offset == 50

    @pytest.mark.asyncio
    async def test_command_acknowledged_and_dispatched(self, service, client):
        on_command = AsyncMock()

        await service.process_updates([make_update(20)], on_command)

        client.send_message.assert_awaited_once_with(CHAT_ID, "working on it")
        on_command.assert_awaited_once_with()
        assert service.offset == 21

    @pytest.mark.asyncio
    async def test_command_must_match_exactly(self, service):
        on_command = AsyncMock()

        await service.process_updates(
            [make_update(1, text="/advice please"), make_update(2, text=" /advice")], on_command
        )

        on_command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ack_failure_still_dispatches(self, service, client):
        client.send_message.side_effect = httpx.ConnectError("down")
        on_command = AsyncMock()

        await service.process_updates([make_update(1)], on_command)

        on_command.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_callback_failure_does_not_stop_batch(self, service):
        on_command = AsyncMock(side_effect=[RuntimeError("boom"), None])

        await service.process_updates([make_update(1), make_update(2)], on_command)

        assert on_command.await_count == 2
        assert service.offset == 3


class TestListen:
    @pytest.mark.asyncio
    async def test_backlog_is_never_delivered(self, service, client):
        """Five pending updates at startup: none reach the callback."""
        stop = asyncio.Event()
        on_command = AsyncMock()
        steady_offsets = []

        async def get_updates(offset, timeout):
            if offset == -1:
                # Telegram returns only the newest of the 5 pending updates
                return [make_update(105)]
            steady_offsets.append(offset)
            stop.set()
            return [make_update(106)]

        client.get_updates.side_effect = get_updates

        await asyncio.wait_for(service.listen(stop, on_command), timeout=1)

        assert steady_offsets == [106]
        on_command.assert_awaited_once()
        assert service.offset == 107

    @pytest.mark.asyncio
    async def test_steady_fetch_uses_poll_timeout(self, service, client):
        stop = asyncio.Event()
        calls = []

        async def get_updates(offset, timeout):
            calls.append((offset, timeout))
            if offset != -1:
                stop.set()
            return []

        client.get_updates.side_effect = get_updates

        await asyncio.wait_for(service.listen(stop, AsyncMock()), timeout=1)

        assert calls == [(-1, 0), (0, 30)]

    @pytest.mark.asyncio
    async def test_fetch_failure_retries_same_cursor(self, service, client):
        stop = asyncio.Event()
        offsets = []
        responses = [
            [make_update(5, text="x")],
            httpx.ReadTimeout("slow"),
            TelegramAPIError("not ok"),
            [],
        ]

        async def get_updates(offset, timeout):
            if offset == -1:
                return []
            offsets.append(offset)
            result = responses.pop(0)
            if not responses:
                stop.set()
            if isinstance(result, Exception):
                raise result
            return result

        client.get_updates.side_effect = get_updates

        await asyncio.wait_for(service.listen(stop, AsyncMock()), timeout=1)

        assert offsets == [0, 6, 6, 6]
        assert service.offset == 6

    @pytest.mark.asyncio
    async def test_stop_before_start_skips_steady_fetch(self, service, client):
        stop = asyncio.Event()
        stop.set()

        await asyncio.wait_for(service.listen(stop, AsyncMock()), timeout=1)

        client.get_updates.assert_awaited_once_with(offset=-1, timeout=0)

    @pytest.mark.asyncio
    async def test_retry_delay_cut_short_by_stop(self, client):
        service = DeliveryService(client, CHAT_ID, COMMAND, retry_delay=60)
        stop = asyncio.Event()

        async def get_updates(offset, timeout):
            if offset == -1:
                return []
            asyncio.get_running_loop().call_later(0.01, stop.set)
            raise httpx.ConnectError("down")

        client.get_updates.side_effect = get_updates

        await asyncio.wait_for(service.listen(stop, AsyncMock()), timeout=1)
