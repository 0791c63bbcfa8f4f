"""External API clients."""

from sentinel.clients.binance_rest import BinanceAPIError, BinanceRestClient
from sentinel.clients.telegram import (
    Chat,
    Message,
    TelegramAPIError,
    TelegramClient,
    Update,
)

__all__ = [
    "BinanceAPIError",
    "BinanceRestClient",
    "Chat",
    "Message",
    "TelegramAPIError",
    "TelegramClient",
    "Update",
]
