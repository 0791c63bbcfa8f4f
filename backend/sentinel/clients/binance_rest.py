"""Binance spot REST API client for prices and daily candles."""

from typing import Any

import httpx


class BinanceAPIError(Exception):
    """Binance returned a payload we cannot interpret."""


class BinanceRestClient:
    """Binance spot REST API client (public endpoints only)."""

    BASE_URL = "https://api.binance.com"
    USER_AGENT = "CryptoSentinel/1.0"

    def __init__(
        self,
        proxy: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.proxy = proxy
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                headers={"User-Agent": self.USER_AGENT},
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
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def get_ticker_price(self, symbol: str) -> float:
        """Latest traded price for a symbol (e.g., "ETHUSDT")."""
        data = await self._request("GET", "/api/v3/ticker/price", {"symbol": symbol})
        try:
            return float(data["price"])
        except (KeyError, TypeError, ValueError) as e:
            raise BinanceAPIError(f"bad ticker payload for {symbol}: {data!r}") from e

    async def get_daily_closes(self, symbol: str, limit: int = 200) -> list[float]:
        """
        Fetch daily close prices.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            limit: Number of days (max 1000)

        Returns:
            Close prices, oldest first. The last entry is today's
            unfinished candle, i.e. the current price.
        """
        data = await self._request(
            "GET",
            "/api/v3/klines",
            {"symbol": symbol, "interval": "1d", "limit": min(limit, 1000)},
        )
        try:
            return [float(item[4]) for item in data]
        except (IndexError, TypeError, ValueError) as e:
            raise BinanceAPIError(f"bad klines payload for {symbol}") from e
