"""Tests for market data collection."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from sentinel.bot_config import CollectorConfig
from sentinel.clients.binance_rest import BinanceAPIError, BinanceRestClient
from sentinel.services.collector import CollectorError, MarketCollector
from sentinel_core.indicators import AHR999_WINDOW
from sentinel_core.models import RegressionZone, TrendState


@pytest.fixture
def client():
    client = MagicMock()
    client.get_daily_closes = AsyncMock(return_value=[60000.0] * AHR999_WINDOW)
    client.get_ticker_price = AsyncMock(return_value=3200.0)
    return client


@pytest.fixture
def collector(client):
    return MarketCollector(client)


class TestFetchSnapshot:
    @pytest.mark.asyncio
    async def test_builds_snapshot(self, collector, client):
        snapshot = await collector.fetch_snapshot(leverage=1.3)

        assert snapshot.price_btc == 60000.0
        assert snapshot.price_eth == 3200.0
        assert snapshot.ahr999 > 0
        assert snapshot.leverage == 1.3
        assert snapshot.mvrv_z_score == 2.5
        assert snapshot.pi_cycle_top is False
        assert snapshot.eth_zone == RegressionZone.MIDDLE
        assert snapshot.trend_state == TrendState.NORMAL
        assert snapshot.source == "Binance"
        assert snapshot.timestamp.tzinfo is not None
        client.get_daily_closes.assert_awaited_once_with("BTCUSDT", limit=AHR999_WINDOW)
        client.get_ticker_price.assert_awaited_once_with("ETHUSDT")

    @pytest.mark.asyncio
    async def test_eth_price_failure_degrades_to_unknown(self, collector, client):
        client.get_ticker_price.side_effect = httpx.ConnectError("down")

        snapshot = await collector.fetch_snapshot(leverage=1.0)

        assert snapshot.price_eth == 0
        assert snapshot.eth_zone == RegressionZone.UNKNOWN

    @pytest.mark.asyncio
    async def test_candle_failure_raises(self, collector, client):
        client.get_daily_closes.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(CollectorError, match="AHR999"):
            await collector.fetch_snapshot(leverage=1.0)

    @pytest.mark.asyncio
    async def test_short_history_raises(self, collector, client):
        client.get_daily_closes.return_value = [60000.0] * 50

        with pytest.raises(CollectorError):
            await collector.fetch_snapshot(leverage=1.0)

    @pytest.mark.asyncio
    async def test_empty_history_raises(self, collector, client):
        client.get_daily_closes.return_value = []

        with pytest.raises(CollectorError):
            await collector.fetch_snapshot(leverage=1.0)

    @pytest.mark.asyncio
    async def test_placeholders_from_config(self, client):
        collector = MarketCollector(client, CollectorConfig(mvrv_z_score=6.5, pi_cycle_top=True))

        snapshot = await collector.fetch_snapshot(leverage=1.0)

        assert snapshot.mvrv_z_score == 6.5
        assert snapshot.pi_cycle_top is True


class TestClassification:
    @pytest.mark.parametrize(
        "price,expected",
        [
            (0.0, TrendState.NORMAL),
            (15000.0, TrendState.BEAR_BOTTOM),
            (20000.0, TrendState.NORMAL),
            (150000.0, TrendState.NORMAL),
            (150001.0, TrendState.BULL_TOP),
        ],
    )
    def test_trend(self, collector, price, expected):
        assert collector.classify_trend(price) == expected

    @pytest.mark.parametrize(
        "price,expected",
        [
            (0.0, RegressionZone.UNKNOWN),
            (1500.0, RegressionZone.LOWER),
            (2000.0, RegressionZone.MIDDLE),
            (5000.0, RegressionZone.MIDDLE),
            (5001.0, RegressionZone.UPPER),
        ],
    )
    def test_eth_zone(self, collector, price, expected):
        assert collector.classify_eth_zone(price) == expected


class TestBinanceRestClient:
    @pytest.mark.asyncio
    async def test_daily_closes(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v3/klines"
            assert request.url.params["interval"] == "1d"
            return httpx.Response(
                200,
                json=[
                    [0, "1.0", "2.0", "0.5", "1.5", "10"],
                    [1, "1.5", "2.5", "1.0", "2.25", "10"],
                ],
            )

        client = BinanceRestClient(transport=httpx.MockTransport(handler))
        assert await client.get_daily_closes("BTCUSDT", limit=2) == [1.5, 2.25]
        await client.close()

    @pytest.mark.asyncio
    async def test_ticker_price(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["symbol"] == "ETHUSDT"
            return httpx.Response(200, json={"symbol": "ETHUSDT", "price": "3210.55000000"})

        client = BinanceRestClient(transport=httpx.MockTransport(handler))
        assert await client.get_ticker_price("ETHUSDT") == 3210.55

    @pytest.mark.asyncio
    async def test_bad_ticker_payload(self):
        def handler(request):
            return httpx.Response(200, json={"code": -1121, "msg": "Invalid symbol."})

        client = BinanceRestClient(transport=httpx.MockTransport(handler))
        with pytest.raises(BinanceAPIError):
            await client.get_ticker_price("NOPE")
