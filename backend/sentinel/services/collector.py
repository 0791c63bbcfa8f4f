"""Market data collection.

Builds one IndicatorSnapshot per cycle. AHR999 is computed from
Binance daily candles; MVRV-Z, the Pi-cycle signal, the 2-year MA
state and the ETH regression zone have no live feed yet and come from
configured placeholder values and price thresholds.
"""

import logging
from datetime import datetime, timezone

import httpx

from sentinel.bot_config import CollectorConfig
from sentinel.clients.binance_rest import BinanceAPIError, BinanceRestClient
from sentinel_core.indicators import AHR999_WINDOW, ahr999
from sentinel_core.models import IndicatorSnapshot, RegressionZone, TrendState

logger = logging.getLogger(__name__)

FETCH_ERRORS = (httpx.HTTPError, BinanceAPIError, ValueError)


class CollectorError(Exception):
    """Required market data could not be collected."""


class MarketCollector:
    """Collect all indicators needed by the signal engine."""

    BTC_SYMBOL = "BTCUSDT"
    ETH_SYMBOL = "ETHUSDT"

    def __init__(
        self,
        client: BinanceRestClient,
        config: CollectorConfig | None = None,
    ):
        self.client = client
        self.config = config or CollectorConfig()

    async def fetch_snapshot(self, leverage: float) -> IndicatorSnapshot:
        """
        Collect a fresh snapshot.

        Args:
            leverage: Current account leverage, supplied by the caller

        Raises:
            CollectorError: if AHR999 cannot be computed
        """
        now = datetime.now(timezone.utc)
        ahr999_value, price_btc = await self._fetch_ahr999(now)

        try:
            price_eth = await self.client.get_ticker_price(self.ETH_SYMBOL)
        except FETCH_ERRORS as e:
            # Not fatal: a zero price renders as insufficient data
            logger.warning("Failed to fetch ETH price: %s", e)
            price_eth = 0.0

        return IndicatorSnapshot(
            timestamp=now,
            ahr999=ahr999_value,
            mvrv_z_score=self.config.mvrv_z_score,
            price_btc=price_btc,
            price_eth=price_eth,
            eth_zone=self.classify_eth_zone(price_eth),
            trend_state=self.classify_trend(price_btc),
            pi_cycle_top=self.config.pi_cycle_top,
            leverage=leverage,
            source="Binance",
        )

    async def _fetch_ahr999(self, now: datetime) -> tuple[float, float]:
        """Compute AHR999 from daily closes. Returns (ahr999, btc_price)."""
        try:
            closes = await self.client.get_daily_closes(self.BTC_SYMBOL, limit=AHR999_WINDOW)
            if not closes:
                raise BinanceAPIError("no daily candles returned")
            price = closes[-1]
            value = ahr999(closes, price, now.date())
        except FETCH_ERRORS as e:
            raise CollectorError(f"AHR999 calculation failed: {e}") from e

        logger.info("AHR999 %.4f at BTC price %.2f", value, price)
        return value, price

    def classify_trend(self, price_btc: float) -> TrendState:
        """2-year MA multiplier state from BTC price thresholds."""
        if price_btc > 0:
            if price_btc < self.config.bear_bottom_below:
                return TrendState.BEAR_BOTTOM
            if price_btc > self.config.bull_top_above:
                return TrendState.BULL_TOP
        return TrendState.NORMAL

    def classify_eth_zone(self, price_eth: float) -> RegressionZone:
        """ETH regression zone from price thresholds. No price means UNKNOWN."""
        if price_eth <= 0:
            return RegressionZone.UNKNOWN
        if price_eth < self.config.eth_lower_below:
            return RegressionZone.LOWER
        if price_eth > self.config.eth_upper_above:
            return RegressionZone.UPPER
        return RegressionZone.MIDDLE
