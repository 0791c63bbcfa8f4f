"""One evaluate-and-send cycle: collect -> evaluate -> render -> deliver."""

import logging

from sentinel.services.collector import CollectorError, MarketCollector
from sentinel.services.delivery import DELIVERY_ERRORS, DeliveryService
from sentinel_core.report import ReportRenderer
from sentinel_core.signal_engine import SignalEngine

logger = logging.getLogger(__name__)

# Error details stay in the log; they may contain Markdown control characters
FAILURE_NOTICE = "⚠️ Failed to fetch market data, will try again next cycle."


class ReportService:
    """
    Run the report pipeline once per call.

    Used both by the scheduler and as the command callback of the poll
    loop. Holds no per-run state, so overlapping calls from the two
    activities are safe.
    """

    def __init__(
        self,
        collector: MarketCollector,
        engine: SignalEngine,
        renderer: ReportRenderer,
        delivery: DeliveryService,
        leverage: float = 1.0,
    ):
        self.collector = collector
        self.engine = engine
        self.renderer = renderer
        self.delivery = delivery
        self.leverage = leverage

    async def run_cycle(self) -> bool:
        """Run one cycle. Returns True if the report was delivered.

        Failures are logged and reported as False; nothing is raised.
        """
        logger.info("Running report cycle...")

        try:
            snapshot = await self.collector.fetch_snapshot(self.leverage)
        except CollectorError as e:
            logger.error("Failed to collect market data: %s", e)
            await self._notify_failure(FAILURE_NOTICE)
            return False

        signal = self.engine.evaluate(snapshot)
        logger.info(
            "Decision: BTC=%s ETH=%s factor=%.1f halted=%s",
            signal.action_btc.value,
            signal.action_eth.value,
            signal.amount_factor,
            signal.halted,
        )

        message = self.renderer.render(snapshot, signal)

        try:
            await self.delivery.send_with_retry(message)
        except DELIVERY_ERRORS as e:
            logger.error("Failed to deliver report: %s", e)
            return False

        logger.info("Report delivered")
        return True

    async def _notify_failure(self, text: str) -> None:
        try:
            await self.delivery.send_with_retry(text)
        except DELIVERY_ERRORS as e:
            logger.error("Failed to send failure notice: %s", e)
