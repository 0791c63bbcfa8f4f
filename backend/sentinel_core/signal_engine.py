"""Signal engine implementing the multi-factor DCA strategy.

This module is pure business logic with no I/O dependencies.
Given the same snapshot it always returns the same signal, which makes
it safe to call from both the scheduler and the command poll loop.
"""

import logging

from sentinel_core.models import (
    Action,
    IndicatorSnapshot,
    RegressionZone,
    StrategyConfig,
    TradeSignal,
)

logger = logging.getLogger(__name__)

# ETH follows its regression zone only; BTC overrides never apply to it
_ETH_ACTIONS: dict[RegressionZone, Action] = {
    RegressionZone.LOWER: Action.DCA_BUY,
    RegressionZone.MIDDLE: Action.HOLD,
    RegressionZone.UPPER: Action.SELL,
    RegressionZone.UNKNOWN: Action.HOLD,
}


class SignalEngine:
    """
    Turn an indicator snapshot into a trade signal.

    Rules, evaluated in priority order (first match wins):
    1. Leverage above the halt threshold -> HALT, nothing deployed
    2. Pi-cycle top or 2-year MA breakout -> SELL_ALERT, nothing deployed
    3. AHR999 bands:
       - below 0.45       -> STRONG_BUY (x1.5)
       - [0.45, 1.20)     -> DCA_BUY (x1.0)
       - [1.20, 5.00)     -> HOLD, or HOLD_CAUTION when MVRV-Z >= 3
       - 5.00 and above   -> SELL (stop deploying, not a liquidation)

    The ETH action is derived from the regression zone alone.
    """

    def __init__(self, config: StrategyConfig | None = None):
        self.config = config or StrategyConfig()

    def evaluate(self, snapshot: IndicatorSnapshot) -> TradeSignal:
        """Evaluate a snapshot. Never raises for a validated snapshot."""
        action_eth = _ETH_ACTIONS.get(snapshot.eth_zone, Action.HOLD)

        if snapshot.leverage > self.config.leverage_halt:
            logger.debug(
                "Leverage %.2fx above %.2fx, halting",
                snapshot.leverage, self.config.leverage_halt,
            )
            return TradeSignal(
                action_btc=Action.HALT,
                action_eth=action_eth,
                halted=True,
                amount_factor=0.0,
            )

        if snapshot.escape_triggered:
            logger.debug(
                "Escape signal fired (pi_cycle_top=%s, trend=%s)",
                snapshot.pi_cycle_top, snapshot.trend_state.value,
            )
            return TradeSignal(
                action_btc=Action.SELL_ALERT,
                action_eth=action_eth,
                halted=True,
                amount_factor=0.0,
            )

        action_btc, factor = self._classify_ahr999(snapshot)
        logger.debug(
            "AHR999 %.4f -> %s (x%.1f), ETH %s -> %s",
            snapshot.ahr999, action_btc.value, factor,
            snapshot.eth_zone.value, action_eth.value,
        )
        return TradeSignal(
            action_btc=action_btc,
            action_eth=action_eth,
            halted=False,
            amount_factor=factor,
        )

    def _classify_ahr999(self, snapshot: IndicatorSnapshot) -> tuple[Action, float]:
        """Map AHR999 to its band action and amount multiplier."""
        cfg = self.config
        value = snapshot.ahr999

        if value < cfg.accumulate_below:
            return Action.STRONG_BUY, cfg.strong_buy_factor
        if value < cfg.dca_below:
            return Action.DCA_BUY, cfg.dca_factor
        if value < cfg.sell_at:
            if snapshot.mvrv_z_score >= cfg.caution_mvrv:
                return Action.HOLD_CAUTION, 0.0
            return Action.HOLD, 0.0
        # Also catches NaN, which fails every comparison above
        return Action.SELL, 0.0


_default_engine = SignalEngine()


def evaluate(snapshot: IndicatorSnapshot) -> TradeSignal:
    """Evaluate a snapshot with the default strategy configuration."""
    return _default_engine.evaluate(snapshot)
