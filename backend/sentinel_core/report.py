"""Report formatting for trade signals.

Produces the weekly Telegram report (legacy Markdown: *bold*, _italic_,
`code`). Rendering is deterministic: the date comes from the snapshot,
so the same (snapshot, signal) pair always renders to the same text.
"""

from __future__ import annotations

from sentinel_core.models import (
    Action,
    IndicatorSnapshot,
    RegressionZone,
    StrategyConfig,
    TradeSignal,
    TrendState,
)

INSUFFICIENT_DATA = "insufficient data"
SEPARATOR = "-" * 21

_TONES: dict[Action, str] = {
    Action.STRONG_BUY: "🟢 Greedy accumulation",
    Action.DCA_BUY: "🟢 Good time to DCA",
    Action.HOLD: "🟡 Hold and watch",
    Action.HOLD_CAUTION: "🟡 Hold and watch",
    Action.SELL: "🔴 Scale out gradually",
}

_ACTIONS: dict[Action, str] = {
    Action.HALT: "⛔️ Stop all operations",
    Action.SELL_ALERT: "🚨 Prepare to exit",
    Action.STRONG_BUY: "💪 Buy BTC heavily",
    Action.DCA_BUY: "📈 Buy BTC",
    Action.HOLD: "✋ Hold and wait",
    Action.HOLD_CAUTION: "✋ Hold and wait",
    Action.SELL: "📉 Sell in batches",
}

# zone -> (emoji, label, rebalancing advice)
_ETH_ZONES: dict[RegressionZone, tuple[str, str, str]] = {
    RegressionZone.LOWER: ("🟢", "Undervalued", "Increase the ETH allocation"),
    RegressionZone.MIDDLE: ("🟡", "Neutral", "Stay passive, follow the BTC allocation"),
    RegressionZone.UPPER: ("🔴", "Overvalued", "Trim ETH, rotate into BTC or stablecoins"),
    RegressionZone.UNKNOWN: ("⚪️", "Unknown", "Insufficient data, stay on the sidelines"),
}


class ReportRenderer:
    """Render a snapshot and its signal into a Telegram report."""

    def __init__(self, config: StrategyConfig | None = None, title: str = "Crypto Sentinel"):
        self.config = config or StrategyConfig()
        self.title = title

    def render(self, snapshot: IndicatorSnapshot, signal: TradeSignal) -> str:
        """Build the full report text."""
        sections = [
            f"🛡️ *{self.title} {snapshot.timestamp:%Y-%m-%d}*",
            f"📊 *Macro tone: {self.macro_tone(signal)}*",
            self.price_section(snapshot),
            self.ahr999_section(snapshot.ahr999),
            self.mvrv_section(snapshot.mvrv_z_score),
            self.eth_section(snapshot.eth_zone),
            self.safety_section(snapshot),
        ]
        return "\n\n".join(sections) + f"\n\n{SEPARATOR}\n" + self.action_section(signal)

    @staticmethod
    def macro_tone(signal: TradeSignal) -> str:
        """One-line market stance derived from the signal."""
        if signal.halted:
            if signal.action_btc == Action.SELL_ALERT:
                return "🔴 Top-escape alert"
            return "⚠️ Risk circuit breaker"
        return _TONES.get(signal.action_btc, "🟡 Neutral")

    @staticmethod
    def price_section(snapshot: IndicatorSnapshot) -> str:
        return (
            "*💲 Live prices*\n"
            f"• BTC: {_format_price(snapshot.price_btc)}\n"
            f"• ETH: {_format_price(snapshot.price_eth)}"
        )

    def ahr999_section(self, value: float) -> str:
        """AHR999 value, zone and distance to the nearest better band."""
        cfg = self.config

        if value < cfg.accumulate_below:
            emoji, zone = "🟢", "Accumulation"
            pct = (cfg.accumulate_below - value) / cfg.accumulate_below * 100
            distance = f"In the accumulation zone, {pct:.0f}% below the DCA line 📈"
            comment = "rare opportunity, buy heavily"
        elif value < cfg.dca_below:
            emoji, zone = "🟢", "DCA"
            pct = (value - cfg.accumulate_below) / value * 100
            distance = f"{pct:.0f}% above the accumulation line {cfg.accumulate_below:.2f} 📉"
            comment = "fair price, keep dollar-cost averaging"
        elif value < cfg.sell_at:
            emoji, zone = "🟡", "Hold"
            pct = (value - cfg.dca_below) / value * 100
            distance = f"Up {pct:.0f}% from the DCA line {cfg.dca_below:.2f} 📈"
            comment = "pause buying, hold your coins"
        else:
            emoji, zone = "🔴", "Escape top"
            pct = (value - cfg.sell_at) / value * 100
            distance = f"{pct:.0f}% past the escape line 🚨"
            comment = "sell in batches, lock in profit"

        return (
            "*1. Hodl index (AHR999)*\n"
            f"• Value: `{value:.2f}` {emoji}\n"
            f"• Zone: *{zone}*\n"
            f"• Distance: {distance}\n"
            f"_(Comment: {comment})_"
        )

    @staticmethod
    def mvrv_section(z_score: float) -> str:
        """MVRV-Z value with its five-band temperature label."""
        if z_score < 0:
            emoji, status = "🟢", "Deeply undervalued"
            distance = "Below the zero line, historical bottom area"
        elif z_score < 1:
            emoji, status = "❄️", "Bottom range"
            distance = f"{100 - z_score * 100:.0f}% away from the zero line, near the bottom"
        elif z_score < 3:
            emoji, status = "🟡", "Neutral range"
            distance = "Market is mild, operate normally"
        elif z_score < 6:
            emoji, status = "🟠", "Warming up"
            distance = f"{100 - (z_score - 3) / 3 * 100:.0f}% left to the overheated line 6.0"
        else:
            emoji, status = "🔴", "Overheated"
            distance = "Market euphoria, do not chase"

        return (
            "*2. Market temperature (MVRV-Z)*\n"
            f"• Value: `{z_score:.2f}` {emoji}\n"
            f"• Zone: *{status}*\n"
            f"• Distance: {distance}"
        )

    @staticmethod
    def eth_section(zone: RegressionZone) -> str:
        emoji, status, advice = _ETH_ZONES.get(zone, _ETH_ZONES[RegressionZone.UNKNOWN])
        return (
            "*3. Ethereum (ETH)*\n"
            f"• Zone: {emoji} *{status}*\n"
            f"• Strategy: {advice}"
        )

    def safety_section(self, snapshot: IndicatorSnapshot) -> str:
        """Leverage badge and escape-signal badge."""
        cfg = self.config

        if snapshot.leverage >= cfg.leverage_halt:
            leverage_status = "❌ Danger"
        elif snapshot.leverage >= cfg.leverage_warning:
            leverage_status = "⚠️ Warning"
        else:
            leverage_status = "✅"

        if snapshot.pi_cycle_top:
            escape_status = "🔴 Pi cycle top cross"
        elif snapshot.trend_state == TrendState.BULL_TOP:
            escape_status = "🔴 Broke above the 2-year MA x5 line"
        else:
            escape_status = "⚪️ No risk for now"

        return (
            "*4. Safety check*\n"
            f"• Leverage: {snapshot.leverage:.1f}x {leverage_status} "
            f"(safe below {cfg.leverage_halt:.1f}x)\n"
            f"• Escape: {escape_status}"
        )

    @staticmethod
    def action_section(signal: TradeSignal) -> str:
        """Footer with this cycle's action and capital multiplier."""
        action = _ACTIONS.get(signal.action_btc, "Watch")

        if signal.amount_factor >= 1.5:
            factor_badge = "💰💰"
        elif signal.amount_factor == 0:
            factor_badge = "🚫"
        else:
            factor_badge = "💰"

        return (
            f"🚀 *This week: {action}*\n"
            f"{factor_badge} *Amount factor: {signal.amount_factor:.1f}x*"
        )


def _format_price(price: float) -> str:
    if price <= 0:
        return f"_{INSUFFICIENT_DATA}_"
    return f"`${price:,.2f}`"
