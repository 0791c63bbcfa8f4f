"""Data models."""

from sentinel_core.models.indicators import IndicatorSnapshot, RegressionZone, TrendState
from sentinel_core.models.signal import Action, TradeSignal
from sentinel_core.models.config import StrategyConfig

__all__ = [
    "IndicatorSnapshot",
    "RegressionZone",
    "TrendState",
    "Action",
    "TradeSignal",
    "StrategyConfig",
]
