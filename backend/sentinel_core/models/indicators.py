"""Market indicator snapshot models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RegressionZone(str, Enum):
    """ETH price position inside its long-run regression channel."""

    LOWER = "lower"
    MIDDLE = "middle"
    UPPER = "upper"
    UNKNOWN = "unknown"  # Not enough data to classify


class TrendState(str, Enum):
    """BTC state relative to the 2-year MA multiplier bands."""

    BEAR_BOTTOM = "bear_bottom"  # Below the 2-year MA
    NORMAL = "normal"
    BULL_TOP = "bull_top"  # Above the 2-year MA x5 line


class IndicatorSnapshot(BaseModel):
    """All indicators needed for one evaluation cycle.

    Built once per cycle by the collector and never mutated afterwards.
    A price of exactly 0 means the price could not be fetched.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    ahr999: float
    mvrv_z_score: float = 0.0
    price_btc: float = Field(default=0.0, ge=0)
    price_eth: float = Field(default=0.0, ge=0)
    eth_zone: RegressionZone = RegressionZone.UNKNOWN
    trend_state: TrendState = TrendState.NORMAL
    pi_cycle_top: bool = False
    leverage: float = Field(default=1.0, ge=0)
    source: str = "Binance"

    @property
    def escape_triggered(self) -> bool:
        """True if either top-escape indicator fired."""
        return self.pi_cycle_top or self.trend_state == TrendState.BULL_TOP
