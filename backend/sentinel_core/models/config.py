"""Strategy configuration models."""

from __future__ import annotations

from pydantic import BaseModel, model_validator


class StrategyConfig(BaseModel):
    """Decision bands and safety thresholds.

    Shared by the signal engine and the report renderer so that the
    bands used to decide and the bands used to describe never drift.
    """

    # AHR999 bands (half-open, upper bound exclusive)
    accumulate_below: float = 0.45
    dca_below: float = 1.20
    sell_at: float = 5.00

    # MVRV-Z at or above this turns HOLD into HOLD_CAUTION
    caution_mvrv: float = 3.0

    # Leverage safety
    leverage_halt: float = 1.5  # Strictly above this halts everything
    leverage_warning: float = 1.2

    # Amount multipliers per band
    strong_buy_factor: float = 1.5
    dca_factor: float = 1.0

    @model_validator(mode="after")
    def _validate(self):
        if not (0 < self.accumulate_below < self.dca_below < self.sell_at):
            raise ValueError(
                "AHR999 bands must satisfy 0 < accumulate_below < dca_below < sell_at"
            )
        if self.leverage_warning > self.leverage_halt:
            raise ValueError("leverage_warning must not exceed leverage_halt")
        return self
