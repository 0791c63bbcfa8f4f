"""Trade signal models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Action(str, Enum):
    """Recommended action for one asset."""

    STRONG_BUY = "strong_buy"
    DCA_BUY = "dca_buy"
    HOLD = "hold"
    HOLD_CAUTION = "hold_caution"
    SELL = "sell"
    SELL_ALERT = "sell_alert"  # Top-escape override
    HALT = "halt"  # Leverage circuit breaker


class TradeSignal(BaseModel):
    """Decision produced by the signal engine for one cycle."""

    model_config = ConfigDict(frozen=True)

    action_btc: Action
    action_eth: Action = Action.HOLD
    halted: bool = False
    amount_factor: float = Field(default=0.0, ge=0)  # 0 = deploy nothing, 1 = baseline

    @model_validator(mode="after")
    def _validate(self):
        if self.halted and self.action_btc not in (Action.HALT, Action.SELL_ALERT):
            raise ValueError(
                f"halted signal must be HALT or SELL_ALERT, got '{self.action_btc.value}'"
            )
        if self.action_btc == Action.HALT and self.amount_factor != 0:
            raise ValueError("HALT signal must have amount_factor 0")
        return self
