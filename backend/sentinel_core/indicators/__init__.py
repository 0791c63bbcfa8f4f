"""Valuation indicators computed from price history."""

from sentinel_core.indicators.ahr999 import (
    AHR999_WINDOW,
    GENESIS_DATE,
    ahr999,
    coin_age_days,
    dca_cost,
    growth_valuation,
)

__all__ = [
    "AHR999_WINDOW",
    "GENESIS_DATE",
    "ahr999",
    "coin_age_days",
    "dca_cost",
    "growth_valuation",
]
