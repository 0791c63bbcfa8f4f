"""AHR999 hodl index.

    ahr999 = (price / dca_cost) * (price / growth_valuation)

- dca_cost: geometric mean of the last 200 daily closes
- growth_valuation: 10 ** (5.84 * log10(coin_age_days) - 17.01)

Below 0.45 has historically marked bottoms, 0.45-1.2 is the DCA window.
"""

import math
from datetime import date
from typing import Sequence

import numpy as np

AHR999_WINDOW = 200
GENESIS_DATE = date(2009, 1, 3)


def coin_age_days(on_date: date) -> int:
    """Days since the Bitcoin genesis block."""
    return (on_date - GENESIS_DATE).days


def growth_valuation(on_date: date) -> float:
    """Exponential-growth fair value of BTC on a given date."""
    age = coin_age_days(on_date)
    if age <= 0:
        raise ValueError(f"date {on_date} is not after genesis {GENESIS_DATE}")
    return 10 ** (5.84 * math.log10(age) - 17.01)


def dca_cost(closes: Sequence[float], window: int = AHR999_WINDOW) -> float:
    """Geometric mean of the last `window` closes."""
    if len(closes) < window:
        raise ValueError(f"need at least {window} closes, got {len(closes)}")

    arr = np.array(closes[-window:], dtype=np.float64)
    if np.any(arr <= 0):
        raise ValueError("closes must be positive")

    return float(np.exp(np.mean(np.log(arr))))


def ahr999(
    closes: Sequence[float],
    price: float,
    on_date: date,
    window: int = AHR999_WINDOW,
) -> float:
    """
    Compute AHR999.

    Args:
        closes: Daily closes, oldest first (at least `window` of them)
        price: Current BTC price
        on_date: Date the price belongs to
        window: DCA cost window in days

    Returns:
        AHR999 index value
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")

    cost = dca_cost(closes, window)
    valuation = growth_valuation(on_date)
    return (price / cost) * (price / valuation)
