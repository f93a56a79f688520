"""
Decimal helpers.

Prices, volumes and balances are carried as `decimal.Decimal` throughout
the simulator so that long runs do not accumulate floating‑point drift.
Values coming from pandas (floats, numpy scalars) are converted through
their string representation.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal(0)
HUNDRED = Decimal(100)


def to_num(value: Any) -> Decimal:
    """Convert `value` to a `Decimal`.

    Floats are converted via `str()` so that ``0.1`` becomes
    ``Decimal('0.1')`` rather than its binary expansion.  Values that
    cannot be parsed become ``Decimal('NaN')``; callers decide how to
    treat non‑finite numbers.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("NaN")


def is_finite(value: Decimal) -> bool:
    return isinstance(value, Decimal) and value.is_finite()
