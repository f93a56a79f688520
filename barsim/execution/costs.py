"""
Trading cost models.

Three providers describe the friction applied by the simulator:

- `Commission` – charged on every fill as a percentage of notional.
- `Slippage` – adverse price adjustment applied to market fills.
- `FundingRate` – periodic charge on the open position, settled at
  every `PeriodicCostInterval` boundary.

All three default to zero, in which case the simulator's accounting is
unaffected by them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

import pandas as pd

from ..utils.num import HUNDRED, ZERO, to_num


class PeriodicCostInterval(Enum):
    ONE_HOUR = timedelta(hours=1)
    FOUR_HOURS = timedelta(hours=4)
    EIGHT_HOURS = timedelta(hours=8)
    ONE_DAY = timedelta(days=1)

    @classmethod
    def parse(cls, value: Any) -> "PeriodicCostInterval":
        """Resolve an interval from its name (``EIGHT_HOURS``) or a
        duration string understood by pandas (``8h``)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        if text.upper() in cls.__members__:
            return cls[text.upper()]
        try:
            delta = pd.Timedelta(text).to_pytimedelta()
        except ValueError as exc:
            raise ValueError(f"Unrecognised funding interval: {value!r}") from exc
        for member in cls:
            if member.value == delta:
                return member
        raise ValueError(f"Unsupported funding interval: {value!r}")


@dataclass(frozen=True)
class Commission:
    percent: Decimal = ZERO

    @classmethod
    def of_percent_price(cls, percent: Any) -> "Commission":
        return cls(percent=to_num(percent))

    def cost(self, volume: Decimal, price: Decimal) -> Decimal:
        """Commission due for filling `volume` at `price` (always >= 0)."""
        return abs(volume) * price * self.percent / HUNDRED


@dataclass(frozen=True)
class Slippage:
    percent: Decimal = ZERO

    @classmethod
    def of_percent_price(cls, percent: Any) -> "Slippage":
        return cls(percent=to_num(percent))

    def apply(self, volume: Decimal, price: Decimal) -> Decimal:
        """Move `price` against the side of `volume`: buys pay more,
        sells receive less."""
        if self.percent == ZERO:
            return price
        adjustment = price * self.percent / HUNDRED
        return price + adjustment if volume > ZERO else price - adjustment


@dataclass(frozen=True)
class FundingRate:
    percent: Decimal = ZERO
    interval: PeriodicCostInterval = PeriodicCostInterval.EIGHT_HOURS

    @classmethod
    def of_percent_price(cls, percent: Any, interval: Any = PeriodicCostInterval.EIGHT_HOURS) -> "FundingRate":
        return cls(percent=to_num(percent), interval=PeriodicCostInterval.parse(interval))

    def payment(self, position_size: Decimal, mark_price: Decimal) -> Decimal:
        """Amount the position pays for one interval.

        Positive for longs under a positive rate, negative (a receipt)
        for shorts.
        """
        return position_size * mark_price * self.percent / HUNDRED
