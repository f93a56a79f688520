"""
Bar, order, position and trade log models.

These dataclasses represent the objects passed between the data
source, the strategy and the simulator.  Keeping them in a separate
module improves readability and makes unit testing easier.

Sign conventions
----------------
A positive volume buys (increases long / reduces short exposure), a
negative volume sells.  `Position.size` follows the same convention:
positive means long, negative short and zero flat.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

import pandas as pd

from ..utils.num import ZERO, to_num


class OrderType(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


@dataclass(frozen=True)
class Bar:
    """An OHLC summary of one interval, stamped with its end time."""
    open_price: Decimal
    high_price: Decimal
    low_price: Decimal
    close_price: Decimal
    end_time: pd.Timestamp

    @classmethod
    def from_row(cls, ts: Any, row: pd.Series) -> "Bar":
        """Build a bar from a DataFrame row with ``open/high/low/close``."""
        return cls(
            open_price=to_num(row['open']),
            high_price=to_num(row['high']),
            low_price=to_num(row['low']),
            close_price=to_num(row['close']),
            end_time=pd.Timestamp(ts),
        )


@dataclass(frozen=True, eq=False)
class Order:
    """One strategy intention for the current tick.

    Orders compare by identity so that two otherwise identical resting
    orders can be removed from the pending list independently.
    """
    volume: Decimal = ZERO
    price: Decimal = ZERO  # only meaningful for LIMIT orders
    order_type: OrderType = OrderType.MARKET
    reduce_only: bool = False

    def __post_init__(self) -> None:
        # Plain numbers and type names are accepted; an unknown type name is
        # kept as given so the simulator can reject the order.
        object.__setattr__(self, 'volume', to_num(self.volume))
        object.__setattr__(self, 'price', to_num(self.price))
        object.__setattr__(self, 'reduce_only', bool(self.reduce_only))
        if not isinstance(self.order_type, OrderType):
            try:
                object.__setattr__(self, 'order_type', OrderType(str(self.order_type).upper()))
            except ValueError:
                pass

    @classmethod
    def market(cls, volume: Any, reduce_only: bool = False) -> "Order":
        return cls(volume=volume, order_type=OrderType.MARKET, reduce_only=reduce_only)

    @classmethod
    def limit(cls, volume: Any, price: Any, reduce_only: bool = False) -> "Order":
        return cls(volume=volume, price=price, order_type=OrderType.LIMIT, reduce_only=reduce_only)

    @classmethod
    def none(cls) -> "Order":
        """A zero‑volume order, meaning "no action"."""
        return cls()

    @property
    def is_zero(self) -> bool:
        return self.volume.is_finite() and self.volume == ZERO

    @property
    def is_buy(self) -> bool:
        return self.volume > ZERO


@dataclass
class Position:
    """Net exposure in the instrument."""
    size: Decimal = ZERO

    @property
    def is_long(self) -> bool:
        return self.size > ZERO

    @property
    def is_short(self) -> bool:
        return self.size < ZERO

    @property
    def is_flat(self) -> bool:
        return self.size == ZERO


@dataclass(frozen=True)
class TradeLog:
    """Record of one executed fill."""
    symbol: str
    filled_volume: Decimal  # signed
    executed_price: Decimal
    timestamp: pd.Timestamp
    commission: Decimal = ZERO


@dataclass(frozen=True)
class OrderRejection:
    """An order that was refused by the simulator and left state untouched."""
    order: Order
    reason: str
    timestamp: pd.Timestamp
