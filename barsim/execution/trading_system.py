"""
Trading system state.

`TradingSystem` holds everything a single simulation run mutates: the
cash balance, the net position and the list of resting limit orders.
It delegates decisions and cost models to a `Strategy`, which is any
object providing the operations listed on the `Strategy` protocol; no
base class is required.

Only the simulator should call the mutating methods.  Strategies
receive the trading system in their hooks to read the current bar,
position and pending orders.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Protocol, Tuple

from ..data.bar_series import BarSeriesProvider
from ..utils.num import HUNDRED, to_num
from .costs import Commission, FundingRate, Slippage
from .models import Bar, Order, Position, TradeLog


class Strategy(Protocol):
    """Operations a strategy must provide to be simulated.

    The four condition hooks are queries: they inspect `system` and
    return an `Order`, using `Order.none()` to signal "no action".
    """

    def starting_balance(self) -> Decimal: ...

    def on_buy_condition(self, system: "TradingSystem") -> Order: ...

    def on_sell_condition(self, system: "TradingSystem") -> Order: ...

    def on_exit_buy_condition(self, system: "TradingSystem") -> Order: ...

    def on_exit_sell_condition(self, system: "TradingSystem") -> Order: ...

    def commission(self) -> Commission: ...

    def slippage(self) -> Slippage: ...

    def funding_rate(self) -> FundingRate: ...


class TradingSystem:
    """Per‑run balance, position and pending order state.

    Parameters
    ----------
    strategy : Strategy
        Supplies decisions, the starting balance and cost models.
    data_source : BarSeriesProvider
        Supplies bars for the instrument being traded.
    """

    def __init__(self, strategy: Strategy, data_source: BarSeriesProvider) -> None:
        self.strategy = strategy
        self.data_source = data_source
        self._balance = to_num(strategy.starting_balance())
        self._position = Position()
        self._orders: List[Order] = []
        self._last_fill: Optional[TradeLog] = None

    # ---- read access ----
    @property
    def symbol(self) -> str:
        return self.data_source.symbol

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def position(self) -> Position:
        """A copy of the running position."""
        return Position(size=self._position.size)

    @property
    def pending_orders(self) -> Tuple[Order, ...]:
        return tuple(self._orders)

    def last_bar(self) -> Bar:
        return self.data_source.last_bar()

    @property
    def last_fill(self) -> Optional[TradeLog]:
        """The most recent fill, or `None` before the first one."""
        return self._last_fill

    # ---- strategy delegation ----
    def on_buy_condition(self) -> Order:
        return self.strategy.on_buy_condition(self)

    def on_sell_condition(self) -> Order:
        return self.strategy.on_sell_condition(self)

    def on_exit_buy_condition(self) -> Order:
        return self.strategy.on_exit_buy_condition(self)

    def on_exit_sell_condition(self) -> Order:
        return self.strategy.on_exit_sell_condition(self)

    def commission(self) -> Commission:
        return self.strategy.commission()

    def slippage(self) -> Slippage:
        return self.strategy.slippage()

    def funding_rate(self) -> FundingRate:
        return self.strategy.funding_rate()

    # ---- order queue ----
    def add_order(self, *orders: Order) -> None:
        self._orders.extend(orders)

    def clear_order(self, order: Order) -> None:
        self._orders.remove(order)

    def clear_all_orders(self) -> None:
        self._orders = []

    # ---- accounting ----
    def apply_fill_to_position(self, new_size: Decimal) -> None:
        self._position.size = new_size

    def record_fill(self, trade: TradeLog) -> None:
        self._last_fill = trade

    def add_balance(self, amount: Decimal) -> None:
        self._balance += amount

    def reduce_balance(self, amount: Decimal) -> None:
        self._balance -= amount

    def reduce_balance_percent(self, percent: Decimal) -> None:
        self._balance *= 1 - to_num(percent) / HUNDRED
