"""
Tick‑driven order matching and position accounting.

The `Simulator` consumes one bar per `tick()` and, in a fixed order,
re‑matches resting limit orders, asks the strategy for exit and entry
decisions, fills whatever crosses the bar and updates the trading
system's position and balance.

Accounting follows a collateral style rather than average cost:

- opening (non reduce‑only) fills change the position only;
- reduce‑only fills are clamped so the position never crosses zero, and
  the balance moves by ``delta * executed_price`` where ``delta`` is the
  signed size actually closed.

Problems with a single order (wrong‑side reduce‑only, non‑finite
volume, bad limit price) never abort the run.  The order is dropped,
state is left unchanged and an `OrderRejection` is recorded on
`Simulator.rejections`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

import pandas as pd

from ..utils.num import ZERO, is_finite
from .models import Bar, Order, OrderRejection, OrderType, TradeLog
from .trading_system import TradingSystem


logger = logging.getLogger(__name__)


@dataclass
class BalancePoint:
    """Account state after a tick."""
    timestamp: pd.Timestamp
    balance: Decimal
    position_size: Decimal


@dataclass
class SimulationResult:
    """Output of a completed run."""
    symbol: str
    starting_balance: Decimal
    balance: Decimal
    position_size: Decimal
    trades: List[TradeLog] = field(default_factory=list)
    balance_curve: List[BalancePoint] = field(default_factory=list)
    rejections: List[OrderRejection] = field(default_factory=list)
    dropped_orders: Tuple[Order, ...] = ()


class Simulator:
    """Drive a `TradingSystem` through its data source bar by bar."""

    def __init__(self, trading_system: TradingSystem) -> None:
        self.trading_system = trading_system
        self.starting_balance = trading_system.balance
        self.trade_history: List[TradeLog] = []
        self.rejections: List[OrderRejection] = []
        self.balance_curve: List[BalancePoint] = []
        self._next_funding_time: Optional[pd.Timestamp] = None

    def run(self) -> SimulationResult:
        """Tick through every remaining bar and return the final snapshot.

        Limit orders still resting when the data runs out are reported
        in `SimulationResult.dropped_orders`; they never fill.
        """
        system = self.trading_system
        logger.info("Simulating %s from balance %s", system.symbol, system.balance)
        while system.data_source.advance():
            self.tick()

        dropped = system.pending_orders
        if dropped:
            logger.info("Data exhausted with %d unfilled pending orders; dropping them", len(dropped))
        logger.info(
            "Simulation of %s finished: balance=%s position=%s fills=%d rejections=%d",
            system.symbol,
            system.balance,
            system.position.size,
            len(self.trade_history),
            len(self.rejections),
        )
        return SimulationResult(
            symbol=system.symbol,
            starting_balance=self.starting_balance,
            balance=system.balance,
            position_size=system.position.size,
            trades=list(self.trade_history),
            balance_curve=list(self.balance_curve),
            rejections=list(self.rejections),
            dropped_orders=dropped,
        )

    def tick(self) -> None:
        """Process the data source's latest bar."""
        system = self.trading_system
        bar = system.last_bar()

        self._settle_funding(bar)
        self._process_pending_orders(bar)

        if system.position.is_long:
            self._submit(system.on_exit_buy_condition(), bar, queue_reduce_only=True)

        if system.position.is_short:
            self._submit(system.on_exit_sell_condition(), bar, queue_reduce_only=True)

        self._submit(system.on_buy_condition(), bar, queue_reduce_only=False)
        self._submit(system.on_sell_condition(), bar, queue_reduce_only=False)

        self.balance_curve.append(
            BalancePoint(timestamp=bar.end_time, balance=system.balance, position_size=system.position.size)
        )

    # ---- matching ----
    def _submit(self, order: Optional[Order], bar: Bar, queue_reduce_only: bool) -> None:
        """Queue or immediately resolve one order coming from a strategy hook.

        Limit orders whose reduce‑only flag matches the hook kind rest
        in the pending list without a fill attempt on this bar; any
        other order is matched now, and a limit that does not cross
        rests afterwards.
        """
        if order is None or order.is_zero:
            return

        reason = self._validate(order)
        if reason is not None:
            self._reject(order, reason, bar)
            return

        if order.order_type is OrderType.LIMIT and order.reduce_only == queue_reduce_only:
            self.trading_system.add_order(order)
            logger.debug("Queued %s limit %s @ %s", "reduce-only" if order.reduce_only else "opening",
                         order.volume, order.price)
            return

        if not self._execute(order, bar) and order.order_type is OrderType.LIMIT:
            self.trading_system.add_order(order)

    def _process_pending_orders(self, bar: Bar) -> None:
        for order in self.trading_system.pending_orders:
            if self._execute(order, bar):
                self.trading_system.clear_order(order)

    @staticmethod
    def _validate(order: Order) -> Optional[str]:
        if not isinstance(order.order_type, OrderType):
            return "unknown order type"
        if not is_finite(order.volume):
            return "non-finite volume"
        if order.order_type is OrderType.LIMIT and not (is_finite(order.price) and order.price > ZERO):
            return "invalid limit price"
        return None

    def fill_price(self, order: Order, bar: Bar) -> Optional[Decimal]:
        """Price at which `order` fills against `bar`, or `None` if it does not cross."""
        if order.order_type is OrderType.MARKET:
            return self.trading_system.slippage().apply(order.volume, bar.close_price)
        if order.is_buy:
            return order.price if bar.low_price <= order.price else None
        return order.price if bar.high_price >= order.price else None

    def _execute(self, order: Order, bar: Bar) -> bool:
        """Try to fill `order`.  Returns `False` only when a limit did not cross."""
        executed_price = self.fill_price(order, bar)
        if executed_price is None:
            return False
        if order.reduce_only:
            self._close_position(order, executed_price, bar)
        else:
            self._open_position(order, executed_price, bar)
        return True

    # ---- accounting ----
    def _open_position(self, order: Order, executed_price: Decimal, bar: Bar) -> None:
        system = self.trading_system
        commission = self._charge_commission(order.volume, executed_price)
        self._log_fill(order.volume, executed_price, bar, commission)
        system.apply_fill_to_position(system.position.size + order.volume)

    def _close_position(self, order: Order, executed_price: Decimal, bar: Bar) -> None:
        system = self.trading_system
        size = system.position.size

        if order.volume > ZERO and size < ZERO:
            new_size = min(size + order.volume, ZERO)
        elif order.volume < ZERO and size > ZERO:
            new_size = max(size + order.volume, ZERO)
        else:
            self._reject(order, "wrong side", bar)
            return

        delta = new_size - size
        system.add_balance(delta * executed_price)
        commission = self._charge_commission(delta, executed_price)
        self._log_fill(delta, executed_price, bar, commission)
        system.apply_fill_to_position(new_size)

    def _charge_commission(self, volume: Decimal, price: Decimal) -> Decimal:
        commission = self.trading_system.commission().cost(volume, price)
        if commission != ZERO:
            self.trading_system.reduce_balance(commission)
        return commission

    def _settle_funding(self, bar: Bar) -> None:
        """Charge the funding rate for every interval boundary `bar` has passed.

        Boundaries are counted from the first bar's end time and settled
        on the position held before this bar's fills.
        """
        funding = self.trading_system.funding_rate()
        interval = funding.interval.value
        if self._next_funding_time is None:
            self._next_funding_time = bar.end_time + interval
            return
        while bar.end_time >= self._next_funding_time:
            payment = funding.payment(self.trading_system.position.size, bar.close_price)
            if payment != ZERO:
                self.trading_system.reduce_balance(payment)
                logger.debug("Funding settled at %s: %s", self._next_funding_time, payment)
            self._next_funding_time += interval

    def _log_fill(self, volume: Decimal, price: Decimal, bar: Bar, commission: Decimal) -> None:
        trade = TradeLog(
            symbol=self.trading_system.symbol,
            filled_volume=volume,
            executed_price=price,
            timestamp=bar.end_time,
            commission=commission,
        )
        self.trade_history.append(trade)
        self.trading_system.record_fill(trade)
        logger.debug("Filled %s %s @ %s at %s", trade.symbol, volume, price, bar.end_time)

    def _reject(self, order: Order, reason: str, bar: Bar) -> None:
        self.rejections.append(OrderRejection(order=order, reason=reason, timestamp=bar.end_time))
        logger.warning(
            "Rejected %s order (volume=%s, reduce_only=%s) at %s: %s",
            getattr(order.order_type, 'value', order.order_type),
            order.volume,
            order.reduce_only,
            bar.end_time,
            reason,
        )
