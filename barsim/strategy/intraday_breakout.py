"""
Intraday breakout strategy implementation.

This strategy tracks the highest high and lowest low of each local
trading day and opens a long or short position when the current bar’s
high or low breaks those levels.  It does not open both directions at
the same time, only enters when flat and honours a configured trading
session window.  Open positions are closed with a reduce‑only market
order once the bar closes beyond the take‑profit or stop‑loss level.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import pandas as pd

from ..config.schema import Config
from ..execution.costs import Commission, FundingRate, Slippage
from ..execution.models import Order
from ..execution.trading_system import TradingSystem
from ..utils.num import to_num
from ..utils.timeutils import is_in_session, local_dates, parse_time_str


@dataclass
class IntradayLevels:
    """Intraday high/low of the bars preceding the current one."""
    high: Optional[float] = None
    low: Optional[float] = None


class IntradayBreakoutStrategy:
    """Generate breakout entries and percentage exits for the simulator."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.session_start = parse_time_str(config.session.start)
        self.session_end = parse_time_str(config.session.end)
        self.volume = to_num(config.strategy.volume)
        self.sl_pct = to_num(config.strategy.sl_pct)
        self.tp_pct = to_num(config.strategy.tp_pct)

    # ---- signal logic ----
    def intraday_levels(self, history: pd.DataFrame) -> IntradayLevels:
        """Levels of the bars before the last one on the last bar’s local day."""
        if len(history) < 2:
            return IntradayLevels()
        ts = history.index[-1]
        start = history.index.searchsorted(ts - pd.Timedelta(days=1))
        recent = history.iloc[start:]
        dates = local_dates(pd.DatetimeIndex(recent.index), self.config.data.timezone)
        earlier = recent.iloc[:-1][dates[:-1] == dates[-1]]
        if earlier.empty:
            return IntradayLevels()
        return IntradayLevels(high=float(earlier['high'].max()), low=float(earlier['low'].min()))

    def evaluate_bar(self, ts: pd.Timestamp, bar: pd.Series, levels: IntradayLevels) -> Optional[str]:
        """Evaluate a single bar against the intraday levels.

        Parameters
        ----------
        ts : pandas.Timestamp
            The timestamp of the bar (bar close).
        bar : pandas.Series
            A row containing `open`, `high`, `low`, `close`.
        levels : IntradayLevels
            High and low of earlier bars on the same day.

        Returns
        -------
        str or None
            `'long'` to enter a long position, `'short'` for a short,
            or `None` if no trade should be taken.
        """
        long_signal = levels.high is not None and bar['high'] > levels.high
        short_signal = levels.low is not None and bar['low'] < levels.low

        # Skip if both triggers fire on the same bar
        signal: Optional[str] = None
        if long_signal and not short_signal:
            signal = 'long'
        elif short_signal and not long_signal:
            signal = 'short'

        if not is_in_session(ts, self.session_start, self.session_end, self.config.data.timezone):
            signal = None
        return signal

    def _signal(self, system: TradingSystem) -> Optional[str]:
        history = system.data_source.history()
        if history.empty:
            return None
        levels = self.intraday_levels(history)
        return self.evaluate_bar(history.index[-1], history.iloc[-1], levels)

    @staticmethod
    def entry_price(system: TradingSystem) -> Optional[Decimal]:
        """Fill price of the open position.

        Entries are only taken when flat and exits close the whole
        position, so while a position is open the last fill is its entry.
        """
        if system.position.is_flat or system.last_fill is None:
            return None
        return system.last_fill.executed_price

    def exit_levels(self, entry_price: Decimal, long: bool) -> tuple:
        """Return ``(stop_loss, take_profit)`` prices for a position entered at `entry_price`."""
        if long:
            return entry_price * (1 - self.sl_pct), entry_price * (1 + self.tp_pct)
        return entry_price * (1 + self.sl_pct), entry_price * (1 - self.tp_pct)

    # ---- Strategy protocol ----
    def starting_balance(self) -> Decimal:
        return to_num(self.config.starting_balance)

    def on_buy_condition(self, system: TradingSystem) -> Order:
        if not system.position.is_flat or self._signal(system) != 'long':
            return Order.none()
        return Order.market(self.volume)

    def on_sell_condition(self, system: TradingSystem) -> Order:
        if not system.position.is_flat or self._signal(system) != 'short':
            return Order.none()
        return Order.market(-self.volume)

    def on_exit_buy_condition(self, system: TradingSystem) -> Order:
        entry_price = self.entry_price(system)
        if entry_price is None:
            return Order.none()
        close = system.last_bar().close_price
        stop_loss, take_profit = self.exit_levels(entry_price, long=True)
        if close <= stop_loss or close >= take_profit:
            return Order.market(-system.position.size, reduce_only=True)
        return Order.none()

    def on_exit_sell_condition(self, system: TradingSystem) -> Order:
        entry_price = self.entry_price(system)
        if entry_price is None:
            return Order.none()
        close = system.last_bar().close_price
        stop_loss, take_profit = self.exit_levels(entry_price, long=False)
        if close >= stop_loss or close <= take_profit:
            return Order.market(-system.position.size, reduce_only=True)
        return Order.none()

    def commission(self) -> Commission:
        return Commission.of_percent_price(self.config.costs.commission_pct)

    def slippage(self) -> Slippage:
        return Slippage.of_percent_price(self.config.costs.slippage_pct)

    def funding_rate(self) -> FundingRate:
        return FundingRate.of_percent_price(self.config.costs.funding_rate_pct, self.config.costs.funding_interval)
