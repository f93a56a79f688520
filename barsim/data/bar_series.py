"""
Bar series provider.

Wraps a time‑indexed OHLC DataFrame and exposes it to the simulator one
bar at a time.  The provider owns the notion of "now": `advance()`
moves to the next bar and `last_bar()` returns the bar that just
closed.  Strategies may inspect `history()` but never see bars beyond
the current one.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from ..execution.models import Bar


class BarSeriesProvider:
    """Replay a single instrument's bars in chronological order.

    Parameters
    ----------
    symbol : str
        Instrument symbol reported on trade logs.
    frame : pandas.DataFrame
        Bars indexed by end timestamp with ``open``, ``high``, ``low``
        and ``close`` columns.  The frame is sorted on construction.
    """

    def __init__(self, symbol: str, frame: pd.DataFrame) -> None:
        missing = [c for c in ('open', 'high', 'low', 'close') if c not in frame.columns]
        if missing:
            raise ValueError(f"Bar frame for {symbol} is missing columns: {missing}")
        self.symbol = symbol
        self._frame = frame.sort_index()
        self._cursor = -1
        self._last: Optional[Bar] = None

    @classmethod
    def from_records(cls, symbol: str, records: list) -> "BarSeriesProvider":
        """Build a provider from dicts with ``time/open/high/low/close`` keys."""
        frame = pd.DataFrame(records)
        frame['time'] = pd.to_datetime(frame['time'])
        return cls(symbol, frame.set_index('time'))

    def __len__(self) -> int:
        return len(self._frame)

    def advance(self) -> bool:
        """Step to the next bar.  Returns `False` once the series is exhausted."""
        if self._cursor + 1 >= len(self._frame):
            return False
        self._cursor += 1
        self._last = Bar.from_row(self._frame.index[self._cursor], self._frame.iloc[self._cursor])
        return True

    def last_bar(self) -> Bar:
        if self._last is None:
            raise RuntimeError("No bar available yet; call advance() first.")
        return self._last

    def history(self) -> pd.DataFrame:
        """Bars up to and including the current one."""
        return self._frame.iloc[: self._cursor + 1]
