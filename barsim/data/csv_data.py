"""
CSV data loader.

This module provides a class to load historical OHLC data from CSV
files.  Two layouts are recognised.  The standard schema is:

```
time,open,high,low,close,tick_volume,spread
```

Only the `time`, `open`, `high`, `low` and `close` columns are
required.  Additional columns are ignored.  The second layout is the
tab‑separated MetaTrader 5 history export with `<DATE>`, `<TIME>`,
`<OPEN>`, `<HIGH>`, `<LOW>` and `<CLOSE>` columns.  Timestamps are
localised (or converted) to the timezone given in the configuration.

Rows with missing prices are dropped here so that the simulator only
ever sees complete bars.
"""

from __future__ import annotations

import logging
from pathlib import Path
import pandas as pd

from .bar_series import BarSeriesProvider


logger = logging.getLogger(__name__)

MT5_COLUMNS = ["<DATE>", "<TIME>", "<OPEN>", "<HIGH>", "<LOW>", "<CLOSE>"]


class CSVDataLoader:
    """Load OHLC data from CSV files for backtesting.

    Parameters
    ----------
    csv_dir : str
        Directory where the CSV files are located.  Each symbol’s file
        must be named `{SYMBOL}.csv`.
    timezone : str
        IANA timezone name used to localise timestamps.
    """

    def __init__(self, csv_dir: str, timezone: str) -> None:
        self.csv_dir = Path(csv_dir)
        self.timezone = timezone

    def load(self, symbol: str) -> pd.DataFrame:
        file_path = self.csv_dir / f"{symbol}.csv"
        if not file_path.exists():
            raise FileNotFoundError(f"CSV file not found for symbol {symbol}: {file_path}")

        with file_path.open("r", encoding="utf-8") as fh:
            header = fh.readline()

        if "<DATE>" in header:
            df = self._load_mt5(file_path, symbol)
        else:
            df = self._load_standard(file_path, symbol)

        before = len(df)
        df = df.dropna(subset=["open", "high", "low", "close"])
        if len(df) < before:
            logger.warning("Dropped %d incomplete bars from %s", before - len(df), file_path)
        return df

    def load_provider(self, symbol: str) -> BarSeriesProvider:
        """Load `symbol` and wrap it for replay by the simulator."""
        return BarSeriesProvider(symbol, self.load(symbol))

    def _localise(self, index: pd.DatetimeIndex) -> pd.DatetimeIndex:
        if index.tz is None:
            return index.tz_localize(self.timezone)
        return index.tz_convert(self.timezone)

    def _load_standard(self, file_path: Path, symbol: str) -> pd.DataFrame:
        df = pd.read_csv(file_path)
        df.columns = [c.strip().lower() for c in df.columns]
        missing = [c for c in ["time", "open", "high", "low", "close"] if c not in df.columns]
        if missing:
            raise ValueError(
                f"Unrecognized CSV format for {symbol}. Missing columns: {missing}. "
                f"Found columns: {list(df.columns)}"
            )
        df["time"] = pd.to_datetime(df["time"], errors="raise")
        df = df.set_index("time").sort_index()
        df.index = self._localise(pd.DatetimeIndex(df.index))
        return df[["open", "high", "low", "close"]].astype(float)

    def _load_mt5(self, file_path: Path, symbol: str) -> pd.DataFrame:
        df = pd.read_csv(file_path, sep="\t", engine="python")
        df.columns = [c.strip() for c in df.columns]

        missing = [c for c in MT5_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(
                f"Unrecognized CSV format for {symbol}. Missing columns: {missing}. "
                f"Found columns: {list(df.columns)}"
            )

        dt = df["<DATE>"].astype(str).str.strip() + " " + df["<TIME>"].astype(str).str.strip()
        ts = pd.to_datetime(dt, format="%Y.%m.%d %H:%M:%S", errors="coerce")
        if ts.isna().any():
            # fallback if format differs
            ts = pd.to_datetime(dt, errors="coerce")
        if ts.isna().any():
            bad = dt[ts.isna()].head(5).tolist()
            raise ValueError(f"Could not parse MT5 DATE/TIME for {symbol}. Examples: {bad}")

        out = pd.DataFrame(
            {
                "open": df["<OPEN>"].astype(float).values,
                "high": df["<HIGH>"].astype(float).values,
                "low": df["<LOW>"].astype(float).values,
                "close": df["<CLOSE>"].astype(float).values,
            },
            index=pd.DatetimeIndex(ts),
        ).sort_index()

        # MT5 exports use terminal local time; treat it as the configured timezone.
        out.index = self._localise(out.index)
        return out
