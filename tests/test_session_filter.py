import os
import sys
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barsim.config.schema import Config
from barsim.strategy.intraday_breakout import IntradayBreakoutStrategy, IntradayLevels

import unittest


class TestSessionFilter(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = Config(symbol="TEST", timeframe="H1")
        # Restrict session to 06:00–20:00
        self.cfg.session.start = "06:00"
        self.cfg.session.end = "20:00"
        self.strategy = IntradayBreakoutStrategy(self.cfg)
        self.levels = IntradayLevels(high=1.0, low=1.0)
        # Breaks the high only
        self.bar = pd.Series({"open": 1.0, "high": 1.5, "low": 1.0, "close": 1.2})

    def test_session_filter_outside_hours(self) -> None:
        ts = pd.Timestamp("2024-01-01 22:00", tz=self.cfg.data.timezone)
        signal = self.strategy.evaluate_bar(ts, self.bar, self.levels)
        self.assertIsNone(signal, "Trades should not be taken outside the configured session")

    def test_session_end_is_exclusive(self) -> None:
        ts = pd.Timestamp("2024-01-01 20:00", tz=self.cfg.data.timezone)
        self.assertIsNone(self.strategy.evaluate_bar(ts, self.bar, self.levels))

    def test_signal_inside_session(self) -> None:
        ts = pd.Timestamp("2024-01-01 10:00", tz=self.cfg.data.timezone)
        self.assertEqual(self.strategy.evaluate_bar(ts, self.bar, self.levels), 'long')

    def test_utc_timestamps_are_converted_before_filtering(self) -> None:
        # 04:30 UTC is 05:30 in Brussels during winter
        ts = pd.Timestamp("2024-01-01 04:30", tz="UTC")
        self.assertIsNone(self.strategy.evaluate_bar(ts, self.bar, self.levels))


if __name__ == '__main__':
    unittest.main()
