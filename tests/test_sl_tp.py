import os
import sys
from decimal import Decimal
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barsim.config.schema import Config
from barsim.data.bar_series import BarSeriesProvider
from barsim.execution.backtest_exec import BacktestEngine
from barsim.strategy.intraday_breakout import IntradayBreakoutStrategy

import unittest


def breakout_bars(tz: str) -> BarSeriesProvider:
    """Four bars on one morning: a range, an upside breakout, then a rally."""
    index = pd.DatetimeIndex([pd.Timestamp(f"2024-01-02 {h}:00", tz=tz) for h in (10, 11, 12, 13)])
    frame = pd.DataFrame(
        {
            "open": [100.0, 100.0, 101.5, 102.0],
            "high": [101.0, 102.0, 102.0, 102.0],
            "low": [99.0, 99.5, 101.0, 101.0],
            "close": [100.0, 101.5, 102.0, 101.5],
        },
        index=index,
    )
    return BarSeriesProvider("TEST", frame)


class TestStopLossTakeProfit(unittest.TestCase):
    def test_stop_loss_and_take_profit_calculation(self) -> None:
        """Verify that SL and TP are computed correctly relative to entry price."""
        cfg = Config(symbol="TEST", timeframe="H1")
        # Set risk parameters to 10 % for easier arithmetic
        cfg.strategy.sl_pct = 0.1
        cfg.strategy.tp_pct = 0.1
        strategy = IntradayBreakoutStrategy(cfg)

        sl_long, tp_long = strategy.exit_levels(Decimal("10"), long=True)
        self.assertEqual(sl_long, Decimal("9"), msg=f"Expected SL=9, got {sl_long}")
        self.assertEqual(tp_long, Decimal("11"), msg=f"Expected TP=11, got {tp_long}")

        sl_short, tp_short = strategy.exit_levels(Decimal("10"), long=False)
        self.assertEqual(sl_short, Decimal("11"), msg=f"Expected SL=11, got {sl_short}")
        self.assertEqual(tp_short, Decimal("9"), msg=f"Expected TP=9, got {tp_short}")

    def test_take_profit_closes_breakout_position(self) -> None:
        cfg = Config(symbol="TEST", timeframe="H1", starting_balance=10_000.0)
        cfg.strategy.volume = 1.0
        cfg.strategy.sl_pct = 0.01
        cfg.strategy.tp_pct = 0.004
        result = BacktestEngine(cfg, data_source=breakout_bars(cfg.data.timezone)).run()

        # Entry at the 11:00 close, exit when the 12:00 close clears 101.5 * 1.004
        self.assertEqual([t.filled_volume for t in result.trades], [Decimal("1"), Decimal("-1")])
        self.assertEqual([t.executed_price for t in result.trades], [Decimal("101.5"), Decimal("102")])
        self.assertEqual(result.position_size, Decimal("0"))
        self.assertEqual(result.balance, Decimal("9898"))
        self.assertEqual(result.rejections, [])

    def test_stop_loss_closes_short_position(self) -> None:
        cfg = Config(symbol="TEST", timeframe="H1")
        cfg.strategy.sl_pct = 0.01
        cfg.strategy.tp_pct = 0.05
        tz = cfg.data.timezone
        index = pd.DatetimeIndex([pd.Timestamp(f"2024-01-02 {h}:00", tz=tz) for h in (10, 11, 12)])
        frame = pd.DataFrame(
            {
                "open": [100.0, 100.0, 99.0],
                "high": [101.0, 100.5, 101.0],
                "low": [99.0, 98.0, 98.5],
                "close": [100.0, 99.0, 100.5],
            },
            index=index,
        )
        result = BacktestEngine(cfg, data_source=BarSeriesProvider("TEST", frame)).run()

        # Short at 99, stop at 99.99 breached by the 100.5 close
        self.assertEqual([t.filled_volume for t in result.trades], [Decimal("-1"), Decimal("1")])
        self.assertEqual(result.position_size, Decimal("0"))
        self.assertEqual(result.balance, Decimal("10000") + Decimal("100.5"))

    def test_exits_are_measured_from_the_fill_price(self) -> None:
        cfg = Config(symbol="TEST", timeframe="H1", starting_balance=10_000.0)
        cfg.strategy.sl_pct = 0.01
        cfg.strategy.tp_pct = 0.004
        cfg.costs.slippage_pct = 1.0
        result = BacktestEngine(cfg, data_source=breakout_bars(cfg.data.timezone)).run()

        # Slipped entry at 102.515 puts the take profit above the 102 close
        self.assertEqual([t.executed_price for t in result.trades], [Decimal("102.515")])
        self.assertEqual(result.position_size, Decimal("1"))


if __name__ == '__main__':
    unittest.main()
