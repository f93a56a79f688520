import os
import sys
import tempfile

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barsim.config.schema import load_config

import unittest


class TestLoadConfig(unittest.TestCase):
    def _write(self, text: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".yaml")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_partial_file_is_merged_with_defaults(self) -> None:
        path = self._write(
            "symbol: GBPUSD\n"
            "starting_balance: 5000\n"
            "costs:\n"
            "  commission_pct: 0.05\n"
            "  funding_interval: 1h\n"
            "strategy:\n"
            "  volume: 2\n"
        )
        cfg = load_config(path)
        self.assertEqual(cfg.symbol, "GBPUSD")
        self.assertEqual(cfg.starting_balance, 5000.0)
        self.assertEqual(cfg.costs.commission_pct, 0.05)
        self.assertEqual(cfg.costs.slippage_pct, 0.0)
        self.assertEqual(cfg.costs.funding_interval, "1h")
        self.assertEqual(cfg.strategy.volume, 2.0)
        self.assertEqual(cfg.strategy.tp_pct, 0.005)
        self.assertEqual(cfg.session.start, "06:00")
        self.assertEqual(cfg.data.timezone, "Europe/Brussels")

    def test_empty_file_gives_defaults(self) -> None:
        cfg = load_config(self._write(""))
        self.assertEqual(cfg.symbol, "EURUSD")
        self.assertEqual(cfg.starting_balance, 10_000.0)

    def test_non_mapping_root_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_config(self._write("- just\n- a list\n"))

    def test_bad_number_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_config(self._write("starting_balance: lots\n"))


if __name__ == '__main__':
    unittest.main()
