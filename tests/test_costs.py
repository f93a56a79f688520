import os
import sys
from decimal import Decimal

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
for path in (PROJECT_ROOT, CURRENT_DIR):
    if path not in sys.path:
        sys.path.insert(0, path)

from barsim.execution.costs import Commission, FundingRate, PeriodicCostInterval, Slippage
from barsim.execution.models import Order
from scripted import build, make_provider, step

import unittest


FLAT_BAR = (100, 101, 99, 100)


class TestCostModels(unittest.TestCase):
    def test_commission_is_percent_of_notional(self) -> None:
        commission = Commission.of_percent_price(0.1)
        self.assertEqual(commission.cost(Decimal("-2"), Decimal("100")), Decimal("0.2"))

    def test_slippage_moves_price_against_the_order(self) -> None:
        slippage = Slippage.of_percent_price(1)
        self.assertEqual(slippage.apply(Decimal("1"), Decimal("100")), Decimal("101"))
        self.assertEqual(slippage.apply(Decimal("-1"), Decimal("100")), Decimal("99"))

    def test_interval_parsing(self) -> None:
        self.assertIs(PeriodicCostInterval.parse("8h"), PeriodicCostInterval.EIGHT_HOURS)
        self.assertIs(PeriodicCostInterval.parse("one_day"), PeriodicCostInterval.ONE_DAY)
        self.assertIs(PeriodicCostInterval.parse(PeriodicCostInterval.ONE_HOUR), PeriodicCostInterval.ONE_HOUR)
        with self.assertRaises(ValueError):
            PeriodicCostInterval.parse("3h")
        with self.assertRaises(ValueError):
            PeriodicCostInterval.parse("every now and then")


class TestCostSettlement(unittest.TestCase):
    def test_commission_charged_on_every_fill(self) -> None:
        provider, system, sim = build(
            [FLAT_BAR, FLAT_BAR],
            buys={0: Order.market(2)},
            exit_buys={1: Order.market(-2, reduce_only=True)},
            commission=Commission.of_percent_price("0.1"),
        )
        step(provider, sim)
        self.assertEqual(system.balance, Decimal("9999.8"))
        self.assertEqual(sim.trade_history[0].commission, Decimal("0.2"))

        step(provider, sim)
        self.assertEqual(system.balance, Decimal("9999.8") - Decimal("200") - Decimal("0.2"))

    def test_slippage_applies_to_market_fills_only(self) -> None:
        provider, system, sim = build(
            [FLAT_BAR, FLAT_BAR, FLAT_BAR],
            buys={0: Order.market(1), 1: Order.limit(1, 99)},
            slippage=Slippage.of_percent_price(1),
        )
        step(provider, sim, 3)
        self.assertEqual([t.executed_price for t in sim.trade_history], [Decimal("101"), Decimal("99")])

    def test_funding_charged_each_interval_on_held_position(self) -> None:
        provider, system, sim = build(
            [FLAT_BAR] * 3,
            buys={0: Order.market(10)},
            funding_rate=FundingRate.of_percent_price("0.01", PeriodicCostInterval.ONE_HOUR),
        )
        step(provider, sim, 3)
        self.assertEqual(system.balance, Decimal("9999.8"))

    def test_short_positions_receive_positive_funding(self) -> None:
        provider, system, sim = build(
            [FLAT_BAR] * 2,
            sells={0: Order.market(-10)},
            funding_rate=FundingRate.of_percent_price("0.01", "1h"),
        )
        step(provider, sim, 2)
        self.assertEqual(system.balance, Decimal("10000.1"))

    def test_gap_in_bars_settles_every_missed_boundary(self) -> None:
        provider, system, sim = build(
            [FLAT_BAR],
            buys={0: Order.market(10)},
            funding_rate=FundingRate.of_percent_price("0.01", PeriodicCostInterval.ONE_HOUR),
        )
        step(provider, sim)
        # Swap in a provider whose next bar is three hours later.
        system.data_source = make_provider([FLAT_BAR, FLAT_BAR], start="2024-01-01 10:00", freq="3h")
        system.data_source.advance()
        step(system.data_source, sim)
        self.assertEqual(system.balance, Decimal("9999.7"))


if __name__ == '__main__':
    unittest.main()
