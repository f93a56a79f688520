"""
Backtest execution engine.

This module contains the `BacktestEngine` class which wires a
configuration into a complete run: it loads historical bars for the
configured symbol, builds the strategy and trading system and hands
them to the `Simulator`.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config.schema import Config
from ..data.csv_data import CSVDataLoader
from ..data.bar_series import BarSeriesProvider
from ..strategy.intraday_breakout import IntradayBreakoutStrategy
from .simulator import SimulationResult, Simulator
from .trading_system import Strategy, TradingSystem


logger = logging.getLogger(__name__)


class BacktestEngine:
    """Run a backtest on historical data loaded from CSV files.

    Parameters
    ----------
    config : Config
        Run configuration.
    strategy : Strategy, optional
        Strategy to simulate.  Defaults to `IntradayBreakoutStrategy`
        built from `config`.
    data_source : BarSeriesProvider, optional
        Bars to replay.  Defaults to `{config.data.csv_dir}/{symbol}.csv`.
    """

    def __init__(
        self,
        config: Config,
        strategy: Optional[Strategy] = None,
        data_source: Optional[BarSeriesProvider] = None,
    ) -> None:
        self.config = config
        self.strategy = strategy if strategy is not None else IntradayBreakoutStrategy(config)
        self.data_source = data_source

    def run(self) -> SimulationResult:
        """Execute the backtest and return the simulation result."""
        data_source = self.data_source
        if data_source is None:
            loader = CSVDataLoader(self.config.data.csv_dir, self.config.data.timezone)
            data_source = loader.load_provider(self.config.symbol)
        logger.info("Loaded %d bars for %s", len(data_source), data_source.symbol)

        system = TradingSystem(self.strategy, data_source)
        return Simulator(system).run()
