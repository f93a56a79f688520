"""
Configuration schema and loader.

This module defines dataclasses that mirror the expected structure of
the YAML configuration file (`config.yaml`).  A helper function
`load_config()` reads a YAML file from disk and returns an instance
of `Config` populated with reasonable defaults for any missing
fields.

When extending the configuration, add new fields to the appropriate
dataclass and to the defaults in `load_config()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Any
import yaml


@dataclass
class SessionConfig:
    """Defines the trading session for each day.

    Attributes
    ----------
    start : str
        Start time in `HH:MM` 24‑hour format.  The time is interpreted in
        the timezone specified by the `data.timezone` configuration.
    end : str
        End time in `HH:MM` format.  The end is exclusive: no new
        positions are opened after this time.
    """

    start: str = "06:00"
    end: str = "20:00"


@dataclass
class CostsConfig:
    """Models trading costs.

    Attributes
    ----------
    commission_pct : float
        Commission charged on every fill, in percent of notional.
    slippage_pct : float
        Adverse price adjustment applied to market fills, in percent of
        the bar close.
    funding_rate_pct : float
        Funding charged on the open position every `funding_interval`,
        in percent of its notional at the bar close.
    funding_interval : str
        Either an interval name (``EIGHT_HOURS``) or a duration such as
        ``8h``.  Supported: 1h, 4h, 8h, 1d.
    """

    commission_pct: float = 0.0
    slippage_pct: float = 0.0
    funding_rate_pct: float = 0.0
    funding_interval: str = "EIGHT_HOURS"


@dataclass
class StrategyConfig:
    """Parameters of the intraday breakout strategy.

    Attributes
    ----------
    volume : float
        Units bought or sold per entry.
    sl_pct : float
        Stop‑loss expressed as a fraction of the entry price (e.g. 0.005
        for 0.5 %).
    tp_pct : float
        Take‑profit expressed as a fraction of the entry price.
    """

    volume: float = 1.0
    sl_pct: float = 0.005
    tp_pct: float = 0.005


@dataclass
class DataConfig:
    """Data source configuration.

    Attributes
    ----------
    csv_dir : str
        Directory containing `{SYMBOL}.csv`.
    timezone : str
        IANA timezone name used both for interpreting timestamps in
        historical data and for defining the trading session.
    """

    csv_dir: str = "data"
    timezone: str = "Europe/Brussels"


@dataclass
class Config:
    """Root configuration for a backtest run."""

    symbol: str = "EURUSD"
    timeframe: str = "H1"
    starting_balance: float = 10_000.0
    session: SessionConfig = field(default_factory=SessionConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    costs: CostsConfig = field(default_factory=CostsConfig)
    data: DataConfig = field(default_factory=DataConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated configuration object.  Missing fields are filled with
        the defaults defined in the dataclasses.

    Raises
    ------
    ValueError
        If the file does not contain a mapping or a numeric field cannot
        be parsed.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    defaults: Dict[str, Any] = {
        'symbol': "EURUSD",
        'timeframe': "H1",
        'starting_balance': 10_000.0,
        'session': {
            'start': "06:00",
            'end': "20:00",
        },
        'strategy': {
            'volume': 1.0,
            'sl_pct': 0.005,
            'tp_pct': 0.005,
        },
        'costs': {
            'commission_pct': 0.0,
            'slippage_pct': 0.0,
            'funding_rate_pct': 0.0,
            'funding_interval': "EIGHT_HOURS",
        },
        'data': {
            'csv_dir': 'data',
            'timezone': 'Europe/Brussels',
        },
    }

    merged = _merge_dict(defaults, raw)

    strategy = merged['strategy']
    costs = merged['costs']
    cfg = Config(
        symbol=str(merged['symbol']),
        timeframe=str(merged['timeframe']),
        starting_balance=float(merged['starting_balance']),
        session=SessionConfig(**merged['session']),
        strategy=StrategyConfig(
            volume=float(strategy['volume']),
            sl_pct=float(strategy['sl_pct']),
            tp_pct=float(strategy['tp_pct']),
        ),
        costs=CostsConfig(
            commission_pct=float(costs['commission_pct']),
            slippage_pct=float(costs['slippage_pct']),
            funding_rate_pct=float(costs['funding_rate_pct']),
            funding_interval=str(costs['funding_interval']),
        ),
        data=DataConfig(**merged['data']),
    )
    return cfg
