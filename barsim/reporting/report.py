"""
Report generation utilities.

This module turns a simulation result into human-readable artefacts:
CSV files of the trade log and balance curve, a JSON summary holding
the metrics and the final balance/position snapshot, and a PNG chart
of the balance curve.
"""

from __future__ import annotations

import os
import json
import pandas as pd
import matplotlib

# Use non-interactive backend for environments without display
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..execution.simulator import SimulationResult
from .metrics import compute_metrics


def trades_frame(result: SimulationResult) -> pd.DataFrame:
    """Trade log as a DataFrame; prices and volumes keep their exact decimal text."""
    return pd.DataFrame(
        [
            {
                'timestamp': t.timestamp.isoformat(),
                'symbol': t.symbol,
                'filled_volume': str(t.filled_volume),
                'executed_price': str(t.executed_price),
                'commission': str(t.commission),
            }
            for t in result.trades
        ],
        columns=['timestamp', 'symbol', 'filled_volume', 'executed_price', 'commission'],
    )


def generate_backtest_report(result: SimulationResult, out_dir: str = "results") -> None:
    """Generate report files for a backtest run.

    Creates the output directory if it does not exist and writes the
    following files:

    - `trades.csv` – the trade log, one row per fill
    - `balance_curve.csv` – balance and position after each bar
    - `summary.json` – performance metrics and final snapshot
    - `balance_curve.png` – line chart of the balance
    """
    os.makedirs(out_dir, exist_ok=True)

    trades_frame(result).to_csv(os.path.join(out_dir, 'trades.csv'), index=False)

    df_curve = pd.DataFrame(
        [
            {
                'timestamp': pt.timestamp.isoformat(),
                'balance': str(pt.balance),
                'position_size': str(pt.position_size),
            }
            for pt in result.balance_curve
        ],
        columns=['timestamp', 'balance', 'position_size'],
    )
    df_curve.to_csv(os.path.join(out_dir, 'balance_curve.csv'), index=False)

    summary = {
        'metrics': compute_metrics(result),
        'snapshot': {
            'balance': str(result.balance),
            'position': str(result.position_size),
        },
    }
    with open(os.path.join(out_dir, 'summary.json'), 'w', encoding='utf-8') as fh:
        json.dump(summary, fh, indent=2, ensure_ascii=False)

    fig, ax = plt.subplots(figsize=(10, 4))
    if not df_curve.empty:
        ax.plot(pd.to_datetime(df_curve['timestamp'], utc=True), df_curve['balance'].astype(float), linewidth=1.5)
        ax.set_title(f'Balance - {result.symbol}')
        ax.set_xlabel('Time')
        ax.set_ylabel('Balance')
        fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(os.path.join(out_dir, 'balance_curve.png'))
    plt.close(fig)
