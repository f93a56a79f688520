"""
Performance metrics calculations.

This module provides helpers to compute summary statistics from a
`SimulationResult`.  Balances in the result are Decimals; metrics are
returned as plain floats and ints so they can be serialised to JSON.

Note that the balance only reflects realised cash flow (and costs), so
the balance curve is flat while a position is open.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..execution.simulator import BalancePoint, SimulationResult


def max_drawdown(balance_curve: List[BalancePoint]) -> float:
    """Largest peak-to-trough decline of the balance, as a fraction of the peak."""
    if not balance_curve:
        return 0.0
    peak = float(balance_curve[0].balance)
    worst = 0.0
    for point in balance_curve:
        balance = float(point.balance)
        if balance > peak:
            peak = balance
        drawdown = (peak - balance) / peak if peak > 0 else 0.0
        if drawdown > worst:
            worst = drawdown
    return worst


def compute_metrics(result: SimulationResult) -> Dict[str, Any]:
    """Compute a set of summary statistics for the run.

    Parameters
    ----------
    result : SimulationResult
        Output of `Simulator.run()`.

    Returns
    -------
    dict
        Dictionary of performance metrics.
    """
    starting = float(result.starting_balance)
    final = float(result.balance)
    curve = result.balance_curve

    exposure_time = 0.0
    if curve:
        exposure_time = sum(1 for p in curve if p.position_size != 0) / len(curve)

    return {
        'symbol': result.symbol,
        'starting_balance': starting,
        'final_balance': final,
        'balance_change': final - starting,
        'total_return': (final - starting) / starting if starting else 0.0,
        'max_drawdown': max_drawdown(curve),
        'num_fills': len(result.trades),
        'total_commission': float(sum(t.commission for t in result.trades)),
        'exposure_time': exposure_time,
        'final_position': float(result.position_size),
        'rejected_orders': len(result.rejections),
        'dropped_orders': len(result.dropped_orders),
    }
