"""
Run-over-run comparison for the OS Resource Management Simulator.

Reports how headline metrics moved since the previous run.
"""

from typing import Dict, Optional

from analysis.metrics import round_half_up


# Metrics shown with a change indicator, in display order
HEADLINE_METRICS = (
    'average_waiting_time',
    'average_turnaround_time',
    'cpu_utilization',
    'utilization',
)


def percent_change(current: float, previous: Optional[float]) -> float:
    """
    Relative change from previous to current, in percent (1 decimal).

    A missing or zero previous value has no meaningful baseline and
    reports 0.0.
    """
    if previous is None or previous == 0:
        return 0.0
    return round_half_up((current - previous) / previous * 100, 1)


def compare_metrics(current: Dict, previous: Optional[Dict]) -> Dict[str, float]:
    """
    Compare the headline metrics of two runs.

    Args:
        current: Metrics dict of the latest run
        previous: Metrics dict of the run before it (None on the first run)

    Returns:
        Dict of metric name -> percent change, for every headline metric
        present in the current run
    """
    previous = previous or {}
    changes = {}
    for name in HEADLINE_METRICS:
        if name not in current:
            continue
        changes[name] = percent_change(current[name], previous.get(name))
    return changes


def format_change(change: float) -> str:
    """Signed display string, e.g. '+12.5%' or '-3.0%'."""
    sign = '+' if change >= 0 else ''
    return f"{sign}{change}%"
