"""
Metrics for the OS Resource Management Simulator.

Pure functions turning a finished run into aggregate statistics. Every
function is total: empty or degenerate input gives zero-valued metrics.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence
import statistics

from models.process import ProcessRecord, ProcessStatus


@dataclass(frozen=True)
class SchedulingMetrics:
    """
    Aggregate statistics for a scheduling run.

    Attributes:
        average_waiting_time: Mean waiting time (2 decimals)
        average_turnaround_time: Mean turnaround time (2 decimals)
        cpu_utilization: Total burst / max finish x 100 (1 decimal)
        throughput: Processes / max finish (2 decimals)
        total_processes: Number of processes in the result set
        total_execution_time: Max finish time
    """
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    cpu_utilization: float = 0.0
    throughput: float = 0.0
    total_processes: int = 0
    total_execution_time: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class MemoryMetrics:
    """
    Aggregate statistics for an allocation run.

    Attributes:
        total_memory: Capacity in units
        used_memory: Allocated units
        free_memory: Free units
        utilization: used / total x 100 (1 decimal)
        fragmentation: Number of maximal free runs
        successful_allocations: Processes with status ALLOCATED
        failed_allocations: Processes with status FAILED
    """
    total_memory: int = 0
    used_memory: int = 0
    free_memory: int = 0
    utilization: float = 0.0
    fragmentation: int = 0
    successful_allocations: int = 0
    failed_allocations: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class DeadlockMetrics:
    """Process counts from a deadlock detection run."""
    total_processes: int = 0
    deadlocked_processes: int = 0
    safe_processes: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


def round_half_up(value: float, places: int) -> float:
    """
    Round to a fixed number of decimals with halves away from zero
    (1.125 -> 1.13; the built-in round() gives 1.12).
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_scheduling_metrics(results: Sequence[ProcessRecord]) -> SchedulingMetrics:
    """
    Calculate scheduling statistics from the per-process results.

    Formulas:
        avg waiting    = mean(waiting_time)
        avg turnaround = mean(turnaround_time)
        CPU util       = sum(burst) / max(finish) x 100
        throughput     = count / max(finish)

    Args:
        results: Decorated process records from a scheduling run

    Returns:
        SchedulingMetrics (all zero for an empty result set)
    """
    if not results:
        return SchedulingMetrics()

    avg_waiting = statistics.mean(p.waiting_time or 0 for p in results)
    avg_turnaround = statistics.mean(p.turnaround_time or 0 for p in results)
    total_burst = sum(p.burst_time or 0 for p in results)
    total_time = max(p.finish_time or 0 for p in results)

    # Guard against a degenerate schedule where nothing ran
    if total_time > 0:
        cpu_utilization = round_half_up(total_burst / total_time * 100, 1)
        throughput = round_half_up(len(results) / total_time, 2)
    else:
        cpu_utilization = 0.0
        throughput = 0.0

    return SchedulingMetrics(
        average_waiting_time=round_half_up(avg_waiting, 2),
        average_turnaround_time=round_half_up(avg_turnaround, 2),
        cpu_utilization=cpu_utilization,
        throughput=throughput,
        total_processes=len(results),
        total_execution_time=total_time
    )


def calculate_fragmentation(memory: Sequence[int]) -> int:
    """
    Count maximal free runs in a memory array.

    A proxy for external fragmentation: says nothing about how many
    blocks are allocated.
    """
    fragments = 0
    in_free_block = False

    for owner in memory:
        if owner == 0 and not in_free_block:
            fragments += 1
            in_free_block = True
        elif owner != 0:
            in_free_block = False

    return fragments


def calculate_memory_metrics(
    memory: Sequence[int],
    results: Sequence[ProcessRecord],
    total_memory: int
) -> MemoryMetrics:
    """
    Calculate allocation statistics.

    Args:
        memory: Unit owner array (0 = free)
        results: Decorated process records from an allocation run
        total_memory: Capacity in units

    Returns:
        MemoryMetrics
    """
    used = sum(1 for owner in memory if owner != 0)
    utilization = round_half_up(used / total_memory * 100, 1) if total_memory > 0 else 0.0

    return MemoryMetrics(
        total_memory=total_memory,
        used_memory=used,
        free_memory=total_memory - used,
        utilization=utilization,
        fragmentation=calculate_fragmentation(memory),
        successful_allocations=sum(1 for p in results if p.status == ProcessStatus.ALLOCATED),
        failed_allocations=sum(1 for p in results if p.status == ProcessStatus.FAILED)
    )


def calculate_deadlock_metrics(
    results: Sequence[ProcessRecord],
    deadlocked: Sequence[int]
) -> DeadlockMetrics:
    """Count total, deadlocked and safe processes."""
    # Only indices that map onto a result count as deadlocked processes
    deadlocked_count = sum(1 for i in set(deadlocked) if 0 <= i < len(results))
    return DeadlockMetrics(
        total_processes=len(results),
        deadlocked_processes=deadlocked_count,
        safe_processes=len(results) - deadlocked_count
    )


def format_metrics_report(
    metrics,
    algorithm: Optional[str] = None,
    results: Optional[List[ProcessRecord]] = None,
    verbose: bool = False
) -> str:
    """
    Format metrics for display at the end of a run.

    Args:
        metrics: SchedulingMetrics, MemoryMetrics or DeadlockMetrics
        algorithm: Human-readable algorithm label
        results: Optional decorated records for a per-process summary
        verbose: If True, include metric formulas

    Returns:
        Formatted metrics report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append("RUN METRICS")
    lines.append("="*60)

    if algorithm:
        lines.append(f"Algorithm: {algorithm}")
        lines.append("")

    lines.append("KEY PERFORMANCE METRICS:")
    lines.append("-" * 60)
    for name, value in metrics.to_dict().items():
        label = name.replace('_', ' ').capitalize()
        lines.append(f"  {label}: {value}")

    if results:
        lines.append("")
        lines.append("PER-PROCESS SUMMARY:")
        lines.append("-" * 60)
        for p in results:
            if isinstance(metrics, SchedulingMetrics):
                detail = (
                    f"start={p.start_time} finish={p.finish_time} "
                    f"wait={p.waiting_time} tat={p.turnaround_time}"
                )
            elif isinstance(metrics, MemoryMetrics):
                detail = f"size={p.memory_size} at={p.allocated_position}"
            else:
                detail = f"held={list(p.resources_held or [])} requested={list(p.resources_requested or [])}"
            lines.append(f"  {p.name:8}: {p.status.value:10} | {detail}")

    if verbose:
        lines.append("")
        lines.append("METRIC FORMULAS:")
        lines.append("-" * 60)
        if isinstance(metrics, SchedulingMetrics):
            lines.append("Waiting Time: finish - arrival - burst")
            lines.append("Turnaround Time: finish - arrival")
            lines.append("CPU Utilization: (SUM burst / max finish) x 100")
            lines.append("Throughput: # processes / max finish")
        elif isinstance(metrics, MemoryMetrics):
            lines.append("Utilization: (used units / total units) x 100")
            lines.append("Fragmentation: number of maximal free runs")
        else:
            lines.append("Deadlocked: processes whose request never fits the work vector")

    lines.append("="*60)
    return "\n".join(lines)
