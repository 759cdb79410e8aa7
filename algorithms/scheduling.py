"""
CPU Scheduling Algorithms for the OS Resource Management Simulator.

Implements FCFS, non-preemptive SJF, SRTF, Round Robin and Priority
scheduling over an immutable process set.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from models.errors import IncompleteRunError
from models.process import ProcessRecord, ProcessStatus, TimelineEntry, color_index
from utils.config import DEFAULT_PALETTE_SIZE, DEFAULT_QUANTUM


@dataclass(frozen=True)
class ScheduleResult:
    """
    Output of a scheduling run.

    Attributes:
        timeline: Executed slices in time order
        results: Decorated copies of every process, in completion order
    """
    timeline: Tuple[TimelineEntry, ...]
    results: Tuple[ProcessRecord, ...]


def _complete(process: ProcessRecord, start: int, finish: int) -> ProcessRecord:
    """Decorate a process with its final times and COMPLETED status."""
    turnaround = finish - process.arrival_time
    return process.decorate(
        start_time=start,
        finish_time=finish,
        waiting_time=turnaround - process.burst_time,
        turnaround_time=turnaround,
        status=ProcessStatus.COMPLETED
    )


def schedule_fcfs(
    processes: Sequence[ProcessRecord],
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """
    First Come First Serve.

    Processes run in arrival order (stable: ties keep input order). Each
    starts at max(clock, arrival) and runs to completion.

    Args:
        processes: Process set in insertion order
        palette_size: Colour palette size for timeline entries

    Returns:
        ScheduleResult
    """
    ordinals = {p.pid: i for i, p in enumerate(processes)}
    timeline = []
    results = []
    clock = 0

    # sorted() is stable, so equal arrivals keep insertion order
    for process in sorted(processes, key=lambda p: p.arrival_time):
        start = max(clock, process.arrival_time)
        finish = start + process.burst_time
        timeline.append(TimelineEntry(
            process.name, start, finish, color_index(ordinals[process.pid], palette_size)
        ))
        results.append(_complete(process, start, finish))
        clock = finish

    return ScheduleResult(tuple(timeline), tuple(results))


def _schedule_non_preemptive(
    processes: Sequence[ProcessRecord],
    selection_key: Callable[[ProcessRecord], int],
    palette_size: int
) -> ScheduleResult:
    """
    Shared loop for SJF and Priority.

    Repeatedly picks, among arrived processes, the one with the smallest
    selection_key; ties go to the first one encountered in the remaining
    set. When nothing has arrived the clock jumps to the earliest
    remaining arrival.
    """
    ordinals = {p.pid: i for i, p in enumerate(processes)}
    remaining = list(processes)
    timeline = []
    results = []
    clock = 0

    while remaining:
        available = [p for p in remaining if p.arrival_time <= clock]

        if not available:
            # Idle gap: jump to the next arrival
            clock = min(p.arrival_time for p in remaining)
            continue

        # min() keeps the first of equal keys
        chosen = min(available, key=selection_key)

        start = clock
        finish = start + chosen.burst_time
        timeline.append(TimelineEntry(
            chosen.name, start, finish, color_index(ordinals[chosen.pid], palette_size)
        ))
        results.append(_complete(chosen, start, finish))

        clock = finish
        remaining.pop(remaining.index(chosen))

    return ScheduleResult(tuple(timeline), tuple(results))


def schedule_sjf(
    processes: Sequence[ProcessRecord],
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """Shortest Job First (non-preemptive): smallest burst among arrived processes."""
    return _schedule_non_preemptive(processes, lambda p: p.burst_time, palette_size)


def schedule_srtf(
    processes: Sequence[ProcessRecord],
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """
    Shortest Remaining Time First, approximated.

    Runs the non-preemptive SJF schedule. Use schedule_srtf_preemptive
    for the variant that preempts on shorter arrivals.
    """
    return schedule_sjf(processes, palette_size)


def schedule_srtf_preemptive(
    processes: Sequence[ProcessRecord],
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """
    Shortest Remaining Time First with preemption.

    At every arrival or completion the arrived process with the least
    remaining time takes the CPU. The running process keeps the CPU on a
    tie; other ties go to the earliest process in input order.
    Consecutive time on the same process is a single timeline entry.

    Args:
        processes: Process set in insertion order
        palette_size: Colour palette size for timeline entries

    Returns:
        ScheduleResult
    """
    count = len(processes)
    remaining = [p.burst_time for p in processes]
    first_start: Dict[int, int] = {}
    timeline: List[TimelineEntry] = []
    results = []
    clock = 0
    current = None

    while len(results) < count:
        arrived = [
            i for i in range(count)
            if remaining[i] > 0 and processes[i].arrival_time <= clock
        ]

        if not arrived:
            clock = min(
                processes[i].arrival_time for i in range(count) if remaining[i] > 0
            )
            current = None
            continue

        chosen = min(arrived, key=lambda i: (remaining[i], i))
        if current in arrived and remaining[current] <= remaining[chosen]:
            chosen = current

        # Nothing can change before the next arrival or this completion
        upcoming = [
            p.arrival_time for p in processes
            if p.arrival_time > clock
        ]
        run_for = remaining[chosen]
        if upcoming:
            run_for = min(run_for, min(upcoming) - clock)

        process = processes[chosen]
        first_start.setdefault(chosen, clock)

        last = timeline[-1] if timeline else None
        if last is not None and last.process_name == process.name and last.finish == clock and current == chosen:
            timeline[-1] = TimelineEntry(last.process_name, last.start, clock + run_for, last.color_index)
        else:
            timeline.append(TimelineEntry(
                process.name, clock, clock + run_for, color_index(chosen, palette_size)
            ))

        clock += run_for
        remaining[chosen] -= run_for
        current = chosen

        if remaining[chosen] == 0:
            results.append(_complete(process, first_start[chosen], clock))
            current = None

    return ScheduleResult(tuple(timeline), tuple(results))


def schedule_round_robin(
    processes: Sequence[ProcessRecord],
    quantum: int = DEFAULT_QUANTUM,
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """
    Round Robin with a single global quantum.

    The ready queue is seeded with every process in input order (arrival
    times do not gate the queue). The head runs for min(quantum, remaining)
    and goes back to the tail if it still has work.

    Args:
        processes: Process set in insertion order
        quantum: Time slice per turn
        palette_size: Colour palette size for timeline entries

    Returns:
        ScheduleResult with results in completion order

    Raises:
        IncompleteRunError: If the ready queue drains before every process finishes
    """
    # Queue holds [index, remaining burst, first start]
    ready_queue = deque([i, p.burst_time, None] for i, p in enumerate(processes))
    timeline = []
    results = []
    clock = 0

    while len(results) < len(processes):
        if not ready_queue:
            raise IncompleteRunError(len(results), len(processes))

        entry = ready_queue.popleft()
        index, remaining, start = entry
        process = processes[index]

        if start is None:
            entry[2] = start = clock

        execute = min(quantum, remaining)
        timeline.append(TimelineEntry(
            process.name, clock, clock + execute, color_index(index, palette_size)
        ))

        entry[1] = remaining - execute
        clock += execute

        if entry[1] > 0:
            ready_queue.append(entry)
        else:
            results.append(_complete(process, start, clock))

    return ScheduleResult(tuple(timeline), tuple(results))


def schedule_priority(
    processes: Sequence[ProcessRecord],
    palette_size: int = DEFAULT_PALETTE_SIZE
) -> ScheduleResult:
    """Priority scheduling (non-preemptive): lowest priority value among arrived processes."""
    return _schedule_non_preemptive(processes, lambda p: p.priority, palette_size)


SCHEDULERS: Dict[str, Callable[..., ScheduleResult]] = {
    'fcfs': schedule_fcfs,
    'sjf': schedule_sjf,
    'srtf': schedule_srtf,
    'srtf_preemptive': schedule_srtf_preemptive,
    'rr': schedule_round_robin,
    'priority': schedule_priority,
}
