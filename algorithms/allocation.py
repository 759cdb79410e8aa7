"""
Contiguous Memory Allocation for the OS Resource Management Simulator.

Implements First Fit, Best Fit and Worst Fit placement. Processes are
placed strictly in their given order and earlier placements are never
revisited.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from models.memory_map import MemoryMap
from models.process import ProcessRecord, ProcessStatus
from utils.config import DEFAULT_TOTAL_MEMORY


@dataclass(frozen=True)
class AllocationResult:
    """
    Output of an allocation run.

    Attributes:
        memory: Final memory map
        results: Decorated copies of every process, in input order
    """
    memory: MemoryMap
    results: Tuple[ProcessRecord, ...]


# A fit strategy picks a start offset from the free runs, or None
FitStrategy = Callable[[List[Tuple[int, int]], int], Optional[int]]


def first_fit(free_runs: List[Tuple[int, int]], size: int) -> Optional[int]:
    """Lowest-offset free run that is large enough."""
    for start, length in free_runs:
        if length >= size:
            return start
    return None


def best_fit(free_runs: List[Tuple[int, int]], size: int) -> Optional[int]:
    """
    Smallest free run that is large enough.

    Strict comparison: among equally small runs the first one wins.
    """
    best_position = None
    best_size = None
    for start, length in free_runs:
        if length >= size and (best_size is None or length < best_size):
            best_size = length
            best_position = start
    return best_position


def worst_fit(free_runs: List[Tuple[int, int]], size: int) -> Optional[int]:
    """
    Largest free run that is large enough.

    Strict comparison: among equally large runs the first one wins.
    """
    worst_position = None
    worst_size = -1
    for start, length in free_runs:
        if length >= size and length > worst_size:
            worst_size = length
            worst_position = start
    return worst_position


def allocate(
    processes: Sequence[ProcessRecord],
    strategy: FitStrategy,
    total_memory: int = DEFAULT_TOTAL_MEMORY
) -> AllocationResult:
    """
    Place every process into a fresh memory map.

    A process that finds no qualifying free run is marked FAILED with
    allocated_position -1; the run continues with the next process.

    Args:
        processes: Process set in insertion order (memory_size is read)
        strategy: One of first_fit, best_fit, worst_fit
        total_memory: Memory capacity in units

    Returns:
        AllocationResult
    """
    memory = MemoryMap(total_memory)
    results = []

    for index, process in enumerate(processes):
        position = strategy(memory.free_runs(), process.memory_size)

        if position is None:
            results.append(process.decorate(
                allocated_position=-1,
                status=ProcessStatus.FAILED
            ))
            continue

        memory.assign(position, process.memory_size, owner=index + 1)
        results.append(process.decorate(
            allocated_position=position,
            status=ProcessStatus.ALLOCATED
        ))

    return AllocationResult(memory, tuple(results))


ALLOCATORS: Dict[str, FitStrategy] = {
    'firstfit': first_fit,
    'bestfit': best_fit,
    'worstfit': worst_fit,
}
