"""
Contiguous Memory Allocation Tests

Worked traces for First Fit, Best Fit and Worst Fit, plus the
no-overlap / in-bounds properties.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.allocation import ALLOCATORS, allocate, best_fit, first_fit, worst_fit
from models.process import ProcessRecord, ProcessStatus


def make_processes(sizes):
    return tuple(
        ProcessRecord(name=f"P{i + 1}", arrival_time=0, burst_time=1, memory_size=size)
        for i, size in enumerate(sizes)
    )


SAMPLE_SIZES = [25, 15, 35, 20, 30]


def test_first_fit_worked_trace():
    """
    Capacity 100, sizes [25, 15, 35, 20, 30] in order:
      P1 -> 0..24, P2 -> 25..39, P3 -> 40..74, P4 -> 75..94
      P5 needs 30 but only 95..99 (5 units) is free -> FAILED
    """
    result = allocate(make_processes(SAMPLE_SIZES), first_fit, total_memory=100)
    positions = [p.allocated_position for p in result.results]
    statuses = [p.status for p in result.results]

    assert positions == [0, 25, 40, 75, -1]
    assert statuses == [ProcessStatus.ALLOCATED] * 4 + [ProcessStatus.FAILED]

    memory = result.memory.to_list()
    assert memory == [1] * 25 + [2] * 15 + [3] * 35 + [4] * 20 + [0] * 5
    assert result.memory.free_runs() == [(95, 5)]


def test_every_strategy_on_fresh_memory():
    """
    On a fresh map the only free run is the tail, so all three
    strategies produce the same placements.
    """
    for name, strategy in ALLOCATORS.items():
        result = allocate(make_processes(SAMPLE_SIZES), strategy, total_memory=100)
        assert [p.allocated_position for p in result.results] == [0, 25, 40, 75, -1], name


def test_failure_does_not_stop_the_run():
    """A failed process is skipped and later, smaller ones still fit."""
    result = allocate(make_processes([60, 50, 30, 20]), first_fit, total_memory=100)
    assert [p.allocated_position for p in result.results] == [0, -1, 60, -1]
    assert result.memory.used_units == 90


def test_strategy_choice_over_free_runs():
    runs = [(0, 10), (20, 5), (30, 20), (60, 5)]

    assert first_fit(runs, 5) == 0
    assert best_fit(runs, 5) == 20, "Smallest run wins, first of equal size"
    assert worst_fit(runs, 5) == 30

    assert first_fit(runs, 15) == 30
    assert best_fit(runs, 15) == 30
    assert worst_fit(runs, 15) == 30

    assert first_fit(runs, 25) is None
    assert best_fit(runs, 25) is None
    assert worst_fit(runs, 25) is None


def test_strategy_ties_pick_lowest_offset():
    runs = [(0, 8), (10, 8), (20, 8)]
    assert best_fit(runs, 4) == 0
    assert worst_fit(runs, 4) == 0


def test_allocations_never_overlap():
    sizes = [7, 13, 1, 40, 22, 9, 9, 50, 3]
    for name, strategy in ALLOCATORS.items():
        result = allocate(make_processes(sizes), strategy, total_memory=100)
        occupied = set()
        for process in result.results:
            if process.status != ProcessStatus.ALLOCATED:
                assert process.allocated_position == -1
                continue
            assert process.allocated_position + process.memory_size <= 100
            block = set(range(process.allocated_position,
                              process.allocated_position + process.memory_size))
            assert not (block & occupied), f"{name}: {process.name} overlaps"
            occupied |= block
        assert len(occupied) == result.memory.used_units


def test_input_order_is_kept():
    processes = make_processes([10, 80, 5])
    result = allocate(processes, worst_fit, total_memory=50)
    assert [p.name for p in result.results] == ["P1", "P2", "P3"]
    assert [p.allocated_position for p in result.results] == [0, -1, 10]
    assert all(p.allocated_position is None for p in processes), "Input must be untouched"
