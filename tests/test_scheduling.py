"""
CPU Scheduling Tests

Checks each algorithm against hand-computed traces plus the general
properties every schedule must satisfy.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.scheduling import (
    SCHEDULERS,
    schedule_fcfs,
    schedule_priority,
    schedule_round_robin,
    schedule_sjf,
    schedule_srtf,
    schedule_srtf_preemptive,
)
from models.process import ProcessRecord, ProcessStatus


def make_processes(rows):
    """rows: list of (name, arrival, burst[, priority])."""
    processes = []
    for row in rows:
        name, arrival, burst = row[:3]
        priority = row[3] if len(row) > 3 else None
        processes.append(ProcessRecord(
            name=name, arrival_time=arrival, burst_time=burst, priority=priority
        ))
    return tuple(processes)


SAMPLE = make_processes([
    ("P1", 0, 6, 2),
    ("P2", 1, 4, 1),
    ("P3", 2, 8, 3),
    ("P4", 3, 3, 2),
    ("P5", 4, 5, 4),
])


def trace(result):
    return [(e.process_name, e.start, e.finish) for e in result.timeline]


def by_name(result):
    return {p.name: p for p in result.results}


def test_fcfs_trace():
    result = schedule_fcfs(SAMPLE)
    assert trace(result) == [
        ("P1", 0, 6), ("P2", 6, 10), ("P3", 10, 18), ("P4", 18, 21), ("P5", 21, 26)
    ]
    p3 = by_name(result)["P3"]
    assert p3.waiting_time == 8
    assert p3.turnaround_time == 16
    assert all(p.status == ProcessStatus.COMPLETED for p in result.results)


def test_fcfs_finish_property():
    """finish[i] = max(clock_before, arrival[i]) + burst[i], clock never decreases."""
    processes = make_processes([("A", 5, 2), ("B", 0, 3), ("C", 5, 1), ("D", 20, 4)])
    result = schedule_fcfs(processes)

    clock = 0
    for entry, process in zip(result.timeline, result.results):
        expected_start = max(clock, process.arrival_time)
        assert entry.start == expected_start
        assert process.finish_time == expected_start + process.burst_time
        assert process.finish_time >= clock
        clock = process.finish_time

    # Stable sort: A and C share arrival 5, A was inserted first
    assert [e.process_name for e in result.timeline] == ["B", "A", "C", "D"]
    assert trace(result)[-1] == ("D", 20, 24), "Idle gap before D"


def test_sjf_trace():
    result = schedule_sjf(SAMPLE)
    assert trace(result) == [
        ("P1", 0, 6), ("P4", 6, 9), ("P2", 9, 13), ("P5", 13, 18), ("P3", 18, 26)
    ]
    results = by_name(result)
    assert results["P4"].waiting_time == 3
    assert results["P3"].turnaround_time == 24


def test_sjf_tie_keeps_first_encountered():
    processes = make_processes([("A", 0, 1), ("B", 0, 4), ("C", 0, 4)])
    result = schedule_sjf(processes)
    assert [e.process_name for e in result.timeline] == ["A", "B", "C"]


def test_sjf_jumps_idle_gaps():
    processes = make_processes([("A", 10, 2), ("B", 4, 3)])
    result = schedule_sjf(processes)
    assert trace(result) == [("B", 4, 7), ("A", 10, 12)]


def test_non_preemptive_properties():
    """Start >= arrival and no two slices overlap for SJF and Priority."""
    processes = make_processes([
        ("A", 0, 3, 5), ("B", 2, 6, 1), ("C", 4, 4, 3), ("D", 30, 2, 2), ("E", 6, 5, 1)
    ])
    for scheduler in (schedule_sjf, schedule_priority):
        result = scheduler(processes)
        for process in result.results:
            assert process.start_time >= process.arrival_time
            assert process.finish_time - process.start_time == process.burst_time

        busy = sum(e.duration for e in result.timeline)
        assert busy == sum(p.burst_time for p in processes)

        for earlier, later in zip(result.timeline, result.timeline[1:]):
            assert later.start >= earlier.finish


def test_srtf_matches_sjf():
    """SRTF is the non-preemptive SJF schedule."""
    assert trace(schedule_srtf(SAMPLE)) == trace(schedule_sjf(SAMPLE))


def test_srtf_preemptive_trace():
    processes = make_processes([("P1", 0, 8), ("P2", 1, 4), ("P3", 2, 9), ("P4", 3, 5)])
    result = schedule_srtf_preemptive(processes)
    assert trace(result) == [
        ("P1", 0, 1), ("P2", 1, 5), ("P4", 5, 10), ("P1", 10, 17), ("P3", 17, 26)
    ]
    results = by_name(result)
    assert results["P1"].start_time == 0
    assert results["P1"].waiting_time == 9
    assert results["P2"].waiting_time == 0
    assert results["P3"].waiting_time == 15
    assert [p.name for p in result.results] == ["P2", "P4", "P1", "P3"]


def test_round_robin_two_process_trace():
    processes = make_processes([("P1", 0, 6), ("P2", 1, 4)])
    result = schedule_round_robin(processes, quantum=3)
    assert trace(result) == [("P1", 0, 3), ("P2", 3, 6), ("P1", 6, 9), ("P2", 9, 10)]

    results = by_name(result)
    assert results["P1"].start_time == 0
    assert results["P1"].finish_time == 9
    assert results["P1"].waiting_time == 3
    assert results["P2"].start_time == 3
    assert results["P2"].finish_time == 10
    assert results["P2"].waiting_time == 5
    assert results["P2"].turnaround_time == 9


def test_round_robin_sample_trace():
    result = schedule_round_robin(SAMPLE, quantum=3)
    assert trace(result) == [
        ("P1", 0, 3), ("P2", 3, 6), ("P3", 6, 9), ("P4", 9, 12), ("P5", 12, 15),
        ("P1", 15, 18), ("P2", 18, 19), ("P3", 19, 22), ("P5", 22, 24), ("P3", 24, 26),
    ]
    assert [p.name for p in result.results] == ["P4", "P1", "P2", "P5", "P3"]


def test_round_robin_conserves_burst():
    result = schedule_round_robin(SAMPLE, quantum=2)
    for process in SAMPLE:
        slices = [e for e in result.timeline if e.process_name == process.name]
        assert sum(e.duration for e in slices) == process.burst_time
        assert all(e.duration <= 2 for e in slices)


def test_priority_trace():
    result = schedule_priority(SAMPLE)
    assert trace(result) == [
        ("P1", 0, 6), ("P2", 6, 10), ("P4", 10, 13), ("P3", 13, 21), ("P5", 21, 26)
    ]


def test_colour_index_follows_input_position():
    result = schedule_sjf(SAMPLE, palette_size=3)
    colours = {e.process_name: e.color_index for e in result.timeline}
    assert colours == {"P1": 0, "P2": 1, "P3": 2, "P4": 0, "P5": 1}


def test_input_is_not_mutated():
    for name, scheduler in SCHEDULERS.items():
        result = scheduler(SAMPLE)
        assert len(result.results) == len(SAMPLE), name
        assert all(p.finish_time is None for p in SAMPLE), name


def test_srtf_preemptive_running_process_keeps_cpu_on_tie():
    """B is listed first, but A is already running when their remaining times tie."""
    processes = make_processes([("B", 1, 3), ("A", 0, 4)])
    result = schedule_srtf_preemptive(processes)
    assert trace(result) == [("A", 0, 4), ("B", 4, 7)]


def test_srtf_preemptive_idle_tie_goes_to_input_order():
    processes = make_processes([("B", 0, 2), ("A", 0, 2)])
    result = schedule_srtf_preemptive(processes)
    assert trace(result) == [("B", 0, 2), ("A", 2, 4)]
