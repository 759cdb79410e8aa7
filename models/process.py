"""
Process model for the OS Resource Management Simulator.

Represents a schedulable/allocatable unit together with the result
fields filled in by a run.
"""

import itertools
from dataclasses import dataclass, field, replace, asdict
from typing import Dict, Optional, Tuple
from enum import Enum


# Monotonic id source shared by every record created in this interpreter
_id_counter = itertools.count(1)


def next_process_id() -> int:
    """Return a fresh, never reused process id."""
    return next(_id_counter)


class ProcessStatus(Enum):
    """Process status after (or before) a run."""
    READY = "Ready"
    COMPLETED = "Completed"
    ALLOCATED = "Allocated"
    FAILED = "Failed"
    DEADLOCKED = "Deadlocked"
    SAFE = "Safe"


@dataclass(frozen=True)
class ProcessRecord:
    """
    Immutable description of a process.

    Which fields matter depends on the operation being run:
    scheduling reads arrival/burst (and priority), allocation reads
    memory_size, deadlock detection reads the two resource vectors.

    Attributes:
        name: Process name, unique within a simulator's collection
        pid: Numeric id assigned at creation time
        arrival_time: Time the process enters the ready queue
        burst_time: Total CPU time required
        priority: 1..10, lower value = more urgent (priority scheduling only)
        quantum: Per-process quantum (stored, round robin uses the global one)
        memory_size: Contiguous units requested (allocation only)
        resources_held: Units held per resource type [R]
        resources_requested: Units requested per resource type [R]
        start_time: First time the process ran
        finish_time: Time the process completed
        waiting_time: turnaround_time - burst_time
        turnaround_time: finish_time - arrival_time
        allocated_position: Memory offset, -1 when allocation failed
        status: Current status
    """
    name: str
    pid: int = field(default_factory=next_process_id)
    arrival_time: Optional[float] = None
    burst_time: Optional[float] = None
    priority: Optional[int] = None
    quantum: Optional[int] = None
    memory_size: Optional[int] = None
    resources_held: Optional[Tuple[int, ...]] = None
    resources_requested: Optional[Tuple[int, ...]] = None

    start_time: Optional[float] = None
    finish_time: Optional[float] = None
    waiting_time: Optional[float] = None
    turnaround_time: Optional[float] = None
    allocated_position: Optional[int] = None
    status: ProcessStatus = ProcessStatus.READY

    def __post_init__(self):
        """Freeze resource vectors into tuples."""
        if self.resources_held is not None:
            object.__setattr__(self, 'resources_held', tuple(self.resources_held))
        if self.resources_requested is not None:
            object.__setattr__(self, 'resources_requested', tuple(self.resources_requested))

    def decorate(self, **changes) -> 'ProcessRecord':
        """
        Return a copy of this record with the given fields overridden.

        The pid is carried over, so the copy still identifies the same process.
        """
        return replace(self, **changes)

    def reset(self) -> 'ProcessRecord':
        """Return a copy with all result fields cleared and status READY."""
        return replace(
            self,
            start_time=None,
            finish_time=None,
            waiting_time=None,
            turnaround_time=None,
            allocated_position=None,
            status=ProcessStatus.READY
        )

    def to_dict(self) -> Dict:
        """Serializable view of every field."""
        data = asdict(self)
        data['status'] = self.status.value
        for key in ('resources_held', 'resources_requested'):
            if data[key] is not None:
                data[key] = list(data[key])
        return data

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"ProcessRecord(name={self.name!r}, pid={self.pid}, "
            f"status={self.status.value})"
        )


@dataclass(frozen=True)
class TimelineEntry:
    """One executed slice of a schedule: [start, finish) on the CPU."""
    process_name: str
    start: int
    finish: int
    color_index: int

    @property
    def duration(self) -> int:
        return self.finish - self.start

    def to_dict(self) -> Dict:
        return asdict(self)


def color_index(ordinal: int, palette_size: int) -> int:
    """Stable process -> colour mapping: ordinal mod palette size."""
    return ordinal % palette_size
