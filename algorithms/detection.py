"""
Deadlock Detection Algorithm for the OS Resource Management Simulator.

Implements matrix-based deadlock detection (Work/Finish reduction) for
multi-instance resource systems.
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from models.system_state import DeadlockMatrices


@dataclass(frozen=True)
class DetectionResult:
    """
    Partition of processes produced by the reduction.

    Attributes:
        finished: Indices of processes that can eventually complete
        deadlocked: Indices of processes that cannot
        sequence: Order in which processes were reduced
    """
    finished: Tuple[int, ...]
    deadlocked: Tuple[int, ...]
    sequence: Tuple[int, ...]

    @property
    def has_deadlock(self) -> bool:
        return len(self.deadlocked) > 0


def detect_deadlock(matrices: DeadlockMatrices) -> DetectionResult:
    """
    Detect deadlock using matrix-based Work/Finish algorithm.

    Algorithm (Multi-Instance Resources):
    1. Initialize Work = Available.copy(), Finish = [False] * num_processes
    2. Scan every process i where Finish[i] == False and Request[i] <= Work (element-wise)
    3. For each such process: Finish[i] = True, Work += Allocation[i]
    4. Repeat the scan until one makes no progress
    5. Deadlock exists if any Finish[i] == False

    Uses Request[i] (current pending request), not a maximum claim. This
    answers whether the current snapshot is reducible, not whether a
    future request sequence will deadlock.

    Time Complexity: O(P²×R) where P = processes, R = resource types

    Args:
        matrices: Allocation/request/available snapshot (not modified)

    Returns:
        DetectionResult with 0-based process indices

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7: Deadlocks.
    """
    num_processes = matrices.num_processes

    # Step 1: Initialize Work and Finish vectors
    work = matrices.available.copy()
    finish = np.zeros(num_processes, dtype=bool)
    sequence = []

    # Step 2-4: Full scans until a scan makes no progress
    found_progress = True
    while found_progress:
        found_progress = False

        for i in range(num_processes):
            if finish[i]:
                continue

            if np.all(matrices.request[i] <= work):
                # Process can complete - add its allocation back to work
                work += matrices.allocation[i]
                finish[i] = True
                sequence.append(i)
                found_progress = True

    # Step 5: Processes never reduced are deadlocked
    finished = tuple(i for i in range(num_processes) if finish[i])
    deadlocked = tuple(i for i in range(num_processes) if not finish[i])

    return DetectionResult(finished, deadlocked, tuple(sequence))


def detect_deadlock_lists(allocation, request, available) -> DetectionResult:
    """Convenience wrapper taking plain nested lists."""
    return detect_deadlock(DeadlockMatrices(
        allocation=allocation,
        request=request,
        available=available
    ))
