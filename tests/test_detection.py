"""
Deadlock Detection Tests

Validates the Work/Finish reduction on the reference snapshot, a
circular wait and a partially reducible system.
"""

import sys
from pathlib import Path

import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.detection import detect_deadlock, detect_deadlock_lists
from models.errors import ValidationError
from models.system_state import DeadlockMatrices


def test_reference_snapshot_is_reducible():
    """Reference dataset is designed to be fully reducible."""
    print("\n" + "="*60)
    print("DETECTION TEST: Reference Snapshot")
    print("="*60)

    result = detect_deadlock_lists(
        allocation=[[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]],
        request=[[0, 0, 0], [2, 0, 2], [0, 0, 0], [1, 0, 0], [0, 0, 2]],
        available=[3, 3, 2]
    )
    print(f"  Sequence: {result.sequence}")

    assert list(result.deadlocked) == []
    assert not result.has_deadlock
    assert result.finished == (0, 1, 2, 3, 4)
    assert result.sequence == (0, 1, 2, 3, 4)


def test_reference_constructor_matches():
    result = detect_deadlock(DeadlockMatrices.reference())
    assert result.deadlocked == ()


def test_circular_wait_deadlocks_everyone():
    result = detect_deadlock_lists(
        allocation=[[1, 0, 0], [0, 1, 0], [0, 0, 1]],
        request=[[0, 1, 0], [0, 0, 1], [1, 0, 0]],
        available=[0, 0, 0]
    )
    assert result.has_deadlock
    assert result.deadlocked == (0, 1, 2)
    assert result.finished == ()


def test_partial_deadlock():
    """P2 can finish but its release does not help P0 or P1."""
    result = detect_deadlock_lists(
        allocation=[[1, 0], [0, 1], [0, 0]],
        request=[[0, 1], [1, 0], [0, 0]],
        available=[0, 0]
    )
    assert result.finished == (2,)
    assert result.deadlocked == (0, 1)


def test_release_unblocks_later_scan():
    """P0 only becomes reducible after P1 has released its allocation."""
    result = detect_deadlock_lists(
        allocation=[[0, 0], [2, 1]],
        request=[[2, 0], [0, 1]],
        available=[0, 1]
    )
    assert result.deadlocked == ()
    assert result.sequence == (1, 0)


def test_inputs_are_not_modified():
    matrices = DeadlockMatrices.reference()
    available_before = matrices.available.copy()
    allocation_before = matrices.allocation.copy()

    detect_deadlock(matrices)

    assert np.array_equal(matrices.available, available_before)
    assert np.array_equal(matrices.allocation, allocation_before)


def test_empty_system():
    result = detect_deadlock_lists(allocation=[], request=[], available=[1, 2])
    assert result.finished == ()
    assert result.deadlocked == ()


def test_ragged_matrices_are_rejected():
    try:
        detect_deadlock_lists(allocation=[[1, 0], [0]], request=[[0, 0], [0, 0]], available=[1, 1])
        assert False, "Ragged allocation should be rejected"
    except ValidationError as e:
        assert e.field == 'allocation'

    try:
        detect_deadlock_lists(allocation=[[1, 0]], request=[[0, 0]], available=[1, "x"])
        assert False, "Non-numeric available should be rejected"
    except ValidationError as e:
        assert e.field == 'available'
