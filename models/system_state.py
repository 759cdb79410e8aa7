"""
Deadlock matrices for the OS Resource Management Simulator.

Holds the allocation/request matrices and the available vector consumed
by the deadlock detector.
"""

import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass

from models.errors import ValidationError
from models.process import ProcessRecord


# Illustrative 5 processes x 3 resource types snapshot; fully reducible
REFERENCE_ALLOCATION = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]
REFERENCE_REQUEST = [[0, 0, 0], [2, 0, 2], [0, 0, 0], [1, 0, 0], [0, 0, 2]]
REFERENCE_AVAILABLE = [3, 3, 2]


@dataclass
class DeadlockMatrices:
    """
    Resource-allocation snapshot for deadlock detection.

    Attributes:
        allocation: [P][R] Units currently held by each process
        request: [P][R] Units each process is currently waiting for
        available: [R] Free units per resource type
        total: [R] Optional total units per type (enables conservation checks)

    Invariant:
        sum(allocation[:, r]) + available[r] == total[r] for every r.
        Not enforced on construction; see assert_resource_conservation().
    """
    allocation: np.ndarray
    request: np.ndarray
    available: np.ndarray
    total: Optional[np.ndarray] = None

    def __post_init__(self):
        """Coerce to integer arrays and validate dimensions."""
        self.available = _as_int_array(self.available, "available")
        if self.available.ndim != 1:
            raise ValidationError("available must be a vector", field="available")
        self.allocation = _as_matrix(self.allocation, "allocation", len(self.available))
        self.request = _as_matrix(self.request, "request", len(self.available))
        if self.total is not None:
            self.total = _as_int_array(self.total, "total")

        if self.allocation.shape != self.request.shape:
            raise ValidationError(
                f"allocation {self.allocation.shape} and request {self.request.shape} "
                f"must have the same shape",
                field="request"
            )
        if self.allocation.shape[1] != self.available.shape[0]:
            raise ValidationError(
                f"available has {self.available.shape[0]} entries but matrices "
                f"have {self.allocation.shape[1]} resource types",
                field="available"
            )
        if self.total is not None and self.total.shape != self.available.shape:
            raise ValidationError("total must match available in length", field="total")

        for name in ('allocation', 'request', 'available'):
            if np.any(getattr(self, name) < 0):
                raise ValidationError(f"{name} cannot contain negative values", field=name)

    @property
    def num_processes(self) -> int:
        """Number of processes (rows)."""
        return self.allocation.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types (columns)."""
        return self.allocation.shape[1]

    @classmethod
    def reference(cls) -> 'DeadlockMatrices':
        """The fixed illustrative 5x3 dataset."""
        return cls(
            allocation=np.array(REFERENCE_ALLOCATION),
            request=np.array(REFERENCE_REQUEST),
            available=np.array(REFERENCE_AVAILABLE)
        )

    @classmethod
    def from_processes(
        cls,
        processes: Sequence[ProcessRecord],
        available: Sequence[int]
    ) -> 'DeadlockMatrices':
        """
        Build matrices from the resource vectors on process records.

        Args:
            processes: Records carrying resources_held / resources_requested
            available: Free units per resource type

        Returns:
            DeadlockMatrices with one row per process, in input order

        Raises:
            ValidationError: If a record lacks a vector or lengths disagree
        """
        num_resources = len(available)
        allocation = np.zeros((len(processes), num_resources), dtype=int)
        request = np.zeros((len(processes), num_resources), dtype=int)

        for i, process in enumerate(processes):
            for attr, matrix in (('resources_held', allocation),
                                 ('resources_requested', request)):
                vector = getattr(process, attr)
                if vector is None:
                    raise ValidationError(
                        f"{process.name}: missing {attr}", field=attr
                    )
                if len(vector) != num_resources:
                    raise ValidationError(
                        f"{process.name}: {attr} length ({len(vector)}) does not "
                        f"match resource count ({num_resources})",
                        field=attr
                    )
                matrix[i] = vector

        return cls(allocation=allocation, request=request, available=np.array(available))

    def assert_resource_conservation(self, context: str = "") -> None:
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
            ValueError: If no totals were supplied
        """
        if self.total is None:
            raise ValueError("Resource totals unknown - cannot check conservation")

        for r_idx in range(self.num_resources):
            allocated = self.allocation[:, r_idx].sum()
            available = self.available[r_idx]
            total = self.total[r_idx]

            assert allocated + available == total, (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

    def to_dict(self) -> dict:
        """Plain-list view for the result envelope."""
        # Convert numpy types to native Python int to avoid display issues
        return {
            'allocation': [[int(x) for x in row] for row in self.allocation],
            'request': [[int(x) for x in row] for row in self.request],
            'available': [int(x) for x in self.available],
        }

    def display(self, names: Optional[List[str]] = None) -> str:
        """
        Generate readable string representation of the snapshot.

        Args:
            names: Optional row labels (defaults to P0, P1, ...)

        Returns:
            Formatted string showing all matrices and vectors
        """
        if names is None or len(names) != self.num_processes:
            names = [f"P{i}" for i in range(self.num_processes)]
        header = "     " + " ".join([f"R{i:2}" for i in range(self.num_resources)])

        output = []
        output.append("\n" + "="*60)
        output.append("DEADLOCK SNAPSHOT")
        output.append("="*60)

        output.append("\nAvailable Resources:")
        output.append("  [" + ", ".join(
            f"R{i}:{self.available[i]:2}" for i in range(self.num_resources)
        ) + "]")

        for title, matrix in (("Allocation Matrix", self.allocation),
                              ("Request Matrix (Pending)", self.request)):
            output.append(f"\n{title}:")
            output.append(header)
            for i, name in enumerate(names):
                row = f"  {name}: "
                row += " ".join([f"{matrix[i][j]:3}" for j in range(self.num_resources)])
                output.append(row)

        output.append("\n" + "="*60)
        return "\n".join(output)


def _as_int_array(values, name: str) -> np.ndarray:
    """Coerce to an int array; ragged or non-numeric input is a ValidationError."""
    try:
        return np.array(values, dtype=int)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must contain integers in a regular shape", field=name)


def _as_matrix(values, name: str, num_resources: int) -> np.ndarray:
    """Coerce to a 2-D int array; an empty input becomes a 0 x R matrix."""
    matrix = _as_int_array(values, name)
    if matrix.size == 0 and matrix.ndim != 2:
        return matrix.reshape(0, num_resources)
    if matrix.ndim != 2:
        raise ValidationError(f"{name} must be a matrix", field=name)
    return matrix
