"""
Memory map model for the OS Resource Management Simulator.

A fixed-length array of memory units used by contiguous allocation.
"""

import numpy as np
from typing import List, Tuple


class MemoryMap:
    """
    Contiguous memory of `capacity` units.

    Each unit holds 0 when free, or the 1-based index of the process
    that owns it.

    Invariant:
        Allocated blocks never overlap; every unit belongs to at most
        one process.
    """

    def __init__(self, capacity: int):
        """
        Create an all-free memory map.

        Args:
            capacity: Total number of units

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            raise ValueError(f"Memory capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.units = np.zeros(capacity, dtype=int)

    @property
    def used_units(self) -> int:
        """Number of allocated units."""
        return int(np.count_nonzero(self.units))

    @property
    def free_units(self) -> int:
        """Number of free units."""
        return self.capacity - self.used_units

    def free_runs(self) -> List[Tuple[int, int]]:
        """
        Find all maximal runs of free units.

        A run is bounded by allocated units or by the ends of memory.

        Returns:
            List of (start, length) tuples in increasing start order
        """
        runs = []
        i = 0
        while i < self.capacity:
            if self.units[i] == 0:
                start = i
                while i < self.capacity and self.units[i] == 0:
                    i += 1
                runs.append((start, i - start))
            else:
                i += 1
        return runs

    def is_free(self, start: int, size: int) -> bool:
        """Check whether units [start, start + size) are all free."""
        if start < 0 or start + size > self.capacity:
            return False
        return not np.any(self.units[start:start + size])

    def assign(self, start: int, size: int, owner: int) -> None:
        """
        Mark units [start, start + size) as owned by `owner`.

        Args:
            start: First unit of the block
            size: Number of units
            owner: 1-based process index

        Raises:
            ValueError: If the block is out of range or not entirely free
        """
        if owner <= 0:
            raise ValueError(f"Owner index must be positive, got {owner}")
        if not self.is_free(start, size):
            raise ValueError(
                f"Cannot assign [{start}, {start + size}) to process {owner} - "
                f"block is out of range or already in use"
            )
        self.units[start:start + size] = owner

    def to_list(self) -> List[int]:
        """Plain Python list of unit owners."""
        # Convert numpy types to native int for serialization
        return [int(x) for x in self.units]

    def display(self) -> str:
        """Compact textual view, one character per unit ('.' for free)."""
        return "".join(
            "." if owner == 0 else str(owner % 10) for owner in self.units
        )
