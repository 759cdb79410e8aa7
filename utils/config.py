"""
Configuration for the OS Resource Management Simulator.

Total memory capacity and the round robin quantum are the tunable
constants; everything else has a fixed default.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

from models.errors import ValidationError


DEFAULT_TOTAL_MEMORY = 100
DEFAULT_QUANTUM = 3
DEFAULT_PALETTE_SIZE = 10

DEADLOCK_SOURCES = ('reference', 'processes')


@dataclass(frozen=True)
class SimulatorConfig:
    """
    Settings for one simulator instance.

    Attributes:
        total_memory: Memory capacity in units for allocation runs
        quantum: Round robin time slice
        palette_size: Number of colours the presentation layer cycles through
        deadlock_source: 'reference' uses the built-in 5x3 snapshot,
            'processes' builds matrices from the process records
        available: Free units per resource type when deadlock_source='processes'
        verbose: Emit debug-level log lines
    """
    total_memory: int = DEFAULT_TOTAL_MEMORY
    quantum: int = DEFAULT_QUANTUM
    palette_size: int = DEFAULT_PALETTE_SIZE
    deadlock_source: str = 'reference'
    available: Tuple[int, ...] = field(default=(3, 3, 2))
    verbose: bool = False

    def __post_init__(self):
        """Validate ranges."""
        object.__setattr__(self, 'available', tuple(self.available))

        if self.total_memory <= 0:
            raise ValidationError("total_memory must be positive", field="total_memory")
        if self.quantum <= 0:
            raise ValidationError("quantum must be positive", field="quantum")
        if self.palette_size <= 0:
            raise ValidationError("palette_size must be positive", field="palette_size")
        if self.deadlock_source not in DEADLOCK_SOURCES:
            raise ValidationError(
                f"deadlock_source must be one of {DEADLOCK_SOURCES}, "
                f"got '{self.deadlock_source}'",
                field="deadlock_source"
            )
        if any(units < 0 for units in self.available):
            raise ValidationError("available cannot contain negative values", field="available")

    @classmethod
    def from_dict(cls, data: Dict) -> 'SimulatorConfig':
        """
        Build a config from a plain dictionary (e.g. a workload file section).

        Raises:
            ValidationError: On unknown keys or out-of-range values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown config keys: {', '.join(unknown)}", field=unknown[0])
        return cls(**data)
