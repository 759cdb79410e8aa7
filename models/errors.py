"""
Error taxonomy for the OS Resource Management Simulator.

All errors are local to a single run; none of them corrupts the
process collection owned by the simulator.
"""

from typing import Optional


class SimulatorError(Exception):
    """Base class for every error raised by the simulator."""
    pass


class ValidationError(SimulatorError):
    """
    A required field is missing or out of range.

    Attributes:
        field: Name of the offending field (None for record-level problems)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class EmptyInputError(SimulatorError):
    """No processes were supplied for a run."""

    def __init__(self, message: str = "No processes to run - add processes first"):
        super().__init__(message)


class UnknownOperationError(SimulatorError):
    """The algorithm tag does not name any known operation."""

    def __init__(self, operation: str):
        super().__init__(f"Unknown operation: '{operation}'")
        self.operation = operation


class IncompleteRunError(SimulatorError):
    """
    A run stopped before every process finished.

    Raised by round robin when its ready queue drains early.
    """

    def __init__(self, completed: int, expected: int):
        super().__init__(
            f"Run ended with {completed}/{expected} processes completed"
        )
        self.completed = completed
        self.expected = expected
