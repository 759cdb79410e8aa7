"""
Logger utility for the OS Resource Management Simulator.

Provides run-by-run logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for engine runs and their outcomes.

    Format: "[FCFS] P1 runs [0, 6)" / "[FIRSTFIT] P2 allocated at 25 (15 units)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None, quiet: bool = False):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
            quiet: Suppress console output (file output is unaffected)
        """
        self.verbose = verbose
        self.quiet = quiet
        self.log_file = log_file
        self.file_handle = None
        self.history: List[str] = []

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)
        self.history.append(formatted)

        # Console output
        if not self.quiet:
            print(formatted)

        # File output
        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_run_start(self, operation: str, label: str, process_count: int) -> None:
        """Log the start of an engine run."""
        self.log(f"\n{'='*60}")
        self.log(f"RUN: {label} ({operation}) - {process_count} processes")
        self.log(f"{'='*60}")

    def log_slice(self, operation: str, name: str, start: int, finish: int) -> None:
        """Log one executed timeline slice."""
        self.log(f"[{operation.upper()}] {name} runs [{start}, {finish})", "debug")

    def log_allocation(
        self,
        operation: str,
        name: str,
        position: int,
        size: int
    ) -> None:
        """
        Log a memory placement decision.

        Args:
            operation: Strategy tag
            name: Process name
            position: Offset, -1 for a failed allocation
            size: Units requested
        """
        if position >= 0:
            self.log(f"[{operation.upper()}] {name} allocated at {position} ({size} units)", "debug")
        else:
            self.log(f"[{operation.upper()}] {name} FAILED - no free block of {size} units", "warning")

    def log_deadlock(self, deadlocked_names: list) -> None:
        """
        Log deadlock detection outcome.

        Args:
            deadlocked_names: Names of processes in deadlock
        """
        if deadlocked_names:
            names_str = ", ".join(deadlocked_names)
            self.log(f"DEADLOCK DETECTED - Processes in deadlock: [{names_str}]", "warning")
        else:
            self.log("No deadlock - every process can be reduced")

    def log_metrics(self, report: str) -> None:
        """Log a formatted metrics report (verbose only)."""
        if self.verbose:
            self.log(report)

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
