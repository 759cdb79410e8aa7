"""
OS Resource Management Simulator
Operation dispatcher for the simulation engine.

Educational tool for demonstrating CPU scheduling, contiguous memory
allocation and deadlock detection.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models.errors import EmptyInputError, SimulatorError, UnknownOperationError, ValidationError
from models.process import ProcessRecord, ProcessStatus, TimelineEntry
from models.system_state import DeadlockMatrices
from algorithms.scheduling import SCHEDULERS, schedule_round_robin
from algorithms.allocation import ALLOCATORS, allocate
from algorithms.detection import detect_deadlock
from analysis.metrics import (
    calculate_scheduling_metrics,
    calculate_memory_metrics,
    calculate_deadlock_metrics,
    format_metrics_report,
)
from analysis.comparison import compare_metrics
from utils.config import SimulatorConfig
from utils.export import build_snapshot, default_report_name, dumps_snapshot, write_snapshot
from utils.logger import SimulatorLogger
from utils.workload_loader import (
    DEADLOCK_OPERATIONS,
    MEMORY_OPERATIONS,
    SCHEDULING_OPERATIONS,
    build_process,
    sample_workload,
    validate_process,
)


OPERATION_LABELS = {
    'fcfs': 'First Come First Serve (FCFS)',
    'sjf': 'Shortest Job First (SJF)',
    'srtf': 'Shortest Remaining Time First (SRTF)',
    'srtf_preemptive': 'Shortest Remaining Time First (Preemptive)',
    'rr': 'Round Robin (Quantum = {quantum})',
    'priority': 'Priority Scheduling',
    'firstfit': 'First Fit Memory Allocation',
    'bestfit': 'Best Fit Memory Allocation',
    'worstfit': 'Worst Fit Memory Allocation',
    'detection': 'Deadlock Detection',
}

ALL_OPERATIONS = SCHEDULING_OPERATIONS + MEMORY_OPERATIONS + DEADLOCK_OPERATIONS


@dataclass(frozen=True)
class ResultEnvelope:
    """
    Uniform output of one run, consumed by the presentation layer.

    Optional fields are filled only by the matching engine family;
    consumers must check for None.

    Attributes:
        operation: Operation tag that produced this result
        algorithm: Human-readable algorithm label
        results: Decorated process records
        metrics: SchedulingMetrics, MemoryMetrics or DeadlockMetrics
        schedule: Timeline (scheduling only)
        memory: Unit owner array (allocation only)
        allocation: [P][R] matrix (deadlock only)
        request: [P][R] matrix (deadlock only)
        available: [R] vector (deadlock only)
        deadlocked: Indices of deadlocked processes (deadlock only)
        safe_sequence: Reduction order of finished processes (deadlock only)
    """
    operation: str
    algorithm: str
    results: Tuple[ProcessRecord, ...]
    metrics: object
    schedule: Optional[Tuple[TimelineEntry, ...]] = None
    memory: Optional[Tuple[int, ...]] = None
    allocation: Optional[Tuple[Tuple[int, ...], ...]] = None
    request: Optional[Tuple[Tuple[int, ...], ...]] = None
    available: Optional[Tuple[int, ...]] = None
    deadlocked: Optional[Tuple[int, ...]] = None
    safe_sequence: Optional[Tuple[int, ...]] = None

    def to_dict(self) -> Dict:
        """JSON-ready view; absent optional fields are left out."""
        data = {
            'operation': self.operation,
            'algorithm': self.algorithm,
            'results': [p.to_dict() for p in self.results],
            'metrics': self.metrics.to_dict(),
        }
        if self.schedule is not None:
            data['schedule'] = [entry.to_dict() for entry in self.schedule]
        if self.memory is not None:
            data['memory'] = list(self.memory)
        for key in ('allocation', 'request'):
            matrix = getattr(self, key)
            if matrix is not None:
                data[key] = [list(row) for row in matrix]
        for key in ('available', 'deadlocked', 'safe_sequence'):
            vector = getattr(self, key)
            if vector is not None:
                data[key] = list(vector)
        return data


def operation_label(operation: str, config: SimulatorConfig) -> str:
    """Human-readable label for an operation tag."""
    if operation not in OPERATION_LABELS:
        raise UnknownOperationError(operation)
    return OPERATION_LABELS[operation].format(quantum=config.quantum)


class Simulator:
    """
    Owns the canonical process collection and dispatches runs.

    Engines only ever see an immutable tuple of records. After a
    successful run the collection is replaced wholesale by the decorated
    copies; a failed run leaves it untouched.
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        logger: Optional[SimulatorLogger] = None,
        processes: Optional[List[ProcessRecord]] = None,
        operation: str = 'fcfs'
    ):
        self.config = config or SimulatorConfig()
        self.logger = logger or SimulatorLogger(verbose=self.config.verbose, quiet=True)
        self._processes: Tuple[ProcessRecord, ...] = tuple(processes or ())
        self.operation = operation
        self.select_operation(operation)

        self.last_result: Optional[ResultEnvelope] = None
        self.last_metrics: Optional[Dict] = None
        self.previous_metrics: Optional[Dict] = None

    @property
    def processes(self) -> Tuple[ProcessRecord, ...]:
        """Current process collection (read-only view)."""
        return self._processes

    def select_operation(self, operation: str) -> None:
        """
        Set the operation used by run() when none is given.

        Raises:
            UnknownOperationError: If the tag is not recognised
        """
        if operation not in OPERATION_LABELS:
            raise UnknownOperationError(operation)
        self.operation = operation

    # ------------------------------------------------------------------
    # Process collection
    # ------------------------------------------------------------------

    def add_process(self, **fields) -> ProcessRecord:
        """
        Validate fields for the current operation and add a new process.

        Raises:
            ValidationError: If a field is invalid or the name is taken
        """
        process = build_process(fields, self.operation)
        if any(p.name == process.name for p in self._processes):
            raise ValidationError(f"Process name already exists: {process.name}", field='name')
        self._processes = self._processes + (process,)
        self.logger.log(f"Added {process.name} (id={process.pid})", "debug")
        return process

    def remove_process(self, name: str) -> None:
        """
        Remove a process by name.

        Raises:
            KeyError: If no process has that name
        """
        remaining = tuple(p for p in self._processes if p.name != name)
        if len(remaining) == len(self._processes):
            raise KeyError(f"No process named {name}")
        self._processes = remaining

    def clear(self) -> None:
        """Drop every process and all stored results."""
        self._processes = ()
        self.last_result = None
        self.last_metrics = None
        self.previous_metrics = None

    def load_sample_data(self, operation: Optional[str] = None) -> None:
        """Replace the collection with the sample workload for an operation."""
        if operation is not None:
            self.select_operation(operation)
        self.clear()
        self._processes = tuple(sample_workload(self.operation))

    def find_processes(self, term: str) -> Tuple[ProcessRecord, ...]:
        """Processes whose name contains term (case-insensitive)."""
        term = term.lower()
        return tuple(p for p in self._processes if term in p.name.lower())

    def sorted_by_name(self) -> Tuple[ProcessRecord, ...]:
        """Processes ordered by name."""
        return tuple(sorted(self._processes, key=lambda p: p.name))

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run(self, operation: Optional[str] = None) -> ResultEnvelope:
        """
        Run one operation over the current collection.

        Steps:
        1. Resolve the operation tag and check the collection is not empty
        2. Validate every record for the operation
        3. Invoke the engine on a reset, immutable snapshot
        4. Compute metrics and build the envelope
        5. Replace the collection with the decorated records

        Args:
            operation: Tag to run (defaults to the selected operation)

        Returns:
            ResultEnvelope

        Raises:
            UnknownOperationError: Unrecognised tag
            EmptyInputError: No processes
            ValidationError: A record is invalid for this operation
            IncompleteRunError: Round robin ended early
        """
        operation = operation or self.operation

        try:
            label = operation_label(operation, self.config)
            if not self._processes:
                raise EmptyInputError()

            # The reference snapshot ignores the processes' own resource vectors
            if not (operation in DEADLOCK_OPERATIONS and self.config.deadlock_source == 'reference'):
                for process in self._processes:
                    validate_process(process, operation)

            snapshot = tuple(p.reset() for p in self._processes)
            self.logger.log_run_start(operation, label, len(snapshot))

            if operation in SCHEDULING_OPERATIONS:
                envelope = self._run_scheduling(operation, label, snapshot)
            elif operation in MEMORY_OPERATIONS:
                envelope = self._run_allocation(operation, label, snapshot)
            else:
                envelope = self._run_detection(operation, label, snapshot)
        except SimulatorError as e:
            self.logger.log(f"Run failed: {e}", "error")
            raise

        self.logger.log_metrics(format_metrics_report(
            envelope.metrics, label, list(envelope.results), verbose=self.config.verbose
        ))

        # Keep the collection in insertion order regardless of result order
        by_pid = {p.pid: p for p in envelope.results}
        self._processes = tuple(by_pid.get(p.pid, p) for p in snapshot)

        self.operation = operation
        self.last_result = envelope
        self.previous_metrics = self.last_metrics
        self.last_metrics = envelope.metrics.to_dict()
        return envelope

    def _run_scheduling(
        self,
        operation: str,
        label: str,
        snapshot: Tuple[ProcessRecord, ...]
    ) -> ResultEnvelope:
        """Dispatch to a scheduling algorithm."""
        if operation == 'rr':
            outcome = schedule_round_robin(
                snapshot, quantum=self.config.quantum, palette_size=self.config.palette_size
            )
        else:
            outcome = SCHEDULERS[operation](snapshot, palette_size=self.config.palette_size)

        for entry in outcome.timeline:
            self.logger.log_slice(operation, entry.process_name, entry.start, entry.finish)

        return ResultEnvelope(
            operation=operation,
            algorithm=label,
            results=outcome.results,
            metrics=calculate_scheduling_metrics(outcome.results),
            schedule=outcome.timeline
        )

    def _run_allocation(
        self,
        operation: str,
        label: str,
        snapshot: Tuple[ProcessRecord, ...]
    ) -> ResultEnvelope:
        """Dispatch to a placement strategy."""
        outcome = allocate(snapshot, ALLOCATORS[operation], self.config.total_memory)
        memory = outcome.memory.to_list()

        for process in outcome.results:
            self.logger.log_allocation(
                operation, process.name, process.allocated_position, process.memory_size
            )

        return ResultEnvelope(
            operation=operation,
            algorithm=label,
            results=outcome.results,
            metrics=calculate_memory_metrics(memory, outcome.results, self.config.total_memory),
            memory=tuple(memory)
        )

    def _run_detection(
        self,
        operation: str,
        label: str,
        snapshot: Tuple[ProcessRecord, ...]
    ) -> ResultEnvelope:
        """
        Run deadlock detection.

        With deadlock_source='reference' the built-in 5x3 snapshot is
        analysed regardless of the processes' own vectors; process i is
        then matched to row i of that snapshot.
        """
        if self.config.deadlock_source == 'processes':
            matrices = DeadlockMatrices.from_processes(snapshot, self.config.available)
        else:
            matrices = DeadlockMatrices.reference()

        self.logger.log(matrices.display([p.name for p in snapshot]), "debug")
        detection = detect_deadlock(matrices)
        deadlocked = set(detection.deadlocked)

        results = tuple(
            p.decorate(status=ProcessStatus.DEADLOCKED if i in deadlocked else ProcessStatus.SAFE)
            for i, p in enumerate(snapshot)
        )
        self.logger.log_deadlock([p.name for p in results if p.status == ProcessStatus.DEADLOCKED])

        plain = matrices.to_dict()
        return ResultEnvelope(
            operation=operation,
            algorithm=label,
            results=results,
            metrics=calculate_deadlock_metrics(results, detection.deadlocked),
            allocation=tuple(tuple(row) for row in plain['allocation']),
            request=tuple(tuple(row) for row in plain['request']),
            available=tuple(plain['available']),
            deadlocked=detection.deadlocked,
            safe_sequence=detection.sequence
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def metric_changes(self) -> Dict[str, float]:
        """Percent change of headline metrics since the previous run."""
        if self.last_metrics is None:
            return {}
        return compare_metrics(self.last_metrics, self.previous_metrics)

    def export_report(
        self,
        file_path: Optional[str] = None,
        directory: Optional[str] = None
    ) -> str:
        """
        Serialize {operation, processes, timestamp, metrics}.

        Args:
            file_path: Also write the report here when given
            directory: Write the report into this directory under a
                timestamped os-analytics-report-<millis>.json name

        Returns:
            The JSON text
        """
        snapshot = build_snapshot(self.operation, self._processes, self.last_metrics)
        if file_path is None and directory is not None:
            file_path = os.path.join(directory, default_report_name())
        if file_path:
            write_snapshot(snapshot, file_path)
            self.logger.log(f"Report exported to {file_path}")
        return dumps_snapshot(snapshot)

