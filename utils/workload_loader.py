"""
Workload Loader for the OS Resource Management Simulator.

Validates process input and loads JSON workload files. Also provides
the built-in sample workloads.
"""

import json
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models.errors import ValidationError
from models.process import ProcessRecord
from utils.config import SimulatorConfig


SCHEDULING_OPERATIONS = ('fcfs', 'sjf', 'srtf', 'srtf_preemptive', 'rr', 'priority')
MEMORY_OPERATIONS = ('firstfit', 'bestfit', 'worstfit')
DEADLOCK_OPERATIONS = ('detection',)

PRIORITY_RANGE = (1, 10)


class WorkloadLoadError(Exception):
    """Exception raised when a workload file cannot be loaded or is invalid."""
    pass


def validate_process_fields(data: Dict[str, Any], operation: str) -> None:
    """
    Validate raw process fields for the given operation.

    Rules:
    - name is required and non-empty
    - deadlock detection: both resource vectors present, non-negative,
      of equal length
    - every other operation: arrival_time >= 0, burst_time > 0 (real numbers)
    - priority: priority in 1..10
    - memory operations: memory_size > 0

    Args:
        data: Field name -> value
        operation: Operation tag the process will be run under

    Raises:
        ValidationError: On the first rule that fails
    """
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Process name is required", field='name')

    if operation in DEADLOCK_OPERATIONS:
        _validate_resource_vectors(name, data)
        return

    _require_number(data, 'arrival_time', name, minimum=0)
    _require_number(data, 'burst_time', name, minimum=0, inclusive=False)

    if operation == 'priority':
        low, high = PRIORITY_RANGE
        _require_int(data, 'priority', name, minimum=low, maximum=high)

    if operation in MEMORY_OPERATIONS:
        _require_int(data, 'memory_size', name, minimum=1)


def validate_process(process: ProcessRecord, operation: str) -> None:
    """Validate an existing record for the given operation."""
    validate_process_fields(process.to_dict(), operation)


def _require_int(
    data: Dict[str, Any],
    field: str,
    name: str,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None
) -> None:
    """Check that data[field] is an integer within [minimum, maximum]."""
    value = data.get(field)
    # bool is an int subclass but never a valid quantity here
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name}: {field} must be an integer", field=field)
    if minimum is not None and value < minimum:
        raise ValidationError(f"{name}: {field} must be >= {minimum} (got {value})", field=field)
    if maximum is not None and value > maximum:
        raise ValidationError(f"{name}: {field} must be <= {maximum} (got {value})", field=field)


def _require_number(
    data: Dict[str, Any],
    field: str,
    name: str,
    minimum: float,
    inclusive: bool = True
) -> None:
    """Check that data[field] is a finite real number above minimum."""
    value = data.get(field)
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name}: {field} must be a number", field=field)
    if not math.isfinite(value):
        raise ValidationError(f"{name}: {field} must be finite", field=field)
    if value < minimum or (not inclusive and value == minimum):
        bound = ">=" if inclusive else ">"
        raise ValidationError(f"{name}: {field} must be {bound} {minimum} (got {value})", field=field)


def _validate_resource_vectors(name: str, data: Dict[str, Any]) -> None:
    """Both vectors present, non-negative integers, same length."""
    vectors = {}
    for field in ('resources_held', 'resources_requested'):
        vector = data.get(field)
        if vector is None:
            raise ValidationError(f"{name}: {field} is required", field=field)
        if not isinstance(vector, (list, tuple)):
            raise ValidationError(f"{name}: {field} must be a list of integers", field=field)
        if len(vector) == 0:
            raise ValidationError(f"{name}: {field} is required", field=field)
        for amount in vector:
            if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
                raise ValidationError(
                    f"{name}: {field} must contain non-negative integers", field=field
                )
        vectors[field] = vector

    if len(vectors['resources_held']) != len(vectors['resources_requested']):
        raise ValidationError(
            f"{name}: resources_held and resources_requested differ in length",
            field='resources_requested'
        )


def parse_resource_vector(text: str, field: Optional[str] = None) -> Tuple[int, ...]:
    """
    Parse a comma-separated resource vector such as '1,0,2'.

    Raises:
        ValidationError: If any entry is not an integer
    """
    try:
        return tuple(int(part.strip()) for part in text.split(','))
    except ValueError:
        raise ValidationError(f"Invalid resource vector: '{text}'", field=field)


def load_workload(file_path: str) -> Tuple[str, SimulatorConfig, List[ProcessRecord]]:
    """
    Load a workload from JSON file.

    Format:
        {
          "operation": "rr",
          "config": {"quantum": 3},
          "processes": [{"name": "P1", "arrival_time": 0, "burst_time": 6}, ...]
        }

    Args:
        file_path: Path to workload JSON file

    Returns:
        Tuple of (operation, SimulatorConfig, process records)

    Raises:
        WorkloadLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise WorkloadLoadError(f"Workload file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise WorkloadLoadError(f"Invalid JSON in workload file: {e}")

    return parse_workload(data)


def parse_workload(data: Dict) -> Tuple[str, SimulatorConfig, List[ProcessRecord]]:
    """
    Build operation, config and records from an already decoded workload.

    Raises:
        WorkloadLoadError: If a section is missing or invalid
    """
    # Validate required fields
    if not isinstance(data, dict):
        raise WorkloadLoadError("Workload must be a JSON object")
    if 'operation' not in data:
        raise WorkloadLoadError("Workload missing 'operation' field")
    if 'processes' not in data:
        raise WorkloadLoadError("Workload missing 'processes' field")

    operation = data['operation']
    if operation not in SCHEDULING_OPERATIONS + MEMORY_OPERATIONS + DEADLOCK_OPERATIONS:
        raise WorkloadLoadError(f"Unknown operation in workload: '{operation}'")

    try:
        config = SimulatorConfig.from_dict(data.get('config', {}))
    except (ValidationError, TypeError) as e:
        raise WorkloadLoadError(f"Invalid config section: {e}")

    if not isinstance(data['processes'], list):
        raise WorkloadLoadError("Workload 'processes' must be a list")

    processes = []
    seen_names = set()
    for proc_data in data['processes']:
        if not isinstance(proc_data, dict):
            raise WorkloadLoadError(f"Invalid process entry: expected an object, got {proc_data!r}")
        try:
            process = build_process(proc_data, operation)
        except ValidationError as e:
            raise WorkloadLoadError(f"Invalid process entry: {e}")
        if process.name in seen_names:
            raise WorkloadLoadError(f"Duplicate process name: {process.name}")
        seen_names.add(process.name)
        processes.append(process)

    return operation, config, processes


def build_process(proc_data: Dict[str, Any], operation: str) -> ProcessRecord:
    """
    Validate raw fields and create a new ProcessRecord.

    Resource vectors may be given as lists or as '1,0,2' strings.

    Raises:
        ValidationError: If the fields are invalid for the operation
    """
    data = dict(proc_data)
    for field in ('resources_held', 'resources_requested'):
        if isinstance(data.get(field), str):
            data[field] = parse_resource_vector(data[field], field)

    validate_process_fields(data, operation)

    allowed = (
        'name', 'arrival_time', 'burst_time', 'priority', 'quantum',
        'memory_size', 'resources_held', 'resources_requested'
    )
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError(
            f"{data['name']}: unknown fields {', '.join(unknown)}", field=unknown[0]
        )

    return ProcessRecord(**{key: data[key] for key in allowed if key in data})


# Sample workloads: five processes for scheduling/memory, five for deadlock
SAMPLE_PROCESSES = [
    {'name': 'P1', 'arrival_time': 0, 'burst_time': 6, 'priority': 2, 'memory_size': 25},
    {'name': 'P2', 'arrival_time': 1, 'burst_time': 4, 'priority': 1, 'memory_size': 15},
    {'name': 'P3', 'arrival_time': 2, 'burst_time': 8, 'priority': 3, 'memory_size': 35},
    {'name': 'P4', 'arrival_time': 3, 'burst_time': 3, 'priority': 2, 'memory_size': 20},
    {'name': 'P5', 'arrival_time': 4, 'burst_time': 5, 'priority': 4, 'memory_size': 30},
]

SAMPLE_DEADLOCK_PROCESSES = [
    {'name': 'P1', 'resources_held': '0,1,0', 'resources_requested': '2,0,0'},
    {'name': 'P2', 'resources_held': '2,0,0', 'resources_requested': '0,0,1'},
    {'name': 'P3', 'resources_held': '3,0,2', 'resources_requested': '0,0,0'},
    {'name': 'P4', 'resources_held': '2,1,1', 'resources_requested': '1,0,0'},
    {'name': 'P5', 'resources_held': '0,0,2', 'resources_requested': '0,0,2'},
]


def sample_workload(operation: str) -> List[ProcessRecord]:
    """Fresh sample records suited to the given operation."""
    source: Sequence[Dict] = (
        SAMPLE_DEADLOCK_PROCESSES if operation in DEADLOCK_OPERATIONS else SAMPLE_PROCESSES
    )
    return [build_process(entry, operation) for entry in source]
