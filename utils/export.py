"""
Report export for the OS Resource Management Simulator.

Serializes a snapshot of {operation, processes, timestamp, metrics} as
key-ordered, indented JSON. The snapshot is a dump for humans and other
tools; the simulator does not import it back.
"""

import json
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from models.process import ProcessRecord


def build_snapshot(
    operation: str,
    processes: Sequence[ProcessRecord],
    metrics: Optional[Dict],
    timestamp: Optional[datetime] = None
) -> Dict:
    """
    Assemble the report dictionary.

    Args:
        operation: Operation tag of the last run
        processes: Current process collection
        metrics: Last-computed metrics (None if nothing has run)
        timestamp: Defaults to now (UTC)

    Returns:
        JSON-serializable dictionary
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return {
        'operation': operation,
        'processes': [p.to_dict() for p in processes],
        'timestamp': timestamp.isoformat(),
        'metrics': dict(metrics) if metrics else {},
    }


def dumps_snapshot(snapshot: Dict) -> str:
    """Serialize with sorted keys and 2-space indentation."""
    return json.dumps(snapshot, indent=2, sort_keys=True)


def write_snapshot(snapshot: Dict, file_path: str) -> None:
    """
    Write the snapshot to a file.

    Args:
        snapshot: Dictionary from build_snapshot()
        file_path: Destination path (overwritten)
    """
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(dumps_snapshot(snapshot))
        f.write("\n")


def default_report_name(timestamp: Optional[datetime] = None) -> str:
    """File name of the form os-analytics-report-<epoch millis>.json."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return f"os-analytics-report-{int(timestamp.timestamp() * 1000)}.json"
