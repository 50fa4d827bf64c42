"""Application layer for the SQLite value bridge.

The application layer composes the ownership bridge into the operations the
host calls: statement batches and queries, and durable copies to files.

Exports:
    ExecutionAdapter:
        - ExecutionAdapter: init / execute / vacuum / query and introspection
        - join_script: Join a sequence of statements into one batch
    DurabilityCopier:
        - DurabilityCopier: Online backup to a file, and import from one
        - BackupPolicy: Step size and retry bounds
        - BackupProgress: Running totals of one backup
    Instrumentation:
        - observe_operation: Span, latency and outcome for one call
        - OperationOutcome: Status a call reports without raising
"""

from sqlite_value.application.durability_copier import (
    BackupPolicy,
    BackupProgress,
    DurabilityCopier,
)
from sqlite_value.application.execution_adapter import ExecutionAdapter, join_script
from sqlite_value.application.instrumentation import OperationOutcome, observe_operation

__all__ = [
    "ExecutionAdapter",
    "join_script",
    "DurabilityCopier",
    "BackupPolicy",
    "BackupProgress",
    "observe_operation",
    "OperationOutcome",
]
