"""
Matrix execution pipeline.

Task matrix, worker pool, sandboxes, verification and results.
"""

from .errors import (
    HardFailure,
    CommandFailedError,
    VerificationError,
    SchemaValidationError,
    ItemFailure,
    MatrixAbortedError,
)
from .results import (
    TaskOutcome,
    TaskResult,
    MatrixReport,
)
from .process import CommandResult, run_command
from .codegen import QuicktypeGenerator
from .sandbox import Sandbox
from .context import VerificationContext
from .matrix import WorkItem, build_work_items
from .scheduler import WorkerPool, run_in_parallel
from .runner import TaskRunner, run_fixture_setups, run_matrix

__all__ = [
    # Errors
    "HardFailure",
    "CommandFailedError",
    "VerificationError",
    "SchemaValidationError",
    "ItemFailure",
    "MatrixAbortedError",
    # Results
    "TaskOutcome",
    "TaskResult",
    "MatrixReport",
    # Processes
    "CommandResult",
    "run_command",
    "QuicktypeGenerator",
    # Per-item execution
    "Sandbox",
    "VerificationContext",
    "TaskRunner",
    # Matrix and scheduling
    "WorkItem",
    "build_work_items",
    "WorkerPool",
    "run_in_parallel",
    "run_fixture_setups",
    "run_matrix",
]
