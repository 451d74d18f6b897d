"""
Execution-specific errors.

Hard failures are FATAL to the whole matrix run.
A single hard failure stops the pool from dispatching further items and
makes the process exit non-zero.

Tolerated mismatches are NOT errors. They are reported as outcomes
(see results.py), never raised.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from ..compare.equivalence import Mismatch


class HardFailure(Exception):
    """
    Base exception for failures that abort the run.

    All hard failures inherit from this.
    """

    pass


class CommandFailedError(HardFailure):
    """
    External command exited non-zero.

    Raised for:
    - Code generator failures
    - Toolchain failures (go run, dotnet run, setup commands)
    """

    def __init__(
        self,
        command: str,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command failed (exit code: {exit_code}): {command}")


class VerificationError(HardFailure):
    """
    A verification step rejected generated output.

    Raised when a comparison that must hold does not hold:
    - Schema generation is not idempotent
    - Output mismatch while mismatches are configured to fail
    """

    def __init__(self, message: str, mismatch: Optional["Mismatch"] = None):
        self.mismatch = mismatch
        super().__init__(message)

    @property
    def command(self) -> Optional[str]:
        if self.mismatch is None:
            return None
        return self.mismatch.command


class SchemaValidationError(HardFailure):
    """Generated JSON Schema does not validate the sample it was derived from."""

    def __init__(self, message: str, sample: str):
        self.sample = sample
        super().__init__(f"{message} (sample: {sample})")


@dataclass(frozen=True)
class ItemFailure:
    """A work item that raised, with its queue position."""

    index: int
    item: Any
    error: Exception


class MatrixAbortedError(Exception):
    """
    Raised by the worker pool after a hard failure stopped the run.

    Carries everything needed to report the run:
    - failures: every item that raised, first failure first
    - results: results of items that finished before the pool drained
    - abandoned: number of queued items that were never dispatched
    """

    def __init__(
        self,
        failures: Sequence[ItemFailure],
        results: Sequence[Any] = (),
        abandoned: int = 0,
    ):
        if not failures:
            raise ValueError("MatrixAbortedError requires at least one failure")
        self.failures: List[ItemFailure] = list(failures)
        self.results: List[Any] = list(results)
        self.abandoned = abandoned
        self.report = None
        """MatrixReport, attached by run_matrix before re-raising."""

        first = self.failures[0]
        label = first.item.label() if hasattr(first.item, "label") else str(first.item)
        message = f"Run aborted on {label}: {first.error}"
        if len(self.failures) > 1:
            message += f" (+{len(self.failures) - 1} more failure(s))"
        if abandoned:
            message += f" ({abandoned} queued item(s) not run)"
        super().__init__(message)

    @property
    def failure(self) -> Exception:
        """The first hard failure."""
        return self.failures[0].error

    @property
    def item(self) -> Any:
        return self.failures[0].item

    @property
    def command(self) -> Optional[str]:
        """Originating command of the first failure, when there is one."""
        return getattr(self.failure, "command", None)

