"""
Execution result models.

Structured representation of per-item outcomes and the run report.
Results are machine-readable (JSON via pydantic) and human-readable.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..compare.equivalence import Mismatch


class TaskOutcome(str, Enum):
    """
    Work item outcome classification.

    PASSED: All checks matched
    TOLERATED_MISMATCH: Completed, but a tolerated check did not match
    SKIPPED_TOO_LARGE: Sample exceeds the size ceiling, never attempted
    FAILED: Hard failure (aborts the run)
    """

    PASSED = "passed"
    TOLERATED_MISMATCH = "tolerated_mismatch"
    SKIPPED_TOO_LARGE = "skipped_too_large"
    FAILED = "failed"


class TaskResult(BaseModel):
    """
    Result of one work item.

    This model is the single source of truth for an item's outcome.
    """

    model_config = ConfigDict(extra="forbid")

    index: int
    """Position in the shuffled queue (0-based)."""

    fixture: str
    sample: str

    outcome: TaskOutcome

    mismatches: List[Mismatch] = Field(default_factory=list)
    """Tolerated mismatches, with full diagnostics."""

    sandbox_path: Optional[str] = None
    """Sandbox directory (None for skipped items)."""

    failure_reason: Optional[str] = None
    """Human-readable failure reason (set when FAILED)."""

    command: Optional[str] = None
    """Originating command of a hard failure, when there is one."""

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> str:
        """Human-readable one-line summary."""
        duration = self.duration_seconds()
        duration_str = f" ({duration:.1f}s)" if duration is not None else ""

        if self.outcome == TaskOutcome.PASSED:
            return f"PASSED{duration_str}: {self.fixture} {self.sample}"

        elif self.outcome == TaskOutcome.TOLERATED_MISMATCH:
            return (
                f"TOLERATED {len(self.mismatches)} MISMATCH(ES){duration_str}: "
                f"{self.fixture} {self.sample}"
            )

        elif self.outcome == TaskOutcome.SKIPPED_TOO_LARGE:
            return f"SKIPPED (too large): {self.fixture} {self.sample}"

        return f"FAILED{duration_str}: {self.fixture} {self.sample} - {self.failure_reason}"


class MatrixReport(BaseModel):
    """
    Aggregate outcome of a matrix run.

    Derived from task results after the pool has drained.
    """

    model_config = ConfigDict(extra="forbid")

    total_items: int
    workers: int
    fixtures: List[str]
    results: List[TaskResult] = Field(default_factory=list)
    not_run: int = 0
    """Items never dispatched because the run aborted."""

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def count(self, outcome: TaskOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def counts(self) -> Dict[str, int]:
        return {outcome.value: self.count(outcome) for outcome in TaskOutcome}

    @property
    def ok(self) -> bool:
        """True when no item failed and every item was accounted for."""
        return (
            self.count(TaskOutcome.FAILED) == 0
            and self.not_run == 0
            and len(self.results) == self.total_items
        )

    def summary(self) -> str:
        counts = self.counts
        parts = [f"{value}={counts[value]}" for value in counts if counts[value]]
        if self.not_run:
            parts.append(f"not_run={self.not_run}")
        status = "OK" if self.ok else "FAILED"
        detail = ", ".join(parts) if parts else "no items"
        return f"{status}: {len(self.results)}/{self.total_items} item(s) [{detail}]"

    def to_json(self) -> str:
        data = self.model_dump(mode="json")
        data["ok"] = self.ok
        data["counts"] = self.counts
        return json.dumps(data, indent=2)
