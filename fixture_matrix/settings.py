"""
Matrix run settings.

All configuration is derived from the environment ONCE at startup.
There is no runtime reconfiguration: the settings object is frozen and
CLI flags produce an updated copy before the run starts.

Environment variables:
- CI, TRAVIS_BRANCH, TRAVIS_EVENT_TYPE, TRAVIS_PULL_REQUEST: CI context
- CPUs: worker count override
- FIXTURE: run only the named fixture
- DEBUG: verbose logging (command echo)
- MATRIX_PROJECT_ROOT: root that fixture templates and sample dirs resolve against
- MATRIX_QUICKTYPE: code generator command (shell-split)
- MATRIX_KEEP_SANDBOXES: retain sandbox directories after each item
- MATRIX_FAIL_ON_MISMATCH: treat output mismatches as hard failures
- MATRIX_SEED: seed for the work item shuffle
- MATRIX_KNOWN_GO_FAILURES: comma-separated sample basenames not compared for Go
"""

import os
import shlex
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Samples larger than this are never handed to the code generator
MAX_SAMPLE_BYTES = 32 * 1024 * 1024

# CI hosts report more cores than they can actually use
CI_WORKER_CAP = 2

BLESSED_BRANCHES: Tuple[str, ...] = ("master",)

PUBLIC_SAMPLE_DIR = "app/public/sample/json"
LOCAL_SAMPLE_DIR = "test/inputs/json"
SAMPLE_PATTERN = "*.json"

DEFAULT_KNOWN_GO_FAILURES: Tuple[str, ...] = ("identifiers.json",)


def _flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in ("1", "true", "yes", "on")


def _optional_int(name: str, value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


class MatrixSettings(BaseModel):
    """
    Immutable configuration for one matrix run.

    Built with from_env(); never mutated afterwards.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # CI context
    is_ci: bool = False
    branch: Optional[str] = None
    is_push: bool = False
    is_pull_request: bool = False

    # Scheduling
    workers: Optional[int] = None
    """Explicit worker count. None means host parallelism."""

    seed: Optional[int] = None
    """Shuffle seed. None means a fresh random order every run."""

    fixture: Optional[str] = None
    """Single-fixture selector. None runs every fixture."""

    # Paths and tools
    project_root: Path = Field(default_factory=Path.cwd)
    quicktype_command: List[str] = Field(default_factory=list)
    """Generator command. Empty means node cli/quicktype.js under project_root."""

    tmp_root: Optional[Path] = None
    """Where sandboxes are created. None means the system temp dir."""

    # Behaviour toggles
    debug: bool = False
    keep_sandboxes: bool = False
    fail_on_mismatch: bool = False

    known_go_failures: Tuple[str, ...] = DEFAULT_KNOWN_GO_FAILURES
    """Samples whose Go output is not compared. Kept as configuration, reason unknown."""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MatrixSettings":
        """
        Read settings from the environment.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Frozen MatrixSettings

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        env = os.environ if environ is None else environ

        pull_request = env.get("TRAVIS_PULL_REQUEST")
        root = env.get("MATRIX_PROJECT_ROOT")
        quicktype = env.get("MATRIX_QUICKTYPE")
        known = env.get("MATRIX_KNOWN_GO_FAILURES")

        return cls(
            is_ci=env.get("CI") == "true",
            branch=env.get("TRAVIS_BRANCH") or None,
            is_push=env.get("TRAVIS_EVENT_TYPE") == "push",
            is_pull_request=bool(pull_request) and pull_request != "false",
            workers=_optional_int("CPUs", env.get("CPUs")),
            seed=_optional_int("MATRIX_SEED", env.get("MATRIX_SEED")),
            fixture=env.get("FIXTURE") or None,
            project_root=Path(root).resolve() if root else Path.cwd(),
            quicktype_command=shlex.split(quicktype) if quicktype else [],
            debug=bool(env.get("DEBUG")),
            keep_sandboxes=_flag(env.get("MATRIX_KEEP_SANDBOXES")),
            fail_on_mismatch=_flag(env.get("MATRIX_FAIL_ON_MISMATCH")),
            known_go_failures=(
                tuple(name.strip() for name in known.split(",") if name.strip())
                if known is not None
                else DEFAULT_KNOWN_GO_FAILURES
            ),
        )

    @property
    def is_blessed(self) -> bool:
        """True when building a blessed branch."""
        return self.branch in BLESSED_BRANCHES

    @property
    def uses_public_samples(self) -> bool:
        """
        CI builds that are neither PRs nor blessed-branch builds only see
        the public sample set.
        """
        return self.is_ci and not self.is_pull_request and not self.is_blessed

    def default_sample_dir(self) -> Path:
        """Directory used when no sample sources are given."""
        relative = PUBLIC_SAMPLE_DIR if self.uses_public_samples else LOCAL_SAMPLE_DIR
        return self.project_root / relative

    def generator_command(self) -> List[str]:
        """Resolved code generator command prefix."""
        if self.quicktype_command:
            return list(self.quicktype_command)
        return ["node", str(self.project_root / "cli" / "quicktype.js")]


def effective_worker_count(settings: MatrixSettings) -> int:
    """
    Number of concurrent workers for this run.

    Explicit override wins, otherwise host parallelism.
    Capped at CI_WORKER_CAP under CI.
    """
    if settings.workers is not None:
        count = settings.workers
    else:
        count = os.cpu_count() or 1

    if settings.is_ci:
        count = min(count, CI_WORKER_CAP)

    return max(1, count)
