"""
Fixture abstraction layer.

A fixture is a named target-verification profile:
- sandbox template directory
- optional one-time setup command
- expected generated artifact filename
- schema diff flag
- verify procedure

Design rules:
- Fixtures are immutable and defined once at startup
- Identity is the fixture name
- Dispatch is polymorphic (subclass per kind), never lookup-by-name
- Fixtures are stateless: all per-item context is passed to verify()
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..compare.equivalence import Mismatch
    from ..execution.context import VerificationContext


class FixtureKind(str, Enum):
    """Supported fixture kinds."""

    CSHARP = "csharp"
    GOLANG = "golang"
    JSON_SCHEMA = "json-schema"


# Source languages fixtures hand to the code generator
SRC_LANG_JSON = "json"
SRC_LANG_JSON_SCHEMA = "json-schema"


class Fixture(ABC):
    """
    Abstract base class for fixtures.

    Subclasses declare kind and implement verify().
    """

    kind: FixtureKind

    def __init__(
        self,
        name: str,
        base: Path,
        output: str,
        setup_command: Optional[Sequence[str]] = None,
        diff_via_schema: bool = False,
    ):
        """
        Args:
            name: Unique fixture name
            base: Template directory copied into each sandbox
            output: File name the generator writes inside the sandbox
            setup_command: Command run once in base before any item
            diff_via_schema: Also regenerate via JSON Schema and diff
        """
        self._name = name
        self._base = Path(base)
        self._output = output
        self._setup_command = list(setup_command) if setup_command else None
        self._diff_via_schema = diff_via_schema

    @property
    def name(self) -> str:
        return self._name

    @property
    def base(self) -> Path:
        return self._base

    @property
    def output(self) -> str:
        return self._output

    @property
    def setup_command(self) -> Optional[List[str]]:
        return list(self._setup_command) if self._setup_command else None

    @property
    def diff_via_schema(self) -> bool:
        return self._diff_via_schema

    @abstractmethod
    def verify(self, sample: Path, ctx: "VerificationContext") -> List["Mismatch"]:
        """
        Verify generated output for one sample.

        Runs inside the item's sandbox (ctx.sandbox_dir). The generator
        has already written self.output from the sample.

        Args:
            sample: Absolute sample path
            ctx: Per-item verification context

        Returns:
            Tolerated mismatches (empty list when everything matched)

        Raises:
            HardFailure: On any failure that must abort the run
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, base={str(self._base)!r})"
