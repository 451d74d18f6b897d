"""
C# fixture.

The template project is restored once (dotnet restore) before any item
runs. Each item runs the project with the sample path as argument and
compares the printed JSON strictly against the sample.
"""

from pathlib import Path
from typing import List, Optional, Sequence, TYPE_CHECKING

from .base import Fixture, FixtureKind

if TYPE_CHECKING:
    from ..compare.equivalence import Mismatch
    from ..execution.context import VerificationContext

CSHARP_OUTPUT = "QuickType.cs"
DOTNET_RESTORE = ("dotnet", "restore")


class CSharpFixture(Fixture):
    kind = FixtureKind.CSHARP

    def __init__(
        self,
        name: str,
        base: Path,
        output: str = CSHARP_OUTPUT,
        setup_command: Optional[Sequence[str]] = DOTNET_RESTORE,
        diff_via_schema: bool = False,
        run_command: Optional[Sequence[str]] = None,
    ):
        super().__init__(name, base, output, setup_command, diff_via_schema)
        self._run_command = list(run_command) if run_command else ["dotnet", "run"]

    def verify(self, sample: Path, ctx: "VerificationContext") -> List["Mismatch"]:
        mismatch = ctx.compare_json_file_to_json(
            expected_file=sample,
            json_command=self._run_command + [str(sample)],
            strict=True,
        )
        return [mismatch] if mismatch else []
