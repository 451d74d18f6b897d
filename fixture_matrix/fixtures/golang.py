"""
Go fixture.

Generated Go code is compiled together with the template's main.go,
the sample is piped through it, and the printed JSON must equal the sample.
Samples on the known-failure list are compared with tolerant equality.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING

from .base import Fixture, FixtureKind

if TYPE_CHECKING:
    from ..compare.equivalence import Mismatch
    from ..execution.context import VerificationContext

GO_OUTPUT = "quicktype.go"


class GoFixture(Fixture):
    kind = FixtureKind.GOLANG

    def __init__(
        self,
        name: str,
        base: Path,
        output: str = GO_OUTPUT,
        setup_command: Optional[Sequence[str]] = None,
        diff_via_schema: bool = True,
        known_failures: Iterable[str] = (),
        run_command: Optional[Sequence[str]] = None,
    ):
        super().__init__(name, base, output, setup_command, diff_via_schema)
        self._known_failures = frozenset(known_failures)
        self._run_command = list(run_command) if run_command else ["go", "run", "main.go", output]

    @property
    def run_command(self) -> List[str]:
        """Command that reads JSON on stdin and prints it back through the generated code."""
        return list(self._run_command)

    def will_fail(self, sample: Path) -> bool:
        return Path(sample).name in self._known_failures

    def verify(self, sample: Path, ctx: "VerificationContext") -> List["Mismatch"]:
        mismatch = ctx.compare_json_file_to_json(
            expected_file=sample,
            json_command=self._run_command,
            stdin_path=sample,
            strict=not self.will_fail(sample),
        )
        return [mismatch] if mismatch else []
