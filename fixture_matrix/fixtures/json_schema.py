"""
JSON Schema fixture.

Three-stage round trip per sample:
1. Derive a schema from the sample; the schema must validate the sample
2. Derive Go from the schema; unless the sample is a known failure,
   the Go program must reproduce the sample
3. Derive a schema from the schema; it must equal the first schema
   (schema generation is idempotent under self-application)

Stages 1 and 3 are hard failures. Stage 2 follows the mismatch policy.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING

from .base import SRC_LANG_JSON, SRC_LANG_JSON_SCHEMA, Fixture, FixtureKind
from .golang import GO_OUTPUT

if TYPE_CHECKING:
    from ..compare.equivalence import Mismatch
    from ..execution.context import VerificationContext

logger = logging.getLogger(__name__)

SCHEMA_OUTPUT = "schema.json"
SCHEMA_FROM_SCHEMA = "schema-from-schema.json"


class JsonSchemaFixture(Fixture):
    kind = FixtureKind.JSON_SCHEMA

    def __init__(
        self,
        name: str,
        base: Path,
        output: str = SCHEMA_OUTPUT,
        setup_command: Optional[Sequence[str]] = None,
        diff_via_schema: bool = False,
        known_failures: Iterable[str] = (),
        run_command: Optional[Sequence[str]] = None,
    ):
        super().__init__(name, base, output, setup_command, diff_via_schema)
        self._known_failures = frozenset(known_failures)
        self._run_command = list(run_command) if run_command else ["go", "run", "main.go", GO_OUTPUT]

    def will_fail(self, sample: Path) -> bool:
        return Path(sample).name in self._known_failures

    def verify(self, sample: Path, ctx: "VerificationContext") -> List["Mismatch"]:
        mismatches: List["Mismatch"] = []
        instance = ctx.read_json(sample)

        # Stage 1: schema from sample must validate the sample
        ctx.generate(SRC_LANG_JSON, sample, self.output)
        schema = ctx.read_json(self.output)
        ctx.validate_schema(schema, instance)

        # Stage 2: Go from schema must reproduce the sample
        ctx.generate(SRC_LANG_JSON_SCHEMA, self.output, GO_OUTPUT)
        if self.will_fail(sample):
            logger.warning(f"[JsonSchema] {Path(sample).name} is known to fail, not checking output")
        else:
            mismatch = ctx.compare_json_file_to_json(
                expected_file=sample,
                json_command=self._run_command,
                stdin_path=sample,
                strict=True,
            )
            if mismatch:
                mismatches.append(mismatch)

        # Stage 3: schema from schema must equal the schema
        ctx.generate(SRC_LANG_JSON_SCHEMA, self.output, SCHEMA_FROM_SCHEMA)
        ctx.require_equal(
            self.output,
            SCHEMA_FROM_SCHEMA,
            strict=True,
            message="Schema generated from schema differs from original schema",
        )

        return mismatches
