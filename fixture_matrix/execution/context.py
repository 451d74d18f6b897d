"""
Verification context.

Everything a fixture's verify procedure needs for one work item:
- the sandbox directory (explicit working root for every command)
- the code generator
- JSON comparison with mismatch policy applied
- JSON Schema validation

Mismatch policy:
- Comparisons on the "allowing for now" path return tolerated
  mismatches, logged with full context
- With fail_on_mismatch set they become VerificationError instead
- require_equal() comparisons are always hard failures
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jsonschema.exceptions import SchemaError, best_match
from jsonschema.validators import Draft7Validator, validator_for

from ..compare.equivalence import Mismatch, compare_json
from .codegen import QuicktypeGenerator
from .errors import SchemaValidationError, VerificationError
from .process import CommandResult, run_command

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class VerificationContext:
    """Per-item verification helpers bound to one sandbox."""

    def __init__(
        self,
        sandbox_dir: Path,
        sample: Path,
        generator: QuicktypeGenerator,
        fail_on_mismatch: bool = False,
    ):
        self.sandbox_dir = Path(sandbox_dir)
        self.sample = Path(sample)
        self.generator = generator
        self.fail_on_mismatch = fail_on_mismatch

    # =========================================================================
    # Commands
    # =========================================================================

    def resolve(self, path: PathLike) -> Path:
        """Resolve a sandbox-relative path."""
        path = Path(path)
        return path if path.is_absolute() else self.sandbox_dir / path

    def generate(self, src_lang: str, src: PathLike, output: PathLike) -> CommandResult:
        return self.generator.generate(src_lang, src, output, cwd=self.sandbox_dir)

    def run(
        self,
        args: Sequence[str],
        stdin_path: Optional[PathLike] = None,
        check: bool = True,
    ) -> CommandResult:
        stdin = self.resolve(stdin_path) if stdin_path is not None else None
        return run_command(args, cwd=self.sandbox_dir, stdin_path=stdin, check=check)

    def read_json(self, path: PathLike) -> Any:
        resolved = self.resolve(path)
        try:
            with open(resolved, "rb") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise VerificationError(f"Invalid JSON in {resolved}: {e}") from e

    def _command_json(self, args: Sequence[str], stdin_path: Optional[PathLike]) -> tuple:
        result = self.run(args, stdin_path=stdin_path)
        try:
            return json.loads(result.stdout), result.command
        except json.JSONDecodeError as e:
            raise VerificationError(f"Command did not print valid JSON ({e}): {result.command}") from e

    # =========================================================================
    # Comparison
    # =========================================================================

    def _compare(
        self,
        expected_file: PathLike,
        json_file: Optional[PathLike],
        json_command: Optional[Sequence[str]],
        stdin_path: Optional[PathLike],
        strict: bool,
    ) -> Optional[Mismatch]:
        if (json_file is None) == (json_command is None):
            raise ValueError("Exactly one of json_file or json_command is required")

        command: Optional[str] = None
        if json_command is not None:
            actual, command = self._command_json(json_command, stdin_path)
        else:
            actual = self.read_json(json_file)
        expected = self.read_json(expected_file)

        comparison = compare_json(expected, actual, strict=strict)
        logger.debug(
            f"[Verify] {expected_file} vs {command or json_file}: "
            f"{'equal' if comparison.equal else 'different'} ({comparison.mode.value})"
        )
        if comparison.equal:
            return None

        return Mismatch(
            expected=expected,
            actual=actual,
            mode=comparison.mode,
            path=comparison.path,
            expected_file=str(self.resolve(expected_file)),
            json_file=str(self.resolve(json_file)) if json_file is not None else None,
            command=command,
            cwd=str(self.sandbox_dir),
            sample=str(self.sample),
        )

    def compare_json_file_to_json(
        self,
        expected_file: PathLike,
        json_file: Optional[PathLike] = None,
        json_command: Optional[Sequence[str]] = None,
        stdin_path: Optional[PathLike] = None,
        strict: bool = True,
    ) -> Optional[Mismatch]:
        """
        Compare expected_file against a JSON file or a command's stdout.

        Mismatches are tolerated (logged and returned) unless
        fail_on_mismatch is set.

        Raises:
            VerificationError: On mismatch with fail_on_mismatch set,
                or when either side is not valid JSON
            CommandFailedError: If json_command exits non-zero
        """
        mismatch = self._compare(expected_file, json_file, json_command, stdin_path, strict)
        if mismatch is None:
            return None

        logger.error(f"[Verify] {mismatch.describe()}")
        logger.error(
            f"[Verify] cwd={mismatch.cwd} expected_file={mismatch.expected_file} "
            f"json_command={mismatch.command} json_file={mismatch.json_file}"
        )
        if self.fail_on_mismatch:
            raise VerificationError(mismatch.describe(), mismatch=mismatch)

        logger.warning(f"[Verify] Allowing mismatch for now: {self.sample}")
        return mismatch

    def require_equal(
        self,
        expected_file: PathLike,
        json_file: PathLike,
        strict: bool = True,
        message: str = "Files are not equivalent",
    ) -> None:
        """
        Compare two JSON files; any difference is a hard failure.

        Raises:
            VerificationError: If the files differ
        """
        mismatch = self._compare(expected_file, json_file, None, None, strict)
        if mismatch is not None:
            mismatch = mismatch.model_copy(update={"message": message})
            logger.error(f"[Verify] {mismatch.describe()}")
            raise VerificationError(mismatch.describe(), mismatch=mismatch)

    # =========================================================================
    # Schema validation
    # =========================================================================

    def validate_schema(self, schema: Any, instance: Any) -> None:
        """
        Assert schema validates instance.

        Raises:
            SchemaValidationError: If the schema is malformed or rejects instance
        """
        cls = validator_for(schema, default=Draft7Validator)
        try:
            cls.check_schema(schema)
        except SchemaError as e:
            raise SchemaValidationError(f"Generated schema is invalid: {e.message}", str(self.sample)) from e

        error = best_match(cls(schema).iter_errors(instance))
        if error is not None:
            raise SchemaValidationError(
                f"Generated schema does not validate input JSON: {error.message}",
                str(self.sample),
            )
