"""
Process execution primitive.

Design rules:
- One subprocess per call, run to completion
- Working directory is ALWAYS passed explicitly (never os.chdir)
- Capture stdout + stderr
- Full command string recorded for diagnostics
- Non-zero exit code = CommandFailedError, unless the caller tolerates it
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .errors import CommandFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    command: str
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def format_command(args: Sequence[str], stdin_path: Optional[Path] = None) -> str:
    """Render args as a copy-pasteable shell command."""
    command = shlex.join(str(a) for a in args)
    if stdin_path is not None:
        command += f" < {shlex.quote(str(stdin_path))}"
    return command


def run_command(
    args: Sequence[str],
    cwd: Path,
    stdin_path: Optional[Path] = None,
    check: bool = True,
) -> CommandResult:
    """
    Run an external command in cwd and wait for it.

    Args:
        args: Command and arguments
        cwd: Working directory for the child process
        stdin_path: File to feed on stdin (None for no input)
        check: Raise on non-zero exit

    Returns:
        CommandResult with captured output

    Raises:
        CommandFailedError: If the command exits non-zero and check is True,
            or if it cannot be started at all
    """
    argv = [str(a) for a in args]
    command = format_command(argv, stdin_path)
    logger.debug(f"[Process] ({cwd}) {command}")

    try:
        if stdin_path is not None:
            with open(stdin_path, "rb") as stdin:
                completed = subprocess.run(
                    argv,
                    cwd=str(cwd),
                    stdin=stdin,
                    capture_output=True,
                )
        else:
            completed = subprocess.run(
                argv,
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
    except OSError as e:
        logger.error(f"[Process] Could not start {command}: {e}")
        raise CommandFailedError(command, exit_code=127, stderr=str(e)) from e

    result = CommandResult(
        command=command,
        exit_code=completed.returncode,
        stdout=completed.stdout.decode("utf-8", errors="replace"),
        stderr=completed.stderr.decode("utf-8", errors="replace"),
    )

    if check and not result.ok:
        logger.error(f"[Process] Exit code {result.exit_code}: {command}")
        if result.stdout:
            logger.error(result.stdout)
        if result.stderr:
            logger.error(result.stderr)
        raise CommandFailedError(
            command,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result
