"""
Per-item sandboxes.

Each work item gets a private copy of its fixture template in a fresh
temporary directory.

Design rules:
- One sandbox per work item, never shared
- Directory name is random hex (collision resistant)
- The process working directory is NEVER changed; the sandbox path is
  passed explicitly to every command
- Sandbox is removed on every exit path unless retention is requested
"""

import logging
import secrets
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class Sandbox:
    """
    Scoped sandbox directory.

    Usage:
        with Sandbox(template) as sandbox:
            run_command([...], cwd=sandbox.path)
    """

    def __init__(
        self,
        template: Path,
        tmp_root: Optional[Path] = None,
        keep: bool = False,
    ):
        """
        Args:
            template: Fixture template directory to copy
            tmp_root: Parent for the sandbox (defaults to system temp dir)
            keep: Retain the directory after the scope ends (debugging)
        """
        self.template = Path(template)
        self.tmp_root = Path(tmp_root) if tmp_root else Path(tempfile.gettempdir())
        self.keep = keep
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Sandbox has not been created")
        return self._path

    def create(self) -> Path:
        """Copy the template into a fresh directory."""
        if not self.template.is_dir():
            raise FileNotFoundError(f"Fixture template not found: {self.template}")

        self.tmp_root.mkdir(parents=True, exist_ok=True)
        while True:
            candidate = self.tmp_root / secrets.token_hex(8)
            if not candidate.exists():
                break

        shutil.copytree(self.template, candidate, symlinks=True)
        self._path = candidate
        logger.debug(f"[Sandbox] {self.template} -> {candidate}")
        return candidate

    def release(self) -> None:
        """Remove the sandbox directory unless it is retained."""
        if self._path is None:
            return
        if self.keep:
            logger.info(f"[Sandbox] Keeping {self._path}")
            return
        shutil.rmtree(self._path, ignore_errors=True)
        logger.debug(f"[Sandbox] Removed {self._path}")

    def __enter__(self) -> "Sandbox":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
