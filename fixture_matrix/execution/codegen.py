"""
Code generator invocation.

The generator (quicktype) is an opaque external command:

    <command> --src <input> --srcLang <lang> -o <output>

Non-zero exit is a hard failure.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

from ..fixtures.base import SRC_LANG_JSON, SRC_LANG_JSON_SCHEMA
from .process import CommandResult, run_command

logger = logging.getLogger(__name__)


class QuicktypeGenerator:
    """
    Runs the code generator.

    Stateless apart from the command prefix, so one instance is shared
    by all workers.
    """

    def __init__(self, command: Sequence[str]):
        if not command:
            raise ValueError("Generator command must not be empty")
        self._command: List[str] = list(command)

    @property
    def command(self) -> List[str]:
        return list(self._command)

    def generate(
        self,
        src_lang: str,
        src: Union[str, Path],
        output: Union[str, Path],
        cwd: Path,
    ) -> CommandResult:
        """
        Generate output from src inside cwd.

        Args:
            src_lang: Source language (json or json-schema)
            src: Input file, absolute or relative to cwd
            output: Output file name, relative to cwd
            cwd: Sandbox directory

        Returns:
            CommandResult of the generator run
        """
        logger.debug(f"[Codegen] {src_lang} {src} -> {output}")
        args = self._command + ["--src", str(src), "--srcLang", src_lang, "-o", str(output)]
        return run_command(args, cwd=cwd)
