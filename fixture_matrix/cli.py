#!/usr/bin/env python3
"""
fixture-matrix CLI - Thin entrypoint for matrix runs.

Runs every selected fixture against every sample and reports outcomes.

Usage:
    fixture-matrix                          # default sample directory
    fixture-matrix test/inputs/json         # every *.json in a directory
    fixture-matrix a.json b.json            # explicit samples
    fixture-matrix --fixture golang --workers 4 --seed 7
    fixture-matrix --list-fixtures

Design Principles:
==================
- CLI is a dispatcher only
- No execution logic inside CLI
- Environment is read once; flags override it before the run starts
- Surface errors verbatim from the execution layer
- Exit non-zero on failure

Exit Codes:
===========
- 0: Every item passed, was tolerated, or was skipped
- 1: Hard failure (run aborted)
- 4: System error (bad sample path, unknown fixture, bad configuration)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .execution.errors import HardFailure, MatrixAbortedError
from .execution.results import MatrixReport
from .execution.runner import run_matrix
from .fixtures.registry import build_default_registry
from .samples.discovery import discover_samples
from .samples.errors import SampleDiscoveryError
from .settings import MatrixSettings

EXIT_SUCCESS = 0
EXIT_HARD_FAILURE = 1
EXIT_SYSTEM_ERROR = 4


def configure_logging(debug: bool) -> None:
    """Log to stderr; DEBUG adds command echo and comparison detail."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def positive_int(value: str) -> int:
    """argparse type: an integer >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fixture-matrix",
        description="Run code generator fixtures against JSON samples",
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="Sample files, or a single directory of *.json samples",
    )
    parser.add_argument(
        "--workers", "-w",
        type=positive_int,
        help="Concurrent workers (default: CPUs env or host parallelism)",
    )
    parser.add_argument(
        "--fixture", "-f",
        help="Only run this fixture (default: FIXTURE env or all)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the work item shuffle",
    )
    parser.add_argument(
        "--tmp-dir",
        type=Path,
        help="Parent directory for sandboxes (default: system temp dir)",
    )
    parser.add_argument(
        "--keep-sandboxes",
        action="store_true",
        help="Do not delete sandboxes after each item",
    )
    parser.add_argument(
        "--fail-on-mismatch",
        action="store_true",
        help="Treat output mismatches as hard failures",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Print the run report as JSON on stdout",
    )
    parser.add_argument(
        "--list-fixtures",
        action="store_true",
        help="List registered fixtures and exit",
    )
    return parser


def apply_overrides(settings: MatrixSettings, args: argparse.Namespace) -> MatrixSettings:
    """Return a copy of settings with CLI flags applied."""
    update = {}
    if args.workers is not None:
        update["workers"] = args.workers
    if args.fixture is not None:
        update["fixture"] = args.fixture
    if args.seed is not None:
        update["seed"] = args.seed
    if args.tmp_dir is not None:
        update["tmp_root"] = args.tmp_dir.resolve()
    if args.keep_sandboxes:
        update["keep_sandboxes"] = True
    if args.fail_on_mismatch:
        update["fail_on_mismatch"] = True
    if args.debug:
        update["debug"] = True
    return settings.model_copy(update=update) if update else settings


def _print_report(report: Optional[MatrixReport], as_json: bool) -> None:
    if report is None:
        return
    if as_json:
        print(report.to_json())
        return
    for result in report.results:
        if result.mismatches:
            for mismatch in result.mismatches:
                print(f"  ! {result.fixture} {result.sample}: {mismatch.describe()}", file=sys.stderr)
    print(report.summary(), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments and run the matrix.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(MatrixSettings.from_env(), args)
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return EXIT_SYSTEM_ERROR

    configure_logging(settings.debug)
    registry = build_default_registry(settings)

    if args.list_fixtures:
        for info in registry.list_fixtures():
            setup = f" setup={info['setup']!r}" if info["setup"] else ""
            diff = " diff-via-schema" if info["diff_via_schema"] else ""
            print(f"{info['name']:<12} {info['base']} -> {info['output']}{setup}{diff}")
        return EXIT_SUCCESS

    fixtures = registry.select(settings.fixture)
    if not fixtures:
        print(f"ERROR: No fixtures selected (fixture={settings.fixture!r})", file=sys.stderr)
        return EXIT_SYSTEM_ERROR

    try:
        samples = discover_samples(args.sources, settings)
    except SampleDiscoveryError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_SYSTEM_ERROR

    try:
        report = run_matrix(fixtures, samples, settings)
    except MatrixAbortedError as e:
        _print_report(e.report, args.json)
        print(f"✗ {e}", file=sys.stderr)
        if e.command:
            print(f"  command: {e.command}", file=sys.stderr)
        return EXIT_HARD_FAILURE
    except HardFailure as e:
        print(f"✗ Setup failed: {e}", file=sys.stderr)
        return EXIT_HARD_FAILURE

    _print_report(report, args.json)
    return EXIT_SUCCESS if report.ok else EXIT_HARD_FAILURE


def run() -> None:
    """Console script entrypoint."""
    sys.exit(main())


if __name__ == "__main__":
    run()
