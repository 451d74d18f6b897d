"""
Matrix runner.

Runs one work item end to end, and the whole matrix through the pool.

Per item:
1. Oversized sample -> SKIPPED_TOO_LARGE (no sandbox, no generator)
2. Fresh sandbox from the fixture template
3. Generate the fixture's artifact from the sample
4. Fixture verify procedure
5. Optional diff against the artifact regenerated via JSON Schema
   (differences are tolerated and reported, never fatal)

Hard failures propagate out of the sandbox (which is released first)
and through the pool, aborting the run.
"""

import difflib
import logging
import os
import random
from datetime import datetime
from typing import List, Optional, Sequence

from ..compare.equivalence import CompareMode, Mismatch
from ..fixtures.base import Fixture
from ..fixtures.registry import FixtureRegistry
from ..samples.discovery import Sample
from ..settings import MatrixSettings, effective_worker_count
from .codegen import SRC_LANG_JSON, SRC_LANG_JSON_SCHEMA, QuicktypeGenerator
from .context import VerificationContext
from .errors import ItemFailure, MatrixAbortedError
from .matrix import WorkItem, build_work_items
from .process import run_command
from .results import MatrixReport, TaskOutcome, TaskResult
from .sandbox import Sandbox
from .scheduler import run_in_parallel

logger = logging.getLogger(__name__)

SCHEMA_FILE = "schema.json"


def run_fixture_setups(fixtures: Sequence[Fixture]) -> None:
    """
    Run every fixture's setup command once, in its template directory.

    Raises:
        CommandFailedError: If a setup command fails
    """
    for fixture in fixtures:
        command = fixture.setup_command
        if not command:
            continue
        logger.info(f"[Runner] Setting up {fixture.name} fixture")
        run_command(command, cwd=fixture.base)


class TaskRunner:
    """
    Executes work items.

    One instance is shared by all workers; it holds no per-item state.
    """

    def __init__(
        self,
        fixtures: Sequence[Fixture],
        generator: QuicktypeGenerator,
        settings: MatrixSettings,
        total: int = 0,
    ):
        self.registry = FixtureRegistry(fixtures)
        self.generator = generator
        self.settings = settings
        self.total = total

    def fixture_for(self, item: WorkItem) -> Fixture:
        """
        Raises:
            FixtureNotFoundError: If the item names a fixture this runner was not given
        """
        return self.registry.get(item.fixture_name)

    def run(self, item: WorkItem, index: int) -> TaskResult:
        """
        Execute one work item.

        Raises:
            HardFailure: Any failure that must abort the run
        """
        fixture = self.fixture_for(item)
        sample = item.sample
        started_at = datetime.now()
        logger.info(f"[Runner] [{index + 1}/{self.total}] {fixture.name} {sample.path}")

        if sample.too_large:
            logger.warning(f"[Runner] Skipping {sample.path} because it's too large ({sample.size} bytes)")
            return TaskResult(
                index=index,
                fixture=fixture.name,
                sample=str(sample.path),
                outcome=TaskOutcome.SKIPPED_TOO_LARGE,
                started_at=started_at,
                completed_at=datetime.now(),
            )

        sandbox = Sandbox(
            fixture.base,
            tmp_root=self.settings.tmp_root,
            keep=self.settings.keep_sandboxes,
        )
        with sandbox:
            ctx = VerificationContext(
                sandbox.path,
                sample.path,
                self.generator,
                fail_on_mismatch=self.settings.fail_on_mismatch,
            )
            ctx.generate(SRC_LANG_JSON, sample.path, fixture.output)

            mismatches = list(fixture.verify(sample.path, ctx))

            if fixture.diff_via_schema:
                mismatch = self.diff_via_schema(fixture, ctx)
                if mismatch is not None:
                    mismatches.append(mismatch)

        result = TaskResult(
            index=index,
            fixture=fixture.name,
            sample=str(sample.path),
            outcome=TaskOutcome.TOLERATED_MISMATCH if mismatches else TaskOutcome.PASSED,
            mismatches=mismatches,
            sandbox_path=str(sandbox.path),
            started_at=started_at,
            completed_at=datetime.now(),
        )
        logger.debug(f"[Runner] {result.summary()}")
        return result

    def diff_via_schema(self, fixture: Fixture, ctx: VerificationContext) -> Optional[Mismatch]:
        """
        Regenerate the artifact via an intermediate JSON Schema and diff.

        Returns:
            Tolerated mismatch when the two artifacts differ, else None
        """
        logger.info(f"[Runner] Diffing {fixture.name} with code generated via JSON Schema")

        ctx.generate(SRC_LANG_JSON, ctx.sample, SCHEMA_FILE)

        output = ctx.resolve(fixture.output)
        expected = output.with_name(output.name + ".expected")
        os.replace(output, expected)
        ctx.generate(SRC_LANG_JSON_SCHEMA, SCHEMA_FILE, fixture.output)

        expected_text = expected.read_text(encoding="utf-8", errors="replace")
        actual_text = output.read_text(encoding="utf-8", errors="replace")
        diff = list(difflib.unified_diff(
            expected_text.splitlines(keepends=True),
            actual_text.splitlines(keepends=True),
            fromfile=expected.name,
            tofile=output.name,
        ))
        if not diff:
            return None

        command = f"diff -Naur {expected.name} {output.name}"
        # FIXME: make this a hard failure once schema round trips produce identical code
        logger.warning(f"[Runner] Command failed, but we're allowing it: {command}")
        return Mismatch(
            expected=expected_text,
            actual=actual_text,
            mode=CompareMode.STRICT,
            expected_file=str(expected),
            json_file=str(output),
            command=command,
            cwd=str(ctx.sandbox_dir),
            sample=str(ctx.sample),
            diff="".join(diff),
            message="Code generated via JSON Schema differs",
        )


def _failed_result(failure: ItemFailure) -> TaskResult:
    item: WorkItem = failure.item
    return TaskResult(
        index=failure.index,
        fixture=item.fixture_name,
        sample=str(item.sample.path),
        outcome=TaskOutcome.FAILED,
        failure_reason=str(failure.error),
        command=getattr(failure.error, "command", None),
        completed_at=datetime.now(),
    )


def run_matrix(
    fixtures: Sequence[Fixture],
    samples: Sequence[Sample],
    settings: MatrixSettings,
    generator: Optional[QuicktypeGenerator] = None,
    rng: Optional[random.Random] = None,
) -> MatrixReport:
    """
    Run every fixture against every sample.

    Args:
        fixtures: Selected fixtures
        samples: Discovered samples
        settings: Run settings
        generator: Code generator (defaults to settings.generator_command())
        rng: Shuffle source (defaults to a Random seeded from settings.seed)

    Returns:
        MatrixReport with one result per work item

    Raises:
        MatrixAbortedError: On any hard failure during dispatch
            (error.report holds the partial report)
        HardFailure: If a fixture setup command fails
    """
    if generator is None:
        generator = QuicktypeGenerator(settings.generator_command())
    if rng is None:
        rng = random.Random(settings.seed)

    items = build_work_items(fixtures, samples, rng=rng)
    workers = effective_worker_count(settings)
    runner = TaskRunner(fixtures, generator, settings, total=len(items))

    report = MatrixReport(
        total_items=len(items),
        workers=workers,
        fixtures=[f.name for f in fixtures],
    )

    try:
        results: List[TaskResult] = run_in_parallel(
            items,
            workers,
            runner.run,
            setup=lambda: run_fixture_setups(fixtures),
        )
    except MatrixAbortedError as e:
        failed = [_failed_result(f) for f in e.failures]
        report.results = sorted(list(e.results) + failed, key=lambda r: r.index)
        report.not_run = e.abandoned
        report.completed_at = datetime.now()
        e.report = report
        raise

    report.results = sorted(results, key=lambda r: r.index)
    report.completed_at = datetime.now()
    logger.info(f"[Runner] {report.summary()}")
    return report
