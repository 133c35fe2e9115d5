"""Run driver: discover files, load each into its own registry, run, report."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from insist.context import RunContext, run_context_scope
from insist.errors import SuiteHookError
from insist.reports.base import Reporter
from insist.snapshot import SnapshotStore
from insist.testing.discovery import collect_files, load_test_file
from insist.testing.engine import Runner
from insist.testing.results import SuiteResult, TestResult
from insist.testing.tree import Registry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FileResult:
    """Outcome of one test file; ``error`` is set when it failed to load or aborted."""

    path: Path
    suites: list[SuiteResult] = field(default_factory=list)
    error: BaseException | None = None

    def iter_tests(self) -> Iterable[TestResult]:
        for suite in self.suites:
            yield from suite.iter_tests()


@dataclass(slots=True)
class RunResult:
    files: list[FileResult] = field(default_factory=list)
    duration_ms: float = 0.0

    def iter_tests(self) -> Iterable[TestResult]:
        for file_result in self.files:
            yield from file_result.iter_tests()

    @property
    def passed(self) -> int:
        return sum(1 for r in self.iter_tests() if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.iter_tests() if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.iter_tests() if r.skipped)

    @property
    def total(self) -> int:
        return sum(1 for _ in self.iter_tests())

    @property
    def errors(self) -> int:
        """Files that failed to load or aborted in a before_all/after_all hook."""
        return sum(1 for f in self.files if f.error is not None)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.errors == 0


async def run_paths(
    paths: Iterable[Path | str] | None = None,
    *,
    reporter: Reporter | None = None,
    select: Callable[[str], bool] | None = None,
    timeout: float | None = None,
    cancel_on_timeout: bool = False,
    update_snapshots: bool = False,
    context: RunContext | None = None,
) -> RunResult:
    """Run every ``insist_*.py`` file under ``paths``, one file at a time.

    Each file gets a fresh Registry, its own snapshot file and a reset channel
    manager. The relay store lives for the whole run.
    """
    start = time.perf_counter()
    files = collect_files(paths)
    run_result = RunResult()

    if not files:
        if reporter is not None:
            await reporter.on_no_tests_found()
        return run_result

    context = context or RunContext(snapshots=SnapshotStore(update=update_snapshots))
    runner = Runner(
        context=context,
        default_timeout=timeout,
        cancel_on_timeout=cancel_on_timeout,
        select=select,
    )

    with run_context_scope(context):
        for path in files:
            file_result = await _run_file(path, runner, context)
            run_result.files.append(file_result)
            if reporter is None:
                continue
            if file_result.error is not None:
                await reporter.on_file_error(file_result)
            else:
                await reporter.on_file_complete(file_result)

    run_result.duration_ms = (time.perf_counter() - start) * 1000
    if reporter is not None:
        await reporter.on_run_complete(run_result)
    return run_result


async def _run_file(path: Path, runner: Runner, context: RunContext) -> FileResult:
    context.snapshots.set_snapshot_file(path)
    context.channels.reset()
    registry = Registry()

    try:
        load_test_file(path, registry)
    except Exception as exc:
        logger.error("failed to load %s: %s", path, exc)
        return FileResult(path=path, error=exc)

    try:
        suites = await runner.run(registry)
    except SuiteHookError as exc:
        logger.error("%s aborted: %s", path, exc)
        return FileResult(path=path, error=exc)
    return FileResult(path=path, suites=suites)


__all__ = ["FileResult", "RunResult", "run_paths"]
