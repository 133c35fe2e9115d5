"""Shared fixtures for unit tests."""

import pytest

from insist import context as ctx
from insist.reports.base import Reporter
from insist.snapshot import SnapshotStore
from insist.testing import tree


class NullReporter(Reporter):
    """Silent reporter that remembers what it was told."""

    def __init__(self, verbosity: int = 0):
        self.verbosity = verbosity
        self.no_tests = False
        self.completed = []
        self.errors = []
        self.run_result = None

    async def on_no_tests_found(self) -> None:
        self.no_tests = True

    async def on_file_complete(self, result) -> None:
        self.completed.append(result)

    async def on_file_error(self, result) -> None:
        self.errors.append(result)

    async def on_run_complete(self, run_result) -> None:
        self.run_result = run_result


@pytest.fixture
def null_reporter() -> NullReporter:
    """Provide a silent reporter for tests."""
    return NullReporter()


@pytest.fixture
def run_context(tmp_path):
    """Bind a fresh RunContext whose snapshots live in tmp_path."""
    run_ctx = ctx.RunContext(snapshots=SnapshotStore())
    run_ctx.snapshots.set_snapshot_file(tmp_path / "insist_unit.py")
    with ctx.run_context_scope(run_ctx):
        yield run_ctx


@pytest.fixture
def registry():
    """A fresh Registry bound as the registration target."""
    reg = tree.Registry()
    with tree.registry_scope(reg):
        yield reg
