"""Context variables binding the active run collaborators and test."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

from insist.channels import ChannelManager
from insist.relay import RelayStore
from insist.snapshot import SnapshotStore


@dataclass(frozen=True, slots=True)
class TestContext:
    """Identity of the test currently executing.

    Attributes
    ----------
    name
        Bare test name as registered.
    full_name
        Suite path and test name joined with ``" > "``.
    suite_path
        Names of the enclosing suites, outermost first (anonymous root omitted).
    """

    name: str
    full_name: str
    suite_path: tuple[str, ...] = ()


@dataclass(slots=True)
class RunContext:
    """Per-run collaborators keyed by the full name of the executing test."""

    snapshots: SnapshotStore = field(default_factory=SnapshotStore)
    channels: ChannelManager = field(default_factory=ChannelManager)
    relay: RelayStore = field(default_factory=RelayStore)

    def set_current_test(self, full_name: str) -> None:
        self.snapshots.set_current_test(full_name)
        self.channels.set_current_test(full_name)


TEST_CONTEXT: ContextVar[TestContext | None] = ContextVar("test_context", default=None)
RUN_CONTEXT: ContextVar[RunContext | None] = ContextVar("run_context", default=None)

_default_run_context: RunContext | None = None


def get_run_context() -> RunContext:
    """Return the bound RunContext, falling back to a process-wide default."""
    global _default_run_context
    ctx = RUN_CONTEXT.get()
    if ctx is not None:
        return ctx
    if _default_run_context is None:
        _default_run_context = RunContext()
    return _default_run_context


def get_test_context() -> TestContext | None:
    return TEST_CONTEXT.get()


@contextmanager
def run_context_scope(ctx: RunContext) -> Iterator[RunContext]:
    token = RUN_CONTEXT.set(ctx)
    try:
        yield ctx
    finally:
        RUN_CONTEXT.reset(token)


@contextmanager
def test_context_scope(ctx: TestContext) -> Iterator[None]:
    token = TEST_CONTEXT.set(ctx)
    try:
        yield
    finally:
        TEST_CONTEXT.reset(token)


__all__ = [
    "RUN_CONTEXT",
    "TEST_CONTEXT",
    "RunContext",
    "TestContext",
    "get_run_context",
    "get_test_context",
    "run_context_scope",
    "test_context_scope",
]
