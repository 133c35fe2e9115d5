"""Shared types for the insist testing framework."""

from enum import Enum


class TestStatus(Enum):
    """Lifecycle state of a single registered test."""

    __test__ = False

    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in {TestStatus.PASSED, TestStatus.FAILED, TestStatus.SKIPPED}


class HookKind(Enum):
    """Suite lifecycle hook lists."""

    BEFORE_ALL = "before_all"
    AFTER_ALL = "after_all"
    BEFORE_EACH = "before_each"
    AFTER_EACH = "after_each"
