"""Immutable outcome records produced by the runner."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from insist.types import TestStatus


@dataclass(frozen=True, slots=True)
class TestResult:
    """Outcome of one test.

    Attributes
    ----------
    name
        Bare test name.
    full_name
        Suite path and test name joined with ``" > "``.
    status
        PASSED, FAILED or SKIPPED.
    duration_ms
        Wall time from before-each through after-each; 0 for skipped tests.
    error
        The exception that failed the test, if any.
    """

    __test__ = False

    name: str
    full_name: str
    status: TestStatus
    duration_ms: float = 0.0
    error: BaseException | None = None

    @property
    def passed(self) -> bool:
        return self.status is TestStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is TestStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is TestStatus.SKIPPED


@dataclass(frozen=True, slots=True)
class SuiteResult:
    name: str
    tests: tuple[TestResult, ...] = ()
    suites: tuple[SuiteResult, ...] = ()
    duration_ms: float = 0.0

    def iter_tests(self) -> Iterator[TestResult]:
        """All test results of this suite and its descendants, depth first."""
        yield from self.tests
        for child in self.suites:
            yield from child.iter_tests()

    def _count(self, status: TestStatus) -> int:
        return sum(1 for r in self.iter_tests() if r.status is status)

    @property
    def passed(self) -> int:
        return self._count(TestStatus.PASSED)

    @property
    def failed(self) -> int:
        return self._count(TestStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(TestStatus.SKIPPED)

    @property
    def total(self) -> int:
        return sum(1 for _ in self.iter_tests())


__all__ = ["SuiteResult", "TestResult"]
