"""Failure types raised by insist.

Every failure a test body can trigger through the library derives from one of
the classes below, so reporters can tell an assertion failure apart from a
misused matcher, a timeout or an exhausted retry.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, SerializationInfo, field_serializer


class MatchResult(BaseModel):
    """Outcome of a single matcher evaluation.

    Attributes:
    ----------
    matcher : str
        Matcher name, e.g. ``to_equal``
    passed : bool
        Whether the (possibly negated) expectation held
    negated : bool
        True when evaluated through ``expect(...).not_``
    message : str | None
        Human readable expected/actual description
    actual : str
        repr of the actual value
    expected : str | None
        repr of the expected value, when the matcher takes one
    """

    matcher: str
    passed: bool
    negated: bool = False
    message: str | None = None
    actual: str = ""
    expected: str | None = None

    @field_serializer("actual", "expected")
    def _truncate(self, v: str | None, info: SerializationInfo) -> str | None:
        """Truncate actual/expected reprs to 50 characters when asked to."""
        ctx = info.context or {}
        if v is None or not ctx.get("truncate"):
            return v
        max_len = 50
        if len(v) <= max_len:
            return v
        return v[:max_len] + "..."

    def __repr__(self) -> str:
        return self.model_dump_json(
            indent=2,
            exclude_none=True,
            context={"truncate": True},
        )

    def __bool__(self) -> bool:
        return self.passed


class AssertionFailedError(AssertionError):
    """AssertionError with the attached MatchResult."""

    def __init__(self, result: MatchResult):
        self.result = result
        super().__init__(result.message or f"{result.matcher} failed")


class ContractViolationError(TypeError):
    """A matcher received an operand of the wrong type or shape."""

    def __init__(self, matcher: str, requirement: str):
        self.matcher = matcher
        self.requirement = requirement
        super().__init__(f"{matcher} expects {requirement}")


class TestTimeoutError(TimeoutError):
    """A test body did not settle within its configured timeout."""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        shown = int(timeout_ms) if float(timeout_ms).is_integer() else timeout_ms
        super().__init__(f"test timeout: exceeded {shown}ms")


class RetryExhaustedError(AssertionError):
    """An Insist producer failed on every attempt."""

    def __init__(self, attempts: int, last_error: BaseException | None):
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "no error recorded"
        super().__init__(f"Insist failed after {attempts} attempts: {detail}")


RelayLookupKind = Literal["missing_key", "missing_property", "not_traversable"]


class RelayLookupError(LookupError):
    """receive() could not resolve a key or a nested path segment."""

    def __init__(self, kind: RelayLookupKind, message: str, *, key: str, path: str):
        self.kind = kind
        self.key = key
        self.path = path
        super().__init__(message)


class ChannelClosedError(RuntimeError):
    """send() on a closed channel, or receive() on a drained closed channel."""


class ChannelEmptyError(RuntimeError):
    """receive() on an open channel with nothing buffered."""


class SuiteHookError(RuntimeError):
    """A before_all/after_all hook raised; the suite subtree is aborted."""

    def __init__(self, suite_path: str, hook: str, cause: BaseException):
        self.suite_path = suite_path
        self.hook = hook
        self.cause = cause
        where = suite_path or "<root>"
        super().__init__(f"{hook} hook failed in suite {where!r}: {cause}")


__all__ = [
    "AssertionFailedError",
    "ChannelClosedError",
    "ChannelEmptyError",
    "ContractViolationError",
    "MatchResult",
    "RelayLookupError",
    "RelayLookupKind",
    "RetryExhaustedError",
    "SuiteHookError",
    "TestTimeoutError",
]
