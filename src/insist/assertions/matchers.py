"""Matcher dispatcher behind ``expect(...)``.

Every matcher computes a plain pass/fail predicate, and ``_check`` applies the
negation flag uniformly before raising ``AssertionFailedError``. Operand type
problems raise ``ContractViolationError`` before any predicate is evaluated,
negated or not.
"""

from __future__ import annotations

import inspect
import logging
import math
import re
from collections.abc import Collection, Iterable, Mapping, Sized
from typing import Any, Protocol, runtime_checkable

from insist.assertions.equality import deep_equal, is_number, same_value
from insist.assertions.fuzzy import DEFAULT_TOLERANCE, Roughly, roughly_equal
from insist.assertions.wrappers import Also, Maybe
from insist.context import get_run_context
from insist.errors import AssertionFailedError, ContractViolationError, MatchResult

logger = logging.getLogger(__name__)

_MISSING = object()


@runtime_checkable
class CallTracking(Protocol):
    """Anything that keeps a call history, e.g. ``Mock`` and ``Spy``."""

    def get_call_count(self) -> int: ...

    def was_called_with(self, *args: Any, **kwargs: Any) -> bool: ...


def _fmt(value: Any) -> str:
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    if isinstance(value, type):
        return value.__name__
    return repr(value)


class Matchers:
    """All matchers for one actual value.

    Parameters
    ----------
    actual:
        The already resolved actual value.
    negated:
        Invert every pass/fail decision.
    """

    def __init__(self, actual: Any, negated: bool = False) -> None:
        self.actual = actual
        self.negated = negated

    # -- plumbing -------------------------------------------------------

    @property
    def _not(self) -> str:
        return "not " if self.negated else ""

    def _check(
        self,
        matcher: str,
        passed: bool,
        message: str,
        expected: Any = _MISSING,
    ) -> MatchResult:
        result = MatchResult(
            matcher=matcher,
            passed=passed != self.negated,
            negated=self.negated,
            message=message,
            actual=_fmt(self.actual),
            expected=None if expected is _MISSING else _fmt(expected),
        )
        logger.debug("%s -> %s", matcher, "pass" if result.passed else "fail")
        if not result.passed:
            raise AssertionFailedError(result)
        return result

    def _fail(self, matcher: str, message: str) -> None:
        raise AssertionFailedError(
            MatchResult(
                matcher=matcher,
                passed=False,
                negated=self.negated,
                message=message,
                actual=_fmt(self.actual),
            )
        )

    def _require_numbers(self, matcher: str, *operands: Any) -> None:
        if not all(is_number(v) for v in (self.actual, *operands)):
            raise ContractViolationError(matcher, "numbers")

    def _require_string(self, matcher: str) -> str:
        if not isinstance(self.actual, str):
            raise ContractViolationError(matcher, "a string")
        return self.actual

    def _require_tracker(self, matcher: str) -> CallTracking:
        if not isinstance(self.actual, CallTracking):
            raise ContractViolationError(matcher, "a mock or spy")
        return self.actual

    def _require_awaitable(self, matcher: str) -> Any:
        if not inspect.isawaitable(self.actual):
            raise ContractViolationError(matcher, "an awaitable")
        return self.actual

    def _candidate(self, matcher: str, expected: Also | Maybe, verb: str) -> MatchResult:
        actual = self.actual
        match expected:
            case Maybe():
                outcome = expected.matches(actual)
                message = outcome.message or f"Expected {_fmt(actual)} {self._not}to match {expected!r}"
                if self.negated and outcome.passed:
                    message = f"Expected {_fmt(actual)} not to match {expected!r}"
                return self._check(matcher, outcome.passed, message, expected)
            case Also():
                return self._check(
                    matcher,
                    expected.matches(actual),
                    f"Expected {_fmt(actual)} {self._not}to {verb} one of {expected!r}",
                    expected,
                )

    # -- equality -------------------------------------------------------

    def to_be(self, expected: Any) -> MatchResult:
        if isinstance(expected, (Also, Maybe)):
            return self._candidate("to_be", expected, "be")
        return self._check(
            "to_be",
            same_value(self.actual, expected),
            f"Expected {_fmt(self.actual)} {self._not}to be {_fmt(expected)}",
            expected,
        )

    def to_equal(self, expected: Any) -> MatchResult:
        if isinstance(expected, (Also, Maybe)):
            return self._candidate("to_equal", expected, "equal")
        return self._check(
            "to_equal",
            deep_equal(self.actual, expected),
            f"Expected {_fmt(self.actual)} {self._not}to equal {_fmt(expected)}",
            expected,
        )

    # -- truthiness -----------------------------------------------------

    def to_be_truthy(self) -> MatchResult:
        return self._check(
            "to_be_truthy", bool(self.actual), f"Expected {_fmt(self.actual)} {self._not}to be truthy"
        )

    def to_be_falsy(self) -> MatchResult:
        return self._check(
            "to_be_falsy", not self.actual, f"Expected {_fmt(self.actual)} {self._not}to be falsy"
        )

    def to_be_none(self) -> MatchResult:
        return self._check(
            "to_be_none", self.actual is None, f"Expected {_fmt(self.actual)} {self._not}to be None"
        )

    # -- numbers --------------------------------------------------------

    def to_be_greater_than(self, expected: float) -> MatchResult:
        self._require_numbers("to_be_greater_than", expected)
        return self._check(
            "to_be_greater_than",
            self.actual > expected,
            f"Expected {self.actual} {self._not}to be greater than {expected}",
            expected,
        )

    def to_be_less_than(self, expected: float) -> MatchResult:
        self._require_numbers("to_be_less_than", expected)
        return self._check(
            "to_be_less_than",
            self.actual < expected,
            f"Expected {self.actual} {self._not}to be less than {expected}",
            expected,
        )

    def to_be_between(self, minimum: float, maximum: float, *, inclusive: bool = True) -> MatchResult:
        self._require_numbers("to_be_between", minimum, maximum)
        actual = self.actual
        if inclusive:
            passed = minimum <= actual <= maximum
        else:
            passed = minimum < actual < maximum
        kind = "inclusive" if inclusive else "exclusive"
        return self._check(
            "to_be_between",
            passed,
            f"Expected {actual} {self._not}to be between {minimum} and {maximum} ({kind})",
            (minimum, maximum),
        )

    def to_be_close_to(self, expected: float, precision: int = 2) -> MatchResult:
        """Compare after rounding both sides half-up to ``precision`` decimals."""
        self._require_numbers("to_be_close_to", expected)
        if math.isfinite(self.actual) and math.isfinite(expected):
            multiplier = 10**precision
            passed = math.floor(self.actual * multiplier + 0.5) == math.floor(expected * multiplier + 0.5)
        else:
            # infinities only match themselves, NaN never matches
            passed = self.actual == expected
        return self._check(
            "to_be_close_to",
            passed,
            f"Expected {self.actual} {self._not}to be close to {expected} (precision: {precision})",
            expected,
        )

    def to_be_nan(self) -> MatchResult:
        self._require_numbers("to_be_nan")
        return self._check(
            "to_be_nan", math.isnan(self.actual), f"Expected {self.actual} {self._not}to be NaN"
        )

    def to_be_finite(self) -> MatchResult:
        self._require_numbers("to_be_finite")
        return self._check(
            "to_be_finite", math.isfinite(self.actual), f"Expected {self.actual} {self._not}to be finite"
        )

    # -- strings and collections ---------------------------------------

    def to_contain(self, item: Any) -> MatchResult:
        actual = self.actual
        if isinstance(actual, str):
            if not isinstance(item, str):
                raise ContractViolationError("to_contain", "a string item when actual is a string")
            passed = item in actual
        elif isinstance(actual, Collection):
            passed = any(same_value(element, item) or element == item for element in actual)
        else:
            raise ContractViolationError("to_contain", "a string or a collection")
        return self._check(
            "to_contain",
            passed,
            f"Expected {_fmt(actual)} {self._not}to contain {_fmt(item)}",
            item,
        )

    def to_contain_equal(self, item: Any) -> MatchResult:
        actual = self.actual
        if isinstance(actual, (str, bytes, Mapping)) or not isinstance(actual, Iterable):
            raise ContractViolationError("to_contain_equal", "a list or other iterable of items")
        return self._check(
            "to_contain_equal",
            any(deep_equal(element, item) for element in actual),
            f"Expected {_fmt(actual)} {self._not}to contain {_fmt(item)}",
            item,
        )

    def to_have_length(self, expected: int) -> MatchResult:
        if not isinstance(self.actual, Sized):
            raise ContractViolationError("to_have_length", "a value with a length")
        length = len(self.actual)
        return self._check(
            "to_have_length",
            length == expected,
            f"Expected length {length} {self._not}to be {expected}",
            expected,
        )

    def to_have_property(self, key: str, value: Any = _MISSING) -> MatchResult:
        """Mapping key or attribute presence, optionally with a structurally equal value."""
        actual = self.actual
        if actual is None or isinstance(actual, (bool, int, float, str, bytes)):
            raise ContractViolationError("to_have_property", "an object or a mapping")

        if isinstance(actual, Mapping):
            present = key in actual
            current = actual[key] if present else None
        else:
            present = hasattr(actual, key)
            current = getattr(actual, key, None)

        if value is _MISSING:
            return self._check(
                "to_have_property",
                present,
                f'Expected object {self._not}to have property "{key}"',
                key,
            )
        if not present:
            message = f'Expected object to have property "{key}"'
        else:
            message = (
                f'Expected property "{key}" {self._not}to be {_fmt(value)}, but got {_fmt(current)}'
            )
        return self._check(
            "to_have_property", present and deep_equal(current, value), message, value
        )

    def to_start_with(self, prefix: str) -> MatchResult:
        actual = self._require_string("to_start_with")
        return self._check(
            "to_start_with",
            actual.startswith(prefix),
            f'Expected "{actual}" {self._not}to start with "{prefix}"',
            prefix,
        )

    def to_end_with(self, suffix: str) -> MatchResult:
        actual = self._require_string("to_end_with")
        return self._check(
            "to_end_with",
            actual.endswith(suffix),
            f'Expected "{actual}" {self._not}to end with "{suffix}"',
            suffix,
        )

    def to_match(self, pattern: str | re.Pattern[str]) -> MatchResult:
        actual = self._require_string("to_match")
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self._check(
            "to_match",
            regex.search(actual) is not None,
            f'Expected "{actual}" {self._not}to match {_fmt(regex)}',
            regex,
        )

    # -- types ----------------------------------------------------------

    def to_be_instance_of(self, cls: type | tuple[type, ...]) -> MatchResult:
        if not (isinstance(cls, type) or (isinstance(cls, tuple) and all(isinstance(c, type) for c in cls))):
            raise ContractViolationError("to_be_instance_of", "a class or a tuple of classes")
        expected_name = cls.__name__ if isinstance(cls, type) else " | ".join(c.__name__ for c in cls)
        return self._check(
            "to_be_instance_of",
            isinstance(self.actual, cls),
            f"Expected {type(self.actual).__name__} {self._not}to be instance of {expected_name}",
            cls,
        )

    def to_be_type_of(self, type_name: str) -> MatchResult:
        actual_type = type(self.actual).__name__
        return self._check(
            "to_be_type_of",
            actual_type == type_name,
            f"Expected type {actual_type} {self._not}to be {type_name}",
            type_name,
        )

    # -- exceptions -----------------------------------------------------

    def to_raise(self, expected: type[BaseException] | str | None = None) -> MatchResult:
        """Call the actual value with no arguments and inspect what it raises.

        ``expected`` may be an exception class or a substring of the message.
        """
        if not callable(self.actual):
            raise ContractViolationError("to_raise", "a callable")
        error: Exception | None = None
        try:
            self.actual()
        except Exception as exc:
            error = exc

        if error is None:
            return self._check(
                "to_raise", False, "Expected callable to raise but it didn't", expected
            )

        if isinstance(expected, type):
            passed = isinstance(error, expected)
            if self.negated:
                message = f"Expected callable not to raise {expected.__name__} but it raised: {error}"
            else:
                message = (
                    f"Expected callable to raise {expected.__name__} "
                    f"but raised {type(error).__name__}"
                )
        elif isinstance(expected, str):
            passed = expected in str(error)
            if self.negated:
                message = f'Expected error message not to include "{expected}" but got "{error}"'
            else:
                message = f'Expected error message to include "{expected}" but got "{error}"'
        else:
            passed = True
            message = f"Expected callable not to raise but it raised: {error}"
        return self._check("to_raise", passed, message, expected)

    to_throw = to_raise

    # -- call tracking --------------------------------------------------

    def to_have_been_called(self) -> MatchResult:
        count = self._require_tracker("to_have_been_called").get_call_count()
        return self._check(
            "to_have_been_called",
            count > 0,
            f"Expected mock {self._not}to have been called, but it was called {count} times",
        )

    def to_have_been_called_with(self, *args: Any, **kwargs: Any) -> MatchResult:
        tracker = self._require_tracker("to_have_been_called_with")
        shown = ", ".join([*map(_fmt, args), *(f"{k}={_fmt(v)}" for k, v in kwargs.items())])
        return self._check(
            "to_have_been_called_with",
            tracker.was_called_with(*args, **kwargs),
            f"Expected mock {self._not}to have been called with ({shown})",
            args,
        )

    def to_have_been_called_times(self, times: int) -> MatchResult:
        count = self._require_tracker("to_have_been_called_times").get_call_count()
        return self._check(
            "to_have_been_called_times",
            count == times,
            f"Expected mock {self._not}to have been called {times} times, but it was called {count} times",
            times,
        )

    # -- awaitables -----------------------------------------------------

    async def to_resolve(self) -> MatchResult:
        awaitable = self._require_awaitable("to_resolve")
        try:
            await awaitable
        except Exception as exc:
            return self._check(
                "to_resolve", False, f"Expected awaitable to resolve but it raised: {exc}"
            )
        return self._check("to_resolve", True, "Expected awaitable not to resolve but it did")

    async def to_reject(self) -> MatchResult:
        awaitable = self._require_awaitable("to_reject")
        try:
            await awaitable
        except Exception:
            return self._check("to_reject", True, "Expected awaitable not to raise but it did")
        return self._check("to_reject", False, "Expected awaitable to raise but it resolved")

    async def to_resolve_with(self, expected: Any) -> MatchResult:
        awaitable = self._require_awaitable("to_resolve_with")
        try:
            result = await awaitable
        except Exception as exc:
            self._fail("to_resolve_with", f"Expected awaitable to resolve but it raised: {exc}")
        return self._check(
            "to_resolve_with",
            deep_equal(result, expected),
            f"Expected awaitable {self._not}to resolve with {_fmt(expected)}, but got {_fmt(result)}",
            expected,
        )

    # -- snapshots ------------------------------------------------------

    def to_match_snapshot(self) -> MatchResult:
        outcome = get_run_context().snapshots.match_snapshot(self.actual)
        if self.negated:
            message = "Expected value not to match its snapshot"
        else:
            message = outcome.message or "Snapshot mismatch"
        return self._check("to_match_snapshot", outcome.passed, message)

    # -- fuzzy ----------------------------------------------------------

    def to_roughly_match(self, expected: str | Roughly, distance: int | None = None) -> MatchResult:
        actual = self._require_string("to_roughly_match")
        if isinstance(expected, Roughly):
            target = expected
        elif isinstance(expected, str):
            target = Roughly(expected, distance)
        else:
            raise ContractViolationError("to_roughly_match", "a string or Roughly(...) expected value")
        return self._check(
            "to_roughly_match",
            target.matches(actual),
            f'Expected "{actual}" {self._not}to roughly match "{target.target}" '
            f"(distance {target.distance_to(actual)}, allowed {target.distance})",
            target,
        )

    def to_roughly_equal(
        self,
        expected: Any,
        *,
        tolerance: float = DEFAULT_TOLERANCE,
        ignore_keys: Collection[str] = (),
    ) -> MatchResult:
        return self._check(
            "to_roughly_equal",
            roughly_equal(self.actual, expected, tolerance, ignore_keys),
            f"Expected {_fmt(self.actual)} {self._not}to roughly equal {_fmt(expected)} "
            f"(tolerance: {tolerance})",
            expected,
        )


__all__ = ["CallTracking", "Matchers"]
