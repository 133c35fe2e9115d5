"""Deferred and polymorphic assertion values.

``Insist``, ``Transform`` and ``Please`` stand in for the *actual* side of an
expectation and are resolved before any matcher runs. ``Also`` and ``Maybe``
stand in for the *expected* side and decide for themselves whether an actual
value matches.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import warnings
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

from insist.assertions.equality import deep_equal, is_number
from insist.errors import RetryExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY_MS = 100


class ForcedValueWarning(UserWarning):
    """Emitted whenever a Please() value replaces the real actual value."""


@dataclass(frozen=True, slots=True, init=False)
class Insist:
    """Retry a producer until it stops raising.

    Parameters
    ----------
    producer:
        Zero-argument callable, or a plain value used as its own result.
    attempts:
        Maximum number of calls, at least 1.
    delay:
        Milliseconds to wait between failed attempts.
    """

    producer: Callable[[], Any]
    attempts: int
    delay: float

    def __init__(
        self,
        producer: Callable[[], Any] | Any,
        attempts: int,
        *,
        delay: float = DEFAULT_RETRY_DELAY_MS,
    ) -> None:
        if attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {attempts}")
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        if not callable(producer):
            value = producer
            producer = lambda: value  # noqa: E731
        object.__setattr__(self, "producer", producer)
        object.__setattr__(self, "attempts", attempts)
        object.__setattr__(self, "delay", delay)

    def resolve(self) -> Any:
        """Run the producer, blocking the whole thread between attempts."""
        last_error: Exception | None = None
        for attempt in range(1, self.attempts + 1):
            logger.info("Insist attempt %d of %d", attempt, self.attempts)
            try:
                result = self.producer()
            except Exception as exc:
                last_error = exc
                logger.debug("Insist attempt %d failed: %s", attempt, exc)
                if attempt < self.attempts:
                    time.sleep(self.delay / 1000)
                continue
            logger.info("Insist succeeded on attempt %d of %d", attempt, self.attempts)
            return result
        raise RetryExhaustedError(self.attempts, last_error) from last_error

    async def resolve_async(self) -> Any:
        """Cooperative variant: sleeps with asyncio and awaits awaitable results."""
        last_error: Exception | None = None
        for attempt in range(1, self.attempts + 1):
            logger.info("Insist attempt %d of %d", attempt, self.attempts)
            try:
                result = self.producer()
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                last_error = exc
                logger.debug("Insist attempt %d failed: %s", attempt, exc)
                if attempt < self.attempts:
                    await asyncio.sleep(self.delay / 1000)
                continue
            logger.info("Insist succeeded on attempt %d of %d", attempt, self.attempts)
            return result
        raise RetryExhaustedError(self.attempts, last_error) from last_error

    def __repr__(self) -> str:
        return f"Insist({self.attempts} attempts)"


@dataclass(frozen=True, slots=True)
class Transform:
    """Apply a pure mapping to a value (or to a resolved Insist) at assertion time."""

    source: Any
    fn: Callable[[Any], Any]

    def resolve(self) -> Any:
        value = self.source
        if isinstance(value, Insist):
            value = value.resolve()
        return self.fn(value)

    async def resolve_async(self) -> Any:
        value = self.source
        if isinstance(value, Insist):
            value = await value.resolve_async()
        return self.fn(value)

    def __repr__(self) -> str:
        return f"Transform({self.source!r})"


@dataclass(frozen=True, slots=True)
class Please:
    """Force the actual value of an expectation, whatever was really produced.

    Meant for mocks and placeholders only; constructing one warns.
    """

    value: Any

    def __post_init__(self) -> None:
        warnings.warn(
            "Do not use Please() as it may bring false results. "
            "Use it for mocks or forced values.",
            ForcedValueWarning,
            stacklevel=3,
        )

    def resolve(self) -> Any:
        return self.value


@dataclass(frozen=True, slots=True, init=False)
class Also:
    """Expected value satisfied by any of several candidates."""

    candidates: tuple[Any, ...]

    def __init__(self, *candidates: Any) -> None:
        object.__setattr__(self, "candidates", candidates)

    def matches(self, actual: Any) -> bool:
        for candidate in self.candidates:
            if isinstance(candidate, Also):
                if candidate.matches(actual):
                    return True
            elif deep_equal(actual, candidate):
                return True
        return False

    def __repr__(self) -> str:
        return f"Also({', '.join(repr(c) for c in self.candidates)})"


@dataclass(frozen=True, slots=True)
class MaybeMatch:
    passed: bool
    matched_value: Any = None
    message: str | None = None


@dataclass(slots=True, init=False)
class Maybe:
    """Expected value for nondeterministic results.

    ``Maybe(1, 100)`` (exactly two numbers) accepts any number in the inclusive
    range; any other argument list accepts a value equal to one of the listed
    candidates. The last successful match is kept on ``matched``.
    """

    values: tuple[Any, ...]
    minimum: float | None = None
    maximum: float | None = None
    matched: Any = field(default=None, compare=False)

    def __init__(self, *args: Any) -> None:
        self.matched = None
        if len(args) == 2 and is_number(args[0]) and is_number(args[1]):
            self.minimum, self.maximum = args
            self.values = ()
        else:
            self.minimum = self.maximum = None
            self.values = args

    @property
    def is_range(self) -> bool:
        return self.minimum is not None

    def matches(self, actual: Any) -> MaybeMatch:
        if self.is_range:
            if not is_number(actual):
                return MaybeMatch(
                    passed=False,
                    message=f"Expected a number for range check, but got {type(actual).__name__}",
                )
            if self.minimum <= actual <= self.maximum:
                self.matched = actual
                logger.info(
                    "Matched value: %r (within range %s-%s)", actual, self.minimum, self.maximum
                )
                return MaybeMatch(passed=True, matched_value=actual)
            return MaybeMatch(
                passed=False,
                message=f"Value {actual!r} is outside range {self.minimum}-{self.maximum}",
            )

        for candidate in self.values:
            if deep_equal(actual, candidate):
                self.matched = candidate
                logger.info(
                    "Matched value: %r (out of %d possibilities)", actual, len(self.values)
                )
                return MaybeMatch(passed=True, matched_value=candidate)
        return MaybeMatch(
            passed=False,
            message=f"Value {actual!r} does not match any of the {len(self.values)} possibilities",
        )

    def __repr__(self) -> str:
        if self.is_range:
            return f"Maybe({self.minimum}, {self.maximum})"
        return f"Maybe({', '.join(repr(v) for v in self.values)})"


# Closed sets dispatched with ``match`` in the assertion entry point and matchers.
DeferredActual = Union[Transform, Insist, Please]
CandidateExpected = Union[Also, Maybe]


__all__ = [
    "Also",
    "CandidateExpected",
    "DEFAULT_RETRY_DELAY_MS",
    "DeferredActual",
    "ForcedValueWarning",
    "Insist",
    "Maybe",
    "MaybeMatch",
    "Please",
    "Transform",
]
