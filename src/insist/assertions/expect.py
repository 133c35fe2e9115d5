"""Assertion entry points: ``expect`` and its coroutine twin ``aexpect``."""

from __future__ import annotations

from typing import Any

from insist.assertions.matchers import Matchers
from insist.assertions.wrappers import Insist, Please, Transform


def resolve_actual(actual: Any) -> Any:
    """Unwrap a deferred actual value.

    Order is fixed: a Transform resolves (including any Insist it wraps), else
    an Insist resolves, else a Please substitutes its forced value.
    """
    match actual:
        case Transform():
            return actual.resolve()
        case Insist():
            return actual.resolve()
        case Please(value=value):
            return value
        case _:
            return actual


async def resolve_actual_async(actual: Any) -> Any:
    match actual:
        case Transform() | Insist():
            return await actual.resolve_async()
        case Please(value=value):
            return value
        case _:
            return actual


class Expectation(Matchers):
    """Matchers for a resolved value, with the negated set on ``not_``."""

    def __init__(self, actual: Any) -> None:
        super().__init__(actual, negated=False)
        self.not_ = Matchers(actual, negated=True)


def expect(actual: Any) -> Expectation:
    """Resolve ``actual`` and return its matchers.

    Examples
    --------
    >>> expect(1 + 1).to_be(2)
    >>> expect(Insist(flaky_call, 3)).to_equal({"ok": True})
    >>> expect([1, 2]).not_.to_contain(3)
    """
    return Expectation(resolve_actual(actual))


async def aexpect(actual: Any) -> Expectation:
    """Like ``expect`` but retries cooperatively and awaits async producers.

    >>> (await aexpect(Insist(fetch_status, 5, delay=50))).to_be("ready")
    """
    return Expectation(await resolve_actual_async(actual))


__all__ = ["Expectation", "aexpect", "expect", "resolve_actual", "resolve_actual_async"]
