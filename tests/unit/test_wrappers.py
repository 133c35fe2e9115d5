import asyncio
import importlib
import logging

import pytest

from insist import errors
from insist.assertions.wrappers import Also, ForcedValueWarning, Insist, Maybe, Please, Transform

# The package re-exports the `expect` function, shadowing the submodule attribute.
expect_mod = importlib.import_module("insist.assertions.expect")


def flaky(failures: int, value="success"):
    calls = {"n": 0}

    def producer():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise RuntimeError(f"attempt {calls['n']} failed")
        return value

    return producer, calls


def test_insist_returns_after_transient_failures():
    producer, calls = flaky(2)
    assert Insist(producer, 5, delay=0).resolve() == "success"
    assert calls["n"] == 3


def test_insist_exhaustion_names_attempts_and_last_error():
    producer, calls = flaky(10)
    with pytest.raises(errors.RetryExhaustedError, match="2 attempts") as excinfo:
        Insist(producer, 2, delay=0).resolve()
    assert "attempt 2 failed" in str(excinfo.value)
    assert isinstance(excinfo.value, AssertionError)
    assert calls["n"] == 2


def test_insist_rejects_bad_arguments():
    with pytest.raises(ValueError, match="attempts must be >= 1, got 0"):
        Insist(lambda: 1, 0)
    with pytest.raises(ValueError):
        Insist(lambda: 1, 1, delay=-5)


def test_insist_accepts_plain_value():
    assert Insist(42, 1).resolve() == 42


def test_insist_logs_attempts(caplog):
    producer, _ = flaky(1)
    with caplog.at_level(logging.INFO, logger="insist.assertions.wrappers"):
        Insist(producer, 3, delay=0).resolve()
    assert "Insist attempt 1 of 3" in caplog.text
    assert "succeeded on attempt 2" in caplog.text


def test_insist_resolve_async_awaits_coroutines():
    calls = {"n": 0}

    async def producer():
        calls["n"] += 1
        if calls["n"] < 3:
            raise RuntimeError("not yet")
        return "ready"

    assert asyncio.run(Insist(producer, 5, delay=1).resolve_async()) == "ready"


def test_transform_resolves_nested_insist_first():
    producer, _ = flaky(1, value={"status": 200})
    wrapped = Transform(Insist(producer, 3, delay=0), lambda r: r["status"])
    assert wrapped.resolve() == 200
    assert Transform("abc", str.upper).resolve() == "ABC"


def test_please_warns_and_forces_value():
    with pytest.warns(ForcedValueWarning, match="Do not use Please"):
        forced = Please(7)
    assert expect_mod.resolve_actual(forced) == 7


def test_resolution_order():
    producer, _ = flaky(0, value=3)
    assert expect_mod.resolve_actual(Insist(producer, 1)) == 3
    assert expect_mod.resolve_actual(Transform(Insist(producer, 1), lambda v: v * 2)) == 6
    assert expect_mod.resolve_actual("plain") == "plain"


def test_aexpect_resolves_cooperatively():
    async def main():
        result = await expect_mod.aexpect(Insist(lambda: asyncio.sleep(0, "done"), 1))
        result.to_be("done")

    asyncio.run(main())


def test_also_matches_any_candidate_structurally():
    candidates = Also(1, 2, {"a": [1]})
    assert candidates.matches(2)
    assert candidates.matches({"a": [1]})
    assert not candidates.matches(4)
    assert Also(1, Also(5, 6)).matches(6)


def test_maybe_range_mode():
    maybe = Maybe(1, 100)
    assert maybe.is_range
    assert maybe.matches(1).passed
    assert maybe.matches(100).passed
    assert maybe.matches(50).passed
    assert maybe.matched == 50
    assert not maybe.matches(0).passed
    assert "outside range" in maybe.matches(101).message
    assert "Expected a number" in maybe.matches("50").message


def test_maybe_value_mode():
    maybe = Maybe("a", "b", "c")
    assert not maybe.is_range
    assert maybe.matches("b").matched_value == "b"
    assert maybe.matched == "b"
    result = maybe.matches("z")
    assert not result.passed
    assert "3 possibilities" in result.message


def test_maybe_with_two_non_numbers_is_value_mode():
    assert not Maybe("x", 5).is_range
    assert not Maybe(True, False).is_range
