import asyncio
import math
import re
from dataclasses import dataclass

import pytest

from insist import errors
from insist.assertions import Also, Maybe, Roughly, expect
from insist.mocking import Spy, mock


@dataclass
class Point:
    x: int
    y: int


def test_to_be_uses_same_value_semantics():
    expect(math.nan).to_be(math.nan)
    expect(1).to_be(1.0)
    expect(0.0).not_.to_be(-0.0)
    expect(True).not_.to_be(1)
    expect([1]).not_.to_be([1])


def test_failure_carries_match_result():
    with pytest.raises(errors.AssertionFailedError) as excinfo:
        expect(1).to_be(2)
    result = excinfo.value.result
    assert result.matcher == "to_be"
    assert not result.passed
    assert result.actual == "1"
    assert result.expected == "2"
    assert str(excinfo.value) == "Expected 1 to be 2"
    assert isinstance(excinfo.value, AssertionError)


def test_negated_failure_message():
    with pytest.raises(errors.AssertionFailedError, match="Expected 1 not to be 1"):
        expect(1).not_.to_be(1)


def test_to_equal_is_structural():
    expect({"a": [1, {"b": 2}]}).to_equal({"a": [1, {"b": 2}]})
    expect(Point(1, 2)).to_equal(Point(1, 2))
    expect({"a": 1}).not_.to_equal({"a": 1, "b": None})
    expect([1, 2]).not_.to_equal([2, 1])


def test_equality_delegates_to_candidates():
    expect(2).to_be(Also(1, 2, 3))
    expect({"k": 1}).to_equal(Also({"k": 1}, {"k": 2}))
    with pytest.raises(errors.AssertionFailedError, match="to be one of"):
        expect(4).to_be(Also(1, 2, 3))
    expect(4).not_.to_be(Also(1, 2, 3))
    expect(42).to_be(Maybe(1, 100))
    with pytest.raises(errors.AssertionFailedError, match="outside range"):
        expect(101).to_be(Maybe(1, 100))
    expect(0).not_.to_equal(Maybe(1, 100))


def test_truthiness():
    expect(1).to_be_truthy()
    expect("").to_be_falsy()
    expect(None).to_be_none()
    expect(0).not_.to_be_none()


def test_numeric_matchers():
    expect(5).to_be_greater_than(3)
    expect(2).to_be_less_than(3)
    expect(5).to_be_between(1, 5)
    expect(5).not_.to_be_between(1, 5, inclusive=False)
    expect(0.1 + 0.2).to_be_close_to(0.3)
    expect(1.005).to_be_close_to(1.01, precision=1)
    expect(1.2).not_.to_be_close_to(1.3, precision=1)
    expect(math.nan).to_be_nan()
    expect(1.0).to_be_finite()
    expect(math.inf).not_.to_be_finite()


def test_close_to_with_non_finite_numbers():
    expect(math.inf).to_be_close_to(math.inf)
    expect(-math.inf).not_.to_be_close_to(math.inf)
    expect(math.inf).not_.to_be_close_to(1e308)
    expect(1.0).not_.to_be_close_to(math.nan)
    with pytest.raises(errors.AssertionFailedError, match="to be close to nan"):
        expect(math.nan).to_be_close_to(math.nan)


def test_numeric_matchers_validate_operands_even_when_negated():
    with pytest.raises(errors.ContractViolationError, match="to_be_greater_than expects numbers"):
        expect("5").to_be_greater_than(3)
    with pytest.raises(errors.ContractViolationError):
        expect(True).not_.to_be_less_than(3)
    with pytest.raises(TypeError):
        expect("x").to_be_nan()


def test_string_and_collection_matchers():
    expect("hello world").to_contain("world")
    expect([1, 2, 3]).to_contain(2)
    expect([{"a": 1}]).to_contain_equal({"a": 1})
    expect((1, 2)).to_have_length(2)
    expect("abc").to_start_with("ab")
    expect("abc").to_end_with("bc")
    expect("order-123").to_match(r"\d+")
    expect("order-123").to_match(re.compile(r"^order"))
    expect("abc").not_.to_match("z")


def test_collection_contracts():
    with pytest.raises(errors.ContractViolationError):
        expect(5).to_contain(1)
    with pytest.raises(errors.ContractViolationError):
        expect("abc").to_contain_equal("a")
    with pytest.raises(errors.ContractViolationError):
        expect(5).to_have_length(1)
    with pytest.raises(errors.ContractViolationError):
        expect(5).to_start_with("5")


def test_to_have_property():
    expect({"a": 1}).to_have_property("a")
    expect({"a": 1}).to_have_property("a", 1)
    expect(Point(1, 2)).to_have_property("y", 2)
    expect({"a": 1}).not_.to_have_property("b")
    expect({"a": 1}).not_.to_have_property("a", 2)
    with pytest.raises(errors.AssertionFailedError, match='property "a" to be 2, but got 1'):
        expect({"a": 1}).to_have_property("a", 2)
    with pytest.raises(errors.ContractViolationError):
        expect(None).to_have_property("a")


def test_type_matchers():
    expect(Point(1, 2)).to_be_instance_of(Point)
    expect(1).to_be_instance_of((int, float))
    expect("x").to_be_type_of("str")
    expect("x").not_.to_be_type_of("int")
    with pytest.raises(errors.ContractViolationError):
        expect(1).to_be_instance_of("int")


def test_to_raise():
    def raises():
        raise KeyError("missing thing")

    expect(raises).to_raise()
    expect(raises).to_raise(KeyError)
    expect(raises).to_throw("missing")
    expect(lambda: None).not_.to_raise()
    expect(raises).not_.to_raise(ValueError)
    with pytest.raises(errors.AssertionFailedError, match="to raise ValueError but raised KeyError"):
        expect(raises).to_raise(ValueError)
    with pytest.raises(errors.AssertionFailedError, match="didn't"):
        expect(lambda: None).to_raise()
    with pytest.raises(errors.ContractViolationError):
        expect(5).to_raise()


def test_call_tracking():
    fn = mock()
    expect(fn).not_.to_have_been_called()
    fn(1, key="v")
    fn(2)
    expect(fn).to_have_been_called()
    expect(fn).to_have_been_called_times(2)
    expect(fn).to_have_been_called_with(1, key="v")
    expect(fn).not_.to_have_been_called_with(3)

    spy = Spy(len)
    spy("abc")
    expect(spy).to_have_been_called_with("abc")

    with pytest.raises(errors.ContractViolationError, match="expects a mock or spy"):
        expect(len).to_have_been_called()


def test_async_matchers():
    async def ok():
        return {"v": 1}

    async def bad():
        raise RuntimeError("nope")

    async def main():
        await expect(ok()).to_resolve()
        await expect(bad()).to_reject()
        await expect(bad()).not_.to_resolve()
        await expect(ok()).not_.to_reject()
        await expect(ok()).to_resolve_with({"v": 1})
        await expect(ok()).not_.to_resolve_with({"v": 2})
        with pytest.raises(errors.AssertionFailedError, match="it raised: nope"):
            await expect(bad()).not_.to_resolve_with({"v": 1})
        with pytest.raises(errors.ContractViolationError):
            await expect(5).to_resolve()

    asyncio.run(main())


def test_snapshot_matcher(run_context):
    test_file = run_context.snapshots.snapshot_file.with_name("insist_unit.py")
    run_context.set_current_test("snap test")
    expect({"a": 1}).to_match_snapshot()

    # a second run against the stored baseline
    run_context.snapshots.set_snapshot_file(test_file)
    run_context.set_current_test("snap test")
    expect({"a": 1}).to_match_snapshot()

    run_context.snapshots.set_snapshot_file(test_file)
    run_context.set_current_test("snap test")
    with pytest.raises(errors.AssertionFailedError, match="Snapshot mismatch"):
        expect({"a": 2}).to_match_snapshot()


def test_fuzzy_matchers():
    expect("helo").to_roughly_match("hello", distance=1)
    expect("helo").not_.to_roughly_match("hello", distance=0)
    expect("wrold").to_roughly_match(Roughly("world"))
    expect({"value": 100}).to_roughly_equal({"value": 105})
    expect({"value": 100}).not_.to_roughly_equal({"value": 105}, tolerance=0.01)
    expect({"v": 1, "id": "a"}).to_roughly_equal({"v": 1, "id": "b"}, ignore_keys=["id"])
    with pytest.raises(errors.ContractViolationError):
        expect(5).to_roughly_match("5")
