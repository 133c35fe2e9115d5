import pytest

from insist.mocking import CallRecord, Mock, Spy, mock


def test_mock_records_calls():
    fn = mock("fetch")
    assert fn(1, 2, flag=True) is None
    assert fn.get_call_count() == 1
    assert fn.get_call_args(0) == (1, 2)
    assert fn.get_call_args(5) == ()
    [call] = fn.get_calls()
    assert isinstance(call, CallRecord)
    assert call.kwargs == {"flag": True}
    assert fn.was_called_with(1, 2, flag=True)
    assert not fn.was_called_with(1, 2)


def test_one_shot_queue_drains_in_registration_order_before_default():
    fn = Mock()
    fn.mock_return_value("default")
    fn.mock_return_value_once("first")
    fn.mock_implementation_once(lambda x: x * 10)
    fn.mock_return_value_once("third")

    assert [fn(1), fn(2), fn(3), fn(4), fn(5)] == ["first", 20, "third", "default", "default"]


def test_persistent_implementation_replaces_return_value():
    fn = Mock().mock_return_value(1).mock_implementation(lambda a, b: a + b)
    assert fn(2, 3) == 5


def test_mock_records_and_reraises_errors():
    def fail():
        raise ValueError("nope")

    fn = Mock().mock_implementation(fail)
    with pytest.raises(ValueError):
        fn()
    assert isinstance(fn.get_calls()[0].error, ValueError)


def test_reset_clears_calls_and_behaviour():
    fn = Mock().mock_return_value(3).mock_return_value_once(4)
    fn()
    fn.reset()
    assert fn.get_call_count() == 0
    assert fn() is None


def test_spy_calls_through_and_records():
    def add(a, b=1):
        return a + b

    spy = Spy(add)
    assert spy(2, b=5) == 7
    assert spy.__name__ == "add"
    assert spy.get_last_return_value() == 7
    assert spy.get_last_call().kwargs == {"b": 5}
    assert spy.get_call(3) is None
    assert spy.was_called_with(2, b=5)


def test_spy_reraises_after_recording():
    def broken():
        raise KeyError("k")

    spy = Spy(broken)
    with pytest.raises(KeyError):
        spy()
    assert spy.get_call_count() == 1
    assert isinstance(spy.get_last_call().error, KeyError)
    assert spy.get_last_return_value() is None
