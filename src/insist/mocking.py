"""Call recorders: configurable mocks and pass-through spies.

Both are plain callable objects carrying their own call history, so the call
tracking matchers can inspect them without any attribute patching.
"""

from __future__ import annotations

import functools
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import Self

from insist.assertions.equality import deep_equal


@dataclass(slots=True)
class CallRecord:
    """One invocation of a recorder."""

    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)
    return_value: Any = None
    error: BaseException | None = None
    timestamp: float = field(default_factory=time.time)


class CallRecorder:
    """Call-history capability shared by Mock and Spy."""

    def __init__(self) -> None:
        self._calls: list[CallRecord] = []

    def _invoke(self, target: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        call = CallRecord(args=args, kwargs=dict(kwargs))
        try:
            call.return_value = target(*args, **kwargs)
        except Exception as exc:
            call.error = exc
            self._calls.append(call)
            raise
        self._calls.append(call)
        return call.return_value

    def get_calls(self) -> list[CallRecord]:
        return list(self._calls)

    def get_call_count(self) -> int:
        return len(self._calls)

    def get_call_args(self, index: int) -> tuple[Any, ...]:
        if -len(self._calls) <= index < len(self._calls):
            return self._calls[index].args
        return ()

    def was_called_with(self, *args: Any, **kwargs: Any) -> bool:
        return any(
            len(call.args) == len(args)
            and all(deep_equal(a, b) for a, b in zip(call.args, args))
            and deep_equal(call.kwargs, kwargs)
            for call in self._calls
        )

    def reset(self) -> None:
        self._calls = []


class Mock(CallRecorder):
    """Stand-in callable with scripted results.

    One-shot values and implementations are consumed in the order they were
    queued; once the queue is empty the persistent implementation (or
    persistent return value, whichever was set last) answers.
    """

    def __init__(self, name: str = "mock") -> None:
        super().__init__()
        self.name = name
        self._once: deque[Callable[..., Any]] = deque()
        self._default: Callable[..., Any] = _returning(None)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        target = self._once.popleft() if self._once else self._default
        return self._invoke(target, args, kwargs)

    def mock_return_value(self, value: Any) -> Self:
        self._default = _returning(value)
        return self

    def mock_return_value_once(self, value: Any) -> Self:
        self._once.append(_returning(value))
        return self

    def mock_implementation(self, fn: Callable[..., Any]) -> Self:
        self._default = fn
        return self

    def mock_implementation_once(self, fn: Callable[..., Any]) -> Self:
        self._once.append(fn)
        return self

    def reset(self) -> None:
        super().reset()
        self._once.clear()
        self._default = _returning(None)

    def __repr__(self) -> str:
        return f"<Mock {self.name!r} calls={self.get_call_count()}>"


class Spy(CallRecorder):
    """Wraps a real callable, recording every call while still invoking it."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        super().__init__()
        self.original = fn
        functools.update_wrapper(self, fn, updated=())

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._invoke(self.original, args, kwargs)

    def get_call(self, index: int) -> CallRecord | None:
        calls = self._calls
        if -len(calls) <= index < len(calls):
            return calls[index]
        return None

    def get_last_call(self) -> CallRecord | None:
        return self._calls[-1] if self._calls else None

    def get_last_return_value(self) -> Any:
        last = self.get_last_call()
        return last.return_value if last else None

    def __repr__(self) -> str:
        name = getattr(self.original, "__qualname__", repr(self.original))
        return f"<Spy {name} calls={self.get_call_count()}>"


def _returning(value: Any) -> Callable[..., Any]:
    def _fn(*_args: Any, **_kwargs: Any) -> Any:
        return value

    return _fn


def mock(name: str = "mock") -> Mock:
    return Mock(name)


__all__ = ["CallRecord", "CallRecorder", "Mock", "Spy", "mock"]
