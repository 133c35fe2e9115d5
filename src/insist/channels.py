"""Point-to-point message channels between tests.

A producer test opens a channel with ``Ask()`` and sends messages into it; the
consumer test that runs next picks the same channel up with
``Ask.receive()`` (or names its producer with ``Ask.from_(name)``). Messages
are buffered FIFO, never blocking.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from insist.errors import ChannelClosedError, ChannelEmptyError

logger = logging.getLogger(__name__)

NEXT_TEST = "__NEXT__"


@dataclass(frozen=True, slots=True)
class Message:
    data: Any
    timestamp: float


class AskChannel:
    """Unbounded FIFO buffer that can be closed by its producer."""

    def __init__(self, target: str | None = None) -> None:
        self.target = target
        self._buffer: deque[Message] = deque()
        self._closed = False

    def send(self, data: Any) -> None:
        if self._closed:
            raise ChannelClosedError("Cannot send on closed channel")
        self._buffer.append(Message(data=data, timestamp=time.time()))
        logger.info("ask channel sent message (buffer: %d)", len(self._buffer))

    def receive(self) -> Any:
        if not self._buffer:
            if self._closed:
                raise ChannelClosedError("Channel is closed and no messages available")
            raise ChannelEmptyError("No messages available in channel")
        message = self._buffer.popleft()
        logger.info("ask channel received message (buffer: %d)", len(self._buffer))
        return message.data

    def next(self) -> Any:
        return self.receive()

    def peek(self) -> Any:
        """Oldest buffered message without consuming it, or None."""
        if not self._buffer:
            return None
        return self._buffer[0].data

    def has_more(self) -> bool:
        return bool(self._buffer) or not self._closed

    def close(self) -> None:
        self._closed = True
        logger.info("ask channel closed (%d messages remaining)", len(self._buffer))

    def is_closed(self) -> bool:
        return self._closed

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()

    def __iter__(self) -> Iterator[Any]:
        """Drain the messages buffered so far."""
        while self._buffer:
            yield self.receive()

    def __len__(self) -> int:
        return len(self._buffer)


def _channel_key(source: str, target: str) -> str:
    return f"{source}<->{target}"


class ChannelManager:
    """Owns the channels of one test file, keyed by (source, target) test."""

    def __init__(self) -> None:
        self._channels: dict[str, AskChannel] = {}
        self._current_test = ""
        self._test_order: list[str] = []

    @property
    def current_test(self) -> str:
        return self._current_test

    def set_current_test(self, name: str) -> None:
        self._current_test = name
        if name not in self._test_order:
            self._test_order.append(name)

    def create_channel(self, target: str | None = None) -> AskChannel:
        """Open (or reuse) the channel from the current test to ``target``."""
        target = target or NEXT_TEST
        key = _channel_key(self._current_test, target)
        if key not in self._channels:
            self._channels[key] = AskChannel(target)
            logger.info("ask channel created: %s <-> %s", self._current_test, target)
        return self._channels[key]

    def receive_channel(self, source: str | None = None) -> AskChannel:
        """Find the channel feeding the current test.

        Without ``source`` the channel opened by the immediately preceding test
        is used. A receiver that runs before its sender gets a fresh channel the
        sender will later write into.
        """
        if source is None:
            for key, channel in self._channels.items():
                sender, target = key.split("<->", 1)
                if target not in (NEXT_TEST, self._current_test):
                    continue
                if self._is_previous(sender):
                    logger.info("ask channel found: %s", key)
                    return channel

        sender = source or self._previous_test()
        key = _channel_key(sender, self._current_test)
        if key not in self._channels:
            self._channels[key] = AskChannel(self._current_test)
            logger.info(
                "ask channel created (receiver first): %s <-> %s", sender, self._current_test
            )
        return self._channels[key]

    def reset(self) -> None:
        self._channels.clear()
        self._test_order.clear()
        self._current_test = ""

    def _is_previous(self, name: str) -> bool:
        if name not in self._test_order or self._current_test not in self._test_order:
            return False
        return self._test_order.index(self._current_test) == self._test_order.index(name) + 1

    def _previous_test(self) -> str:
        if self._current_test in self._test_order:
            index = self._test_order.index(self._current_test)
            if index > 0:
                return self._test_order[index - 1]
        return f"__prev__{len(self._test_order)}"


class _AskFactory:
    """``Ask()`` opens a channel; ``Ask.receive()`` / ``Ask.from_()`` read one."""

    def __call__(self, target: str | None = None) -> AskChannel:
        return self._manager().create_channel(target)

    def receive(self, source: str | None = None) -> AskChannel:
        return self._manager().receive_channel(source)

    def from_(self, source: str) -> AskChannel:
        return self._manager().receive_channel(source)

    @staticmethod
    def _manager() -> ChannelManager:
        from insist.context import get_run_context

        return get_run_context().channels


Ask = _AskFactory()

__all__ = ["Ask", "AskChannel", "ChannelManager", "Message", "NEXT_TEST"]
