"""Cross-test key/value relay.

One test ``send``s a value under a key, a later test ``receive``s it. Keys are
write-once; ``receive`` accepts dot-separated paths into the stored value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from insist.errors import RelayLookupError

logger = logging.getLogger(__name__)


class RelayOptions(BaseModel):
    """Field projection applied to a value before it is stored.

    ``include`` wins when both are given.
    """

    include: list[str] | None = None
    exclude: list[str] | None = None

    @property
    def is_empty(self) -> bool:
        return self.include is None and self.exclude is None


class RelayStore:
    """Write-once store shared by the tests of a run."""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}

    def send(
        self,
        key: str,
        value: Any,
        *,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> None:
        if key in self._store:
            logger.warning("Key %r has already been sent. Duplicate send() ignored.", key)
            return

        options = RelayOptions(
            include=list(include) if include is not None else None,
            exclude=list(exclude) if exclude is not None else None,
        )
        self._store[key] = value if options.is_empty else _project(value, options)
        logger.debug("relay stored %r", key)

    def receive(self, key: str) -> Any:
        if "." in key:
            return self._receive_path(key)

        if key not in self._store:
            raise RelayLookupError(
                "missing_key",
                f'receive() failed: Key "{key}" was not sent by any previous test',
                key=key,
                path=key,
            )
        return self._store[key]

    def has(self, key: str) -> bool:
        return key in self._store

    def clear(self) -> None:
        self._store.clear()

    def _receive_path(self, path: str) -> Any:
        root, *parts = path.split(".")
        if root not in self._store:
            raise RelayLookupError(
                "missing_key",
                f'receive() failed: Key "{root}" was not sent by any previous test',
                key=root,
                path=path,
            )

        current = self._store[root]
        for part in parts:
            if current is None:
                raise RelayLookupError(
                    "not_traversable",
                    f'receive() failed: Cannot access "{part}" on None at path "{path}"',
                    key=root,
                    path=path,
                )
            found, current = _step(current, part, path, root)
            if not found:
                raise RelayLookupError(
                    "missing_property",
                    f'receive() failed: Property "{part}" does not exist at path "{path}"',
                    key=root,
                    path=path,
                )
        return current


def _step(current: Any, part: str, path: str, root: str) -> tuple[bool, Any]:
    """Descend one path segment; returns (found, value)."""
    if isinstance(current, Mapping):
        if part in current:
            return True, current[part]
        return False, None

    if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
        try:
            return True, current[int(part)]
        except (ValueError, IndexError):
            return False, None

    if isinstance(current, (str, bytes, int, float, bool)):
        raise RelayLookupError(
            "not_traversable",
            f'receive() failed: Cannot access property "{part}" on non-object at path "{path}"',
            key=root,
            path=path,
        )

    if hasattr(current, part):
        return True, getattr(current, part)
    return False, None


def _project(value: Any, options: RelayOptions) -> Any:
    if isinstance(value, list):
        return [_project(item, options) for item in value]

    if not isinstance(value, Mapping):
        return value

    if options.include is not None:
        return {k: value[k] for k in options.include if k in value}
    excluded = set(options.exclude or ())
    return {k: v for k, v in value.items() if k not in excluded}


def send(
    key: str,
    value: Any,
    *,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> None:
    """Store ``value`` under ``key`` for later tests of the same run."""
    from insist.context import get_run_context

    get_run_context().relay.send(key, value, include=include, exclude=exclude)


def receive(key: str) -> Any:
    """Read a value sent by an earlier test; ``key`` may be a dotted path."""
    from insist.context import get_run_context

    return get_run_context().relay.receive(key)


def clear_sent() -> None:
    from insist.context import get_run_context

    get_run_context().relay.clear()


__all__ = ["RelayOptions", "RelayStore", "clear_sent", "receive", "send"]
