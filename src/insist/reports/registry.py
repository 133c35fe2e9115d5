"""Name -> class lookup behind ``--reporter``.

Reporters register themselves with ``@reporter``; the CLI resolves the name
given on the command line (or in ``[tool.insist]``) to an instance. Names
that are not registered are tried as import strings, so a project can point
at its own class without registering it.
"""

from __future__ import annotations

import logging
import pkgutil
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from insist.reports.base import Reporter

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Reporter")


class ReporterRegistry:
    """Registered reporter classes; built-ins survive ``reset()``."""

    def __init__(self) -> None:
        self._classes: dict[str, type[Reporter]] = {}
        self._builtins: dict[str, type[Reporter]] = {}

    def add(self, key: str, cls: type[Reporter], *, builtin: bool = False) -> None:
        if key in self._classes and self._classes[key] is not cls:
            logger.debug("reporter %s re-registered as %s", key, cls.__qualname__)
        self._classes[key] = cls
        if builtin:
            self._builtins[key] = cls

    def reset(self) -> None:
        self._classes.clear()
        self._classes.update(self._builtins)

    def view(self) -> Mapping[str, type[Reporter]]:
        return self._classes

    def lookup(self, name: str) -> type[Reporter]:
        """Registered class for ``name``, else the class its import string points at.

        Raises:
            ValueError: ``name`` is neither registered nor an import string.
            TypeError: The imported object is not a reporter class.
        """
        if name in self._classes:
            return self._classes[name]
        if "." not in name and ":" not in name:
            known = ", ".join(sorted(self._classes))
            raise ValueError(f"Unknown reporter: {name}. Available: {known}")

        target = pkgutil.resolve_name(name)

        from insist.reports.base import Reporter

        if not (isinstance(target, type) and issubclass(target, Reporter)):
            raise TypeError(f"{name} is not a Reporter")
        return target


_registry = ReporterRegistry()


def reporter(
    cls: type[R] | None = None,
    *,
    enabled: bool = True,
    name: str | None = None,
) -> type[R] | Any:
    """Class decorator making a reporter selectable by name.

    Usable bare (``@reporter``) or configured
    (``@reporter(name="json")``, ``@reporter(enabled=False)``).
    """

    def register(target: type[R]) -> type[R]:
        if enabled:
            _registry.add(name or target.__name__, target)
        return target

    return register if cls is None else register(cls)


def register_builtin(cls: type[R]) -> type[R]:
    _registry.add(cls.__name__, cls, builtin=True)
    return cls


def get_reporter_registry() -> Mapping[str, type[Reporter]]:
    return _registry.view()


def clear_reporter_registry() -> None:
    """Forget user-registered reporters."""
    _registry.reset()


def resolve_reporter(name: str, **kwargs: Any) -> Reporter:
    """Instantiate the reporter ``name`` refers to with ``kwargs``."""
    return _registry.lookup(name)(**kwargs)


__all__ = [
    "ReporterRegistry",
    "clear_reporter_registry",
    "get_reporter_registry",
    "register_builtin",
    "reporter",
    "resolve_reporter",
]
