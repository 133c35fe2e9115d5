"""Project configuration read from ``[tool.insist]`` in pyproject.toml."""

from __future__ import annotations

import logging
import shlex
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

PYPROJECT = "pyproject.toml"


class InsistConfig(BaseModel):
    """Defaults for ``insist test``; command line flags override them."""

    test_paths: list[str] = Field(default_factory=lambda: ["."], description="Files or directories searched")
    keyword: str | None = Field(default=None, description="-k expression applied to full test names")
    verbosity: int = Field(default=0, description="Base verbosity, shifted by -v / -q")
    addopts: list[str] = Field(default_factory=list, description="Extra arguments prepended to argv")
    timeout: float | None = Field(default=None, gt=0, description="Default per-test timeout in ms")
    cancel_on_timeout: bool = Field(default=False, description="Cancel timed out async bodies")
    update_snapshots: bool = Field(default=False, description="Rewrite mismatching snapshots")
    reporter: str = Field(default="ConsoleReporter", description="Reporter name or import string")

    @field_validator("addopts", mode="before")
    @classmethod
    def _split_addopts(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("test_paths", mode="before")
    @classmethod
    def _listify_paths(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value


DEFAULT_CONFIG = InsistConfig()


def find_pyproject(start: Path | None = None) -> Path | None:
    """Nearest pyproject.toml in ``start`` or one of its parents."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PYPROJECT
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> InsistConfig:
    """Load ``[tool.insist]``; missing file or table yields the defaults.

    Raises:
        ValueError: If the table exists but does not validate.
    """
    path = find_pyproject(start)
    if path is None:
        return InsistConfig()

    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Ignoring unparsable %s: %s", path, exc)
        return InsistConfig()

    table = data.get("tool", {}).get("insist", {})
    try:
        return InsistConfig.model_validate(table)
    except ValidationError as exc:
        msg = f"Invalid [tool.insist] in {path}: {exc}"
        raise ValueError(msg) from exc


__all__ = ["DEFAULT_CONFIG", "InsistConfig", "find_pyproject", "load_config"]
