"""On-disk snapshot baselines.

Each test file ``insist_foo.py`` owns ``insist_foo.snap.json`` next to it. The
first ``match_snapshot`` for a (test, ordinal) key records the serialized value
as the baseline; later runs compare against it.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import difflib
import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

FUNCTION_MARKER = "[Function]"
SNAPSHOT_SUFFIX = ".snap.json"
NAN_MARKER = "[NaN]"
INFINITY_MARKER = "[Infinity]"
NEGATIVE_INFINITY_MARKER = "[-Infinity]"


@dataclass(frozen=True, slots=True)
class SnapshotMatch:
    passed: bool
    message: str | None = None


def serialize(value: Any) -> Any:
    """Convert ``value`` to the JSON-compatible form stored in baselines."""
    if isinstance(value, float) and not math.isfinite(value):
        # stored as markers so a reloaded NaN still compares equal
        if math.isnan(value):
            return NAN_MARKER
        return INFINITY_MARKER if value > 0 else NEGATIVE_INFINITY_MARKER
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    if isinstance(value, BaseModel):
        return serialize(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return serialize(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {str(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((serialize(v) for v in value), key=repr)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if callable(value):
        return FUNCTION_MARKER
    if hasattr(value, "__dict__"):
        return {k: serialize(v) for k, v in vars(value).items() if not k.startswith("_")}
    return repr(value)


def snapshot_path_for(test_file: Path | str) -> Path:
    path = Path(test_file)
    return path.with_name(path.stem + SNAPSHOT_SUFFIX)


class SnapshotStore:
    """Loads, compares and persists the snapshots of one test file at a time."""

    def __init__(self, *, update: bool = False) -> None:
        self.update = update
        self._snapshots: dict[str, Any] = {}
        self._snapshot_file: Path | None = None
        self._current_test = ""
        self._counts: dict[str, int] = {}

    @property
    def snapshot_file(self) -> Path | None:
        return self._snapshot_file

    def set_snapshot_file(self, test_file: Path | str) -> None:
        self._snapshot_file = snapshot_path_for(test_file)
        self._counts.clear()
        self._snapshots = self._load()

    def set_current_test(self, name: str) -> None:
        self._current_test = name

    def match_snapshot(self, value: Any) -> SnapshotMatch:
        name = self._current_test
        if not name:
            raise RuntimeError(
                "Cannot create snapshot without test name. "
                "Make sure snapshot is called within a test."
            )

        count = self._counts.get(name, 0) + 1
        self._counts[name] = count
        key = name if count == 1 else f"{name} {count}"

        serialized = serialize(value)

        if key not in self._snapshots:
            self._snapshots[key] = serialized
            self._save()
            logger.info("snapshot written: %s", key)
            return SnapshotMatch(passed=True)

        existing = self._snapshots[key]
        if existing == serialized:
            return SnapshotMatch(passed=True)

        if self.update:
            self._snapshots[key] = serialized
            self._save()
            logger.info("snapshot updated: %s", key)
            return SnapshotMatch(passed=True)

        return SnapshotMatch(passed=False, message=_mismatch_message(key, existing, serialized))

    def _load(self) -> dict[str, Any]:
        if self._snapshot_file is None or not self._snapshot_file.exists():
            return {}
        try:
            data = json.loads(self._snapshot_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable snapshot file %s: %s", self._snapshot_file, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring snapshot file %s: top level is not an object", self._snapshot_file)
            return {}
        return data

    def _save(self) -> None:
        if self._snapshot_file is None:
            return
        self._snapshot_file.parent.mkdir(parents=True, exist_ok=True)
        self._snapshot_file.write_text(json.dumps(self._snapshots, indent=2), encoding="utf-8")


def _mismatch_message(key: str, expected: Any, received: Any) -> str:
    expected_text = json.dumps(expected, indent=2)
    received_text = json.dumps(received, indent=2)
    diff = "\n".join(
        difflib.unified_diff(
            expected_text.splitlines(),
            received_text.splitlines(),
            fromfile="snapshot",
            tofile="received",
            lineterm="",
        )
    )
    return (
        f'Snapshot mismatch for "{key}"\n'
        f"Expected: {expected_text}\n"
        f"Received: {received_text}\n"
        f"{diff}"
    )


__all__ = ["SnapshotMatch", "SnapshotStore", "serialize", "snapshot_path_for"]
