"""Approximate matching: edit distance for strings, relative tolerance for numbers."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import Any

from insist.assertions.equality import is_number

DEFAULT_DISTANCE = 2
DEFAULT_TOLERANCE = 0.1


def levenshtein(a: str, b: str) -> int:
    """Minimum single-character inserts, deletes and substitutions turning a into b."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


class Roughly:
    """Expected string that tolerates up to ``distance`` edits."""

    __slots__ = ("target", "distance")

    def __init__(self, target: str, distance: int | None = None) -> None:
        if not isinstance(target, str):
            raise TypeError(f"Roughly expects a string target, got {type(target).__name__}")
        distance = DEFAULT_DISTANCE if distance is None else distance
        if distance < 0:
            raise ValueError(f"distance must be >= 0, got {distance}")
        self.target = target
        self.distance = distance

    def distance_to(self, candidate: str) -> int:
        return levenshtein(self.target, candidate)

    def matches(self, candidate: Any) -> bool:
        if not isinstance(candidate, str):
            return False
        return self.distance_to(candidate) <= self.distance

    def __repr__(self) -> str:
        return f"Roughly({self.target!r}, distance={self.distance})"


def roughly_equal(
    a: Any,
    b: Any,
    tolerance: float = DEFAULT_TOLERANCE,
    ignore_keys: Collection[str] = (),
) -> bool:
    """Structural equality where numeric leaves may drift proportionally.

    Two numbers pass when ``|a - b| <= tolerance * (|a| + |b|) / 2``. Mappings
    must share the same keys once ``ignore_keys`` are removed; sequences are
    compared element-wise; every other leaf must be equal.
    """
    if is_number(a) and is_number(b):
        diff = abs(a - b)
        avg = (abs(a) + abs(b)) / 2
        return diff <= avg * tolerance

    if a is None or b is None:
        return a is b

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        ignored = set(ignore_keys)
        keys_a = [k for k in a if k not in ignored]
        keys_b = {k for k in b if k not in ignored}
        if len(keys_a) != len(keys_b):
            return False
        return all(
            k in keys_b and roughly_equal(a[k], b[k], tolerance, ignore_keys) for k in keys_a
        )

    if _is_sequence(a) and _is_sequence(b):
        if len(a) != len(b):
            return False
        return all(roughly_equal(x, y, tolerance, ignore_keys) for x, y in zip(a, b))

    if type(a) is not type(b):
        return False

    if hasattr(a, "__dict__") and hasattr(b, "__dict__"):
        return roughly_equal(vars(a), vars(b), tolerance, ignore_keys)

    return a == b


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


__all__ = ["DEFAULT_DISTANCE", "DEFAULT_TOLERANCE", "Roughly", "levenshtein", "roughly_equal"]
