"""Identity and structural equality used by matchers and call recorders."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence, Set
from numbers import Real
from typing import Any

_PRIMITIVES = (str, bytes, int, float, complex, bool, type(None))


def is_number(value: Any) -> bool:
    """Real numbers, excluding bools."""
    return isinstance(value, Real) and not isinstance(value, bool)


def same_value(a: Any, b: Any) -> bool:
    """Identity comparison with SameValue semantics.

    NaN is the same as NaN, ``0.0`` and ``-0.0`` differ, ``True`` is not ``1``
    and numbers compare by value regardless of int/float. Other primitives
    compare by value; everything else must be the same object.
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if is_number(a) and is_number(b):
        fa, fb = float(a), float(b)
        if math.isnan(fa) and math.isnan(fb):
            return True
        if fa == 0 and fb == 0:
            return math.copysign(1.0, fa) == math.copysign(1.0, fb)
        return a == b
    if isinstance(a, _PRIMITIVES) and type(a) is type(b):
        return a == b
    return False


def deep_equal(a: Any, b: Any) -> bool:
    """Recursive structural equality over mappings, sequences and objects."""
    if same_value(a, b):
        return True
    if a is None or b is None:
        return False

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)

    if _is_sequence(a) and _is_sequence(b):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, Set) and isinstance(b, Set):
        return a == b

    if isinstance(a, _PRIMITIVES) or isinstance(b, _PRIMITIVES):
        return False

    attrs_a, attrs_b = _attributes(a), _attributes(b)
    if attrs_a is not None and attrs_b is not None:
        return deep_equal(attrs_a, attrs_b)

    return a == b


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _attributes(value: Any) -> dict[str, Any] | None:
    if hasattr(value, "__dict__"):
        return dict(vars(value))
    slots = getattr(type(value), "__slots__", None)
    if slots:
        names = [slots] if isinstance(slots, str) else list(slots)
        return {name: getattr(value, name) for name in names if hasattr(value, name)}
    return None


__all__ = ["deep_equal", "is_number", "same_value"]
