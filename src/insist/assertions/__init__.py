"""Assertion resolution: deferred values, matchers and fuzzy comparison."""

from .equality import deep_equal, same_value
from .expect import Expectation, aexpect, expect
from .fuzzy import Roughly, levenshtein, roughly_equal
from .matchers import CallTracking, Matchers
from .wrappers import Also, ForcedValueWarning, Insist, Maybe, Please, Transform

__all__ = [
    "Also",
    "CallTracking",
    "Expectation",
    "ForcedValueWarning",
    "Insist",
    "Matchers",
    "Maybe",
    "Please",
    "Roughly",
    "Transform",
    "aexpect",
    "deep_equal",
    "expect",
    "levenshtein",
    "roughly_equal",
    "same_value",
]
