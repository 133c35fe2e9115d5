"""insist - suites, hooks and a matcher vocabulary for retrying, fuzzy and multi-candidate assertions."""

from .assertions import (
    Also,
    ForcedValueWarning,
    Insist,
    Maybe,
    Please,
    Roughly,
    Transform,
    aexpect,
    expect,
)
from .channels import Ask, AskChannel
from .errors import (
    AssertionFailedError,
    ContractViolationError,
    RelayLookupError,
    RetryExhaustedError,
    TestTimeoutError,
)
from .mocking import Mock, Spy, mock
from .relay import clear_sent, receive, send
from .testing import after_all, after_each, before_all, before_each, describe, it, test
from .version import __version__


__all__ = [
    # Registration
    "describe",
    "test",
    "it",
    "before_all",
    "after_all",
    "before_each",
    "after_each",
    # Assertions
    "expect",
    "aexpect",
    "Insist",
    "Transform",
    "Please",
    "Also",
    "Maybe",
    "Roughly",
    "ForcedValueWarning",
    # Collaborators
    "mock",
    "Mock",
    "Spy",
    "Ask",
    "AskChannel",
    "send",
    "receive",
    "clear_sent",
    # Errors
    "AssertionFailedError",
    "ContractViolationError",
    "RelayLookupError",
    "RetryExhaustedError",
    "TestTimeoutError",
]
