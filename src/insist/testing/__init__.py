"""Suite registration, discovery and execution."""

from .discovery import collect_files, load_test_file
from .engine import Runner
from .registrars import after_all, after_each, before_all, before_each, describe, it, test
from .results import SuiteResult, TestResult
from .tree import Registry, Suite, Test, get_registry, registry_scope, reset_default_registry

__all__ = [
    "Registry",
    "Runner",
    "Suite",
    "SuiteResult",
    "Test",
    "TestResult",
    "after_all",
    "after_each",
    "before_all",
    "before_each",
    "collect_files",
    "describe",
    "get_registry",
    "it",
    "load_test_file",
    "registry_scope",
    "reset_default_registry",
    "test",
]
