"""Reporting module for insist test output."""

from insist.reports.base import Reporter
from insist.reports.console import ConsoleReporter
from insist.reports.registry import (
    clear_reporter_registry,
    get_reporter_registry,
    reporter,
    resolve_reporter,
)

__all__ = [
    "ConsoleReporter",
    "Reporter",
    "clear_reporter_registry",
    "get_reporter_registry",
    "reporter",
    "resolve_reporter",
]
