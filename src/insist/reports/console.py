"""Console reporter rendering results with rich."""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from insist.errors import AssertionFailedError
from insist.reports.registry import register_builtin

if TYPE_CHECKING:
    from insist.session import FileResult, RunResult
    from insist.testing.results import SuiteResult, TestResult

_PACKAGE_DIR = Path(__file__).resolve().parent.parent
MAX_STACK_FRAMES = 3


def user_frames(error: BaseException, limit: int = MAX_STACK_FRAMES) -> list[traceback.FrameSummary]:
    """Innermost traceback frames that do not belong to the insist package."""
    frames = [
        frame
        for frame in traceback.extract_tb(error.__traceback__)
        if not Path(frame.filename).resolve().is_relative_to(_PACKAGE_DIR)
    ]
    return frames[-limit:]


@register_builtin
class ConsoleReporter:
    """Tree view of suites and tests, failures inline, summary at the end.

    Args:
        verbosity: Below 0 hides passing tests; above 0 shows durations.
        console: Console to print to; a new stdout console by default.
    """

    def __init__(self, verbosity: int = 0, console: Console | None = None) -> None:
        self.verbosity = verbosity
        self.console = console or Console(highlight=False)

    async def on_no_tests_found(self) -> None:
        self.console.print("[yellow]No tests found.[/yellow]")

    async def on_file_complete(self, result: FileResult) -> None:
        self.console.print()
        self.console.print(f"[bold]{escape(_display_path(result.path))}[/bold]")
        for suite in result.suites:
            self._print_suite(suite, 1)

    async def on_file_error(self, result: FileResult) -> None:
        self.console.print()
        self.console.print(f"[bold red]✗ {escape(_display_path(result.path))}[/bold red]")
        if result.error is not None:
            self._print_error(result.error, 1)

    async def on_run_complete(self, run_result: RunResult) -> None:
        parts = []
        if run_result.failed:
            parts.append(f"[red]{run_result.failed} failed[/red]")
        parts.append(f"[green]{run_result.passed} passed[/green]")
        if run_result.skipped:
            parts.append(f"[yellow]{run_result.skipped} skipped[/yellow]")
        parts.append(f"{run_result.total} total")

        self.console.print()
        if run_result.errors:
            self.console.print(f"Files: [red]{run_result.errors} failed to run[/red]")
        self.console.print(f"Tests: {', '.join(parts)}")
        if self.verbosity > 0:
            self.console.print(f"[dim]Time: {run_result.duration_ms / 1000:.2f}s[/dim]")

    def _print_suite(self, suite: SuiteResult, indent: int) -> None:
        if suite.name:
            ok = suite.failed == 0
            color, symbol = ("green", "✓") if ok else ("red", "✗")
            self.console.print(f"{'  ' * indent}[{color}]{symbol} {escape(suite.name)}[/{color}]")
            indent += 1
        for test in suite.tests:
            self._print_test(test, indent)
        for child in suite.suites:
            self._print_suite(child, indent)

    def _print_test(self, test: TestResult, indent: int) -> None:
        pad = "  " * indent
        name = escape(test.name)
        if test.skipped:
            if self.verbosity >= 0:
                self.console.print(f"{pad}[yellow]○[/yellow] [dim]{name} (skipped)[/dim]")
            return
        if test.passed:
            if self.verbosity >= 0:
                timing = f" [dim]({test.duration_ms:.0f}ms)[/dim]" if self.verbosity > 0 else ""
                self.console.print(f"{pad}[green]✓[/green] [dim]{name}[/dim]{timing}")
            return
        self.console.print(f"{pad}[red]✗[/red] {name}")
        if test.error is not None:
            self._print_error(test.error, indent + 1)

    def _print_error(self, error: BaseException, indent: int) -> None:
        pad = "  " * indent
        result = error.result if isinstance(error, AssertionFailedError) else None
        if result is not None and result.expected is not None and not result.negated:
            self.console.print(f"{pad}[red]Expected:[/red] {escape(result.expected)}")
            self.console.print(f"{pad}[red]Received:[/red] {escape(result.actual)}")
        message = str(error) or type(error).__name__
        if not isinstance(error, AssertionError):
            message = f"{type(error).__name__}: {message}"
        for line in message.splitlines():
            self.console.print(f"{pad}[red]{escape(line)}[/red]")
        for frame in user_frames(error):
            self.console.print(
                f"{pad}[dim]at {escape(frame.name)} ({escape(frame.filename)}:{frame.lineno})[/dim]"
            )


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


__all__ = ["ConsoleReporter", "user_frames"]
