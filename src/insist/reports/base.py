"""Base reporter protocol for insist test output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from insist.session import FileResult, RunResult


@runtime_checkable
class Reporter(Protocol):
    """Protocol defining the interface for test reporters.

    All methods are async to support I/O-bound reporters (file output, sockets, etc.).
    Sync reporters can implement these as regular coroutines that don't await anything.
    """

    async def on_no_tests_found(self) -> None:
        """Called when discovery finds no test files."""
        ...

    async def on_file_complete(self, result: FileResult) -> None:
        """Called after every suite of a test file has run."""
        ...

    async def on_file_error(self, result: FileResult) -> None:
        """Called when a file failed to load or aborted in a suite hook."""
        ...

    async def on_run_complete(self, run_result: RunResult) -> None:
        """Called after all files ran."""
        ...
