"""CLI module for the insist test runner."""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.logging import RichHandler

from insist.config import InsistConfig, load_config
from insist.reports import Reporter, resolve_reporter
from insist.session import run_paths
from insist.version import __version__


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the insist CLI."""
    config = load_config()
    parser = _build_parser()
    raw = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args([*config.addopts, *raw] if config.addopts else raw)

    if args.command == "test":
        exit_code = asyncio.run(_run_tests(args, config))
        raise SystemExit(exit_code)

    parser.print_help()
    raise SystemExit(0)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="insist", description="insist test runner")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    test_parser = subparsers.add_parser("test", help="Run insist_*.py test files")
    test_parser.add_argument("paths", nargs="*", help="Test files or directories")
    test_parser.add_argument("-k", "--keyword", help="Filter tests by keyword expression")
    test_parser.add_argument(
        "--timeout",
        type=float,
        help="Default per-test timeout in milliseconds (async tests only)",
    )
    test_parser.add_argument(
        "--cancel-on-timeout",
        action="store_true",
        default=None,
        help="Cancel a timed out test body instead of letting it finish in the background",
    )
    test_parser.add_argument(
        "-u",
        "--update-snapshots",
        action="store_true",
        default=None,
        help="Rewrite snapshots that do not match",
    )
    test_parser.add_argument("--reporter", help="Reporter name or import string")
    test_parser.add_argument("-q", "--quiet", action="count", default=0, help="Reduce CLI output")
    test_parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase CLI output"
    )
    return parser


def _resolve_paths(args: argparse.Namespace, config: InsistConfig) -> list[str]:
    if args.paths:
        return args.paths
    return config.test_paths


def _resolve_keyword(args: argparse.Namespace, config: InsistConfig) -> str | None:
    return args.keyword or config.keyword


def _resolve_verbosity(args: argparse.Namespace, config: InsistConfig) -> int:
    return config.verbosity + args.verbose - args.quiet


def _resolve_timeout(args: argparse.Namespace, config: InsistConfig) -> float | None:
    if args.timeout is not None:
        return args.timeout if args.timeout > 0 else None
    return config.timeout


def _resolve_flag(value: bool | None, default: bool) -> bool:
    return default if value is None else value


def _resolve_reporter(args: argparse.Namespace, config: InsistConfig, verbosity: int) -> Reporter:
    return resolve_reporter(args.reporter or config.reporter, verbosity=verbosity)


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


async def _run_tests(args: argparse.Namespace, config: InsistConfig) -> int:
    console = Console()
    verbosity = _resolve_verbosity(args, config)
    _configure_logging(verbosity)

    keyword = _resolve_keyword(args, config)
    select: Callable[[str], bool] | None = None
    if keyword:
        try:
            select = KeywordMatcher(keyword).match
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            return 2

    try:
        reporter = _resolve_reporter(args, config, verbosity)
    except (ValueError, TypeError, ImportError, AttributeError) as exc:
        console.print(f"[red]{exc}[/red]")
        return 2

    try:
        run_result = await run_paths(
            _resolve_paths(args, config),
            reporter=reporter,
            select=select,
            timeout=_resolve_timeout(args, config),
            cancel_on_timeout=_resolve_flag(args.cancel_on_timeout, config.cancel_on_timeout),
            update_snapshots=_resolve_flag(args.update_snapshots, config.update_snapshots),
        )
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        return 2

    return 0 if run_result.ok else 1


_TOKEN = re.compile(r"\"[^\"]*\"|'[^']*'|[()]|[^\s()]+")
_OPERATORS = {"and", "or", "not"}

# Parsed expression: a lowercase substring, or ("not", x) / ("and", x, y) / ("or", x, y).
Expr = str | tuple


class KeywordMatcher:
    """pytest-style ``-k`` expression over full test names.

    Terms are case-insensitive substrings; ``not`` binds tighter than ``and``,
    which binds tighter than ``or``; parentheses group. Quote a term to match
    text containing spaces or operator words.
    """

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._tokens = _TOKEN.findall(expression)
        self._pos = 0
        self.tree = self._expr()
        if self._pos < len(self._tokens):
            raise ValueError(f"Invalid keyword expression: {expression!r}")

    def match(self, text: str) -> bool:
        return _evaluate(self.tree, text.lower())

    def _next_is(self, word: str) -> bool:
        return self._pos < len(self._tokens) and self._tokens[self._pos].lower() == word

    def _take(self) -> str:
        if self._pos >= len(self._tokens):
            raise ValueError(f"Unexpected end of keyword expression: {self.expression!r}")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _expr(self) -> Expr:
        node = self._conjunction()
        while self._next_is("or"):
            self._take()
            node = ("or", node, self._conjunction())
        return node

    def _conjunction(self) -> Expr:
        node = self._negation()
        while self._next_is("and"):
            self._take()
            node = ("and", node, self._negation())
        return node

    def _negation(self) -> Expr:
        if self._next_is("not"):
            self._take()
            return ("not", self._negation())
        return self._atom()

    def _atom(self) -> Expr:
        token = self._take()
        if token == "(":
            node = self._expr()
            if not self._next_is(")"):
                raise ValueError(f"Unmatched '(' in keyword expression: {self.expression!r}")
            self._take()
            return node
        if token == ")" or token.lower() in _OPERATORS:
            raise ValueError(f"Unexpected {token!r} in keyword expression: {self.expression!r}")
        if token[0] in "\"'":
            token = token[1:-1]
        return token.lower()


def _evaluate(node: Expr, text: str) -> bool:
    match node:
        case str():
            return node in text
        case ("not", operand):
            return not _evaluate(operand, text)
        case ("and", left, right):
            return _evaluate(left, text) and _evaluate(right, text)
        case ("or", left, right):
            return _evaluate(left, text) or _evaluate(right, text)
    raise ValueError(f"Malformed keyword expression node: {node!r}")


__all__ = ["KeywordMatcher", "main"]
