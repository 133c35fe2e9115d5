"""Test file discovery and loading."""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from insist.testing.tree import Registry, registry_scope

TEST_FILE_PREFIX = "insist_"
_SKIP_DIRS = {"__pycache__", "node_modules", "venv", "site-packages"}


def is_test_file(path: Path) -> bool:
    return path.name.startswith(TEST_FILE_PREFIX) and path.suffix == ".py"


def _skipped_dir(path: Path, root: Path) -> bool:
    for part in path.relative_to(root).parts[:-1]:
        if part.startswith(".") or part in _SKIP_DIRS:
            return True
    return False


def collect_files(paths: Iterable[Path | str] | Path | str | None = None) -> list[Path]:
    """Return the ``insist_*.py`` files under ``paths``, sorted and de-duplicated.

    Args:
        paths: Files or directories to search. Defaults to the current directory.

    Returns:
        Absolute paths. Hidden directories, ``__pycache__`` and virtualenvs are not searched.
    """
    if paths is None:
        paths = [Path.cwd()]
    elif isinstance(paths, (str, Path)):
        paths = [paths]

    found: list[Path] = []
    for raw in paths:
        path = Path(raw).resolve()
        if path.is_file():
            if is_test_file(path):
                found.append(path)
        elif path.is_dir():
            found.extend(
                file_path
                for file_path in sorted(path.rglob(f"{TEST_FILE_PREFIX}*.py"))
                if not _skipped_dir(file_path, path)
            )
        else:
            raise FileNotFoundError(f"No such file or directory: {raw}")

    return list(dict.fromkeys(found))


def _load_module(path: Path) -> ModuleType:
    module_name = f"insist_tests.{path.stem}_{abs(hash(path))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not create module spec for: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_test_file(path: Path, registry: Registry) -> ModuleType:
    """Import ``path`` with ``registry`` as the registration target."""
    with registry_scope(registry):
        return _load_module(path)


__all__ = ["TEST_FILE_PREFIX", "collect_files", "is_test_file", "load_test_file"]
