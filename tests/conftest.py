"""Expose the project root on sys.path and provide shared fixtures."""

from __future__ import annotations

import logging
import sys
import textwrap

from pathlib import Path
from typing import Callable, List, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from runnerkit.runtime import (  # noqa: E402
    ChainResolver,
    ImportResolver,
    RegistryResolver,
)
from runnerkit.types import RunnerOptions  # noqa: E402
from tests.units import events  # noqa: E402


@pytest.fixture(autouse=True)
def reset_events():
    """Every test starts with an empty event log."""

    events.reset()
    yield
    events.reset()


@pytest.fixture(autouse=True)
def restore_logging():
    """CLI runs adjust logger levels and attach file handlers; undo both."""

    root = logging.getLogger()
    package = logging.getLogger("runnerkit")
    root_level, package_level = root.level, package.level
    package_handlers = list(package.handlers)
    yield
    for handler in list(package.handlers):
        if handler not in package_handlers:
            package.removeHandler(handler)
            handler.close()
    root.setLevel(root_level)
    package.setLevel(package_level)


@pytest.fixture()
def registry() -> RegistryResolver:
    return RegistryResolver()


@pytest.fixture()
def resolver(tmp_path: Path, registry: RegistryResolver) -> ChainResolver:
    """Isolated resolver: private registry first, then imports."""

    return ChainResolver(registry, ImportResolver(tmp_path))


class FatalRecorder:
    """Stand-in for the process-exit policy that only records calls."""

    def __init__(self) -> None:
        self.calls: List[Tuple[RunnerOptions, Exception]] = []

    def __call__(self, options: RunnerOptions, error: Exception) -> None:
        self.calls.append((options, error))


@pytest.fixture()
def fatal() -> FatalRecorder:
    return FatalRecorder()


@pytest.fixture()
def write_unit(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a Python unit file below ``tmp_path`` and return its path."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write
