"""Typed helpers for parsing runnerkit configuration dictionaries."""

from __future__ import annotations

import importlib
import logging
import sys

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from runnerkit.exceptions import RunnerConfigError
from runnerkit.types import ActionEntry, ParallelGroup, RunnerOptions

DEFAULT_EXPORT = "default"
LOGGER = logging.getLogger(__name__)


def _ensure_path(
    value: Optional[str | Path],
    *,
    config_root: Path,
    default: Optional[Path] = None,
) -> Path:
    if value is None:
        if default is None:
            raise RunnerConfigError("Path value is required")
        return default
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (config_root / path).resolve()
    return path


def _as_list(value: Any) -> list:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass(frozen=True)
class PluginSettings:
    paths: Tuple[Path, ...] = field(default_factory=tuple)
    modules: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RunnerSettings:
    base_dir: Path = field(default_factory=Path.cwd)
    default_export: str = DEFAULT_EXPORT
    plugins: PluginSettings = field(default_factory=PluginSettings)


def build_runner_settings(
    config: Dict[str, Any], *, config_root: Path
) -> RunnerSettings:
    runner_cfg = config.get("runner") or {}
    if not isinstance(runner_cfg, Mapping):
        raise RunnerConfigError("'runner' section must be a mapping")
    base_dir = _ensure_path(
        runner_cfg.get("base_dir"),
        config_root=config_root,
        default=config_root.resolve(),
    )
    plugin_cfg = runner_cfg.get("plugins") or {}
    plugins = PluginSettings(
        paths=tuple(
            _ensure_path(item, config_root=config_root)
            for item in _as_list(plugin_cfg.get("paths"))
        ),
        modules=tuple(
            str(item) for item in _as_list(plugin_cfg.get("modules")) if item
        ),
    )
    return RunnerSettings(
        base_dir=base_dir,
        default_export=str(
            runner_cfg.get("default_export") or DEFAULT_EXPORT
        ),
        plugins=plugins,
    )


def import_plugin_modules(plugins: PluginSettings) -> None:
    """Extend ``sys.path`` and import modules that register runnables."""

    for path in plugins.paths:
        if not path.exists():
            raise RunnerConfigError(f"Plugin path '{path}' does not exist")
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))
    for dotted in plugins.modules:
        try:
            importlib.import_module(dotted)
        except Exception as exc:
            raise RunnerConfigError(
                f"Failed to import plugin module '{dotted}': {exc}"
            ) from exc
        LOGGER.debug("Imported plugin module %s", dotted)


def build_runner_options(
    value: RunnerOptions | Mapping[str, Any],
) -> RunnerOptions:
    if isinstance(value, RunnerOptions):
        return value
    if not isinstance(value, Mapping):
        raise RunnerConfigError(
            f"Runner options must be a mapping, got {type(value).__name__}"
        )
    args = value.get("args")
    if args is not None and not isinstance(args, (list, tuple)):
        raise RunnerConfigError(
            f"args for '{value.get('path')}' must be a list of strings"
        )
    return RunnerOptions(
        path=value.get("path") or "",
        args=tuple(args) if args is not None else None,
        forever=bool(value.get("forever", False)),
    )


def build_action_entry(
    value: ActionEntry | Mapping[str, Any],
) -> ActionEntry:
    """Coerce a plain mapping into ``RunnerOptions`` or ``ParallelGroup``.

    Any mapping carrying a ``parallelism`` key is a group, even when the
    group is empty or null; such a group is later skipped.
    """

    if isinstance(value, (RunnerOptions, ParallelGroup)):
        return value
    if isinstance(value, Mapping) and "parallelism" in value:
        group = value.get("parallelism") or []
        if not isinstance(group, (list, tuple)):
            raise RunnerConfigError("'parallelism' must be a list of options")
        return ParallelGroup(
            parallelism=tuple(build_runner_options(item) for item in group)
        )
    return build_runner_options(value)


def build_actions(
    actions: Optional[Mapping[str, Any]],
) -> Dict[str, ActionEntry]:
    if not actions:
        return {}
    if not isinstance(actions, Mapping):
        raise RunnerConfigError("'actions' must be a mapping of names")
    built: Dict[str, ActionEntry] = {}
    for name, value in actions.items():
        try:
            built[str(name)] = build_action_entry(value)
        except RunnerConfigError as exc:
            raise RunnerConfigError(f"Action '{name}': {exc}") from exc
    return built


def select_actions(
    actions: Mapping[str, ActionEntry], names: Iterable[str]
) -> Dict[str, ActionEntry]:
    """Keep only ``names`` (in the order given), failing on unknown ones."""

    selected: Dict[str, ActionEntry] = {}
    for name in names:
        if name not in actions:
            raise RunnerConfigError(f"Unknown action '{name}'")
        selected[name] = actions[name]
    return selected


__all__ = [
    "DEFAULT_EXPORT",
    "PluginSettings",
    "RunnerSettings",
    "build_action_entry",
    "build_actions",
    "build_runner_options",
    "build_runner_settings",
    "import_plugin_modules",
    "select_actions",
]
