"""Resolvers that turn a path identifier into a runnable factory."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import os
import re
import sys

from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, Optional, Protocol, Tuple

from runnerkit.configuration import DEFAULT_EXPORT
from runnerkit.exceptions import (
    MissingDefaultExportError,
    RunnableNotFoundError,
)
from runnerkit.types import RunnableFactory

LOGGER = logging.getLogger(__name__)
_MISSING = object()


class UnitResolver(Protocol):
    def resolve(self, path: str) -> RunnableFactory:
        """Return the zero-argument factory exported under ``path``."""
        ...


def _split_export(path: str, default_export: str) -> Tuple[str, str]:
    target, sep, attr = path.rpartition(":")
    if sep and target and attr.isidentifier():
        return target, attr
    return path, default_export


def _looks_like_file(target: str) -> bool:
    return (
        "/" in target
        or os.sep in target
        or target.startswith(".")
        or target.startswith("~")
        or target.endswith(".py")
    )


def _module_name_for(file_path: Path) -> str:
    digest = hashlib.sha1(
        str(file_path).encode("utf-8"), usedforsecurity=False
    ).hexdigest()[:10]
    if file_path.name == "__init__.py":
        stem = file_path.parent.name
    else:
        stem = file_path.stem
    stem = re.sub(r"\W", "_", stem)
    return f"runnerkit_unit_{stem}_{digest}"


class ImportResolver:
    """Loads units from dotted module names or Python files.

    Filesystem targets are resolved relative to ``base_dir`` and may omit
    the ``.py`` suffix; a directory resolves to its ``__init__.py``. The
    default export is the module attribute named ``default_export`` unless
    the path ends in ``:attr``.
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        *,
        default_export: str = DEFAULT_EXPORT,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.default_export = default_export

    def resolve(self, path: str) -> RunnableFactory:
        target, attr = _split_export(path, self.default_export)
        if _looks_like_file(target):
            module = self._import_file(path, target)
        else:
            module = self._import_dotted(path, target)
        factory = getattr(module, attr, _MISSING)
        if factory is _MISSING:
            raise MissingDefaultExportError(
                path,
                f"Module {path} does not export a default runnable "
                f"(expected attribute '{attr}').",
            )
        return factory

    def _candidates(self, target: str) -> Tuple[Path, ...]:
        candidate = Path(target).expanduser()
        if not candidate.is_absolute():
            candidate = (self.base_dir or Path.cwd()) / candidate
        candidates = [candidate]
        # The filesystem root has no name to append a suffix to.
        if candidate.name:
            candidates.append(candidate.with_name(candidate.name + ".py"))
        candidates.append(candidate / "__init__.py")
        return tuple(candidates)

    def _import_file(self, path: str, target: str) -> ModuleType:
        file_path = next(
            (item for item in self._candidates(target) if item.is_file()),
            None,
        )
        if file_path is None:
            raise RunnableNotFoundError(
                path, f"Cannot find runnable module '{path}'"
            )
        file_path = file_path.resolve()
        module_name = _module_name_for(file_path)
        cached = sys.modules.get(module_name)
        if cached is not None:
            return cached

        search_locations = (
            [str(file_path.parent)]
            if file_path.name == "__init__.py"
            else None
        )
        spec = importlib.util.spec_from_file_location(
            module_name,
            file_path,
            submodule_search_locations=search_locations,
        )
        if spec is None or spec.loader is None:
            raise RunnableNotFoundError(
                path, f"Cannot load runnable module from {file_path}"
            )
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        LOGGER.debug("Imported %s from %s", path, file_path)
        return module

    def _import_dotted(self, path: str, target: str) -> ModuleType:
        try:
            return importlib.import_module(target)
        except ModuleNotFoundError as exc:
            # Only a miss on the target itself counts; a missing dependency
            # imported by the unit's own module propagates unchanged.
            missing = exc.name or ""
            if missing and (
                target == missing or target.startswith(missing + ".")
            ):
                raise RunnableNotFoundError(
                    path, f"Cannot find runnable module '{path}'"
                ) from exc
            raise
        except ValueError as exc:
            raise RunnableNotFoundError(
                path, f"Invalid runnable module name '{path}': {exc}"
            ) from exc


class RegistryResolver:
    """Keeps track of runnable factories by name."""

    _instance: "RegistryResolver | None" = None

    def __init__(self) -> None:
        self._registry: Dict[str, RunnableFactory] = {}

    @classmethod
    def get_registry(cls) -> "RegistryResolver":
        if cls._instance is None:
            cls._instance = RegistryResolver()
        return cls._instance

    def register(self, name: str, factory: RunnableFactory) -> None:
        self._registry[name] = factory

    def unregister(self, name: str) -> None:
        self._registry.pop(name, None)

    def get(self, name: str) -> Optional[RunnableFactory]:
        return self._registry.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def resolve(self, path: str) -> RunnableFactory:
        factory = self._registry.get(path)
        if factory is None:
            raise RunnableNotFoundError(
                path, f"No runnable registered under '{path}'"
            )
        return factory


class ChainResolver:
    """Tries each resolver in turn; the first one that finds ``path`` wins."""

    def __init__(self, *resolvers: UnitResolver) -> None:
        if not resolvers:
            raise ValueError("ChainResolver needs at least one resolver")
        self.resolvers = resolvers

    def resolve(self, path: str) -> RunnableFactory:
        last_error: Optional[RunnableNotFoundError] = None
        for resolver in self.resolvers:
            try:
                return resolver.resolve(path)
            except RunnableNotFoundError as exc:
                last_error = exc
        assert last_error is not None
        raise last_error


def runnable(
    name: str, *, registry: Optional[RegistryResolver] = None
) -> Callable[[type], type]:
    """Class decorator registering a runnable under ``name``."""

    def decorator(cls: type) -> type:
        (registry or RegistryResolver.get_registry()).register(name, cls)
        return cls

    return decorator


def default_resolver(
    base_dir: Optional[Path] = None,
    *,
    default_export: str = DEFAULT_EXPORT,
) -> UnitResolver:
    """Registered names first, then dynamic imports."""

    return ChainResolver(
        RegistryResolver.get_registry(),
        ImportResolver(base_dir, default_export=default_export),
    )


__all__ = [
    "ChainResolver",
    "ImportResolver",
    "RegistryResolver",
    "UnitResolver",
    "default_resolver",
    "runnable",
]
