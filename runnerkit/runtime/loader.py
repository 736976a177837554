"""Loads, validates and configures runnable units."""

from __future__ import annotations

import inspect
import logging

from typing import Any, Optional

from runnerkit.exceptions import InvalidRunnerShapeError
from runnerkit.types import Runnable, missing_operations

from .resolvers import UnitResolver, default_resolver

LOGGER = logging.getLogger(__name__)


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ModuleLoader:
    """Turns a path into a configured, ready-to-run instance.

    The loader keeps no state of its own: every call instantiates and
    configures a fresh object, even for a path that was loaded before.
    Errors from resolution, instantiation and ``configure`` propagate to
    the caller unchanged.
    """

    def __init__(self, resolver: Optional[UnitResolver] = None) -> None:
        self.resolver = resolver or default_resolver()

    async def load(self, path: str) -> Runnable:
        factory = self.resolver.resolve(path)
        if not callable(factory):
            raise InvalidRunnerShapeError(
                path,
                f"The default export of '{path}' is not constructible "
                f"({type(factory).__name__}).",
            )
        runnable = factory()
        missing = missing_operations(runnable)
        if missing:
            raise InvalidRunnerShapeError(
                path,
                f"The runnable object from '{path}' does not match the "
                f"Runnable interface (missing: {', '.join(missing)}).",
            )
        LOGGER.debug("Configuring %s", path)
        await maybe_await(runnable.configure())
        return runnable


__all__ = ["ModuleLoader", "maybe_await"]
