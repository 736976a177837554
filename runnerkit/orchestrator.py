"""Runner orchestrator: single, parallel and action-map execution."""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from runnerkit.configuration import (
    DEFAULT_EXPORT,
    build_action_entry,
    build_runner_options,
)
from runnerkit.runtime import (
    ExecutionDriver,
    FatalHandler,
    ModuleLoader,
    UnitResolver,
    default_resolver,
)
from runnerkit.types import ParallelGroup, Runnable, RunnerOptions

LOGGER = logging.getLogger(__name__)


class Runner:
    """High level controller that loads units and runs them.

    Example::

        runner = Runner()
        await runner.exec(RunnerOptions("./worker/sync_database"))
        await runner.parallelism(
            RunnerOptions("./api/http_api", args=("--port", "8080")),
            RunnerOptions("services.graphql", forever=True),
        )
    """

    def __init__(
        self,
        loader: Optional[ModuleLoader] = None,
        driver: Optional[ExecutionDriver] = None,
        *,
        resolver: Optional[UnitResolver] = None,
        on_fatal: Optional[FatalHandler] = None,
    ) -> None:
        if loader is not None and resolver is not None:
            raise ValueError("Pass either a loader or a resolver, not both")
        if driver is not None and on_fatal is not None:
            raise ValueError("Pass either a driver or on_fatal, not both")
        self.loader = loader or ModuleLoader(resolver)
        self.driver = driver or ExecutionDriver(on_fatal)

    @classmethod
    def from_base_dir(
        cls,
        base_dir: Path,
        *,
        default_export: str = DEFAULT_EXPORT,
        on_fatal: Optional[FatalHandler] = None,
    ) -> "Runner":
        resolver = default_resolver(base_dir, default_export=default_export)
        return cls(resolver=resolver, on_fatal=on_fatal)

    async def runner_actions(
        self, actions: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Carry out every named action, one at a time, in mapping order.

        Entries with a non-empty ``parallelism`` group go through
        :meth:`parallelism`; groups that are empty are skipped; anything
        else is treated as a single set of options for :meth:`exec`.
        """

        results: Dict[str, Any] = {}
        for name, value in actions.items():
            entry = build_action_entry(value)
            if isinstance(entry, ParallelGroup):
                if not entry:
                    LOGGER.debug("Skipping empty parallel action '%s'", name)
                    continue
                results[name] = await self.parallelism(*entry.parallelism)
            else:
                results[name] = await self.exec(entry)
        return results

    async def load_runnable_module(self, path: str) -> Runnable:
        """Load, validate and configure the unit exported under ``path``."""

        return await self.loader.load(path)

    async def run(self, runnable: Runnable, options: RunnerOptions) -> Any:
        return await self.driver.run(runnable, options)

    async def exec(self, options: RunnerOptions | Mapping[str, Any]) -> Any:
        """Load the unit described by ``options`` and run it."""

        options = build_runner_options(options)
        runnable = await self.load_runnable_module(options.path)
        return await self.run(runnable, options)

    async def parallelism(
        self, *options: RunnerOptions | Mapping[str, Any]
    ) -> List[Any]:
        """Configure every unit first, then run them in the given order.

        Runs are started one after another; a unit marked ``forever`` only
        overlaps with later ones through background work it starts itself.
        """

        configurations: List[Tuple[Runnable, RunnerOptions]] = []
        for item in options:
            option = build_runner_options(item)
            configurations.append(
                (await self.load_runnable_module(option.path), option)
            )

        results: List[Any] = []
        for runnable, option in configurations:
            results.append(await self.run(runnable, option))
        return results


__all__ = ["Runner"]
