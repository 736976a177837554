"""Execution driver: runs a configured unit and applies the failure policy."""

from __future__ import annotations

import logging
import sys

from typing import Any, Callable, NoReturn, Optional

from runnerkit.exceptions import FatalRunError
from runnerkit.types import Runnable, RunnerOptions

from .loader import maybe_await

LOGGER = logging.getLogger(__name__)

FatalHandler = Callable[[RunnerOptions, Exception], Any]


def exit_process(options: RunnerOptions, error: Exception) -> NoReturn:
    """Default policy: a failed run takes the whole process down."""

    sys.exit(1)


def raise_fatal(options: RunnerOptions, error: Exception) -> NoReturn:
    """Non-terminating policy for hosts and tests that catch the failure."""

    raise FatalRunError(options, error) from error


class ExecutionDriver:
    """Invokes ``run`` on a configured unit and reports the outcome."""

    def __init__(self, on_fatal: Optional[FatalHandler] = None) -> None:
        self.on_fatal = on_fatal or exit_process

    async def run(self, runnable: Runnable, options: RunnerOptions) -> Any:
        try:
            job = await maybe_await(runnable.run(options.args))
        except Exception as exc:
            LOGGER.error("Error running '%s': %s", options.path, exc)
            self.on_fatal(options, exc)
            return None
        if options.forever:
            LOGGER.info("Loaded and running '%s'...", options.path)
            return job
        LOGGER.info("Finished running '%s'", options.path)
        return None


__all__ = ["ExecutionDriver", "FatalHandler", "exit_process", "raise_fatal"]
