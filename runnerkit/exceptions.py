"""Custom exceptions for the runner framework."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from runnerkit.types import RunnerOptions


class RunnerError(RuntimeError):
    """Base exception for orchestration failures."""


class RunnerConfigError(RunnerError):
    """Raised when runner options, actions or settings are invalid."""


class RunnerLoadError(RunnerError):
    """Base class for failures while turning a path into a runnable."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class RunnableNotFoundError(RunnerLoadError):
    """Raised when a path does not resolve to loadable code."""


class MissingDefaultExportError(RunnerLoadError):
    """Raised when the resolved module has no default export."""


class InvalidRunnerShapeError(RunnerLoadError):
    """Raised when the instantiated default export lacks configure/run."""


class FatalRunError(RunnerError):
    """Raised by non-terminating fatal handlers when a unit's run fails."""

    def __init__(self, options: "RunnerOptions", error: BaseException) -> None:
        super().__init__(f"Error running '{options.path}': {error}")
        self.options = options
        self.error = error
