"""runnerkit package entry point."""

from .configuration import build_action_entry, build_actions
from .exceptions import (
    FatalRunError,
    InvalidRunnerShapeError,
    MissingDefaultExportError,
    RunnableNotFoundError,
    RunnerConfigError,
    RunnerError,
    RunnerLoadError,
)
from .orchestrator import Runner
from .runtime import ImportResolver, RegistryResolver, raise_fatal, runnable
from .types import ParallelGroup, Runnable, RunnerOptions

__version__ = "0.1.0"

__all__ = [
    "FatalRunError",
    "ImportResolver",
    "InvalidRunnerShapeError",
    "MissingDefaultExportError",
    "ParallelGroup",
    "RegistryResolver",
    "Runnable",
    "RunnableNotFoundError",
    "Runner",
    "RunnerConfigError",
    "RunnerError",
    "RunnerLoadError",
    "RunnerOptions",
    "build_action_entry",
    "build_actions",
    "raise_fatal",
    "runnable",
]
