"""Core dataclasses and protocols used throughout runnerkit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
    Union,
    runtime_checkable,
)

from runnerkit.exceptions import RunnerConfigError

T = TypeVar("T", covariant=True)


@runtime_checkable
class Configurable(Protocol):
    async def configure(self) -> Any:
        """One-time setup (connections, clients, ...) before ``run``."""
        ...


@runtime_checkable
class Runnable(Configurable, Protocol[T]):
    """Two-phase unit of work: ``configure`` once, then ``run``."""

    async def run(self, args: Optional[Sequence[str]] = None) -> T:
        ...


RunnableFactory = Callable[[], Any]


def is_runnable(obj: Any) -> bool:
    """Capability check: ``configure`` and ``run`` must both be callable."""

    return callable(getattr(obj, "configure", None)) and callable(
        getattr(obj, "run", None)
    )


def missing_operations(obj: Any) -> Tuple[str, ...]:
    return tuple(
        name
        for name in ("configure", "run")
        if not callable(getattr(obj, name, None))
    )


@dataclass(frozen=True)
class RunnerOptions:
    """Describes one unit to load and run.

    ``path`` identifies the unit (dotted module, filesystem path or a
    registered name). ``args`` are handed verbatim to ``run``. ``forever``
    marks units whose ``run`` leaves long-lived work behind; it is purely
    advisory and only changes the notice that gets logged.
    """

    path: str
    args: Optional[Tuple[str, ...]] = None
    forever: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path.strip():
            raise RunnerConfigError("RunnerOptions.path must be non-empty")
        if self.args is not None:
            if isinstance(self.args, str):
                raise RunnerConfigError(
                    f"args for '{self.path}' must be a sequence of strings"
                )
            object.__setattr__(
                self, "args", tuple(str(arg) for arg in self.args)
            )


@dataclass(frozen=True)
class ParallelGroup:
    """Units that are all configured up front, then run in order."""

    parallelism: Tuple[RunnerOptions, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parallelism", tuple(self.parallelism))

    def __bool__(self) -> bool:
        return bool(self.parallelism)


ActionEntry = Union[RunnerOptions, ParallelGroup]
ActionsMap = Mapping[str, Union[ActionEntry, Mapping[str, Any]]]


__all__ = [
    "ActionEntry",
    "ActionsMap",
    "Configurable",
    "ParallelGroup",
    "Runnable",
    "RunnableFactory",
    "RunnerOptions",
    "is_runnable",
    "missing_operations",
]
