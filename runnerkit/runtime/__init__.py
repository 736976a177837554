"""Runtime exports: resolvers, loader and execution driver."""

from .driver import ExecutionDriver, FatalHandler, exit_process, raise_fatal
from .loader import ModuleLoader
from .resolvers import (
    ChainResolver,
    ImportResolver,
    RegistryResolver,
    UnitResolver,
    default_resolver,
    runnable,
)

__all__ = [
    "ChainResolver",
    "ExecutionDriver",
    "FatalHandler",
    "ImportResolver",
    "ModuleLoader",
    "RegistryResolver",
    "UnitResolver",
    "default_resolver",
    "exit_process",
    "raise_fatal",
    "runnable",
]
