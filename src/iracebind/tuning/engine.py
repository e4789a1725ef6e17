"""
Locating and initialising the racing engine.

The engine is the irace Python wrapper, which in turn embeds R. Loading it is
process-wide, one-time state: `init_engine` extends ``sys.path`` with
``$IRACEPY_HOME`` (if set) and imports the wrapper exactly once, no matter how
many runs are started or from how many threads. There is no teardown.

Environment:
    IRACEPY_HOME      directory appended to sys.path before the import
    IRACEBIND_ENGINE  module name of the wrapper (default: "irace")
"""
from __future__ import annotations

import logging
import os
import sys
import threading
from importlib import import_module
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from iracebind.foundation.exceptions import EngineNotAvailableError

IRACEPY_HOME_ENV = "IRACEPY_HOME"
ENGINE_MODULE_ENV = "IRACEBIND_ENGINE"
DEFAULT_ENGINE_MODULE = "irace"

_INIT_LOCK = threading.Lock()
_ENGINE: ModuleType | None = None


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


@runtime_checkable
class Engine(Protocol):
    """Attributes the engine module must expose."""

    Real: Any
    Integer: Any
    Bool: Any
    Categorical: Any
    ParameterSpace: Any
    Scenario: Any
    Run: Any

    def irace(self, *, target_runner: Any, scenario: Any, parameter_space: Any) -> Any: ...

    def multi_irace(self, *, runs: Any, n_jobs: int, global_seed: int | None) -> Any: ...


def register_search_path() -> str | None:
    """Append $IRACEPY_HOME to sys.path (once). Returns the path added, if any."""
    home = os.environ.get(IRACEPY_HOME_ENV)
    if not home:
        return None
    if home not in sys.path:
        sys.path.append(home)
        _logger().debug("Added %s=%s to sys.path", IRACEPY_HOME_ENV, home)
    return home


def init_engine(module_name: str | None = None) -> ModuleType:
    """
    Import the engine module exactly once per process and return it.

    Safe to call repeatedly and concurrently; later calls return the cached
    module. Raises EngineNotAvailableError if the import fails, in which case a
    later call retries.
    """
    global _ENGINE
    if _ENGINE is not None:
        return _ENGINE
    with _INIT_LOCK:
        if _ENGINE is not None:
            return _ENGINE
        name = module_name or os.environ.get(ENGINE_MODULE_ENV) or DEFAULT_ENGINE_MODULE
        register_search_path()
        try:
            module = import_module(name)
        except ImportError as exc:
            raise EngineNotAvailableError(name, str(exc)) from exc
        missing = [attr for attr in ("ParameterSpace", "Scenario", "irace") if not hasattr(module, attr)]
        if missing:
            raise EngineNotAvailableError(name, f"missing attributes: {', '.join(missing)}")
        _logger().info("Loaded racing engine '%s'", name)
        _ENGINE = module
        return module


def engine_initialized() -> bool:
    return _ENGINE is not None


def resolve_engine(engine: Any = None) -> Any:
    """Return `engine` if given, else the process-wide engine module."""
    if engine is not None:
        return engine
    return init_engine()


__all__ = [
    "Engine",
    "IRACEPY_HOME_ENV",
    "ENGINE_MODULE_ENV",
    "DEFAULT_ENGINE_MODULE",
    "register_search_path",
    "init_engine",
    "engine_initialized",
    "resolve_engine",
]
