from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any, Optional

from iracebind.foundation.exceptions import ConfigurationError


class Verbosity(IntEnum):
    """Stdout verbosity of the racing engine."""

    SILENT = 0
    MINIMAL = 1
    STANDARD = 2
    DEBUG = 3


@dataclass(frozen=True)
class Scenario:
    """
    Tuning scenario handed to the racing engine, after irace's scenario file.

    Only a small part of irace's scenario options is covered. The scenario does
    NOT hold the parameter space or instances; those are passed alongside it.
    It is shared read-only by every target-runner invocation of a run.
    """

    max_experiments: Optional[int] = None
    """
    Upper bound of experiments (configuration x instance x seed) to perform,
    i.e. the tuning budget.
    """

    min_experiments: Optional[int] = None
    """
    Minimum number of experiments irace should perform before stopping.
    """

    elitist: bool = True
    """
    Whether elitist irace should be used.
    """

    deterministic: bool = False
    """
    Whether the target algorithm is deterministic (True) or stochastic (False).
    """

    log_file: Optional[str] = None
    """
    Optional path of irace's R data log file.
    """

    exec_dir: Optional[str] = None
    """
    Optional working directory for the engine.
    """

    num_jobs: int = 1
    """
    Number of experiments the engine may run in parallel. The target runner is
    invoked concurrently up to this count. Parallelism is not supported by the
    engine on Windows.
    """

    seed: Optional[int] = None
    """
    Initial RNG seed of the engine.
    """

    verbose: Verbosity = Verbosity.SILENT
    """
    Verbosity of the engine's stdout output.
    """

    def __post_init__(self) -> None:
        object.__setattr__(self, "verbose", Verbosity(self.verbose))
        if self.max_experiments is not None and self.max_experiments <= 0:
            raise ConfigurationError("max_experiments must be > 0")
        if self.min_experiments is not None and self.min_experiments <= 0:
            raise ConfigurationError("min_experiments must be > 0")
        if (
            self.max_experiments is not None
            and self.min_experiments is not None
            and self.min_experiments > self.max_experiments
        ):
            raise ConfigurationError("min_experiments must be <= max_experiments")
        if self.num_jobs < 1:
            raise ConfigurationError("num_jobs must be >= 1")
        if self.seed is not None and not 0 <= self.seed < 2**64:
            raise ConfigurationError("seed must be an unsigned 64-bit integer")

    def to_record(self, num_instances: int) -> dict[str, Any]:
        """Engine-side representation; instances are exposed as indices."""
        record: dict[str, Any] = {
            "max_experiments": self.max_experiments,
            "min_experiments": self.min_experiments,
            "elitist": self.elitist,
            "deterministic": self.deterministic,
            "log_file": self.log_file,
            "exec_dir": self.exec_dir,
            "instances": list(range(num_instances)),
            "n_jobs": self.num_jobs,
            "seed": self.seed,
            "verbose": int(self.verbose),
        }
        # Optional settings are left to the engine's defaults.
        for key in ("max_experiments", "min_experiments", "log_file", "exec_dir"):
            if record[key] is None:
                del record[key]
        return record

    def encode_for_engine(self, engine: Any, num_instances: int) -> Any:
        return engine.Scenario(**self.to_record(num_instances))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Scenario:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown scenario settings: {', '.join(unknown)}.",
                f"Supported settings: {', '.join(sorted(known))}",
            )
        values = dict(data)
        if isinstance(values.get("verbose"), str):
            values["verbose"] = Verbosity[values["verbose"].upper()]
        return cls(**values)


__all__ = ["Scenario", "Verbosity"]
