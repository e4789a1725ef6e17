"""iracebind: typed parameter spaces and experiment dispatch for irace."""

from importlib import metadata as _metadata

from .foundation.exceptions import (
    DecodeError,
    FlattenKeyCollisionError,
    IndexOutOfRangeError,
    IraceBindError,
    MissingInstanceError,
    TargetRunnerError,
    TypeMismatchError,
    UnknownParameterError,
    UnsupportedNestedError,
)
from .foundation.logging import configure_iracebind_logging
from .tuning import (
    Experiment,
    Params,
    ParamSpace,
    ProblemInstance,
    Run,
    Scenario,
    TargetRunner,
    Verbosity,
    decode_params,
    irace,
    multi_irace,
)

try:
    __version__ = _metadata.version("iracebind")
except _metadata.PackageNotFoundError:  # pragma: no cover - source checkout without install
    __version__ = "0.0.0+unknown"

__all__ = [
    "irace",
    "multi_irace",
    "Run",
    "ParamSpace",
    "Params",
    "decode_params",
    "Scenario",
    "Verbosity",
    "Experiment",
    "ProblemInstance",
    "TargetRunner",
    "IraceBindError",
    "DecodeError",
    "UnknownParameterError",
    "TypeMismatchError",
    "IndexOutOfRangeError",
    "UnsupportedNestedError",
    "FlattenKeyCollisionError",
    "MissingInstanceError",
    "TargetRunnerError",
    "configure_iracebind_logging",
    "__version__",
]
