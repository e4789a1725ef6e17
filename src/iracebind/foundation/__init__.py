"""Shared building blocks: exceptions and logging."""

from .exceptions import (
    ConfigurationError,
    DecodeError,
    DuplicateParameterError,
    EngineError,
    EngineNotAvailableError,
    EngineResultError,
    EvaluationError,
    FlattenKeyCollisionError,
    FrozenSpaceError,
    IndexOutOfRangeError,
    InvalidBoundsError,
    IraceBindError,
    MissingInstanceError,
    MissingParameterError,
    TargetRunnerError,
    TypeMismatchError,
    UnknownParameterError,
    UnsupportedNestedError,
)
from .logging import configure_iracebind_logging

__all__ = [
    "IraceBindError",
    "ConfigurationError",
    "DuplicateParameterError",
    "InvalidBoundsError",
    "FlattenKeyCollisionError",
    "FrozenSpaceError",
    "DecodeError",
    "UnsupportedNestedError",
    "UnknownParameterError",
    "TypeMismatchError",
    "IndexOutOfRangeError",
    "MissingParameterError",
    "EvaluationError",
    "MissingInstanceError",
    "TargetRunnerError",
    "EngineError",
    "EngineNotAvailableError",
    "EngineResultError",
    "configure_iracebind_logging",
]
