"""
iracebind exception hierarchy.

All iracebind-specific exceptions inherit from IraceBindError and carry a
human-readable message, an optional suggestion and a details dict.

Example:
    try:
        params = decode_params(raw, space)
    except DecodeError as e:
        logger.warning("Bad configuration: %s", e)
        logger.info("Details: %s", e.details)
"""

from __future__ import annotations

from typing import Any


class IraceBindError(Exception):
    """
    Base exception for all iracebind errors.

    Attributes:
        message: Human-readable error description
        suggestion: Optional suggestion for fixing the error
        details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with suggestion."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(IraceBindError):
    """Raised when a parameter space, registry or scenario is set up incorrectly."""

    pass


class DuplicateParameterError(ConfigurationError):
    """Raised when a name is declared twice on the same level of a parameter space."""

    def __init__(self, name: str) -> None:
        message = f"Parameter '{name}' is already declared in this space."
        suggestion = "Parameter names must be unique within one level; rename one of them"
        super().__init__(message, suggestion, {"name": name})


class InvalidBoundsError(ConfigurationError):
    """Raised when a numerical or categorical declaration has an empty domain."""

    def __init__(self, name: str, message: str) -> None:
        suggestion = "Ensure lower < upper (and both > 0 for log scale) and at least one variant"
        super().__init__(f"Invalid declaration for '{name}': {message}", suggestion, {"name": name})


class FlattenKeyCollisionError(ConfigurationError):
    """Raised when flattening produces the same dotted name twice."""

    def __init__(self, key: str) -> None:
        message = f"Flattened key '{key}' is already present."
        suggestion = "Two nested spaces map onto the same dotted name; rename the outer or inner parameter"
        super().__init__(message, suggestion, {"key": key})


class FrozenSpaceError(ConfigurationError):
    """Raised when a parameter space is mutated after a run has started."""

    def __init__(self, operation: str) -> None:
        message = f"Cannot {operation}: parameter space is frozen."
        suggestion = "Build and flatten the space completely before starting a run"
        super().__init__(message, suggestion, {"operation": operation})


# =============================================================================
# Decode Errors
# =============================================================================


class DecodeError(IraceBindError):
    """Base class for errors raised while decoding an untyped configuration."""

    pass


class UnsupportedNestedError(DecodeError, ConfigurationError):
    """Raised when a nested (unflattened) subspace is decoded or encoded."""

    def __init__(self, name: str) -> None:
        message = f"Nested parameter space '{name}' is not supported here."
        suggestion = "Call ParamSpace.flatten() before encoding or decoding"
        super().__init__(message, suggestion, {"name": name})


class UnknownParameterError(DecodeError):
    """Raised when a configuration names a parameter absent from the schema."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        message = f"Unknown parameter name: '{name}'."
        suggestion = f"Declared parameters: {', '.join(available)}" if available else None
        super().__init__(message, suggestion, {"name": name})


class TypeMismatchError(DecodeError):
    """Raised when a value does not have the kind its parameter declares."""

    def __init__(self, name: str, expected: str, value: Any = None) -> None:
        self.name = name
        self.expected = expected
        message = f"'{name}' expects {expected}, got {type(value).__name__} ({value!r})."
        super().__init__(message, None, {"name": name, "expected": expected, "value": value})


class IndexOutOfRangeError(DecodeError):
    """Raised when a categorical index does not address a declared variant."""

    def __init__(self, name: str, index: int, num_variants: int) -> None:
        message = f"Categorical '{name}' has {num_variants} variants, index {index} is out of range."
        super().__init__(message, None, {"name": name, "index": index, "num_variants": num_variants})


class MissingParameterError(DecodeError, KeyError):
    """Raised when a decoded parameter is requested but was not part of the configuration."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing parameter '{name}'.", None, {"name": name})

    def __str__(self) -> str:
        return self._format_message()


# =============================================================================
# Runtime Errors
# =============================================================================


class EvaluationError(IraceBindError):
    """Raised when a single target-runner invocation fails."""

    pass


class MissingInstanceError(EvaluationError):
    """Raised when an experiment carries no instance of the expected type."""

    def __init__(self, index: int | None = None, expected: str | None = None) -> None:
        message = "Missing instance"
        if index is not None:
            message += f" for index {index}"
        if expected is not None:
            message += f" (expected {expected})"
        suggestion = "Check that the registered instances match the target runner's instance_type"
        super().__init__(message + ".", suggestion, {"index": index, "expected": expected})


class TargetRunnerError(EvaluationError, ValueError):
    """Boundary representation of a failed invocation, handed back to the engine."""

    def __init__(self, experiment_id: str | None, cause: BaseException) -> None:
        message = f"Target runner failed for experiment '{experiment_id}': {cause}"
        super().__init__(message, None, {"experiment_id": experiment_id, "cause": type(cause).__name__})


# =============================================================================
# Engine Errors
# =============================================================================


class EngineError(IraceBindError):
    """Base class for problems talking to the racing engine."""

    pass


class EngineNotAvailableError(EngineError):
    """Raised when the engine module cannot be imported."""

    def __init__(self, module: str, reason: str | None = None) -> None:
        message = f"Racing engine module '{module}' could not be imported."
        if reason:
            message += f" ({reason})"
        suggestion = "Install the irace Python wrapper or point IRACEPY_HOME at its location"
        super().__init__(message, suggestion, {"module": module})


class EngineResultError(EngineError):
    """Raised when the engine returns something other than a list of configurations."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "The engine should return a list of dicts", None)


__all__ = [
    # Base
    "IraceBindError",
    # Configuration
    "ConfigurationError",
    "DuplicateParameterError",
    "InvalidBoundsError",
    "FlattenKeyCollisionError",
    "FrozenSpaceError",
    # Decode
    "DecodeError",
    "UnsupportedNestedError",
    "UnknownParameterError",
    "TypeMismatchError",
    "IndexOutOfRangeError",
    "MissingParameterError",
    # Runtime
    "EvaluationError",
    "MissingInstanceError",
    "TargetRunnerError",
    # Engine
    "EngineError",
    "EngineNotAvailableError",
    "EngineResultError",
]
