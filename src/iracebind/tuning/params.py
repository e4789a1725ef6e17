"""
Decoded parameters and the schema-directed decoder.

The engine hands back configurations as untyped ``{name: value}`` mappings.
`decode_params` converts them into typed values using the ParamSpace the
run was started with, so the same schema drives both directions.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

import numpy as np

from iracebind.foundation.exceptions import (
    IndexOutOfRangeError,
    MissingParameterError,
    TypeMismatchError,
    UnknownParameterError,
    UnsupportedNestedError,
)

from .param_space import U32_MAX, Bool, Categorical, Integer, Nested, ParamSpace, Real

T = TypeVar("T")


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class Params(Mapping[str, Any]):
    """
    Typed values of one configuration, keyed by (flattened) parameter name.

    Only `decode_params` builds these from engine output. Target runners read
    values with `require(name, kind)` or consume them with `extract(name, kind)`.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise MissingParameterError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Params({self._values!r})"

    @staticmethod
    def _check_kind(name: str, value: Any, kind: type[T] | None) -> T:
        if kind is None:
            return value
        # bool is an int subclass; keep the two apart.
        if kind is not bool and isinstance(value, bool):
            raise TypeMismatchError(name, kind.__name__, value)
        if not isinstance(value, kind):
            raise TypeMismatchError(name, kind.__name__, value)
        return value

    def require(self, name: str, kind: type[T] | None = None) -> T:
        """Return the value for `name`, raising MissingParameterError if absent."""
        return self._check_kind(name, self[name], kind)

    def extract(self, name: str, kind: type[T] | None = None) -> T:
        """Remove and return the value for `name`, checked against `kind`."""
        value = self.require(name, kind)
        del self._values[name]
        return value

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise TypeMismatchError(name, "float", value)
    return float(value)


def _as_unsigned(name: str, value: Any, expected: str, upper: int | None = None) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise TypeMismatchError(name, expected, value)
    number = int(value)
    if number < 0 or (upper is not None and number > upper):
        raise TypeMismatchError(name, expected, value)
    return number


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, (bool, np.bool_)):
        raise TypeMismatchError(name, "bool", value)
    return bool(value)


def _as_variant(name: str, value: Any, categorical: Categorical) -> Any:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise TypeMismatchError(name, "categorical index", value)
    index = int(value)
    if not 0 <= index < len(categorical.variants):
        raise IndexOutOfRangeError(name, index, len(categorical.variants))
    return categorical.variants[index]


def decode_value(name: str, value: Any, space: ParamSpace) -> Any:
    """Decode a single raw value according to its declaration in `space`."""
    subspace = space.get_raw(name)
    if subspace is None:
        raise UnknownParameterError(name, space.names())
    if isinstance(subspace, Real):
        return _as_float(name, value)
    if isinstance(subspace, Integer):
        return _as_unsigned(name, value, "unsigned 32-bit integer", U32_MAX)
    if isinstance(subspace, Bool):
        return _as_bool(name, value)
    if isinstance(subspace, Categorical):
        return _as_variant(name, value, subspace)
    if isinstance(subspace, Nested):
        raise UnsupportedNestedError(name)
    raise TypeError(f"Unsupported declaration type for '{name}': {type(subspace)!r}")  # pragma: no cover


def decode_params(raw: Mapping[str, Any], space: ParamSpace) -> Params:
    """
    Decode an untyped configuration into Params.

    Either every entry decodes or the first failure is raised and nothing is
    returned.
    """
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = str(key)
        values[name] = decode_value(name, value, space)
    _logger().debug("Decoded %d parameters", len(values))
    return Params(values)


__all__ = ["Params", "decode_params", "decode_value"]
