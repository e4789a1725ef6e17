"""
Parameter space definitions handed to the racing engine.

All declarations use name as the first argument:
- Real(name, lower, upper, log=False)
- Integer(name, lower, upper, log=False)
- Bool(name)
- Categorical(name, variants)
- Nested(name, space)

A ParamSpace keeps declarations in insertion order. Nested spaces must be
flattened into dotted names ("outer.inner") before the space can be encoded
for the engine or used to decode configurations.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Union

import numpy as np

from iracebind.foundation.exceptions import (
    ConfigurationError,
    DuplicateParameterError,
    FlattenKeyCollisionError,
    FrozenSpaceError,
    InvalidBoundsError,
    UnsupportedNestedError,
)

U32_MAX = 2**32 - 1


def _check_numeric_bounds(name: str, lower: float, upper: float, log: bool) -> None:
    if not lower < upper:
        raise InvalidBoundsError(name, f"lower ({lower!r}) must be < upper ({upper!r})")
    if log and lower <= 0:
        raise InvalidBoundsError(name, "log scale requires positive bounds")


@dataclass(frozen=True)
class Real:
    """Real-valued parameter in [lower, upper]."""

    name: str
    lower: float
    upper: float
    log: bool = False

    kind: ClassVar[str] = "real"

    def __post_init__(self) -> None:
        object.__setattr__(self, "lower", float(self.lower))
        object.__setattr__(self, "upper", float(self.upper))
        _check_numeric_bounds(self.name, self.lower, self.upper, self.log)

    def sample_raw(self, rng: np.random.Generator) -> float:
        if self.log:
            lo, hi = math.log(self.lower), math.log(self.upper)
            value = math.exp(rng.uniform(lo, hi))
            return float(min(max(value, self.lower), self.upper))
        return float(rng.uniform(self.lower, self.upper))

    def to_record(self) -> dict[str, Any]:
        return {"type": self.kind, "name": self.name, "lower": self.lower, "upper": self.upper, "log": self.log}

    def __str__(self) -> str:
        return f"{self.name}: [{self.lower!r}, {self.upper!r}]{' (log)' if self.log else ''}"


@dataclass(frozen=True)
class Integer:
    """Unsigned 32-bit integer parameter in [lower, upper] (inclusive)."""

    name: str
    lower: int
    upper: int
    log: bool = False

    kind: ClassVar[str] = "integer"

    def __post_init__(self) -> None:
        for bound in (self.lower, self.upper):
            if isinstance(bound, bool) or not isinstance(bound, (int, np.integer)):
                raise InvalidBoundsError(self.name, f"integer bounds required, got {bound!r}")
            if not 0 <= int(bound) <= U32_MAX:
                raise InvalidBoundsError(self.name, f"bound {bound!r} is not an unsigned 32-bit integer")
        object.__setattr__(self, "lower", int(self.lower))
        object.__setattr__(self, "upper", int(self.upper))
        _check_numeric_bounds(self.name, self.lower, self.upper, self.log)

    def sample_raw(self, rng: np.random.Generator) -> int:
        if self.log:
            lo, hi = math.log(self.lower), math.log(self.upper)
            value = int(round(math.exp(rng.uniform(lo, hi))))
            return min(max(value, self.lower), self.upper)
        return int(rng.integers(self.lower, self.upper + 1))

    def to_record(self) -> dict[str, Any]:
        return {"type": self.kind, "name": self.name, "lower": self.lower, "upper": self.upper, "log": self.log}

    def __str__(self) -> str:
        return f"{self.name}: [{self.lower!r}, {self.upper!r}]{' (log)' if self.log else ''}"


@dataclass(frozen=True)
class Bool:
    """Boolean parameter; the domain is always (True, False)."""

    name: str

    kind: ClassVar[str] = "bool"
    variants: ClassVar[tuple[bool, bool]] = (True, False)

    def sample_raw(self, rng: np.random.Generator) -> bool:
        return bool(rng.integers(0, 2))

    def to_record(self) -> dict[str, Any]:
        return {"type": self.kind, "name": self.name}

    def __str__(self) -> str:
        return f"{self.name}: bool"


@dataclass(frozen=True)
class Categorical:
    """
    Categorical parameter over an ordered sequence of opaque host values.

    The engine only ever sees the variant indices ``0..len(variants)``; the
    values themselves stay on the host side.
    """

    name: str
    variants: tuple[Any, ...]

    kind: ClassVar[str] = "categorical"

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", tuple(self.variants))
        if not self.variants:
            raise InvalidBoundsError(self.name, "categorical parameter needs at least one variant")

    def sample_raw(self, rng: np.random.Generator) -> int:
        return int(rng.integers(0, len(self.variants)))

    def to_record(self) -> dict[str, Any]:
        return {"type": self.kind, "name": self.name, "variants": list(range(len(self.variants)))}

    def __str__(self) -> str:
        return f"{self.name}: [{', '.join(repr(v) for v in self.variants)}]"


@dataclass(frozen=True)
class Nested:
    """A complete parameter space embedded under one name."""

    name: str
    space: ParamSpace

    kind: ClassVar[str] = "nested"

    def sample_raw(self, rng: np.random.Generator) -> Any:
        raise UnsupportedNestedError(self.name)

    def to_record(self) -> dict[str, Any]:
        raise UnsupportedNestedError(self.name)

    def __str__(self) -> str:
        return f"{self.name}: {self.space!r}"


# Type alias for any declaration
Subspace = Union[Real, Integer, Bool, Categorical, Nested]

_SUBSPACE_TYPES: dict[str, type] = {
    "real": Real,
    "integer": Integer,
    "bool": Bool,
    "categorical": Categorical,
    "nested": Nested,
}

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "real": ("lower", "upper"),
    "integer": ("lower", "upper"),
    "categorical": ("variants",),
}


class ParamSpace(Mapping[str, Subspace]):
    """
    Ordered, named parameter space.

    Example:
        space = (
            ParamSpace()
            .add_real("x", 0.0, 1.0)
            .add_integer("n", 1, 10)
            .add_bool("flag")
            .add_categorical("mode", ["a", "b", "c"])
        )
    """

    def __init__(self, subspaces: Mapping[str, Subspace] | Iterable[Subspace] | None = None) -> None:
        self._subspaces: dict[str, Subspace] = {}
        self._frozen = False
        if subspaces is None:
            return
        if isinstance(subspaces, Mapping):
            for name, subspace in subspaces.items():
                self.add_raw(name, subspace)
        else:
            for subspace in subspaces:
                self.add_raw(subspace.name, subspace)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------
    def __getitem__(self, name: str) -> Subspace:
        return self._subspaces[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._subspaces)

    def __len__(self) -> int:
        return len(self._subspaces)

    def __repr__(self) -> str:
        return "{" + ", ".join(str(sub) for sub in self._subspaces.values()) + "}"

    def get_raw(self, name: str) -> Subspace | None:
        """Return the declaration with the given name, or None."""
        return self._subspaces.get(name)

    def names(self) -> list[str]:
        return list(self._subspaces)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> ParamSpace:
        """Disallow any further mutation, including nested spaces."""
        self._frozen = True
        for subspace in self._subspaces.values():
            if isinstance(subspace, Nested):
                subspace.space.freeze()
        return self

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            raise FrozenSpaceError(operation)

    def add_raw(self, name: str, subspace: Subspace) -> ParamSpace:
        """Insert a declaration under `name`. Names must be unique on this level."""
        self._check_mutable(f"add '{name}'")
        if name in self._subspaces:
            raise DuplicateParameterError(name)
        if subspace.name != name:
            subspace = replace(subspace, name=name)
        self._subspaces[name] = subspace
        return self

    def add_real(self, name: str, lower: float, upper: float, log: bool = False) -> ParamSpace:
        """Add a real parameter; `log=True` samples on a logarithmic scale."""
        return self.add_raw(name, Real(name, lower, upper, log))

    def add_integer(self, name: str, lower: int, upper: int, log: bool = False) -> ParamSpace:
        """Add an unsigned integer parameter; `log=True` samples on a logarithmic scale."""
        return self.add_raw(name, Integer(name, lower, upper, log))

    def add_bool(self, name: str) -> ParamSpace:
        return self.add_raw(name, Bool(name))

    def add_categorical(self, name: str, variants: Iterable[Any]) -> ParamSpace:
        """Add a categorical parameter; variant order defines the index seen by the engine."""
        return self.add_raw(name, Categorical(name, tuple(variants)))

    def add_categorical_names(self, name: str, variants: Iterable[Any]) -> ParamSpace:
        """Add a categorical parameter whose variants are stored as strings."""
        return self.add_categorical(name, (str(v) for v in variants))

    def add_nested(self, name: str, space: ParamSpace) -> ParamSpace:
        """Embed a complete space under `name`. See `flatten`."""
        return self.add_raw(name, Nested(name, space))

    def copy(self) -> ParamSpace:
        """Shallow, unfrozen copy. Declarations are immutable and shared."""
        clone = ParamSpace()
        clone._subspaces = dict(self._subspaces)
        return clone

    def with_real(self, name: str, lower: float, upper: float, log: bool = False) -> ParamSpace:
        return self.copy().add_real(name, lower, upper, log)

    def with_integer(self, name: str, lower: int, upper: int, log: bool = False) -> ParamSpace:
        return self.copy().add_integer(name, lower, upper, log)

    def with_bool(self, name: str) -> ParamSpace:
        return self.copy().add_bool(name)

    def with_categorical(self, name: str, variants: Iterable[Any]) -> ParamSpace:
        return self.copy().add_categorical(name, variants)

    def with_categorical_names(self, name: str, variants: Iterable[Any]) -> ParamSpace:
        return self.copy().add_categorical_names(name, variants)

    def with_nested(self, name: str, space: ParamSpace) -> ParamSpace:
        return self.copy().add_nested(name, space)

    # ------------------------------------------------------------------
    # Flattening
    # ------------------------------------------------------------------
    def is_flat(self) -> bool:
        return not any(isinstance(sub, Nested) for sub in self._subspaces.values())

    def require_flat(self) -> ParamSpace:
        """Raise UnsupportedNestedError naming the first nested entry, if any."""
        for name, subspace in self._subspaces.items():
            if isinstance(subspace, Nested):
                raise UnsupportedNestedError(name)
        return self

    def flatten(self) -> bool:
        """
        Flatten nested spaces recursively, in place.

        Nested spaces are replaced by their children, each renamed to
        "{outer}.{inner}" and kept at the position of the nested entry::

            {"nested_space": {"inner_key": ...}}  ->  {"nested_space.inner_key": ...}

        Returns True if any nesting was removed. Raises FlattenKeyCollisionError
        if two entries end up with the same dotted name; the space is left
        untouched in that case.
        """
        if self.is_flat():
            return False
        self._check_mutable("flatten")

        flat: dict[str, Subspace] = {}
        for key, subspace in self._subspaces.items():
            if not isinstance(subspace, Nested):
                if key in flat:
                    raise FlattenKeyCollisionError(key)
                flat[key] = subspace
                continue
            # Work on a copy: the same inner space may be embedded more than once.
            inner = subspace.space.copy()
            inner.flatten()
            for inner_key, inner_subspace in inner.items():
                flat_key = f"{key}.{inner_key}"
                if flat_key in flat:
                    raise FlattenKeyCollisionError(flat_key)
                flat[flat_key] = replace(inner_subspace, name=flat_key)

        self._subspaces = flat
        return True

    # ------------------------------------------------------------------
    # Engine representation
    # ------------------------------------------------------------------
    def to_records(self) -> list[dict[str, Any]]:
        """
        One JSON-like record per parameter, in insertion order.

        Categorical variants are exposed as indices only. Raises
        UnsupportedNestedError if the space has not been flattened.
        """
        return [subspace.to_record() for subspace in self._subspaces.values()]

    def encode_for_engine(self, engine: Any) -> Any:
        """Build the engine's ParameterSpace object from `to_records()`."""
        factories = {
            "real": engine.Real,
            "integer": engine.Integer,
            "bool": engine.Bool,
            "categorical": engine.Categorical,
        }
        subspaces = []
        for record in self.to_records():
            kind = record.pop("type")
            subspaces.append(factories[kind](**record))
        return engine.ParameterSpace(subspaces)

    def sample_raw(self, rng: np.random.Generator | None = None) -> dict[str, Any]:
        """Draw a configuration in the engine's raw representation (categoricals as indices)."""
        rng = np.random.default_rng() if rng is None else rng
        return {name: subspace.sample_raw(rng) for name, subspace in self._subspaces.items()}

    # ------------------------------------------------------------------
    # Plain-dict representation (YAML/JSON configuration files)
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name, subspace in self._subspaces.items():
            if isinstance(subspace, Nested):
                data[name] = {"type": "nested", "parameters": subspace.space.to_dict()}
            elif isinstance(subspace, Categorical):
                data[name] = {"type": "categorical", "variants": list(subspace.variants)}
            else:
                record = subspace.to_record()
                record.pop("name")
                data[name] = record
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParamSpace:
        """
        Build a space from a plain mapping, e.g. loaded from YAML::

            x: {type: real, lower: 0.0, upper: 1.0, log: false}
            mode: {type: categorical, variants: [a, b, c]}
            inner: {type: nested, parameters: {...}}
        """
        space = cls()
        for name, entry in data.items():
            if not isinstance(entry, Mapping):
                raise ConfigurationError(f"Declaration for '{name}' must be a mapping, got {type(entry).__name__}.")
            kind = str(entry.get("type", "")).lower()
            if kind not in _SUBSPACE_TYPES:
                raise ConfigurationError(
                    f"Unknown parameter type '{kind}' for '{name}'.",
                    f"Use one of: {', '.join(_SUBSPACE_TYPES)}",
                    {"name": name, "type": kind},
                )
            required = _REQUIRED_KEYS.get(kind, ())
            missing = [key for key in required if key not in entry]
            if missing:
                raise ConfigurationError(
                    f"Declaration for '{name}' is missing: {', '.join(missing)}.",
                    f"A {kind} parameter needs: {', '.join(required)}",
                    {"name": name, "missing": missing},
                )
            if kind == "real":
                space.add_real(name, entry["lower"], entry["upper"], bool(entry.get("log", False)))
            elif kind == "integer":
                space.add_integer(name, entry["lower"], entry["upper"], bool(entry.get("log", False)))
            elif kind == "bool":
                space.add_bool(name)
            elif kind == "categorical":
                space.add_categorical(name, entry["variants"])
            else:
                space.add_nested(name, cls.from_dict(entry.get("parameters", {})))
        return space


__all__ = [
    "ParamSpace",
    "Subspace",
    "Real",
    "Integer",
    "Bool",
    "Categorical",
    "Nested",
    "U32_MAX",
]
