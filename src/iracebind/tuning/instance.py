"""
Problem instances and the type-erased instance registry.

The engine only knows instances by their position (0..n). The registry keeps
the host objects behind one non-generic type and hands them back only after a
checked comparison of the stored type tag against the type the caller expects.
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from types import UnionType
from typing import Any, Generic, TypeVar, Union, get_args, get_origin

from iracebind.foundation.exceptions import ConfigurationError

P = TypeVar("P")


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class ProblemInstance(Generic[P]):
    """
    A shared problem plus an evaluator prototype.

    The problem is shared read-only between concurrent experiments; each call
    to `evaluator()` returns an independent copy of the prototype so that
    evaluators with internal state (counters, caches) never leak across runs.
    """

    problem: P
    evaluator_prototype: Any = None
    name: str | None = None

    def evaluator(self) -> Any:
        """Return a fresh copy of the evaluator."""
        if self.evaluator_prototype is None:
            return None
        return copy.deepcopy(self.evaluator_prototype)

    def unpack(self) -> tuple[P, Any]:
        """Return the problem and a fresh evaluator."""
        return self.problem, self.evaluator()

    def type_parameters(self) -> tuple[type, ...]:
        return (type(self.problem),)


@dataclass(frozen=True)
class TypeTag:
    """Runtime type of an erased value, plus the types it is parameterised over."""

    cls: type
    parameters: tuple[type, ...] = ()

    @classmethod
    def of(cls, value: Any) -> TypeTag:
        parameters = value.type_parameters() if hasattr(value, "type_parameters") else ()
        return cls(type(value), tuple(parameters))

    def matches(self, expected: Any) -> bool:
        """
        True if a value with this tag may be handed out as `expected`.

        `expected` is a class, a subscripted generic such as
        ``ProblemInstance[Sphere]`` or a Union of those. TypeVars and Any in
        the subscript match everything.
        """
        if expected is Any or expected is object:
            return True
        origin = get_origin(expected)
        if origin is Union or origin is UnionType:
            return any(self.matches(option) for option in get_args(expected))
        if origin is None:
            return isinstance(expected, type) and issubclass(self.cls, expected)
        if not (isinstance(origin, type) and issubclass(self.cls, origin)):
            return False
        for actual, wanted in zip(self.parameters, get_args(expected)):
            if wanted is Any or isinstance(wanted, TypeVar):
                continue
            if not (isinstance(wanted, type) and issubclass(actual, wanted)):
                return False
        return True

    def as_type(self) -> Any:
        """The class, subscripted with its parameters if it has any."""
        if not self.parameters or not hasattr(self.cls, "__class_getitem__"):
            return self.cls
        return self.cls[self.parameters if len(self.parameters) > 1 else self.parameters[0]]

    def __str__(self) -> str:
        if not self.parameters:
            return self.cls.__name__
        return f"{self.cls.__name__}[{', '.join(p.__name__ for p in self.parameters)}]"


@dataclass(frozen=True)
class ErasedInstance:
    """A registered instance behind a non-generic handle."""

    value: Any
    tag: TypeTag = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag", TypeTag.of(self.value))

    def downcast(self, expected: Any) -> Any | None:
        """Return the value if its tag matches `expected`, else None."""
        if self.tag.matches(expected):
            return self.value
        return None


class InstanceRegistry(Sequence[ErasedInstance]):
    """
    Read-only registry of the instances of one tuning run.

    All instances share one type. If `instance_type` is not given it is taken
    from the first instance. The registry cannot be modified after
    construction.
    """

    __slots__ = ("_entries", "_instance_type")

    def __init__(self, instances: Iterable[Any], instance_type: Any = None) -> None:
        entries = tuple(ErasedInstance(value) for value in instances)
        if instance_type is None and entries:
            instance_type = entries[0].tag.as_type()
        for index, entry in enumerate(entries):
            if not entry.tag.matches(instance_type):
                raise ConfigurationError(
                    f"Instance {index} has type {entry.tag}, expected {instance_type!r}.",
                    "All instances of one run must share the same problem type",
                    {"index": index},
                )
        object.__setattr__(self, "_entries", entries)
        object.__setattr__(self, "_instance_type", instance_type)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("InstanceRegistry is read-only")

    def __getitem__(self, index: Any) -> Any:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ErasedInstance]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"InstanceRegistry(n={len(self._entries)}, type={self._instance_type!r})"

    @property
    def instance_type(self) -> Any:
        return self._instance_type

    def indices(self) -> list[int]:
        """Instance identifiers as exposed to the engine."""
        return list(range(len(self._entries)))

    def get(self, index: int | None, expected: Any = object) -> Any | None:
        """
        Resolve `index` and re-specialise the entry to `expected`.

        Returns None if the index is absent or out of range, or if the entry
        has a different type than expected.
        """
        if index is None or not 0 <= index < len(self._entries):
            return None
        entry = self._entries[index]
        value = entry.downcast(expected)
        if value is None:
            _logger().debug("Instance %d has type %s, not %r", index, entry.tag, expected)
        return value


__all__ = ["ProblemInstance", "TypeTag", "ErasedInstance", "InstanceRegistry"]
