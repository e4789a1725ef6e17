from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from iracebind.foundation.exceptions import MissingInstanceError, TypeMismatchError

from .instance import InstanceRegistry
from .param_space import ParamSpace
from .params import Params, decode_params

P = TypeVar("P")

_MISSING = object()


def _field(record: Any, name: str, default: Any = _MISSING) -> Any:
    """Read `name` from a mapping or from an attribute-style record."""
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
    elif hasattr(record, name):
        return getattr(record, name)
    if default is _MISSING:
        raise TypeMismatchError(name, "field of the experiment record", None)
    return default


def _optional_index(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not hasattr(value, "__index__"):
        raise TypeMismatchError("instance", "instance index", value)
    return value.__index__()


def _seed(value: Any) -> int:
    if isinstance(value, bool) or not hasattr(value, "__index__"):
        raise TypeMismatchError("seed", "unsigned 64-bit integer", value)
    seed = value.__index__()
    if not 0 <= seed < 2**64:
        raise TypeMismatchError("seed", "unsigned 64-bit integer", value)
    return seed


@dataclass
class Experiment(Generic[P]):
    """
    A single execution of the target runner.

    The experiment specifies the parameters, seed and problem instance to run
    the target algorithm with. `instance` is None when the engine sent no
    instance or when the registered instance is not of the runner's type.
    """

    id: str
    seed: int
    params: Params
    instance_id: Optional[str] = None
    instance: Optional[P] = None
    instance_index: Optional[int] = None

    def require_instance(self) -> P:
        """Return the instance or raise MissingInstanceError."""
        if self.instance is None:
            raise MissingInstanceError(self.instance_index)
        return self.instance

    @classmethod
    def from_record(
        cls,
        record: Any,
        instances: InstanceRegistry,
        param_space: ParamSpace,
        instance_type: Any = object,
    ) -> Experiment[Any]:
        """
        Build an experiment from a raw engine record.

        The record carries ``configuration_id``, ``seed``, ``instance_id``,
        ``instance`` (an index into `instances`) and ``configuration``.
        """
        experiment_id = str(_field(record, "configuration_id"))
        seed = _seed(_field(record, "seed"))

        instance_id = _field(record, "instance_id", None)
        index = _optional_index(_field(record, "instance", None))
        instance = instances.get(index, instance_type)

        configuration = _field(record, "configuration")
        if not isinstance(configuration, Mapping):
            raise TypeMismatchError("configuration", "mapping of parameter values", configuration)
        params = decode_params(configuration, param_space)

        return cls(
            id=experiment_id,
            seed=seed,
            params=params,
            instance_id=None if instance_id is None else str(instance_id),
            instance=instance,
            instance_index=index,
        )


__all__ = ["Experiment"]
