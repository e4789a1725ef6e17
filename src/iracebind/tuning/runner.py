"""
Target runners and their type-erased adapter.

A target runner executes the host algorithm for one experiment and returns a
single scalar. The engine calls back into one non-generic callable
(`TargetRunnerAdapter`), which decodes the raw experiment, resolves the
instance as the runner's `instance_type` and only then calls the runner.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from iracebind.foundation.exceptions import IraceBindError, TargetRunnerError

from .experiment import Experiment
from .instance import InstanceRegistry
from .param_space import ParamSpace
from .scenario import Scenario

P = TypeVar("P")

RunnerFn = Callable[[Scenario, Experiment[Any]], float]


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class TargetRunner(ABC, Generic[P]):
    """
    Executes the target algorithm with the parameters, instance and seed of an
    experiment and returns its performance as a single value (lower is better
    for irace).

    Set `instance_type` to the class (or subscripted generic) the runner expects
    its instances to be. Instances passed as a list must match it (subclasses
    included); entries of a prebuilt InstanceRegistry that do not match are
    resolved as missing.
    """

    instance_type: Any = None

    @abstractmethod
    def run(self, scenario: Scenario, experiment: Experiment[P]) -> float:
        raise NotImplementedError


class FunctionRunner(TargetRunner[Any]):
    """Adapts a plain ``fn(scenario, experiment) -> float`` to TargetRunner."""

    def __init__(self, fn: RunnerFn, instance_type: Any = None) -> None:
        self.fn = fn
        self.instance_type = instance_type

    def run(self, scenario: Scenario, experiment: Experiment[Any]) -> float:
        return self.fn(scenario, experiment)

    def __repr__(self) -> str:
        return f"FunctionRunner({getattr(self.fn, '__name__', self.fn)!r})"


def as_target_runner(runner: TargetRunner[Any] | RunnerFn, instance_type: Any = None) -> TargetRunner[Any]:
    if isinstance(runner, TargetRunner):
        return runner
    if callable(runner):
        return FunctionRunner(runner, instance_type)
    raise TypeError(f"Expected a TargetRunner or callable, got {type(runner).__name__}")


class TargetRunnerAdapter:
    """
    The single callable handed to the engine.

    Holds the runner together with everything needed to rebuild a typed
    experiment from the engine's raw record: the instance registry, the
    scenario and the (frozen) parameter space. Nothing here is mutated after
    construction, so concurrent calls from the engine's workers are safe.
    """

    def __init__(
        self,
        runner: TargetRunner[Any] | RunnerFn,
        instances: Iterable[Any] | InstanceRegistry,
        scenario: Scenario,
        param_space: ParamSpace,
        instance_type: Any = None,
    ) -> None:
        self.runner = as_target_runner(runner, instance_type)
        if instance_type is None:
            instance_type = self.runner.instance_type
        if isinstance(instances, InstanceRegistry):
            self.instances = instances
        else:
            self.instances = InstanceRegistry(instances, instance_type)
        self.instance_type = instance_type if instance_type is not None else object
        self.scenario = scenario
        self.param_space = param_space.require_flat().freeze()

    @property
    def num_instances(self) -> int:
        return len(self.instances)

    def dispatch(self, record: Any) -> Experiment[Any]:
        """Decode a raw engine record into a typed experiment."""
        return Experiment.from_record(record, self.instances, self.param_space, self.instance_type)

    def __call__(self, scenario: Any, experiment: Any) -> float:
        """
        Engine entry point.

        `scenario` is the engine's own scenario object and is ignored; the
        runner always sees the host Scenario. Any failure is reported as
        TargetRunnerError and only affects this invocation.
        """
        experiment_id = None
        try:
            typed = self.dispatch(experiment)
            experiment_id = typed.id
            result = float(self.runner.run(self.scenario, typed))
        except IraceBindError as exc:
            _logger().warning("Experiment %s rejected: %s", experiment_id, exc.message)
            raise TargetRunnerError(experiment_id, exc) from exc
        except Exception as exc:
            _logger().warning("Experiment %s failed: %s: %s", experiment_id, type(exc).__name__, exc)
            raise TargetRunnerError(experiment_id, exc) from exc
        _logger().debug("Experiment %s (seed=%d) -> %r", experiment_id, typed.seed, result)
        return result

    def __repr__(self) -> str:
        return f"TargetRunnerAdapter(runner={self.runner!r}, instances={self.num_instances})"


__all__ = ["TargetRunner", "FunctionRunner", "RunnerFn", "as_target_runner", "TargetRunnerAdapter"]
