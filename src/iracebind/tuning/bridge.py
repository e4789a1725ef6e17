"""
Calling the racing engine.

Outbound, the parameter space, scenario and instances are encoded for the
engine and a TargetRunnerAdapter is handed over as the target runner. Inbound,
the configurations the engine returns are decoded against the same parameter
space, in the order the engine returned them.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from iracebind.foundation.exceptions import EngineResultError

from .engine import Engine, resolve_engine
from .param_space import ParamSpace
from .params import Params, decode_params
from .runner import RunnerFn, TargetRunner, TargetRunnerAdapter
from .scenario import Scenario

P = TypeVar("P")


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


@dataclass
class Run(Generic[P]):
    """One tuning run of a `multi_irace` batch."""

    target_runner: TargetRunner[P] | RunnerFn
    instances: Sequence[P]
    scenario: Scenario
    param_space: ParamSpace
    instance_type: Any = None
    adapter: TargetRunnerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.instances = list(self.instances)
        self.adapter = TargetRunnerAdapter(
            self.target_runner,
            self.instances,
            self.scenario,
            self.param_space,
            self.instance_type,
        )

    def engine_kwargs(self, engine: Engine) -> dict[str, Any]:
        """Keyword arguments for the engine's `irace` / `Run`."""
        return {
            "target_runner": self.adapter,
            "scenario": self.scenario.encode_for_engine(engine, self.adapter.num_instances),
            "parameter_space": self.param_space.encode_for_engine(engine),
        }


def convert_result(result: Any, param_space: ParamSpace) -> list[Params]:
    """Decode the engine's list of configurations against `param_space`."""
    if isinstance(result, (str, bytes, Mapping)) or not isinstance(result, Sequence):
        raise EngineResultError(f"Engine result should be a list, got {type(result).__name__}.")
    configurations: list[Params] = []
    for item in result:
        if not isinstance(item, Mapping):
            raise EngineResultError(f"Engine result should be a list of dicts, got an item of type {type(item).__name__}.")
        configurations.append(decode_params(item, param_space))
    return configurations


def irace(
    target_runner: TargetRunner[P] | RunnerFn,
    instances: Iterable[P],
    scenario: Scenario,
    param_space: ParamSpace,
    *,
    instance_type: Any = None,
    engine: Any = None,
) -> list[Params]:
    """
    Tune `target_runner` with irace and return the elite configurations.

    `param_space` must be flat (see ParamSpace.flatten) and is frozen for the
    duration of the run. `engine` defaults to the process-wide engine module.
    """
    engine = resolve_engine(engine)
    run = Run(target_runner, list(instances), scenario, param_space, instance_type)
    kwargs = run.engine_kwargs(engine)
    _logger().info(
        "Starting irace: %d parameters, %d instances, max_experiments=%s, n_jobs=%d",
        len(param_space),
        run.adapter.num_instances,
        scenario.max_experiments,
        scenario.num_jobs,
    )
    result = engine.irace(**kwargs)
    configurations = convert_result(result, param_space)
    _logger().info("irace returned %d configurations", len(configurations))
    return configurations


def multi_irace(
    runs: Iterable[Run[Any]],
    num_jobs: int,
    global_seed: int | None = None,
    *,
    engine: Any = None,
) -> list[list[Params]]:
    """
    Execute several independent tuning runs in one engine call.

    Returns one list of configurations per run, in the order of `runs`.
    """
    engine = resolve_engine(engine)
    runs = list(runs)
    engine_runs = [engine.Run(**run.engine_kwargs(engine)) for run in runs]
    _logger().info("Starting multi_irace: %d runs, n_jobs=%d", len(runs), num_jobs)
    results = engine.multi_irace(runs=engine_runs, n_jobs=num_jobs, global_seed=global_seed)
    if isinstance(results, (str, bytes, Mapping)) or not isinstance(results, Sequence):
        raise EngineResultError(f"multi_irace result should be a list, got {type(results).__name__}.")
    if len(results) != len(runs):
        raise EngineResultError(f"multi_irace returned {len(results)} results for {len(runs)} runs.")
    return [convert_result(result, run.param_space) for result, run in zip(results, runs)]


__all__ = ["Run", "irace", "multi_irace", "convert_result"]
