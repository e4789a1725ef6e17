from __future__ import annotations

import math
from typing import Any

import numpy as np
import pytest
from joblib import Parallel, delayed

from iracebind.tuning import ParamSpace, Scenario


class FakeEngine:
    """
    In-process stand-in for the irace wrapper.

    Samples `num_configurations` configurations from the encoded parameter
    space, evaluates each on every instance through the target runner and
    returns the `num_elites` best ones. Failed invocations count as +inf.
    """

    def __init__(self, num_configurations: int = 6, num_elites: int = 2) -> None:
        self.num_configurations = num_configurations
        self.num_elites = num_elites
        self.records: list[dict[str, Any]] = []
        self.errors: list[BaseException] = []
        self.scenarios: list[dict[str, Any]] = []
        self.parameter_spaces: list[list[dict[str, Any]]] = []

    @staticmethod
    def Real(**kwargs: Any) -> dict[str, Any]:
        return {"type": "real", **kwargs}

    @staticmethod
    def Integer(**kwargs: Any) -> dict[str, Any]:
        return {"type": "integer", **kwargs}

    @staticmethod
    def Bool(**kwargs: Any) -> dict[str, Any]:
        return {"type": "bool", **kwargs}

    @staticmethod
    def Categorical(**kwargs: Any) -> dict[str, Any]:
        return {"type": "categorical", **kwargs}

    @staticmethod
    def ParameterSpace(params: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return list(params)

    @staticmethod
    def Scenario(**kwargs: Any) -> dict[str, Any]:
        return dict(kwargs)

    @staticmethod
    def Run(**kwargs: Any) -> dict[str, Any]:
        return dict(kwargs)

    @staticmethod
    def _sample(parameter_space: list[dict[str, Any]], rng: np.random.Generator) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for param in parameter_space:
            if param["type"] == "real":
                config[param["name"]] = float(rng.uniform(param["lower"], param["upper"]))
            elif param["type"] == "integer":
                config[param["name"]] = int(rng.integers(param["lower"], param["upper"] + 1))
            elif param["type"] == "bool":
                config[param["name"]] = bool(rng.integers(0, 2))
            else:
                config[param["name"]] = int(rng.choice(param["variants"]))
        return config

    def _invoke(self, target_runner: Any, scenario: dict[str, Any], record: dict[str, Any]) -> float:
        try:
            return float(target_runner(scenario, record))
        except ValueError as exc:
            self.errors.append(exc)
            return math.inf

    def irace(self, *, target_runner: Any, scenario: dict[str, Any], parameter_space: list[dict[str, Any]]) -> list:
        self.scenarios.append(scenario)
        self.parameter_spaces.append(parameter_space)
        rng = np.random.default_rng(scenario.get("seed") or 0)
        configs = [self._sample(parameter_space, rng) for _ in range(self.num_configurations)]
        instances = scenario["instances"] or [None]

        records = []
        for config_id, config in enumerate(configs, start=1):
            for instance in instances:
                records.append(
                    {
                        "configuration_id": str(config_id),
                        "seed": int(rng.integers(0, 2**31)),
                        "instance_id": None if instance is None else f"instance_{instance}",
                        "instance": instance,
                        "configuration": dict(config),
                    }
                )
        self.records.extend(records)

        n_jobs = int(scenario.get("n_jobs", 1))
        if n_jobs > 1:
            scores = Parallel(n_jobs=n_jobs, backend="threading")(
                delayed(self._invoke)(target_runner, scenario, record) for record in records
            )
        else:
            scores = [self._invoke(target_runner, scenario, record) for record in records]

        per_config = np.asarray(scores, dtype=float).reshape(len(configs), len(instances)).mean(axis=1)
        order = np.argsort(per_config, kind="stable")
        return [configs[i] for i in order[: self.num_elites]]

    def multi_irace(self, *, runs: list[dict[str, Any]], n_jobs: int, global_seed: int | None) -> list:
        return [self.irace(**run) for run in runs]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def basic_space() -> ParamSpace:
    return (
        ParamSpace()
        .add_real("x", 0.0, 1.0)
        .add_integer("n", 1, 10)
        .add_bool("flag")
        .add_categorical("mode", ["a", "b", "c"])
    )


@pytest.fixture
def scenario() -> Scenario:
    return Scenario(max_experiments=100, seed=42)
