"""
Tuning a small particle swarm optimiser on benchmark functions with irace.

Usage:
    IRACEPY_HOME=/path/to/iracepy python examples/pso_tuning.py

Requirements:
    the irace Python wrapper (and R with the irace package) must be importable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from iracebind import (
    ParamSpace,
    ProblemInstance,
    Scenario,
    TargetRunner,
    Verbosity,
    configure_iracebind_logging,
    irace,
)
from iracebind.tuning import save_configurations_json


@dataclass(frozen=True)
class BenchmarkFunction:
    name: str
    dim: int
    fn: Callable[[np.ndarray], np.ndarray]
    bound: float


def sphere(x: np.ndarray) -> np.ndarray:
    return np.sum(x * x, axis=-1)


def rastrigin(x: np.ndarray) -> np.ndarray:
    return 10.0 * x.shape[-1] + np.sum(x * x - 10.0 * np.cos(2.0 * np.pi * x), axis=-1)


class CountingEvaluator:
    def __init__(self):
        self.evaluations = 0

    def __call__(self, problem: BenchmarkFunction, x: np.ndarray) -> np.ndarray:
        self.evaluations += x.shape[0]
        return problem.fn(x)


class PsoRunner(TargetRunner[ProblemInstance[BenchmarkFunction]]):
    instance_type = ProblemInstance[BenchmarkFunction]

    def __init__(self, max_evaluations: int = 20_000):
        self.max_evaluations = max_evaluations

    def run(self, scenario, experiment):
        problem, evaluate = experiment.require_instance().unpack()
        params = experiment.params
        pop_size = params.require("population_size", int)
        v_max = params.require("v_max", float) * problem.bound
        w_start = params.require("initial_inertia_weight", float)
        w_end = w_start * params.require("end_inertia_weight_ratio", float)
        c_1 = params.require("c_1", float)
        c_2 = params.require("c_2", float)

        rng = np.random.default_rng(experiment.seed)
        x = rng.uniform(-problem.bound, problem.bound, size=(pop_size, problem.dim))
        v = rng.uniform(-v_max, v_max, size=x.shape)
        f = evaluate(problem, x)
        best_x, best_f = x.copy(), f.copy()
        g = int(np.argmin(best_f))

        while evaluate.evaluations < self.max_evaluations and best_f[g] > 1e-6:
            progress = evaluate.evaluations / self.max_evaluations
            w = w_start + (w_end - w_start) * progress
            r_1, r_2 = rng.random(x.shape), rng.random(x.shape)
            v = w * v + c_1 * r_1 * (best_x - x) + c_2 * r_2 * (best_x[g] - x)
            v = np.clip(v, -v_max, v_max)
            x = np.clip(x + v, -problem.bound, problem.bound)
            f = evaluate(problem, x)
            improved = f < best_f
            best_x[improved], best_f[improved] = x[improved], f[improved]
            g = int(np.argmin(best_f))

        return float(best_f[g])


def main():
    configure_iracebind_logging(level=logging.INFO)

    instances = [
        ProblemInstance(BenchmarkFunction("sphere", 10, sphere, 5.12), CountingEvaluator(), name="sphere-10"),
        ProblemInstance(BenchmarkFunction("rastrigin", 10, rastrigin, 5.12), CountingEvaluator(), name="rastrigin-10"),
    ]
    scenario = Scenario(max_experiments=180, num_jobs=1, seed=1, verbose=Verbosity.MINIMAL)
    space = (
        ParamSpace()
        .add_integer("population_size", 5, 256)
        .add_real("v_max", 1e-4, 1.0, log=True)
        .add_real("initial_inertia_weight", 0.5, 3.0)
        .add_real("end_inertia_weight_ratio", 0.0, 1.0)
        .add_real("c_1", 0.3, 3.0)
        .add_real("c_2", 0.3, 3.0)
    )

    elites = irace(PsoRunner(), instances, scenario, space)
    for rank, config in enumerate(elites):
        print(rank, config.to_dict())
    save_configurations_json(elites, "results/pso_elites.json")


if __name__ == "__main__":
    main()
