import csv
import json

import pytest
import yaml

from iracebind.foundation.exceptions import ConfigurationError
from iracebind.tuning import (
    Categorical,
    Integer,
    Real,
    Scenario,
    Verbosity,
    configurations_to_records,
    load_tuning_spec,
    save_configurations_csv,
    save_configurations_json,
    tuning_spec_from_dict,
)


def test_scenario_defaults():
    scenario = Scenario()
    assert scenario.elitist is True
    assert scenario.deterministic is False
    assert scenario.num_jobs == 1
    assert scenario.seed is None
    assert scenario.verbose is Verbosity.SILENT


def test_scenario_record_lists_instance_indices():
    record = Scenario(max_experiments=500, seed=3, verbose=2, num_jobs=2).to_record(4)
    assert record == {
        "max_experiments": 500,
        "elitist": True,
        "deterministic": False,
        "instances": [0, 1, 2, 3],
        "n_jobs": 2,
        "seed": 3,
        "verbose": 2,
    }


def test_scenario_record_keeps_optional_paths_when_set():
    record = Scenario(log_file="irace.Rdata", exec_dir="/tmp/run", min_experiments=10).to_record(0)
    assert record["log_file"] == "irace.Rdata"
    assert record["exec_dir"] == "/tmp/run"
    assert record["min_experiments"] == 10
    assert record["instances"] == []
    assert "max_experiments" not in record


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_experiments": 0},
        {"min_experiments": -5},
        {"max_experiments": 10, "min_experiments": 20},
        {"num_jobs": 0},
        {"seed": -1},
        {"seed": 2**64},
    ],
)
def test_invalid_scenario_is_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        Scenario(**kwargs)


def test_scenario_is_immutable():
    scenario = Scenario()
    with pytest.raises(AttributeError):
        scenario.num_jobs = 4


def test_scenario_from_dict():
    scenario = Scenario.from_dict({"max_experiments": 200, "verbose": "debug", "deterministic": True})
    assert scenario.verbose is Verbosity.DEBUG
    assert scenario.deterministic is True
    with pytest.raises(ConfigurationError, match="budget"):
        Scenario.from_dict({"budget": 200})


def _spec():
    return {
        "scenario": {"max_experiments": 180, "num_jobs": 2, "seed": 5},
        "parameters": {
            "population_size": {"type": "integer", "lower": 5, "upper": 256},
            "v_max": {"type": "real", "lower": 1.0e-4, "upper": 1.0, "log": True},
            "crossover": {
                "type": "nested",
                "parameters": {
                    "kind": {"type": "categorical", "variants": ["sbx", "blx"]},
                    "elitism": {"type": "bool"},
                },
            },
        },
    }


def test_tuning_spec_is_flattened():
    scenario, space = tuning_spec_from_dict(_spec())
    assert scenario == Scenario(max_experiments=180, num_jobs=2, seed=5)
    assert space.names() == ["population_size", "v_max", "crossover.kind", "crossover.elitism"]
    assert space["population_size"] == Integer("population_size", 5, 256)
    assert space["v_max"] == Real("v_max", 1.0e-4, 1.0, log=True)
    assert space["crossover.kind"] == Categorical("crossover.kind", ("sbx", "blx"))


def test_tuning_spec_requires_parameters():
    with pytest.raises(ConfigurationError):
        tuning_spec_from_dict({"scenario": {}})


@pytest.mark.parametrize("suffix", [".yaml", ".json"])
def test_load_tuning_spec_from_file(tmp_path, suffix):
    path = tmp_path / f"tuning{suffix}"
    if suffix == ".yaml":
        path.write_text(yaml.safe_dump(_spec()), encoding="utf-8")
    else:
        path.write_text(json.dumps(_spec()), encoding="utf-8")

    scenario, space = load_tuning_spec(path)
    assert scenario.max_experiments == 180
    assert len(space) == 4
    assert space.is_flat()


def test_load_tuning_spec_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_tuning_spec(tmp_path / "missing.yaml")
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_tuning_spec(path)


class Strategy:
    def __str__(self):
        return "strategy"


def test_configurations_are_saved_as_json(tmp_path):
    configurations = [{"x": 0.5, "mode": Strategy()}, {"x": 0.25, "mode": "b"}]
    path = tmp_path / "out" / "elites.json"
    save_configurations_json(configurations, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [
        {"rank": 0, "config": {"x": 0.5, "mode": "strategy"}},
        {"rank": 1, "config": {"x": 0.25, "mode": "b"}},
    ]
    assert configurations_to_records(configurations)[1]["rank"] == 1


def test_configurations_are_saved_as_csv(tmp_path):
    configurations = [{"x": 0.5, "flag": True}, {"x": 0.25, "n": 3}]
    path = tmp_path / "elites.csv"
    save_configurations_csv(configurations, path)

    with path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    assert rows == [
        ["rank", "x", "flag", "n"],
        ["0", "0.5", "True", ""],
        ["1", "0.25", "", "3"],
    ]
