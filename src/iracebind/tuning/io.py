from __future__ import annotations

import csv
import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from iracebind.foundation.exceptions import ConfigurationError

from .param_space import ParamSpace
from .scenario import Scenario


def load_spec_file(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML or JSON tuning specification.
    """
    spec_path = Path(path).expanduser().resolve()
    if not spec_path.exists():
        raise FileNotFoundError(f"Config file '{spec_path}' does not exist.")
    with spec_path.open("r", encoding="utf-8") as fh:
        if spec_path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(fh) or {}
        else:
            data = json.load(fh)
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config file '{spec_path}' must contain a mapping at the top level.")
    return dict(data)


def tuning_spec_from_dict(data: Mapping[str, Any]) -> tuple[Scenario, ParamSpace]:
    """
    Build the scenario and the flattened parameter space from a spec mapping::

        scenario:
          max_experiments: 180
          num_jobs: 2
        parameters:
          population_size: {type: integer, lower: 5, upper: 256}
          v_max: {type: real, lower: 1.0e-4, upper: 1.0, log: true}
    """
    if "parameters" not in data:
        raise ConfigurationError("Tuning spec has no 'parameters' section.")
    scenario = Scenario.from_dict(data.get("scenario") or {})
    space = ParamSpace.from_dict(data["parameters"] or {})
    space.flatten()
    return scenario, space


def load_tuning_spec(path: str | Path) -> tuple[Scenario, ParamSpace]:
    """Load a scenario and a flattened parameter space from YAML/JSON."""
    return tuning_spec_from_dict(load_spec_file(path))


def configurations_to_records(configurations: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Plain dicts, one per configuration, tagged with their rank in the engine's result."""
    return [{"rank": rank, "config": dict(config)} for rank, config in enumerate(configurations)]


def save_configurations_json(configurations: Sequence[Mapping[str, Any]], path: str | Path) -> None:
    """Persist decoded configurations to JSON. Opaque categorical values are written with str()."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(configurations_to_records(configurations), fh, indent=2, default=str)


def save_configurations_csv(configurations: Sequence[Mapping[str, Any]], path: str | Path) -> None:
    """Persist decoded configurations to CSV, one column per parameter."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    columns: list[str] = []
    for config in configurations:
        for name in config:
            if name not in columns:
                columns.append(name)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["rank", *columns])
        for rank, config in enumerate(configurations):
            writer.writerow([rank, *(config.get(name, "") for name in columns)])


__all__ = [
    "load_spec_file",
    "tuning_spec_from_dict",
    "load_tuning_spec",
    "configurations_to_records",
    "save_configurations_json",
    "save_configurations_csv",
]
