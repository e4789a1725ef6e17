"""
Declaring and flattening a parameter space.

Usage:
    python examples/parameter_space.py
"""
from __future__ import annotations

from enum import Enum

from iracebind import ParamSpace


class Option(Enum):
    OPTION_1 = 1
    OPTION_2 = 2
    OPTION_3 = 3


def main():
    space = (
        ParamSpace()
        .with_real("initial_temp", 0.02, 5e4, log=True)
        .with_real("restart_temp_ratio", 1e-4, 1.0, log=True)
        .with_bool("no_local_search")
        .with_integer("population_size", 5, 64)
        .with_categorical("option", list(Option))
        .with_categorical_names("answer", ["yes", "no"])
        .with_nested("0", ParamSpace().with_real("nested_parameter", 0.0, 1.0))
    )
    print(space)

    space.flatten()
    print(space)
    print(space.to_dict())


if __name__ == "__main__":
    main()
