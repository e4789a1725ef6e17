"""Typed parameter spaces and experiment dispatch for irace.

Parameter types use signature: ParamType(name, ...)
- Real(name, lower, upper, log=False)
- Integer(name, lower, upper, log=False)
- Bool(name)
- Categorical(name, variants)
- Nested(name, space)

Also provides the instance registry, target-runner adapter and the `irace` /
`multi_irace` entry points.
"""

from .bridge import Run, convert_result, irace, multi_irace
from .engine import Engine, engine_initialized, init_engine, register_search_path, resolve_engine
from .experiment import Experiment
from .instance import ErasedInstance, InstanceRegistry, ProblemInstance, TypeTag
from .io import (
    configurations_to_records,
    load_spec_file,
    load_tuning_spec,
    save_configurations_csv,
    save_configurations_json,
    tuning_spec_from_dict,
)
from .param_space import Bool, Categorical, Integer, Nested, ParamSpace, Real, Subspace
from .params import Params, decode_params, decode_value
from .runner import FunctionRunner, TargetRunner, TargetRunnerAdapter, as_target_runner
from .scenario import Scenario, Verbosity

__all__ = [
    # Parameter types
    "ParamSpace",
    "Subspace",
    "Real",
    "Integer",
    "Bool",
    "Categorical",
    "Nested",
    # Decoding
    "Params",
    "decode_params",
    "decode_value",
    # Instances
    "ProblemInstance",
    "InstanceRegistry",
    "ErasedInstance",
    "TypeTag",
    # Experiments and runners
    "Experiment",
    "TargetRunner",
    "FunctionRunner",
    "TargetRunnerAdapter",
    "as_target_runner",
    # Scenario
    "Scenario",
    "Verbosity",
    # Engine
    "Engine",
    "init_engine",
    "engine_initialized",
    "register_search_path",
    "resolve_engine",
    "Run",
    "irace",
    "multi_irace",
    "convert_result",
    # I/O
    "load_spec_file",
    "load_tuning_spec",
    "tuning_spec_from_dict",
    "configurations_to_records",
    "save_configurations_json",
    "save_configurations_csv",
]
