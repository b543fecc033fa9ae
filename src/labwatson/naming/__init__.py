"""Naming: parameter access and savename."""

from labwatson.naming.access import (
    DataclassParameters,
    NamedTupleParameters,
    ParameterAdapter,
    access,
    all_access,
    as_parameters,
    default_allowed,
    default_prefix,
    dict_of,
    dict_to_ntuple,
    ntuple_to_dict,
    register_adapter,
    unregister_adapter,
)
from labwatson.naming.savename import encode, render_value, savename

__all__ = [
    # Access
    "ParameterAdapter",
    "DataclassParameters",
    "NamedTupleParameters",
    "as_parameters",
    "access",
    "all_access",
    "default_allowed",
    "default_prefix",
    "register_adapter",
    "unregister_adapter",
    # Conversions
    "dict_of",
    "dict_to_ntuple",
    "ntuple_to_dict",
    # Names
    "encode",
    "render_value",
    "savename",
]
