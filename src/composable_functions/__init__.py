"""composable-functions: compose functions that may fail.

Public API:
    - composable(): wrap a function so it returns a Result instead of raising
    - make_step(): build steps that parse their input and context first
    - pipe/sequence/all/collect/merge/first/branch: combine steps
    - map/map_error/catch_error/from_success: transform results
    - serialize(): plain-data form of a Result
"""

from __future__ import annotations

import logging

from composable_functions.combinators import (
    all,
    apply_context,
    branch,
    catch_error,
    collect,
    collect_sequence,
    first,
    from_success,
    map,
    map_error,
    map_parameters,
    merge,
    merge_objects,
    pipe,
    sequence,
    trace,
)
from composable_functions.composable import Step, composable, is_step
from composable_functions.config import Config, config_scope, get_config
from composable_functions.core.normalize import normalize, normalize_all
from composable_functions.core.result_primitives import (
    ErrorKind,
    ErrorValue,
    Failure,
    Result,
    Success,
    failure,
    success,
)
from composable_functions.errors import (
    ComposableError,
    CompositionError,
    ConfigurationError,
    ContextError,
    ErrorList,
    InputError,
    InvariantViolationError,
)
from composable_functions.parsers import (
    Issue,
    ParseFailure,
    Parser,
    ParseSuccess,
    from_pydantic,
)
from composable_functions.schema import apply_schema, make_step
from composable_functions.serializer import serialize, serialize_error

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("composable-functions")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("composable_functions").addHandler(logging.NullHandler())

__all__ = [
    "ComposableError",
    "CompositionError",
    "Config",
    "ConfigurationError",
    "ContextError",
    "ErrorKind",
    "ErrorList",
    "ErrorValue",
    "Failure",
    "InputError",
    "InvariantViolationError",
    "Issue",
    "ParseFailure",
    "ParseSuccess",
    "Parser",
    "Result",
    "Step",
    "Success",
    "all",
    "apply_context",
    "apply_schema",
    "branch",
    "catch_error",
    "collect",
    "collect_sequence",
    "composable",
    "config_scope",
    "failure",
    "first",
    "from_pydantic",
    "from_success",
    "get_config",
    "is_step",
    "make_step",
    "map",
    "map_error",
    "map_parameters",
    "merge",
    "merge_objects",
    "normalize",
    "normalize_all",
    "pipe",
    "sequence",
    "serialize",
    "serialize_error",
    "success",
    "trace",
]
