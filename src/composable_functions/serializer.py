"""Transport shapes for Results.

``serialize`` turns a Result into plain data, suitable for JSON once the
success value is. Failures partition their errors by kind.
"""

from __future__ import annotations

from typing import Any, Literal, TypedDict

from composable_functions.core.result_primitives import (
    ErrorKind,
    ErrorValue,
    Failure,
    Result,
)


class SerializedError(TypedDict):
    message: str
    kind: str
    path: list[str]
    #: Class name of the cause when it is an exception, ``"Error"`` otherwise.
    name: str


class SerializedSuccess(TypedDict):
    ok: Literal[True]
    value: Any


class SerializedFailure(TypedDict):
    ok: Literal[False]
    #: Generic errors only; input/context errors have their own lists.
    errors: list[SerializedError]
    input_errors: list[SerializedError]
    context_errors: list[SerializedError]


SerializedResult = SerializedSuccess | SerializedFailure


def serialize_error(error: ErrorValue) -> SerializedError:
    """Return the plain-data form of one error."""
    cause = error.cause
    return {
        "message": error.message,
        "kind": error.kind.value,
        "path": list(error.path),
        "name": type(cause).__name__ if isinstance(cause, BaseException) else "Error",
    }


def serialize(result: Result[Any]) -> SerializedResult:
    """Return the plain-data form of a Result.

    Example:
        serialize(await increment("abc"))
        # {"ok": False, "errors": [], "input_errors": [{...}], "context_errors": []}
    """
    if not isinstance(result, Failure):
        return {"ok": True, "value": result.value}

    buckets: dict[ErrorKind, list[SerializedError]] = {kind: [] for kind in ErrorKind}
    for error in result.errors:
        buckets[error.kind].append(serialize_error(error))
    return {
        "ok": False,
        "errors": buckets[ErrorKind.GENERIC],
        "input_errors": buckets[ErrorKind.INPUT],
        "context_errors": buckets[ErrorKind.CONTEXT],
    }


__all__ = [
    "SerializedError",
    "SerializedFailure",
    "SerializedResult",
    "SerializedSuccess",
    "serialize",
    "serialize_error",
]
