"""Turn anything that was raised into an ErrorValue.

This is the last line of defense at the composable boundary, so it accepts
any value and never raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from composable_functions.core.result_primitives import ErrorKind, ErrorValue
from composable_functions.errors import ContextError, InputError


def normalize(value: Any) -> ErrorValue:
    """Return a normalized ErrorValue for *value*.

    Rules, in order:
    - ErrorValue instances are returned unchanged.
    - InputError/ContextError keep their kind and path.
    - Other exceptions use ``str(exc)``, or the class name when that is empty.
    - Objects with a string ``message`` attribute (or mapping key) use it.
    - Anything else is stringified.

    The original value is always kept as ``cause``.
    """
    if isinstance(value, ErrorValue):
        return value
    if isinstance(value, InputError):
        return ErrorValue(_exc_message(value), value, ErrorKind.INPUT, value.path)
    if isinstance(value, ContextError):
        return ErrorValue(_exc_message(value), value, ErrorKind.CONTEXT, value.path)
    if isinstance(value, BaseException):
        return ErrorValue(_exc_message(value) or type(value).__name__, value)

    message = _message_field(value)
    if message is None:
        message = _safe_str(value)
    return ErrorValue(message, value)


def normalize_all(values: Any) -> tuple[ErrorValue, ...]:
    """Normalize an iterable of raised values; a lone value counts as one."""
    if isinstance(values, (str, bytes, Mapping, BaseException, ErrorValue)):
        return (normalize(values),)
    try:
        items = list(values)
    except TypeError:
        return (normalize(values),)
    return tuple(normalize(v) for v in items)


def _exc_message(exc: BaseException) -> str:
    # ComposableError.__str__ appends the hint; the message is args[0].
    if isinstance(exc, (InputError, ContextError)) and exc.args:
        return _safe_str(exc.args[0])
    return _safe_str(exc)


def _message_field(value: Any) -> str | None:
    try:
        if isinstance(value, Mapping):
            message = value.get("message")
        else:
            message = getattr(value, "message", None)
    except Exception:
        return None
    return message if isinstance(message, str) else None


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return object.__repr__(value)
