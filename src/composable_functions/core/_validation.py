"""Composition-time validation helpers shared by the combinators.

Misuse is reported while a composition is being built, never when it runs:
a running step only ever returns Results.
"""

from __future__ import annotations

from collections.abc import Mapping
import inspect
import typing

from composable_functions.errors import CompositionError


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = CompositionError,
    field_name: str | None = None,
    hint: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        text = f"{field_name}: {message}" if field_name else message
        if issubclass(exc, CompositionError):
            raise exc(text, hint=hint)
        raise exc(text)


def _require_callable(func: typing.Any, field_name: str) -> None:
    _require(
        condition=callable(func),
        message=f"must be callable, got {type(func).__name__}",
        field_name=field_name,
        hint="Pass a function, a coroutine function or a Step.",
    )


def _require_steps(steps: tuple[typing.Any, ...], combinator: str) -> None:
    """Validate a non-empty positional list of callables."""
    _require(
        condition=len(steps) > 0,
        message="requires at least one step",
        field_name=combinator,
    )
    for i, step in enumerate(steps):
        _require_callable(step, f"{combinator}() argument {i}")


def _require_named_steps(steps: typing.Any, combinator: str) -> None:
    _require(
        condition=isinstance(steps, Mapping),
        message=f"expects a mapping of name to step, got {type(steps).__name__}",
        field_name=combinator,
    )
    _require(
        condition=len(steps) > 0,
        message="requires at least one step",
        field_name=combinator,
    )
    for key, step in steps.items():
        _require_callable(step, f"{combinator}()[{key!r}]")


def _accepts_positional(func: typing.Any, count: int) -> bool:
    """Return True when *func* can be called with *count* positional arguments.

    Callables whose signature cannot be introspected are assumed to accept them.
    """
    try:
        sig = inspect.signature(func)
    except (ValueError, TypeError):
        return True
    params = list(sig.parameters.values())
    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return True
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    return len(positional) >= count
