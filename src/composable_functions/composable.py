"""The composable boundary: the one place exceptions become Failures.

A ``Step`` is an immutable async callable that always returns a ``Result``.
``composable`` builds one from any sync or async function; combinators build
new Steps out of existing ones and never raise at call time.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import dataclasses
import inspect
import logging
from typing import Any

from composable_functions.config import get_config
from composable_functions.core._validation import _require_callable
from composable_functions.core.normalize import normalize
from composable_functions.core.result_primitives import Failure, Result, Success
from composable_functions.errors import ErrorList

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class Step[T]:
    """An async callable returning ``Result`` instead of raising.

    Call it with ``(input, context)``; both are optional. Steps are created
    at composition time and may be invoked any number of times.
    """

    run: Callable[..., Awaitable[Result[T]]] = dataclasses.field(repr=False)
    name: str = "<step>"

    async def __call__(self, *args: Any, **kwargs: Any) -> Result[T]:
        return await self.run(*args, **kwargs)


def is_step(value: object) -> bool:
    """Return True when *value* is a Step."""
    return isinstance(value, Step)


def callable_name(fn: Any) -> str:
    if isinstance(fn, Step):
        return fn.name
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


def composable[T](fn: Callable[..., T], *, name: str | None = None) -> Step[Any]:
    """Wrap *fn* so every call returns a Result.

    Works with plain and coroutine functions and as a decorator. Raised
    exceptions are normalized into a single-error Failure; an ``ErrorList``
    contributes its whole error list. ``CancelledError`` and other
    non-``Exception`` signals propagate. Steps are returned unchanged.

    Raises:
        ConfigurationError: when the environment holds an invalid
            configuration; it is resolved while the step is built.

    Example:
        @composable
        async def fetch_user(user_id, ctx):
            return await ctx["db"].get(user_id)
    """
    if isinstance(fn, Step):
        return fn
    _require_callable(fn, "composable()")
    # Resolve now: a bad environment raises here, never from inside a step.
    get_config()
    step_name = name or callable_name(fn)

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        try:
            value = fn(*args, **kwargs)
            if inspect.isawaitable(value):
                value = await value
        except ErrorList as e:
            log.debug("Step %s failed with %d nested error(s)", step_name, len(e.errors))
            return Failure(e.errors)
        except Exception as e:
            log.debug(
                "Step %s raised %s: %s",
                step_name,
                type(e).__name__,
                e,
                exc_info=e if get_config().log_tracebacks else None,
            )
            return Failure((normalize(e),))
        return Success(value)

    return Step(run, step_name)


def as_step(fn: Any, field_name: str) -> Step[Any]:
    """Coerce a step-like argument to a Step, validating it first."""
    if isinstance(fn, Step):
        return fn
    _require_callable(fn, field_name)
    return composable(fn)


__all__ = ["Step", "as_step", "composable", "is_step"]
