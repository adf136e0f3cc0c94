"""Combinators: build new Steps out of existing ones.

Every combinator is a pure function from steps (or plain callables, which
are wrapped with ``composable``) to a new Step. They operate on Result
values only; the composable boundary is the sole place exceptions are
caught.

Sequential combinators (``pipe``, ``sequence``, ``collect_sequence``,
``branch``) await one step at a time. Parallel combinators (``all``,
``collect``, ``merge``, ``first``) start every step through a single
``asyncio.gather`` and resolve only after all of them finished.

Steps are called as ``step(input, *context)``: in a chain, each following
step receives the previous value as its input and the caller's remaining
positional arguments (the context) unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping, Sequence
import dataclasses
import functools
import logging
from typing import Any

from composable_functions.composable import Step, as_step, callable_name, composable
from composable_functions.core._validation import (
    _require_callable,
    _require_named_steps,
    _require_steps,
)
from composable_functions.core.normalize import normalize, normalize_all
from composable_functions.core.result_primitives import (
    ErrorValue,
    Failure,
    Result,
    Success,
)
from composable_functions.errors import ErrorList

log = logging.getLogger(__name__)

EMPTY_MAPPED_ERRORS = "map_error mapper returned no errors"


def _as_steps(fns: Iterable[Any], combinator: str) -> list[Step[Any]]:
    return [as_step(fn, f"{combinator}() argument {i}") for i, fn in enumerate(fns)]


def _label(combinator: str, steps: Iterable[Step[Any]]) -> str:
    return f"{combinator}({', '.join(s.name for s in steps)})"


def _renamed(step: Step[Any], name: str) -> Step[Any]:
    return dataclasses.replace(step, name=name)


def _concat_errors(results: Iterable[Result[Any]]) -> list[ErrorValue]:
    return [err for res in results for err in res.errors]


# --- Sequential ---


def _chain(fns: tuple[Any, ...], combinator: str) -> Step[list[Any]]:
    _require_steps(fns, combinator)
    head, *tail = _as_steps(fns, combinator)
    name = _label(combinator, [head, *tail])

    async def run(*args: Any, **kwargs: Any) -> Result[list[Any]]:
        res = await head(*args, **kwargs)
        if isinstance(res, Failure):
            log.debug("%s short-circuited at step 0 (%s)", name, head.name)
            return res

        context = args[1:]
        values = [res.value]
        for i, step in enumerate(tail, start=1):
            res = await step(values[-1], *context, **kwargs)
            if isinstance(res, Failure):
                log.debug("%s short-circuited at step %d (%s)", name, i, step.name)
                return res
            values.append(res.value)
        return Success(values)

    return Step(run, name)


def sequence(*fns: Any) -> Step[list[Any]]:
    """Run steps left to right, collecting every value in a list.

    Stops at the first failure and returns it; later steps never run.

    Example:
        chain = sequence(parse_id, load_user)
        await chain("42")  # Success([42, <User 42>])
    """
    return _chain(fns, "sequence")


def pipe(*fns: Any) -> Step[Any]:
    """Run steps left to right, threading each value into the next step.

    The result is the last step's value. The context is handed unchanged to
    every step. Stops at the first failure.

    Example:
        to_label = pipe(parse_id, load_user, lambda user: user.name)
    """
    chain = _chain(fns, "pipe")

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        res = await chain(*args, **kwargs)
        if isinstance(res, Failure):
            return res
        return Success(res.value[-1])

    return Step(run, chain.name)


def collect_sequence(fns: Mapping[str, Any]) -> Step[dict[str, Any]]:
    """Like ``sequence`` over a mapping; the result keeps the mapping's keys.

    Steps run in the mapping's iteration order, each one receiving the
    previous step's value.
    """
    _require_named_steps(fns, "collect_sequence")
    keys = list(fns)
    chain = _chain(tuple(fns.values()), "collect_sequence")

    def to_dict(values: list[Any]) -> dict[str, Any]:
        return dict(zip(keys, values, strict=True))

    return _renamed(map(chain, to_dict), chain.name)


# --- Parallel ---


def all(*fns: Any) -> Step[list[Any]]:  # noqa: A001
    """Run steps concurrently with the same arguments.

    Succeeds with the values in step order when every step succeeds;
    otherwise fails with every failing step's errors, concatenated in step
    order. All steps always run to completion.

    Like every combinator taking steps, it needs at least one; an empty
    call raises ``CompositionError``.

    Example:
        both = all(load_profile, load_settings)
        await both(user_id)  # Success([profile, settings])
    """
    return _fan_out(fns, "all")


def _fan_out(fns: tuple[Any, ...], combinator: str) -> Step[list[Any]]:
    _require_steps(fns, combinator)
    steps = _as_steps(fns, combinator)
    name = _label(combinator, steps)

    async def run(*args: Any, **kwargs: Any) -> Result[list[Any]]:
        results = await asyncio.gather(*(step(*args, **kwargs) for step in steps))
        errors = _concat_errors(results)
        if errors:
            failed = sum(1 for res in results if isinstance(res, Failure))
            log.debug("%s: %d of %d step(s) failed", name, failed, len(steps))
            return Failure(tuple(errors))
        return Success([res.value for res in results])

    return Step(run, name)


def _tag(key: str, value: Any) -> dict[str, Any]:
    return {key: value}


def collect(fns: Mapping[str, Any]) -> Step[dict[str, Any]]:
    """Like ``all`` over a mapping; the result keeps the mapping's keys.

    Example:
        page = collect({"user": load_user, "posts": load_posts})
        await page(user_id)  # Success({"user": ..., "posts": [...]})
    """
    _require_named_steps(fns, "collect")
    tagged = [
        map(as_step(fn, f"collect()[{key!r}]"), functools.partial(_tag, key))
        for key, fn in fns.items()
    ]
    name = "collect({})".format(
        ", ".join(f"{key}={callable_name(fn)}" for key, fn in fns.items())
    )
    return _renamed(map(all(*tagged), merge_objects), name)


def merge_objects(objs: Sequence[Any]) -> dict[str, Any]:
    """Shallow-merge mappings left to right; later keys win.

    Raises:
        TypeError: when an element is not a mapping.
    """
    merged: dict[str, Any] = {}
    for i, obj in enumerate(objs):
        if not isinstance(obj, Mapping):
            raise TypeError(
                f"Cannot merge value at position {i}: expected a mapping, got {type(obj).__name__}"
            )
        merged.update(obj)
    return merged


def merge(*fns: Any) -> Step[dict[str, Any]]:
    """Run steps concurrently and shallow-merge their mapping results.

    Later steps win on key collisions. A step whose value is not a mapping
    makes the whole merge fail with a generic error. Prefer ``collect``
    when the parts do not have to share one namespace.
    """
    parts = _fan_out(fns, "merge")
    return _renamed(map(parts, merge_objects), parts.name)


def first(*fns: Any) -> Step[Any]:
    """Run steps concurrently and return the first success by step order.

    Step order decides the winner, not completion time. When no step
    succeeds, fails with every step's errors in step order. Every step
    runs, so side effects happen even for the losers.
    """
    _require_steps(fns, "first")
    steps = _as_steps(fns, "first")
    name = _label("first", steps)

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        results = await asyncio.gather(*(step(*args, **kwargs) for step in steps))
        for res in results:
            if isinstance(res, Success):
                return res
        log.debug("%s: none of %d step(s) succeeded", name, len(steps))
        return Failure(tuple(_concat_errors(results)))

    return Step(run, name)


# --- Conditional ---


def branch(fn: Any, resolver: Callable[[Any], Any]) -> Step[Any]:
    """Choose the next step at runtime from the previous step's value.

    ``resolver`` (sync or async) receives the value of ``fn``. When it
    returns a step or callable, that step runs with the value as input and
    the original context. When it returns anything else (e.g. ``None``),
    the value of ``fn`` is the result.

    Example:
        find_user = branch(
            get_id_or_email,
            lambda key: find_by_id if isinstance(key, int) else find_by_email,
        )
    """
    source = as_step(fn, "branch() step")
    _require_callable(resolver, "branch() resolver")
    resolve = composable(resolver)
    name = f"branch({source.name}, {resolve.name})"

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        res = await source(*args, **kwargs)
        if isinstance(res, Failure):
            return res

        chosen = await resolve(res.value)
        if isinstance(chosen, Failure):
            return chosen
        if not callable(chosen.value):
            log.debug("%s: resolver chose no step", name)
            return res

        next_step = composable(chosen.value)
        log.debug("%s: resolved to %s", name, next_step.name)
        return await next_step(res.value, *args[1:], **kwargs)

    return Step(run, name)


# --- Transformations ---


def map(fn: Any, mapper: Callable[[Any], Any]) -> Step[Any]:  # noqa: A001
    """Transform the value of a successful step.

    ``mapper`` may be sync or async; if it raises, that failure replaces the
    success. Failures pass through unchanged.
    """
    source = as_step(fn, "map() step")
    transform = as_step(mapper, "map() mapper")

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        res = await source(*args, **kwargs)
        if isinstance(res, Failure):
            return res
        return await transform(res.value)

    return Step(run, f"map({source.name}, {transform.name})")


def map_error(fn: Any, mapper: Callable[[tuple[ErrorValue, ...]], Any]) -> Step[Any]:
    """Replace the errors of a failed step with ``mapper(errors)``.

    Returned elements are normalized, so a mapper may return exceptions or
    strings as well as ErrorValues. A mapper that returns no errors still
    yields a Failure, holding a single generic error that keeps the
    original errors as its cause. Successes pass through unchanged.
    """
    source = as_step(fn, "map_error() step")
    transform = as_step(mapper, "map_error() mapper")

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        res = await source(*args, **kwargs)
        if isinstance(res, Success):
            return res

        mapped = await transform(res.errors)
        if isinstance(mapped, Failure):
            return mapped
        errors = normalize_all(mapped.value)
        if not errors:
            return Failure((ErrorValue(EMPTY_MAPPED_ERRORS, cause=res.errors),))
        return Failure(errors)

    return Step(run, f"map_error({source.name}, {transform.name})")


def catch_error(fn: Any, catcher: Callable[..., Any]) -> Step[Any]:
    """Recover from a failed step.

    On failure, ``catcher(errors, *args, **kwargs)`` runs with the error
    tuple and the original arguments, and its value becomes the success.
    If the catcher raises, that is the new failure.

    Example:
        with_default = catch_error(load_avatar, lambda errors, user: DEFAULT_AVATAR)
    """
    source = as_step(fn, "catch_error() step")
    recover = as_step(catcher, "catch_error() catcher")

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        res = await source(*args, **kwargs)
        if isinstance(res, Success):
            return res
        return await recover(res.errors, *args, **kwargs)

    return Step(run, f"catch_error({source.name}, {recover.name})")


def map_parameters(fn: Any, mapper: Callable[..., Any]) -> Step[Any]:
    """Adapt the arguments of a step.

    ``mapper`` receives the call's arguments and returns a tuple or list
    used as the step's positional arguments.

    Example:
        add_pair = map_parameters(add, lambda pair: (pair["a"], pair["b"]))
    """
    target = as_step(fn, "map_parameters() step")
    transform = as_step(mapper, "map_parameters() mapper")

    async def run(*args: Any, **kwargs: Any) -> Result[Any]:
        mapped = await transform(*args, **kwargs)
        if isinstance(mapped, Failure):
            return mapped
        params = mapped.value
        if not isinstance(params, (tuple, list)):
            return Failure(
                (
                    normalize(
                        TypeError(
                            "map_parameters mapper must return a tuple or list of "
                            f"arguments, got {type(params).__name__}"
                        )
                    ),
                )
            )
        return await target(*params)

    return Step(run, f"map_parameters({target.name}, {transform.name})")


def apply_context(fn: Any, context: Any) -> Step[Any]:
    """Fix the context of a step, leaving a step of its input only.

    Any context or keyword arguments passed by the caller are ignored.
    """
    target = as_step(fn, "apply_context() step")

    async def run(value: Any = None, *_rest: Any, **_kwargs: Any) -> Result[Any]:
        return await target(value, context)

    return Step(run, f"apply_context({target.name})")


def trace(
    trace_fn: Callable[..., Any],
) -> Callable[[Any], Step[Any]]:
    """Observe a step's result and arguments without changing them.

    ``trace_fn(result, *args, **kwargs)`` (sync or async) runs after every
    call; the original result is returned unless the tracer raises, in
    which case its failure is returned instead.

    Example:
        log_failures = trace(lambda res, *args: res.ok or report(res, args))
        tracked = log_failures(increment)
    """
    tracer = as_step(trace_fn, "trace() tracer")

    def decorate(fn: Any) -> Step[Any]:
        source = as_step(fn, "trace() step")

        async def run(*args: Any, **kwargs: Any) -> Result[Any]:
            res = await source(*args, **kwargs)
            traced = await tracer(res, *args, **kwargs)
            if isinstance(traced, Failure):
                return traced
            return res

        return Step(run, f"trace({source.name})")

    return decorate


# --- Leaving the Result world ---


def from_success(
    fn: Any,
    on_error: Callable[[tuple[ErrorValue, ...]], Any] | None = None,
) -> Callable[..., Any]:
    """Return an async function yielding the step's value or raising.

    On failure it raises ``ErrorList`` with the (optionally mapped) errors.
    Inside another composable, that raise becomes a Failure carrying the
    inner errors unchanged, which makes it the way to call a step from
    within a handler. Also handy in tests.

    Example:
        @composable
        async def checkout(cart_id, ctx):
            cart = await from_success(load_cart)(cart_id, ctx)
            return total(cart)
    """
    target = map_error(fn, on_error) if on_error is not None else as_step(fn, "from_success()")

    async def call(*args: Any, **kwargs: Any) -> Any:
        res = await target(*args, **kwargs)
        if isinstance(res, Failure):
            raise ErrorList(res.errors)
        return res.value

    call.__qualname__ = call.__name__ = f"from_success({target.name})"
    return call


__all__ = [
    "EMPTY_MAPPED_ERRORS",
    "all",
    "apply_context",
    "branch",
    "catch_error",
    "collect",
    "collect_sequence",
    "first",
    "from_success",
    "map",
    "map_error",
    "map_parameters",
    "merge",
    "merge_objects",
    "pipe",
    "sequence",
    "trace",
]
