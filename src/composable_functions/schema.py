"""Validated steps: parse input and context before the handler runs.

Input and context are checked independently; when either fails, every
issue from both is reported together, tagged as INPUT or CONTEXT errors
with the parser's path. The handler only runs with parsed values.
"""

from __future__ import annotations

from collections.abc import Callable
import inspect
import logging
from typing import Any

from composable_functions.composable import Step, as_step, callable_name, composable
from composable_functions.config import get_config
from composable_functions.core._validation import _accepts_positional, _require_callable
from composable_functions.core.result_primitives import (
    ErrorKind,
    ErrorValue,
    Failure,
    Result,
    Success,
)
from composable_functions.parsers import (
    ParseSuccess,
    Parser,
    accept_mapping,
    accept_none,
    coerce_parse_result,
)

log = logging.getLogger(__name__)

_MISSING: Any = object()


async def _invoke_parser(parser: Parser[Any] | Callable[[Any], Any], raw: Any) -> Any:
    parse = parser.parse if isinstance(parser, Parser) else parser
    outcome = parse(raw)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return coerce_parse_result(outcome)


_run_parser = composable(_invoke_parser, name="parse")


async def _parse(parser: Any, raw: Any, kind: ErrorKind) -> Result[Any]:
    # A parser that crashes is a generic failure, not an input/context issue.
    checked = await _run_parser(parser, raw)
    if isinstance(checked, Failure):
        return checked
    outcome = checked.value
    if isinstance(outcome, ParseSuccess):
        return Success(outcome.value)
    return Failure(
        tuple(
            ErrorValue(issue.message, cause=issue, kind=kind, path=issue.path)
            for issue in outcome.issues
        )
    )


def _require_parser(parser: Any, field_name: str) -> None:
    if parser is not None and not isinstance(parser, Parser):
        _require_callable(parser, field_name)


def apply_schema(
    fn: Any,
    input_parser: Parser[Any] | Callable[[Any], Any] | None = None,
    context_parser: Parser[Any] | Callable[[Any], Any] | None = None,
) -> Step[Any]:
    """Guard an existing step with input and context parsers.

    Defaults: input must be ``None``; context must be a mapping and falls
    back to ``Config.default_context`` when omitted. Arguments after the
    context, and keyword arguments, are ignored.

    Raises:
        ConfigurationError: when the environment holds an invalid
            configuration; it is resolved while the step is built.
    """
    target = as_step(fn, "apply_schema() step")
    get_config()
    _require_parser(input_parser, "apply_schema() input_parser")
    _require_parser(context_parser, "apply_schema() context_parser")
    in_parser = input_parser if input_parser is not None else accept_none
    ctx_parser = context_parser if context_parser is not None else accept_mapping

    async def run(
        value: Any = None, context: Any = _MISSING, *_rest: Any, **_kwargs: Any
    ) -> Result[Any]:
        if context is _MISSING:
            context = get_config().default_context
        parsed_input = await _parse(in_parser, value, ErrorKind.INPUT)
        parsed_context = await _parse(ctx_parser, context, ErrorKind.CONTEXT)

        errors = (*parsed_input.errors, *parsed_context.errors)
        if errors:
            log.debug("%s rejected its arguments with %d error(s)", target.name, len(errors))
            return Failure(errors)
        return await target(parsed_input.value, parsed_context.value)

    return Step(run, target.name)


def make_step(
    input_parser: Parser[Any] | Callable[[Any], Any] | None = None,
    context_parser: Parser[Any] | Callable[[Any], Any] | None = None,
) -> Callable[[Callable[..., Any]], Step[Any]]:
    """Build validated steps from plain handlers.

    The handler receives ``(input, context)`` after both were parsed; a
    handler taking a single parameter receives only the input.

    Example:
        greet = make_step(
            from_pydantic(Greeting),
            from_pydantic(RequestContext),
        )(lambda greeting, ctx: f"{greeting.text}, {ctx.user.name}")
    """
    _require_parser(input_parser, "make_step() input_parser")
    _require_parser(context_parser, "make_step() context_parser")

    def decorate(handler: Callable[..., Any]) -> Step[Any]:
        _require_callable(handler, "make_step() handler")
        if _accepts_positional(handler, 2):
            step = composable(handler)
        else:
            step = composable(
                lambda value, _context: handler(value), name=callable_name(handler)
            )
        return apply_schema(step, input_parser, context_parser)

    return decorate


__all__ = ["apply_schema", "make_step"]
