"""The parse contract consumed by validated steps, plus a pydantic adapter.

Any validation library works with ``make_step`` once something exposes
``parse(raw)`` returning a ``ParseSuccess`` or ``ParseFailure`` (directly or
as an awaitable). A plain callable with that signature is accepted too.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
import dataclasses
import typing
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from composable_functions.errors import InvariantViolationError


@dataclasses.dataclass(frozen=True, slots=True)
class Issue:
    """One validation problem at ``path`` inside the parsed value."""

    path: tuple[str, ...]
    message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(str(p) for p in self.path))


@dataclasses.dataclass(frozen=True, slots=True)
class ParseSuccess[T]:
    value: T
    ok: typing.ClassVar[bool] = True


@dataclasses.dataclass(frozen=True, slots=True)
class ParseFailure:
    issues: tuple[Issue, ...]
    ok: typing.ClassVar[bool] = False

    def __post_init__(self) -> None:
        issues = tuple(self.issues)
        if not issues:
            raise InvariantViolationError("ParseFailure requires at least one issue")
        object.__setattr__(self, "issues", issues)


type ParseResult[T] = ParseSuccess[T] | ParseFailure


@runtime_checkable
class Parser[T](Protocol):
    """Anything exposing the parse contract."""

    def parse(self, raw: Any) -> ParseResult[T] | Awaitable[ParseResult[T]]: ...


def coerce_parse_result(outcome: Any) -> ParseSuccess[Any] | ParseFailure:
    """Accept the dataclasses or their plain mapping shape.

    The mapping shape is ``{"ok": True, "value": v}`` or
    ``{"ok": False, "issues": [{"path": [...], "message": "..."}]}``.

    Raises:
        TypeError: for anything else.
    """
    if isinstance(outcome, (ParseSuccess, ParseFailure)):
        return outcome
    if isinstance(outcome, Mapping) and "ok" in outcome:
        if outcome["ok"]:
            return ParseSuccess(outcome.get("value"))
        return ParseFailure(
            tuple(
                Issue(tuple(i.get("path", ())), str(i.get("message", "")))
                for i in outcome.get("issues", ())
            )
        )
    raise TypeError(
        f"Parser returned {type(outcome).__name__}; expected ParseSuccess or ParseFailure"
    )


class _NoneParser:
    """Accepts only ``None``."""

    def parse(self, raw: Any) -> ParseResult[None]:
        if raw is None:
            return ParseSuccess(None)
        return ParseFailure((Issue((), f"Expected None, received {type(raw).__name__}"),))


class _MappingParser:
    """Accepts any mapping, unchanged."""

    def parse(self, raw: Any) -> ParseResult[Mapping[str, Any]]:
        if isinstance(raw, Mapping):
            return ParseSuccess(raw)
        return ParseFailure((Issue((), "Expected an object"),))


accept_none: Parser[None] = _NoneParser()
accept_mapping: Parser[Mapping[str, Any]] = _MappingParser()


class PydanticParser[T]:
    """Adapt a pydantic ``TypeAdapter`` to the parse contract.

    Each pydantic error becomes one Issue with the error's location as path.
    """

    __slots__ = ("_adapter", "_strict")

    def __init__(self, tp: type[T] | Any, *, strict: bool | None = None) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(tp)
        self._strict = strict

    def parse(self, raw: Any) -> ParseResult[T]:
        try:
            value = self._adapter.validate_python(raw, strict=self._strict)
        except ValidationError as e:
            return ParseFailure(
                tuple(Issue(tuple(err["loc"]), err["msg"]) for err in e.errors())
            )
        return ParseSuccess(value)


def from_pydantic[T](tp: type[T] | Any, *, strict: bool | None = None) -> PydanticParser[T]:
    """Build a parser from any type pydantic can validate.

    Example:
        increment = make_step(from_pydantic(int))(lambda n, _ctx: n + 1)
    """
    return PydanticParser(tp, strict=strict)


__all__ = [
    "Issue",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "Parser",
    "PydanticParser",
    "accept_mapping",
    "accept_none",
    "coerce_parse_result",
    "from_pydantic",
]
