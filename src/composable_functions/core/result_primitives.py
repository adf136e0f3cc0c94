"""Result model for explicit failure handling.

Every step returns one of these two values instead of raising, which makes
failures a predictable part of the data flow and lets combinators aggregate
them without try/except blocks.
"""

from __future__ import annotations

import dataclasses
import enum
import typing

from composable_functions.errors import InvariantViolationError

TSuccess = typing.TypeVar("TSuccess")


class ErrorKind(str, enum.Enum):
    """Where an error originated."""

    GENERIC = "generic"
    INPUT = "input"
    CONTEXT = "context"


@dataclasses.dataclass(frozen=True, slots=True)
class ErrorValue:
    """A single normalized error.

    ``path`` locates the offending part of a structured input or context
    and is empty for errors raised by a step's own logic.
    """

    message: str
    cause: typing.Any = dataclasses.field(default=None, compare=False)
    kind: ErrorKind = ErrorKind.GENERIC
    path: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(str(p) for p in self.path))


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful outcome; never carries errors."""

    value: TSuccess
    ok: typing.ClassVar[bool] = True

    @property
    def errors(self) -> tuple[ErrorValue, ...]:
        return ()


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """A failed outcome carrying at least one error."""

    errors: tuple[ErrorValue, ...]
    ok: typing.ClassVar[bool] = False

    def __post_init__(self) -> None:
        errors = tuple(self.errors)
        if not errors:
            raise InvariantViolationError(
                "Failure requires at least one error",
                hint="Use Success for outcomes without errors.",
            )
        for err in errors:
            if not isinstance(err, ErrorValue):
                raise InvariantViolationError(
                    f"Failure errors must be ErrorValue instances, got {type(err).__name__}",
                    hint="Pass raw values through normalize() first.",
                )
        object.__setattr__(self, "errors", errors)


Result = Success[TSuccess] | Failure


def success[T](value: T) -> Success[T]:
    """Build a Success."""
    return Success(value)


def failure(errors: typing.Iterable[ErrorValue]) -> Failure:
    """Build a Failure from one or more ErrorValues."""
    return Failure(tuple(errors))
