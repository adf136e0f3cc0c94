"""Exception hierarchy for composable-functions.

Steps never raise these at call time: the composable boundary turns any
exception into a ``Failure``. They exist for composition-time misuse, for
handlers that want to report path-tagged input/context problems, and for
``from_success`` to carry a whole error list through a raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from composable_functions.core.result_primitives import ErrorValue


class ComposableError(Exception):
    """Base exception for all composable-functions errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        """Return the message including the hint, when there is one."""
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class ConfigurationError(ComposableError):
    """Configuration validation or resolution failed."""


class CompositionError(ComposableError, TypeError):
    """A combinator was given arguments it cannot compose."""


class InvariantViolationError(ComposableError, ValueError):
    """An impossible Result state was requested, e.g. an empty Failure."""


class _PathError(ComposableError):
    def __init__(self, message: str, path: Sequence[object] = ()) -> None:
        super().__init__(message)
        self.path: tuple[str, ...] = tuple(str(p) for p in path)


class InputError(_PathError):
    """Raise from a handler to report a problem with its input.

    Example:
        @composable
        def rename(user):
            if not user.get("name"):
                raise InputError("Name is required", ["user", "name"])
    """


class ContextError(_PathError):
    """Raise from a handler to report a problem with its context."""


class ErrorList(ComposableError):
    """Carries a complete error list through a raise.

    ``composable`` unpacks it into a Failure with exactly these errors, so
    a step calling another step through ``from_success`` keeps the inner
    errors intact instead of wrapping them into one.
    """

    def __init__(self, errors: Iterable[ErrorValue]) -> None:
        self.errors: tuple[ErrorValue, ...] = tuple(errors)
        if not self.errors:
            raise InvariantViolationError("ErrorList requires at least one error")
        super().__init__("; ".join(e.message for e in self.errors))


__all__ = [
    "ComposableError",
    "CompositionError",
    "ConfigurationError",
    "ContextError",
    "ErrorList",
    "InputError",
    "InvariantViolationError",
]
