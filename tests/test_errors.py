from __future__ import annotations

import pytest

from composable_functions import (
    ComposableError,
    CompositionError,
    ConfigurationError,
    ContextError,
    ErrorList,
    ErrorValue,
    InputError,
    InvariantViolationError,
)

pytestmark = pytest.mark.unit


def test_hint_is_appended_to_message() -> None:
    err = ConfigurationError("Config failed", hint="Check the env")

    assert str(err) == "Config failed. Check the env"
    assert err.hint == "Check the env"


def test_message_without_hint() -> None:
    err = ComposableError("Something went wrong")

    assert str(err) == "Something went wrong"
    assert err.hint is None


def test_subclass_hierarchy() -> None:
    """Misuse errors are catchable by their builtin counterparts too."""
    assert issubclass(CompositionError, TypeError)
    assert issubclass(CompositionError, ComposableError)
    assert issubclass(InvariantViolationError, ValueError)
    assert issubclass(ErrorList, ComposableError)


def test_path_errors_stringify_path() -> None:
    err = InputError("Must be positive", ["items", 2, "qty"])

    assert err.path == ("items", "2", "qty")
    assert str(err) == "Must be positive"
    assert ContextError("No user").path == ()


def test_error_list_carries_errors() -> None:
    errors = [ErrorValue("a"), ErrorValue("b")]

    err = ErrorList(errors)

    assert err.errors == tuple(errors)
    assert str(err) == "a; b"


def test_error_list_requires_errors() -> None:
    with pytest.raises(InvariantViolationError):
        ErrorList([])
