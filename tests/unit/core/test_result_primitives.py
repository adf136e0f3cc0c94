"""Contract tests for the Result model.

These verify immutability, value-based equality and the invariant that a
Failure always carries at least one error.
"""

from __future__ import annotations

import pytest

from composable_functions import (
    ErrorKind,
    ErrorValue,
    Failure,
    InvariantViolationError,
    Success,
    failure,
    success,
)

pytestmark = pytest.mark.unit


class TestResultMonadCompliance:
    """Success/Failure behave as immutable tagged values."""

    def test_success_is_immutable(self):
        result = Success("value")

        with pytest.raises(AttributeError):
            result.value = "modified"  # type: ignore[misc]

    def test_failure_is_immutable(self):
        result = Failure((ErrorValue("boom"),))

        with pytest.raises(AttributeError):
            result.errors = ()  # type: ignore[misc]

    def test_success_never_carries_errors(self):
        result = success(42)

        assert result.ok is True
        assert result.errors == ()
        assert result.value == 42

    def test_failure_keeps_errors_as_tuple(self):
        result = failure([ErrorValue("a"), ErrorValue("b")])

        assert result.ok is False
        assert isinstance(result.errors, tuple)
        assert [e.message for e in result.errors] == ["a", "b"]

    def test_equality_is_value_based(self):
        assert Success(1) == Success(1)
        assert Success(1) != Success(2)
        assert Failure((ErrorValue("x"),)) == Failure((ErrorValue("x"),))

    def test_result_is_exactly_success_or_failure(self):
        assert isinstance(Success(1), Success | Failure)
        assert not isinstance("string", Success | Failure)


class TestFailureInvariant:
    def test_empty_failure_is_rejected(self):
        with pytest.raises(InvariantViolationError):
            Failure(())

    def test_empty_failure_is_a_value_error(self):
        with pytest.raises(ValueError):
            failure([])

    def test_failure_rejects_raw_values(self):
        with pytest.raises(InvariantViolationError, match="ErrorValue"):
            Failure(("just a string",))  # type: ignore[arg-type]


class TestErrorValue:
    def test_defaults_to_generic_without_path(self):
        error = ErrorValue("boom")

        assert error.kind is ErrorKind.GENERIC
        assert error.path == ()
        assert error.cause is None

    def test_path_is_frozen_to_strings(self):
        error = ErrorValue("bad", kind=ErrorKind.INPUT, path=["items", 0])  # type: ignore[arg-type]

        assert error.path == ("items", "0")

    def test_tuple_path_is_stringified_too(self):
        error = ErrorValue("bad", path=("items", 0))  # type: ignore[arg-type]

        assert error.path == ("items", "0")

    def test_cause_does_not_affect_equality(self):
        assert ErrorValue("x", cause=ValueError("x")) == ErrorValue("x", cause=KeyError("x"))

    def test_kind_values_are_strings(self):
        assert ErrorKind.INPUT.value == "input"
        assert ErrorKind.CONTEXT == "context"
