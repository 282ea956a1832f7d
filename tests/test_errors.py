"""Tests for the exception hierarchy and deferred error collection."""

from __future__ import annotations

from budtelemetry import ErrorList
from budtelemetry.commons.exceptions import (
    ConfigurationError,
    EnvironmentDecodeError,
    ProviderTimeoutError,
    TelemetryErrorGroup,
    TelemetryException,
    join_errors,
)


class TestExceptions:
    """Tests for the exception classes."""

    def test_str_includes_details(self) -> None:
        """Test that details are rendered after the message."""
        err = TelemetryException("boom", details={"key": "value"})
        assert str(err) == "boom | Details: {'key': 'value'}"
        assert str(TelemetryException("boom")) == "boom"

    def test_decode_error_is_configuration_error(self) -> None:
        """Test the decode error carries key and value."""
        err = EnvironmentDecodeError("OTEL_TRACES_SAMPLER", "sometimes", "invalid enum")
        assert isinstance(err, ConfigurationError)
        assert err.details == {"key": "OTEL_TRACES_SAMPLER", "value": "sometimes"}

    def test_timeout_error(self) -> None:
        """Test the timeout error names the provider."""
        err = ProviderTimeoutError("tracer provider", 100)
        assert "tracer provider" in str(err)
        assert err.timeout_millis == 100


class TestJoinErrors:
    """Tests for join_errors."""

    def test_nothing_to_join(self) -> None:
        """Test that joining nothing yields None."""
        assert join_errors() is None
        assert join_errors(None, None) is None

    def test_single_error_is_returned_as_is(self) -> None:
        """Test that a single error is not wrapped."""
        err = ValueError("boom")
        assert join_errors(None, err) is err

    def test_several_errors_are_grouped(self) -> None:
        """Test that several errors are grouped in order."""
        first, second = ValueError("first"), RuntimeError("second")
        group = join_errors(first, second, message="failed")
        assert isinstance(group, TelemetryErrorGroup)
        assert isinstance(group, ExceptionGroup)
        assert group.message == "failed"
        assert group.exceptions == (first, second)

    def test_subgroup_keeps_type(self) -> None:
        """Test that splitting a group keeps the group type."""
        group = join_errors(ValueError("first"), RuntimeError("second"))
        match, rest = group.split(ValueError)
        assert isinstance(match, TelemetryErrorGroup)
        assert isinstance(rest, TelemetryErrorGroup)


class TestErrorList:
    """Tests for ErrorList."""

    def test_empty(self) -> None:
        """Test that an empty list is falsy and joins to None."""
        errors = ErrorList()
        assert not errors
        assert len(errors) == 0
        assert errors.join() is None
        assert list(errors) == []

    def test_none_is_ignored(self) -> None:
        """Test that None values are not stored."""
        errors = ErrorList()
        errors.append(None)
        errors.append()
        assert not errors

    def test_append_keeps_order(self) -> None:
        """Test that errors are kept in append order."""
        first, second, third = ValueError("1"), ValueError("2"), ValueError("3")
        errors = ErrorList()
        errors.append(first)
        errors.append(second, None, third)
        assert list(errors) == [first, second, third]

    def test_join_is_repeatable(self) -> None:
        """Test that joining twice yields the same errors without duplicates."""
        errors = ErrorList()
        errors.append(ValueError("1"), ValueError("2"))
        first = errors.join()
        second = errors.join()
        assert first.exceptions == second.exceptions
        assert len(errors) == 2
