"""Unit tests for src/core/exceptions.py."""

import pytest

from src.core.exceptions import (
    ErrorCode,
    PlaceholderResolutionError,
    PropertySourceError,
    ReporterError,
    Severity,
)


@pytest.mark.unit
class TestReporterError:
    """Test the base exception."""

    def test_enum_code_normalized(self) -> None:
        """Enum error codes are stored as their string value."""
        error = ReporterError(ErrorCode.PROPERTY_SOURCE_ERROR, "Something broke")

        assert error.error_code == "PROPERTY_SOURCE_ERROR"
        assert error.severity == Severity.MEDIUM
        assert error.context == {}
        assert str(error) == "[PROPERTY_SOURCE_ERROR] Something broke"

    def test_string_code_and_context(self) -> None:
        """Custom codes and context are kept and shown in repr."""
        error = ReporterError(
            "CUSTOM", "Bad thing", Severity.HIGH, context={"key": "value"}
        )

        assert repr(error) == (
            "ReporterError(error_code='CUSTOM', message='Bad thing', "
            "severity=HIGH, context={'key': 'value'})"
        )

    def test_cause_chained(self) -> None:
        """The original exception becomes the cause."""
        cause = OSError("disk")
        error = ReporterError(
            ErrorCode.PROPERTY_SOURCE_ERROR, "wrapped", cause=cause
        )

        assert error.cause is cause
        assert error.__cause__ is cause


@pytest.mark.unit
class TestSpecializedErrors:
    """Test the specialized exceptions."""

    def test_property_source_error(self) -> None:
        """Source errors are high severity with their own code."""
        error = PropertySourceError("Unable to read", {"path": "/x"})

        assert isinstance(error, ReporterError)
        assert error.error_code == ErrorCode.PROPERTY_SOURCE_ERROR.value
        assert error.severity == Severity.HIGH
        assert str(error) == "[PROPERTY_SOURCE_ERROR] Unable to read"

    def test_placeholder_resolution_error(self) -> None:
        """Placeholder errors render as their plain message."""
        error = PlaceholderResolutionError(
            "Could not resolve placeholder 'a' in value \"${a}\"", "a", "${a}"
        )

        assert str(error) == "Could not resolve placeholder 'a' in value \"${a}\""
        assert error.error_code == ErrorCode.PLACEHOLDER_RESOLUTION_ERROR.value
        assert error.severity == Severity.LOW
        assert error.context == {"placeholder": "a", "value": "${a}"}
        assert error.placeholder == "a"
        assert error.value == "${a}"
