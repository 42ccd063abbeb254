"""Structured exception hierarchy for consistent error handling.

This module defines the exception system used by the configuration
environment and the startup reporter.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for logging decisions
- **ReporterError**: Base exception with error code, severity and context
- **Specialized exceptions**: Property source and placeholder failures

Placeholder failures are expected during a report: the reporter turns them
into a single diagnostic line per key instead of aborting startup.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for configuration handling."""

    PROPERTY_SOURCE_ERROR = "PROPERTY_SOURCE_ERROR"
    """A property source could not be read or the source collection was misused."""

    PLACEHOLDER_RESOLUTION_ERROR = "PLACEHOLDER_RESOLUTION_ERROR"
    """A ${...} placeholder in a property value could not be resolved."""


class Severity(Enum):
    """Severity levels for configuration errors."""

    LOW = "LOW"
    """Errors that only affect a single diagnostic value."""

    MEDIUM = "MEDIUM"
    """Errors that affect part of the configuration."""

    HIGH = "HIGH"
    """Errors that make the configuration unusable."""


class ReporterError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the error code and message
        """
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name, error code, message, severity,
                and context
        """
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class PropertySourceError(ReporterError):
    """Exception raised when a property source cannot be used.

    Raised for unreadable source files and for invalid operations on an
    ordered source collection (e.g. positioning relative to an unknown source).

    Args:
        message: Description of the failure
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.PROPERTY_SOURCE_ERROR, message, Severity.HIGH, context, cause
        )


class PlaceholderResolutionError(ReporterError):
    """Exception raised when a ${...} placeholder cannot be resolved.

    The string form is the bare message so that diagnostic lines read
    naturally, e.g. ``Could not resolve placeholder 'db.host' in value "${db.host}"``.

    Args:
        message: Description of the resolution failure
        placeholder: Name of the placeholder that failed
        value: The raw property value being resolved
    """

    def __init__(self, message: str, placeholder: str, value: str) -> None:
        super().__init__(
            ErrorCode.PLACEHOLDER_RESOLUTION_ERROR,
            message,
            Severity.LOW,
            {"placeholder": placeholder, "value": value},
        )
        self.placeholder = placeholder
        self.value = value

    def __str__(self) -> str:
        """Return the plain resolution message."""
        return self.message
