"""
Domain-specific exception hierarchy for the business day resolver.
"""

from enum import Enum


class BusinessDayError(Exception):
    """Base class for all application-level errors."""


class ValidationErrorKind(str, Enum):
    """What part of a location's time configuration was rejected."""

    MALFORMED_CLOSE_TIME = "malformed_close_time"
    UNKNOWN_TIMEZONE = "unknown_timezone"


class ValidationError(BusinessDayError, ValueError):
    """Raised when a location time configuration cannot be used."""

    def __init__(self, kind: ValidationErrorKind, value: object, message: str):
        super().__init__(message)
        self.kind = kind
        self.value = value


class MalformedCloseTimeError(ValidationError):
    """Raised when a business close time is not a valid HH:MM string."""

    def __init__(self, value: object, reason: str = "expected HH:MM"):
        super().__init__(
            ValidationErrorKind.MALFORMED_CLOSE_TIME,
            value,
            f"Invalid business close time {value!r}: {reason}",
        )


class UnknownTimezoneError(ValidationError):
    """Raised when a timezone is not a recognised IANA identifier."""

    def __init__(self, value: object):
        super().__init__(
            ValidationErrorKind.UNKNOWN_TIMEZONE,
            value,
            f"Unknown timezone: {value!r}",
        )


class LocationNotFoundError(BusinessDayError, LookupError):
    """Raised when a location cannot be found by the configuration provider."""


class MissingTimeConfigError(BusinessDayError):
    """Raised when a location has no close time or timezone and no fallback is allowed."""
