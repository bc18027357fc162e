"""
Domain layer - Pure business logic without external dependencies.
"""

from .cache import BusinessDayCache, CacheStats
from .exceptions import (
    BusinessDayError,
    LocationNotFoundError,
    MalformedCloseTimeError,
    MissingTimeConfigError,
    UnknownTimezoneError,
    ValidationError,
    ValidationErrorKind,
)
from .models import BusinessDayBounds, LocationTimeConfig
from .resolver import BusinessDayResolver

__all__ = [
    "BusinessDayBounds",
    "BusinessDayCache",
    "BusinessDayError",
    "BusinessDayResolver",
    "CacheStats",
    "LocationNotFoundError",
    "LocationTimeConfig",
    "MalformedCloseTimeError",
    "MissingTimeConfigError",
    "UnknownTimezoneError",
    "ValidationError",
    "ValidationErrorKind",
]
