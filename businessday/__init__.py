"""
Operating day boundary resolution for bar and restaurant locations.
"""

from .domain import (
    BusinessDayBounds,
    BusinessDayCache,
    BusinessDayError,
    BusinessDayResolver,
    LocationTimeConfig,
    MalformedCloseTimeError,
    UnknownTimezoneError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "BusinessDayBounds",
    "BusinessDayCache",
    "BusinessDayError",
    "BusinessDayResolver",
    "LocationTimeConfig",
    "MalformedCloseTimeError",
    "UnknownTimezoneError",
    "ValidationError",
    "__version__",
]
