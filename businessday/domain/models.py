"""
Domain models for location time settings and operating day bounds.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, Mapping, Optional, Union

import pendulum
from pendulum import Date, DateTime, Duration

from .exceptions import MalformedCloseTimeError, UnknownTimezoneError

InstantLike = Union[datetime, str]
DayLike = Union[date, datetime, str]

# Subtracted from the next operating day's start to get an inclusive end
END_OF_DAY_RESOLUTION: Duration = pendulum.duration(milliseconds=1)

DEFAULT_BUSINESS_CLOSE_TIMES: Dict[str, str] = {
    "MIDNIGHT": "00:00",  # Standard calendar day
    "TWO_AM": "02:00",    # Common for bars/restaurants
    "THREE_AM": "03:00",  # Late night establishments
    "FOUR_AM": "04:00",   # Very late establishments
    "SIX_AM": "06:00",    # Early morning establishments
}

COMMON_TIMEZONES = (
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Phoenix",  # no DST
    "America/Anchorage",
    "Pacific/Honolulu",
    "Europe/London",
    "Europe/Paris",
    "Asia/Tokyo",
    "Australia/Sydney",
)

_CLOSE_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


def parse_close_time(value: object) -> time:
    """
    Parse a strict 24-hour ``HH:MM`` close time.

    Raises:
        MalformedCloseTimeError: If the format or either component is invalid
    """
    if not isinstance(value, str):
        raise MalformedCloseTimeError(value, "expected a string")

    match = _CLOSE_TIME_PATTERN.fullmatch(value)
    if not match:
        raise MalformedCloseTimeError(value)

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23:
        raise MalformedCloseTimeError(value, f"hour must be between 0 and 23, got {hour}")
    if not 0 <= minute <= 59:
        raise MalformedCloseTimeError(value, f"minute must be between 0 and 59, got {minute}")

    return time(hour=hour, minute=minute)


def load_timezone(name: object):
    """
    Resolve an IANA timezone identifier.

    Raises:
        UnknownTimezoneError: If the identifier is not known to the tz database
    """
    if not isinstance(name, str) or not name.strip():
        raise UnknownTimezoneError(name)
    try:
        return pendulum.timezone(name)
    except (ValueError, KeyError) as exc:
        raise UnknownTimezoneError(name) from exc


def to_instant(value: InstantLike) -> DateTime:
    """
    Normalize a datetime or ISO-8601 string to a UTC pendulum DateTime.

    Naive datetimes and strings without an offset are read as UTC.
    """
    if isinstance(value, str):
        parsed = pendulum.parse(value, tz="UTC")
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Not a point in time: {value!r}")
        return parsed.in_timezone("UTC")

    if isinstance(value, datetime):
        return pendulum.instance(value, tz="UTC").in_timezone("UTC")

    raise TypeError(f"Expected a datetime or ISO-8601 string, got {type(value).__name__}")


def parse_day_or_instant(value: str) -> Union[Date, DateTime]:
    """
    Parse an ISO-8601 string without widening a date-only string.

    ``"2024-06-18"`` stays a calendar date; anything with a time of day
    becomes a UTC instant, read as UTC when it carries no offset.
    """
    parsed = pendulum.parse(value, tz="UTC", exact=True)

    # DateTime subclasses Date, so check it first
    if isinstance(parsed, DateTime):
        return parsed.in_timezone("UTC")
    if isinstance(parsed, Date):
        return parsed

    raise ValueError(f"Not a date or point in time: {value!r}")


@dataclass(frozen=True)
class LocationTimeConfig:
    """
    A location's operating day settings, as supplied by the data layer.

    Nothing is validated on construction; the resolver validates on use so
    that malformed values are reported where they are consumed.
    """
    business_close_time: str  # HH:MM, e.g. "02:00" for 2 AM
    timezone: str  # IANA identifier, e.g. "America/New_York"

    def close_time(self) -> time:
        """Get the close time as a time object."""
        return parse_close_time(self.business_close_time)

    def tzinfo(self):
        """Get the pendulum timezone for this location."""
        return load_timezone(self.timezone)

    @property
    def is_midnight_close(self) -> bool:
        """Whether the operating day is the plain calendar day."""
        return self.close_time() == time(0, 0)

    def validate(self) -> "LocationTimeConfig":
        """Check both fields, raising a ValidationError subclass on failure."""
        self.close_time()
        self.tzinfo()
        return self

    @classmethod
    def from_location(cls, location: Mapping[str, Any]) -> Optional["LocationTimeConfig"]:
        """
        Build a config from a location record.

        Accepts either the API's camelCase keys or snake_case keys.
        Returns None when the close time or timezone is missing.
        """
        close_time = location.get("businessCloseTime") or location.get("business_close_time")
        timezone = location.get("timezone")

        if not close_time or not timezone:
            return None

        return cls(business_close_time=close_time, timezone=timezone)


@dataclass(frozen=True)
class BusinessDayBounds:
    """
    Inclusive UTC bounds of one operating day.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def contains(self, instant: InstantLike) -> bool:
        """Check if an instant falls inside these bounds (both ends inclusive)."""
        moment = to_instant(instant)
        return self.start <= moment <= self.end

    def duration_seconds(self) -> float:
        """Return the length of the operating day in seconds."""
        return (self.end - self.start).total_seconds()

    def in_timezone(self, tz: str) -> "BusinessDayBounds":
        """Return the same bounds expressed in another timezone."""
        return BusinessDayBounds(
            start=self.start.in_timezone(tz),
            end=self.end.in_timezone(tz),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.to_iso8601_string(),
            "end": self.end.to_iso8601_string(),
        }

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm:ss.SSS')} - {self.end.format('YYYY-MM-DD HH:mm:ss.SSS')}"
