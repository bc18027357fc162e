"""
Application services for turning calendar range selections into query bounds.

The service fetches a location's close time and timezone through a
provider protocol and delegates the arithmetic to the domain-level
``BusinessDayResolver``. What happens when the settings are absent, or
present but malformed, is decided here by two separate policies rather
than inside the resolver.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Mapping, Optional, Protocol, Union

from ..domain.exceptions import LocationNotFoundError, MissingTimeConfigError, ValidationError
from ..domain.models import (
    DEFAULT_BUSINESS_CLOSE_TIMES,
    BusinessDayBounds,
    DayLike,
    InstantLike,
    LocationTimeConfig,
)
from ..domain.resolver import BusinessDayResolver

logger = logging.getLogger(__name__)

TimeConfigSource = Union[LocationTimeConfig, Mapping[str, Any], None]
RangeEdge = Union[DayLike, InstantLike]


class LocationConfigProvider(Protocol):
    """Protocol describing the location settings lookup needed by the service."""

    def get_location_time_config(self, location_id: str) -> TimeConfigSource:
        """
        Return the location's time settings, or None if it has none.

        Raises LocationNotFoundError for unknown locations.
        """


class MissingConfigPolicy(str, Enum):
    """What to do when a location has no close time or timezone."""

    CALENDAR_DAY = "calendar_day"
    RAISE = "raise"


class InvalidConfigPolicy(str, Enum):
    """What to do when a location's close time or timezone is malformed."""

    RAISE = "raise"
    CALENDAR_DAY = "calendar_day"


def calendar_day_config(timezone: str = "UTC") -> LocationTimeConfig:
    """Settings that make operating days equal to calendar days in ``timezone``."""
    return LocationTimeConfig(
        business_close_time=DEFAULT_BUSINESS_CLOSE_TIMES["MIDNIGHT"],
        timezone=timezone,
    )


def coerce_time_config(source: TimeConfigSource) -> Optional[LocationTimeConfig]:
    """Normalize provider output to a LocationTimeConfig, or None when incomplete."""
    if source is None:
        return None

    if isinstance(source, LocationTimeConfig):
        if not source.business_close_time or not source.timezone:
            return None
        return source

    return LocationTimeConfig.from_location(source)


class DateRangeFilterService:
    """
    Converts user-picked date ranges into UTC filter bounds per location.

    Defaults: absent settings fall back to calendar days, malformed settings
    raise. Both are configurable independently.
    """

    def __init__(
        self,
        resolver: BusinessDayResolver,
        provider: Optional[LocationConfigProvider] = None,
        *,
        missing_policy: MissingConfigPolicy = MissingConfigPolicy.CALENDAR_DAY,
        invalid_policy: InvalidConfigPolicy = InvalidConfigPolicy.RAISE,
        fallback_timezone: str = "UTC",
    ) -> None:
        self._resolver = resolver
        self._provider = provider
        self._missing_policy = missing_policy
        self._invalid_policy = invalid_policy
        self._fallback_config = calendar_day_config(fallback_timezone).validate()

    def effective_config(self, source: TimeConfigSource) -> LocationTimeConfig:
        """
        Pick the settings to resolve with, applying both fallback policies.

        Raises:
            MissingTimeConfigError: If settings are absent and the policy is RAISE
            ValidationError: If settings are malformed and the policy is RAISE
        """
        config = coerce_time_config(source)

        if config is None:
            if self._missing_policy is MissingConfigPolicy.RAISE:
                raise MissingTimeConfigError("Location has no business close time or timezone configured")
            logger.info("No business day settings; using calendar day boundaries")
            return self._fallback_config

        try:
            return config.validate()
        except ValidationError as exc:
            if self._invalid_policy is InvalidConfigPolicy.RAISE:
                raise
            logger.warning("Failed to convert to business day range, using calendar days: %s", exc)
            return self._fallback_config

    def time_config_for_location(self, location_id: str) -> LocationTimeConfig:
        """Fetch a location's settings and apply the fallback policies."""
        return self.effective_config(self._fetch(location_id))

    def bounds_for_config(self, start: RangeEdge, end: RangeEdge, source: TimeConfigSource) -> BusinessDayBounds:
        """Collapse a date range to UTC bounds for the given settings."""
        config = self.effective_config(source)
        return self._resolver.collapse_range_to_bounds(start, end, config)

    def bounds_for_location(self, location_id: str, start: RangeEdge, end: RangeEdge) -> BusinessDayBounds:
        """Collapse a date range to UTC bounds using a location's stored settings."""
        return self.bounds_for_config(start, end, self._fetch(location_id))

    def operating_days_for_location(
        self,
        location_id: str,
        start: RangeEdge,
        end: RangeEdge,
    ) -> List[BusinessDayBounds]:
        """List every operating day of a location between two dates."""
        config = self.time_config_for_location(location_id)
        return self._resolver.resolve_range(start, end, config)

    def _fetch(self, location_id: str) -> TimeConfigSource:
        if self._provider is None:
            raise LocationNotFoundError(f"No location provider configured; cannot look up '{location_id}'")

        source = self._provider.get_location_time_config(location_id)
        logger.debug("Loaded time settings for location %s: %r", location_id, source)
        return source
