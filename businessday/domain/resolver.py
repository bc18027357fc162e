"""
Core business logic for operating day boundaries.

An operating day starts at a location's business close time and ends one
millisecond before the next close time. With a close time of 02:00, an
order at 01:30 on the 18th belongs to the operating day that started at
02:00 on the 17th. A close time of 00:00 makes the operating day the
plain calendar day.

Pure computation: no I/O, no database. Results are memoized in a
``BusinessDayCache`` owned by the resolver instance.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Tuple, Union

import pendulum
from pendulum import Date, DateTime

from .cache import BusinessDayCache
from .models import (
    END_OF_DAY_RESOLUTION,
    BusinessDayBounds,
    DayLike,
    InstantLike,
    LocationTimeConfig,
    parse_day_or_instant,
    to_instant,
)

logger = logging.getLogger(__name__)


class BusinessDayResolver:
    """
    Converts instants, calendar dates and ranges into operating day bounds.

    Algorithm for a single instant:
    1. Validate the close time and timezone
    2. Convert the instant to the location's wall clock
    3. If it is before today's close time, the operating day started on
       the previous calendar date; otherwise it started today
    4. Bounds run from that date's close time to 1 ms before the next
       date's close time, returned in UTC
    """

    def __init__(
        self,
        cache: BusinessDayCache | None = None,
        now: Callable[[], datetime] = pendulum.now,
    ) -> None:
        self._cache = cache if cache is not None else BusinessDayCache()
        self._now = now

    @property
    def cache(self) -> BusinessDayCache:
        return self._cache

    def resolve_bounds(self, instant: Union[DayLike, InstantLike], config: LocationTimeConfig) -> BusinessDayBounds:
        """
        Get the bounds of the operating day containing ``instant``.

        Args:
            instant: Aware or naive (UTC) datetime, ISO-8601 string, or a
                calendar date naming the operating day that starts on it
            config: The location's close time and timezone

        Returns:
            BusinessDayBounds with UTC start and end

        Raises:
            MalformedCloseTimeError: If the close time is not a valid HH:MM
            UnknownTimezoneError: If the timezone is not a known IANA zone
        """
        close_time, tz = self._validate(config)
        local = self._to_local(instant, tz, close_time)
        operating_date = self._operating_date_for(local, close_time, tz)
        return self._bounds_for(operating_date, close_time, tz, config)

    def resolve_operating_day(self, operating_date: DayLike, config: LocationTimeConfig) -> BusinessDayBounds:
        """
        Get the bounds of the operating day that starts on ``operating_date``.

        A datetime is reduced to its calendar date in the location's timezone;
        a date-only string is read as that date.
        """
        close_time, tz = self._validate(config)

        if isinstance(operating_date, str):
            operating_date = parse_day_or_instant(operating_date)

        if isinstance(operating_date, datetime):
            operating_date = to_instant(operating_date).in_timezone(tz).date()

        return self._bounds_for(operating_date, close_time, tz, config)

    def resolve_bounds_for_today(self, config: LocationTimeConfig) -> BusinessDayBounds:
        """Get the bounds of the operating day in progress right now."""
        return self.resolve_bounds(to_instant(self._now()), config)

    def resolve_bounds_for_yesterday(self, config: LocationTimeConfig) -> BusinessDayBounds:
        """Get the bounds of the operating day containing this time yesterday."""
        _, tz = self._validate(config)
        yesterday = to_instant(self._now()).in_timezone(tz).subtract(days=1)
        return self.resolve_bounds(yesterday, config)

    def resolve_range(
        self,
        start: Union[DayLike, InstantLike],
        end: Union[DayLike, InstantLike],
        config: LocationTimeConfig,
    ) -> List[BusinessDayBounds]:
        """
        Get one set of bounds per calendar day from ``start`` to ``end``.

        Each day resolves ``start``'s wall-clock time shifted by whole
        calendar days, so consecutive entries are contiguous. Returns an
        empty list when ``end`` is before ``start``.
        """
        close_time, tz = self._validate(config)
        first = self._to_local(start, tz, close_time)
        last = self._to_local(end, tz, close_time)

        if last < first:
            return []

        day_count = last.date().toordinal() - first.date().toordinal() + 1

        return [
            self.resolve_bounds(first.add(days=offset), config)
            for offset in range(day_count)
        ]

    def collapse_range_to_bounds(
        self,
        start: Union[DayLike, InstantLike],
        end: Union[DayLike, InstantLike],
        config: LocationTimeConfig,
    ) -> BusinessDayBounds:
        """
        Convert a calendar range selection to UTC filter bounds.

        Returns the start of the operating day containing ``start`` and the
        end of the operating day containing ``end``.
        """
        start_bounds = self.resolve_bounds(start, config)
        end_bounds = self.resolve_bounds(end, config)

        return BusinessDayBounds(start=start_bounds.start, end=end_bounds.end)

    def find_operating_day(self, timestamp: InstantLike, config: LocationTimeConfig) -> Date:
        """Get the local calendar date on which the timestamp's operating day starts."""
        bounds = self.resolve_bounds(timestamp, config)
        return bounds.start.in_timezone(config.timezone).date()

    def is_timestamp_in_operating_day(
        self,
        timestamp: InstantLike,
        operating_day: DayLike,
        config: LocationTimeConfig,
    ) -> bool:
        """
        Check whether ``timestamp`` falls inside an operating day.

        A plain date or date-only string names the operating day starting on
        that date (as returned by ``find_operating_day``); a datetime names
        the operating day containing it.
        """
        if isinstance(operating_day, str):
            operating_day = parse_day_or_instant(operating_day)

        if isinstance(operating_day, datetime):
            bounds = self.resolve_bounds(operating_day, config)
        else:
            bounds = self.resolve_operating_day(operating_day, config)

        return bounds.contains(timestamp)

    def _validate(self, config: LocationTimeConfig) -> Tuple[time, object]:
        return config.close_time(), config.tzinfo()

    def _bounds_for(
        self,
        operating_date: date,
        close_time: time,
        tz,
        config: LocationTimeConfig,
    ) -> BusinessDayBounds:
        key = BusinessDayCache.make_key(config.timezone, config.business_close_time, operating_date)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Business day cache hit: %s", key)
            return cached

        logger.debug("Business day cache miss: %s", key)

        start = self._close_on(operating_date, close_time, tz)
        next_start = self._close_on(operating_date + timedelta(days=1), close_time, tz)

        bounds = BusinessDayBounds(
            start=start.in_timezone("UTC"),
            end=next_start.in_timezone("UTC") - END_OF_DAY_RESOLUTION,
        )

        self._cache.put(key, bounds)
        return bounds

    def _operating_date_for(self, local: DateTime, close_time: time, tz) -> date:
        local_date = local.date()
        if local < self._close_on(local_date, close_time, tz):
            return local_date - timedelta(days=1)
        return local_date

    @staticmethod
    def _close_on(day: date, close_time: time, tz) -> DateTime:
        # Nonexistent wall times (DST gaps) are shifted forward by pendulum
        return pendulum.datetime(
            day.year,
            day.month,
            day.day,
            close_time.hour,
            close_time.minute,
            tz=tz,
        )

    @classmethod
    def _to_local(cls, value: Union[DayLike, InstantLike], tz, close_time: time) -> DateTime:
        if isinstance(value, str):
            value = parse_day_or_instant(value)

        if isinstance(value, datetime):
            return to_instant(value).in_timezone(tz)

        if isinstance(value, date):
            # A bare calendar date names the operating day starting on it
            return cls._close_on(value, close_time, tz)

        raise TypeError(f"Expected a date, datetime or ISO-8601 string, got {type(value).__name__}")
