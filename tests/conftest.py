"""
Shared fixtures.
"""

import pytest

from businessday.domain.cache import BusinessDayCache
from businessday.domain.models import LocationTimeConfig
from businessday.domain.resolver import BusinessDayResolver


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> BusinessDayCache:
    return BusinessDayCache(ttl_seconds=4 * 60 * 60, sweep_threshold=100, clock=clock)


@pytest.fixture
def resolver(cache) -> BusinessDayResolver:
    return BusinessDayResolver(cache=cache)


@pytest.fixture
def two_am_new_york() -> LocationTimeConfig:
    return LocationTimeConfig(business_close_time="02:00", timezone="America/New_York")


@pytest.fixture
def midnight_new_york() -> LocationTimeConfig:
    return LocationTimeConfig(business_close_time="00:00", timezone="America/New_York")
