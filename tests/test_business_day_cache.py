"""
Tests for the bounds cache.
"""

from datetime import date

import pendulum
import pytest

from businessday.domain.cache import BusinessDayCache
from businessday.domain.models import BusinessDayBounds


def _bounds(day: int) -> BusinessDayBounds:
    start = pendulum.datetime(2024, 6, day, 6, 0, tz="UTC")
    return BusinessDayBounds(start=start, end=start.add(days=1).subtract(microseconds=1000))


class TestBusinessDayCache:
    """Tests for BusinessDayCache."""

    def test_make_key(self):
        key = BusinessDayCache.make_key("America/New_York", "02:00", date(2024, 6, 17))
        assert key == "America/New_York:02:00:2024-06-17"

    def test_get_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_put_then_get(self, cache):
        cache.put("a", _bounds(17))

        assert cache.get("a") == _bounds(17)
        assert len(cache) == 1
        assert "a" in cache

    def test_put_replaces_existing_entry(self, cache):
        cache.put("a", _bounds(17))
        cache.put("a", _bounds(18))

        assert cache.get("a") == _bounds(18)
        assert len(cache) == 1

    def test_expired_entry_is_ignored_but_kept(self, cache, clock):
        """Stale entries read as absent but stay until a sweep."""
        cache.put("a", _bounds(17))
        clock.advance(4 * 60 * 60)

        assert cache.get("a") is None
        assert "a" in cache
        assert cache.stats().size == 1

    def test_entry_valid_just_before_ttl(self, cache, clock):
        cache.put("a", _bounds(17))
        clock.advance(4 * 60 * 60 - 1)

        assert cache.get("a") == _bounds(17)

    def test_put_refreshes_timestamp(self, cache, clock):
        cache.put("a", _bounds(17))
        clock.advance(3 * 60 * 60)
        cache.put("a", _bounds(17))
        clock.advance(3 * 60 * 60)

        assert cache.get("a") == _bounds(17)

    def test_sweep_removes_only_stale_entries(self, cache, clock):
        cache.put("old", _bounds(17))
        clock.advance(3 * 60 * 60)
        cache.put("new", _bounds(18))
        clock.advance(60 * 60)

        removed = cache.sweep()

        assert removed == 1
        assert cache.stats().keys == ["new"]

    def test_put_sweeps_past_threshold(self, clock):
        """Test that growing past the threshold triggers a sweep on insert."""
        cache = BusinessDayCache(ttl_seconds=60, sweep_threshold=3, clock=clock)
        for index in range(4):
            cache.put(f"stale-{index}", _bounds(17))

        clock.advance(61)
        cache.put("fresh", _bounds(18))

        assert cache.stats().keys == ["fresh"]

    def test_no_sweep_at_or_below_threshold(self, clock):
        cache = BusinessDayCache(ttl_seconds=60, sweep_threshold=3, clock=clock)
        for index in range(3):
            cache.put(f"stale-{index}", _bounds(17))

        clock.advance(61)
        cache.put("fresh", _bounds(18))

        assert len(cache) == 4

    def test_clear(self, cache):
        cache.put("a", _bounds(17))
        cache.put("b", _bounds(18))

        cache.clear()

        assert cache.stats().size == 0
        assert cache.get("a") is None

    def test_stats(self, cache):
        cache.put("a", _bounds(17))
        cache.put("b", _bounds(18))

        stats = cache.stats()

        assert stats.size == 2
        assert sorted(stats.keys) == ["a", "b"]

    @pytest.mark.parametrize("ttl, threshold", [(0, 100), (-1, 100), (60, 0)])
    def test_invalid_settings(self, ttl, threshold):
        with pytest.raises(ValueError):
            BusinessDayCache(ttl_seconds=ttl, sweep_threshold=threshold)
