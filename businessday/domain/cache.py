"""
In-process memoization of operating day bounds.

Entries expire lazily: a stale entry is ignored by ``get`` but stays in the
map until an opportunistic sweep removes it. Sweeps run when the map grows
past ``sweep_threshold``. There is no LRU ordering; the key space
(timezone x close time x date) is small per organization.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from .models import BusinessDayBounds

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 4 * 60 * 60
DEFAULT_SWEEP_THRESHOLD = 100


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the cache for monitoring and tests."""
    size: int
    keys: List[str] = field(default_factory=list)


class BusinessDayCache:
    """
    TTL map from operating day keys to computed bounds.

    Safe to share between threads; every access holds an internal lock.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be greater than zero")
        if sweep_threshold < 1:
            raise ValueError("sweep_threshold must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: Dict[str, Tuple[BusinessDayBounds, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(timezone: str, close_time: str, operating_date: date) -> str:
        """
        Build the cache key for an operating day.

        ``operating_date`` is the local calendar date on which the operating
        day starts, so two instants on the same calendar date that fall on
        either side of the close time get different keys.
        """
        return f"{timezone}:{close_time}:{operating_date.isoformat()}"

    def get(self, key: str) -> Optional[BusinessDayBounds]:
        """Return cached bounds if present and younger than the TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            bounds, created_at = entry
            if self._clock() - created_at >= self.ttl_seconds:
                return None
            return bounds

    def put(self, key: str, bounds: BusinessDayBounds) -> None:
        """Insert or replace an entry, stamped with the current clock."""
        with self._lock:
            if len(self._entries) > self.sweep_threshold:
                self._sweep_locked()
            self._entries[key] = (bounds, self._clock())

    def sweep(self) -> int:
        """Remove every stale entry. Returns the number removed."""
        with self._lock:
            return self._sweep_locked()

    def _sweep_locked(self) -> int:
        now = self._clock()
        stale = [
            key for key, (_, created_at) in self._entries.items()
            if now - created_at >= self.ttl_seconds
        ]
        for key in stale:
            del self._entries[key]

        logger.debug("Swept %d stale entries, %d remaining", len(stale), len(self._entries))
        return len(stale)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()
        logger.debug("Business day cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), keys=list(self._entries.keys()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
