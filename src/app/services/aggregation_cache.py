"""Aggregation Cache

In-process TTL cache for computed reports, keyed by owner, report kind and
month. Dropping it entirely only makes reports slower, never wrong.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from src.domain.month_key import MonthKey

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 5 * 60 * 1000
DEFAULT_MAXSIZE = 4096


class _Miss:
    def __repr__(self):
        return "MISS"

    def __bool__(self):
        return False


MISS = _Miss()


@dataclass(frozen=True)
class CacheKey:
    owner_id: int
    report_kind: str
    month_key: MonthKey


@dataclass(frozen=True)
class _Entry:
    value: Any
    ttl_seconds: float


def _time_to_use(key, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds


class AggregationCache:
    """
    TTL cache for report values

    Expiry is checked lazily on read. All operations take an internal lock so
    the cache can be shared between threads; concurrent writes to one key are
    last-writer-wins.

    Usage:
        cache = AggregationCache(default_ttl_ms=60_000)
        key = CacheKey(owner_id=1, report_kind="unified", month_key=MonthKey(2025, 9))
        value = cache.get(key)
        if value is MISS:
            cache.set(key, compute())
    """

    def __init__(
        self,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        maxsize: int = DEFAULT_MAXSIZE,
        timer: Callable[[], float] = time.monotonic,
    ):
        if default_ttl_ms <= 0:
            raise ValueError("default_ttl_ms must be positive")
        self.default_ttl_ms = default_ttl_ms
        self._store = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: CacheKey) -> Any:
        """Return the cached value, or MISS if absent or expired"""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                self._store.expire()
                logger.debug(f"Cache miss for {key}")
                return MISS
            self._hits += 1
        logger.debug(f"Cache hit for {key}")
        return entry.value

    def set(self, key: CacheKey, value: Any, ttl_ms: Optional[int] = None) -> None:
        ttl_ms = self.default_ttl_ms if ttl_ms is None else ttl_ms
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        with self._lock:
            self._store[key] = _Entry(value=value, ttl_seconds=ttl_ms / 1000)

    def invalidate(self, key: CacheKey) -> None:
        with self._lock:
            self._store.pop(key, None)

    def invalidate_owner(self, owner_id: int, month_key: Optional[MonthKey] = None) -> int:
        """
        Evict every report kind for an owner

        Args:
            owner_id: Owner whose entries are evicted
            month_key: Restrict eviction to one month; all months when None

        Returns:
            Number of evicted entries
        """
        with self._lock:
            stale = [
                key
                for key in list(self._store.keys())
                if key.owner_id == owner_id
                and (month_key is None or key.month_key == month_key)
            ]
            for key in stale:
                self._store.pop(key, None)
        logger.debug(f"Evicted {len(stale)} cached reports for owner {owner_id}")
        return len(stale)

    def invalidate_all(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> dict:
        with self._lock:
            return {"hits": self._hits, "misses": self._misses, "size": len(self._store)}

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)
