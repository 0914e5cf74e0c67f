"""Unit tests for AggregationCache"""

import threading
import pytest

from src.app.services.aggregation_cache import (
    DEFAULT_TTL_MS,
    MISS,
    AggregationCache,
    CacheKey,
)
from src.domain.month_key import MonthKey

SEPTEMBER = MonthKey(2025, 9)
OCTOBER = MonthKey(2025, 10)


@pytest.fixture
def cache(fake_timer):
    return AggregationCache(default_ttl_ms=60_000, timer=fake_timer)


def key(owner_id=1, kind="unified", month=SEPTEMBER):
    return CacheKey(owner_id=owner_id, report_kind=kind, month_key=month)


class TestGetSet:
    def test_miss_on_empty_cache(self, cache):
        assert cache.get(key()) is MISS
        assert not MISS

    def test_hit_returns_stored_value(self, cache):
        value = {"total": 3}
        cache.set(key(), value)

        assert cache.get(key()) is value

    def test_keys_are_distinct_per_owner_kind_and_month(self, cache):
        cache.set(key(), "a")

        assert cache.get(key(owner_id=2)) is MISS
        assert cache.get(key(kind="summary")) is MISS
        assert cache.get(key(month=OCTOBER)) is MISS
        assert cache.get(CacheKey(1, "unified", MonthKey.parse("2025-09"))) == "a"

    def test_last_writer_wins(self, cache):
        cache.set(key(), "first")
        cache.set(key(), "second")

        assert cache.get(key()) == "second"

    def test_default_ttl_is_five_minutes(self):
        assert DEFAULT_TTL_MS == 300_000
        assert AggregationCache().default_ttl_ms == 300_000

    def test_rejects_non_positive_ttl(self, cache):
        with pytest.raises(ValueError):
            cache.set(key(), "value", ttl_ms=0)
        with pytest.raises(ValueError):
            AggregationCache(default_ttl_ms=-1)


class TestExpiry:
    """Expiry is checked lazily on read"""

    def test_value_available_before_ttl(self, cache, fake_timer):
        cache.set(key(), "value")
        fake_timer.advance(59)

        assert cache.get(key()) == "value"

    def test_value_expires_after_ttl(self, cache, fake_timer):
        cache.set(key(), "value")
        fake_timer.advance(61)

        assert cache.get(key()) is MISS
        assert len(cache) == 0

    def test_per_entry_ttl(self, cache, fake_timer):
        cache.set(key(), "short", ttl_ms=1_000)
        cache.set(key(month=OCTOBER), "default")
        fake_timer.advance(2)

        assert cache.get(key()) is MISS
        assert cache.get(key(month=OCTOBER)) == "default"


class TestInvalidation:
    def test_invalidate_single_key(self, cache):
        cache.set(key(), "a")
        cache.set(key(month=OCTOBER), "b")

        cache.invalidate(key())

        assert cache.get(key()) is MISS
        assert cache.get(key(month=OCTOBER)) == "b"

    def test_invalidate_missing_key_is_noop(self, cache):
        cache.invalidate(key())

        assert len(cache) == 0

    def test_invalidate_owner_single_month(self, cache):
        cache.set(key(), "a")
        cache.set(key(kind="summary"), "b")
        cache.set(key(month=OCTOBER), "c")
        cache.set(key(owner_id=2), "d")

        evicted = cache.invalidate_owner(1, SEPTEMBER)

        assert evicted == 2
        assert cache.get(key(month=OCTOBER)) == "c"
        assert cache.get(key(owner_id=2)) == "d"

    def test_invalidate_owner_all_months(self, cache):
        cache.set(key(), "a")
        cache.set(key(month=OCTOBER), "c")
        cache.set(key(owner_id=2), "d")

        evicted = cache.invalidate_owner(1)

        assert evicted == 2
        assert cache.get(key()) is MISS
        assert cache.get(key(month=OCTOBER)) is MISS
        assert cache.get(key(owner_id=2)) == "d"

    def test_invalidate_all(self, cache):
        cache.set(key(), "a")
        cache.set(key(owner_id=2), "b")

        cache.invalidate_all()

        assert len(cache) == 0


class TestStats:
    def test_stats_track_hits_and_misses(self, cache):
        cache.get(key())
        cache.set(key(), "a")
        cache.get(key())
        cache.get(key())

        assert cache.stats() == {"hits": 2, "misses": 1, "size": 1}


class TestConcurrency:
    def test_concurrent_writers_and_readers(self):
        """Threads writing the same key never corrupt the cache"""
        cache = AggregationCache()
        errors = []

        def worker(value):
            try:
                for _ in range(200):
                    cache.set(key(), value)
                    result = cache.get(key())
                    assert result in range(8)
                    cache.invalidate_owner(2)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert cache.get(key()) in range(8)
