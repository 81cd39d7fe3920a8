"""Tests for ResultCache.

Tests verify:
- set/get round trip and overwrite
- an entry is served up to exactly ttl seconds and gone just after
- the default ttl applies when none is given
- delete, clear, len and membership ignore expired entries
"""

from fakes import FakeClock
from scanner.market_data.result_cache import CacheEntry, ResultCache


class TestCacheEntry:
    def test_expiry_is_strictly_after_ttl(self) -> None:
        entry = CacheEntry(key="k", value=1, inserted_at=100.0, ttl=10.0)
        assert entry.is_expired(110.0) is False
        assert entry.is_expired(110.001) is True


class TestResultCache:
    """Tests for ResultCache get/set semantics."""

    def test_get_missing_returns_none(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        assert cache.get("candidates:explosion") is None

    def test_set_then_get(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("candidates:explosion", ["FOOUSDT"], ttl=120)
        assert cache.get("candidates:explosion") == ["FOOUSDT"]

    def test_overwrite_replaces_value_and_resets_age(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("k", "old", ttl=10)
        clock.advance(8)
        cache.set("k", "new", ttl=10)
        clock.advance(8)
        assert cache.get("k") == "new"

    def test_present_at_exactly_ttl(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("k", "v", ttl=120)
        clock.advance(120)
        assert cache.get("k") == "v"

    def test_expired_after_ttl(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("k", "v", ttl=120)
        clock.advance(120.01)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl(self, clock: FakeClock) -> None:
        cache = ResultCache(default_ttl=30, clock=clock)
        cache.set("k", "v")
        clock.advance(29)
        assert "k" in cache
        clock.advance(2)
        assert "k" not in cache

    def test_per_entry_ttl(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("short", 1, ttl=60)
        cache.set("long", 2, ttl=1800)
        clock.advance(61)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_delete_and_clear(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        cache.delete("missing")
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0

    def test_empty_list_is_a_cached_value(self, clock: FakeClock) -> None:
        cache = ResultCache(clock=clock)
        cache.set("candidates:explosion", [])
        assert cache.get("candidates:explosion") == []
