"""
Unit tests for the TTL cache, driven by a fake clock.
"""

import pytest

from medsafe.cache import TTLCache
from tests.mocks.clock import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


class TestTTLCache:
    def test_empty(self, cache):
        assert cache.get("k") is None
        assert cache.peek("k") is None

    def test_fresh_then_stale(self, cache, clock):
        cache.set("k", {"v": 1}, ttl_seconds=60)
        clock.advance(59)
        assert cache.get("k") == {"v": 1}
        clock.advance(1)
        assert cache.get("k") is None
        # stale data is retained, just not served
        assert cache.peek("k").data == {"v": 1}

    def test_refresh_replaces_entry(self, cache, clock):
        cache.set("k", {"v": 1, "extra": True}, ttl_seconds=60)
        clock.advance(120)
        cache.set("k", {"v": 2}, ttl_seconds=60)
        assert cache.get("k") == {"v": 2}
        assert cache.peek("k").expires_at == clock.now + 60

    def test_keys_independent(self, cache):
        cache.set("a", 1, ttl_seconds=60)
        assert cache.get("b") is None
        cache.clear()
        assert cache.get("a") is None


class TestGetOrCompute:
    def test_computes_once_within_ttl(self, cache):
        calls = []

        def compute():
            calls.append(1)
            return {"n": len(calls)}

        first = cache.get_or_compute("k", compute, 60)
        second = cache.get_or_compute("k", compute, 60)
        assert first is second
        assert len(calls) == 1

    def test_recomputes_after_expiry(self, cache, clock):
        cache.get_or_compute("k", lambda: "old", 60)
        clock.advance(61)
        assert cache.get_or_compute("k", lambda: "new", 60) == "new"

    def test_refresh_skips_read_but_writes(self, cache):
        cache.set("k", "old", 60)
        assert cache.get_or_compute("k", lambda: "new", 60, read=False) == "new"
        assert cache.get("k") == "new"

    def test_debug_leaves_entry_untouched(self, cache):
        cache.set("k", "old", 60)
        assert cache.get_or_compute("k", lambda: "debug", 60, read=False, write=False) == "debug"
        assert cache.get("k") == "old"

    def test_failure_keeps_stale_entry_and_propagates(self, cache, clock):
        cache.set("k", "old", 60)
        clock.advance(61)

        def boom():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError, match="upstream down"):
            cache.get_or_compute("k", boom, 60)
        assert cache.get("k") is None
        assert cache.peek("k").data == "old"
