"""
Unit Tests for the Redis query cache
"""
import fnmatch
import pytest

from app.core.config import settings
from app.services.cache_service import CacheService


class FakeRedis:
    """In-memory stand-in for the redis.asyncio client methods the cache uses"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = ttl

    async def scan(self, cursor, match=None, count=None):
        return 0, [k for k in self.store if fnmatch.fnmatch(k, match)]

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)

    async def info(self, section=None):
        return {"used_memory_human": "1K"}

    async def dbsize(self):
        return len(self.store)


class BrokenRedis(FakeRedis):
    async def get(self, key):
        raise ConnectionError("redis down")

    async def setex(self, key, ttl, value):
        raise ConnectionError("redis down")


@pytest.fixture
def enabled_cache(monkeypatch):
    monkeypatch.setattr(settings, "CACHE_ENABLED", True)
    cache = CacheService()
    cache._redis = FakeRedis()
    return cache


def counting_loader(result):
    calls = {"count": 0}

    async def loader():
        calls["count"] += 1
        return result

    return loader, calls


class TestDisabledCache:

    @pytest.mark.asyncio
    async def test_disabled_cache_always_loads(self, monkeypatch):
        monkeypatch.setattr(settings, "CACHE_ENABLED", False)
        cache = CacheService()
        loader, calls = counting_loader([{"id": "1", "name": "Grade 1"}])

        await cache.cached_query("classes", loader)
        result = await cache.cached_query("classes", loader)

        assert result == [{"id": "1", "name": "Grade 1"}]
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_disabled_cache_reports_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "CACHE_ENABLED", False)
        cache = CacheService()

        assert await cache.get_cache_stats() == {"enabled": False}
        assert await cache.invalidate_table("classes") is False


class TestEnabledCache:

    @pytest.mark.asyncio
    async def test_read_through_hits_after_first_load(self, enabled_cache):
        loader, calls = counting_loader([{"id": "1", "name": "Grade 1"}])

        first = await enabled_cache.cached_query("classes", loader, ttl=60)
        second = await enabled_cache.cached_query("classes", loader, ttl=60)

        assert first == second
        assert calls["count"] == 1
        assert enabled_cache._redis.ttls["query:classes:all"] == 60

    @pytest.mark.asyncio
    async def test_invalidate_table_drops_only_that_table(self, enabled_cache):
        await enabled_cache.set_query("classes", [1], query_key="all")
        await enabled_cache.set_query("classes", [2], query_key="active")
        await enabled_cache.set_query("streams", [3])

        assert await enabled_cache.invalidate_table("classes") is True

        assert await enabled_cache.get_query("classes") is None
        assert await enabled_cache.get_query("classes", "active") is None
        assert await enabled_cache.get_query("streams") == [3]

    @pytest.mark.asyncio
    async def test_default_ttl_is_listing_ttl(self, enabled_cache):
        await enabled_cache.set_query("transport_zones", [])

        assert enabled_cache._redis.ttls["query:transport_zones:all"] == settings.CACHE_TTL_LISTINGS

    @pytest.mark.asyncio
    async def test_redis_errors_degrade_to_miss(self, monkeypatch):
        monkeypatch.setattr(settings, "CACHE_ENABLED", True)
        cache = CacheService()
        cache._redis = BrokenRedis()
        loader, calls = counting_loader(["fresh"])

        assert await cache.get_query("classes") is None
        assert await cache.set_query("classes", ["x"]) is False
        assert await cache.cached_query("classes", loader) == ["fresh"]
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_stats(self, enabled_cache):
        await enabled_cache.set_query("classes", [1])

        stats = await enabled_cache.get_cache_stats()

        assert stats["enabled"] is True
        assert stats["total_keys"] == 1
