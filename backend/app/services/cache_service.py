"""
Read-through Redis cache for slow-changing listings

Results are stored as JSON under ``query:<table>:<query key>``. A write to
a table drops every cached query for that table, so callers never have to
know which keys exist. With CACHE_ENABLED off (the default) nothing touches
Redis. Redis failures are logged and behave like a miss.
"""
import json
from typing import Any, Awaitable, Callable, List, Optional

import redis.asyncio as redis

from app.core.config import settings
from app.core.logging_config import logger

KEY_PREFIX = "query:"
SCAN_BATCH = 100


class CacheService:

    def __init__(self):
        self._redis: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    @property
    def TTL_LOOKUPS(self) -> int:
        return settings.CACHE_TTL_LOOKUPS

    @property
    def TTL_LISTINGS(self) -> int:
        return settings.CACHE_TTL_LISTINGS

    def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.Redis.from_url(
                settings.REDIS_URL, db=settings.REDIS_CACHE_DB, max_connections=50
            )
            logger.info(f"Query cache using Redis db {settings.REDIS_CACHE_DB}")
        return self._redis

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    @staticmethod
    def key_for(table: str, query_key: str = "all") -> str:
        return f"{KEY_PREFIX}{table}:{query_key}"

    async def get_query(self, table: str, query_key: str = "all") -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = await self._client().get(self.key_for(table, query_key))
        except Exception as e:
            logger.warning(f"Cache read failed for {table}/{query_key}: {e}")
            return None
        if raw is None:
            return None
        return json.loads(raw)

    async def set_query(self, table: str, data: Any, query_key: str = "all",
                        ttl: Optional[int] = None) -> bool:
        """Store ``data``; ``ttl`` defaults to the listing TTL"""
        if not self.enabled:
            return False
        try:
            await self._client().setex(
                self.key_for(table, query_key),
                ttl or self.TTL_LISTINGS,
                json.dumps(data, default=str),
            )
        except Exception as e:
            logger.warning(f"Cache write failed for {table}/{query_key}: {e}")
            return False
        return True

    async def invalidate_table(self, table: str) -> bool:
        if not self.enabled:
            return False
        client = self._client()
        stale: List[Any] = []
        try:
            cursor = 0
            while True:
                cursor, keys = await client.scan(cursor, match=self.key_for(table, "*"), count=SCAN_BATCH)
                stale.extend(keys)
                if not cursor:
                    break
            if stale:
                await client.delete(*stale)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {table}: {e}")
            return False
        logger.debug(f"Dropped {len(stale)} cached queries for {table}")
        return True

    async def cached_query(
        self,
        table: str,
        loader: Callable[[], Awaitable[Any]],
        query_key: str = "all",
        ttl: Optional[int] = None,
    ) -> Any:
        """Return the cached value or run ``loader`` (JSON-serializable result) and cache it"""
        hit = await self.get_query(table, query_key)
        if hit is not None:
            return hit

        data = await loader()
        await self.set_query(table, data, query_key=query_key, ttl=ttl)
        return data

    async def get_cache_stats(self) -> dict:
        if not self.enabled:
            return {"enabled": False}
        try:
            client = self._client()
            memory = await client.info("memory")
            return {
                "enabled": True,
                "used_memory": memory.get("used_memory_human", "N/A"),
                "total_keys": await client.dbsize(),
            }
        except Exception as e:
            logger.warning(f"Cache stats unavailable: {e}")
            return {"enabled": True, "error": str(e)}


cache_service = CacheService()
