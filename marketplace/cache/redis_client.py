"""
Redis client - read-through cache for product detail lookups.
Challenge: Connection pooling, fail gracefully when Redis is down.
Design: Single client instance, injected into services for testability.
"""

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from marketplace.config import get_settings

logger = logging.getLogger(__name__)

# Shared async Redis client (connection pool managed by redis-py)
_redis: Redis | None = None


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            get_settings().redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


class ProductCache:
    """
    Cache of serialized product detail responses keyed by product id.

    Every operation degrades to a miss/no-op when Redis is unavailable, so the
    database stays the source of truth. A client of None disables caching.
    """

    prefix = "product:"

    def __init__(self, client: Redis | None, ttl_seconds: int = 300):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def _key(self, product_id: Any) -> str:
        return f"{self.prefix}{product_id}"

    async def get(self, product_id: Any) -> dict[str, Any] | None:
        if self.client is None:
            return None
        try:
            raw = await self.client.get(self._key(product_id))
        except (RedisError, OSError) as e:
            logger.debug("cache get failed for product %s: %s", product_id, e)
            return None
        return json.loads(raw) if raw else None

    async def set(self, product_id: Any, value: dict[str, Any]) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.setex(self._key(product_id), self.ttl_seconds, json.dumps(value))
            return True
        except (RedisError, OSError) as e:
            logger.debug("cache set failed for product %s: %s", product_id, e)
            return False

    async def invalidate(self, product_id: Any) -> bool:
        """Drop a product after it changes."""
        if self.client is None:
            return False
        try:
            await self.client.delete(self._key(product_id))
            return True
        except (RedisError, OSError) as e:
            logger.debug("cache delete failed for product %s: %s", product_id, e)
            return False


def get_product_cache() -> ProductCache:
    """FastAPI dependency. Overridden in tests."""
    return ProductCache(get_redis(), get_settings().product_cache_ttl)
