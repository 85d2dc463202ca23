"""
Redis client configuration using redis-py (asyncio).
Used as a best-effort read cache: every helper degrades to a miss on error.
"""

import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.asyncio.client import Redis

from app.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper."""

    _client: Optional[Redis] = None

    @classmethod
    def get_client(cls) -> Redis:
        """Get or create Redis client."""
        if cls._client is None:
            cls._client = aioredis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5.0,
                health_check_interval=30,
            )
            logger.info("Redis client initialized")
        return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close Redis client."""
        if cls._client:
            await cls._client.close()
            cls._client = None
            logger.info("Redis client closed")


async def get_redis() -> Redis:
    """Dependency for getting redis connection."""
    return RedisClient.get_client()


async def cache_get_json(key: str) -> Optional[Any]:
    try:
        redis = await get_redis()
        cached = await redis.get(key)
        if cached:
            return json.loads(cached)
    except Exception as e:
        logger.warning(f"Redis cache read failed for {key}: {e}")
    return None


async def cache_set_json(key: str, value: Any, ttl_seconds: int) -> None:
    try:
        redis = await get_redis()
        await redis.setex(key, ttl_seconds, json.dumps(value))
    except Exception as e:
        logger.warning(f"Redis cache write failed for {key}: {e}")


async def cache_delete(key: str) -> None:
    try:
        redis = await get_redis()
        await redis.delete(key)
    except Exception as e:
        logger.warning(f"Redis cache invalidation failed for {key}: {e}")
