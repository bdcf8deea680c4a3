"""Redis connection pool and JSON cache helpers."""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

redis_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Create the shared Redis connection pool."""
    global redis_pool
    redis_pool = redis.from_url(url, decode_responses=True)
    logger.info("Redis pool initialised: %s", url)


async def close_redis() -> None:
    """Gracefully close the Redis pool."""
    global redis_pool
    if redis_pool is not None:
        await redis_pool.aclose()
        redis_pool = None
        logger.info("Redis pool closed")


async def get_redis_pool() -> redis.Redis:
    """Return the active Redis connection (raises if not initialised)."""
    if redis_pool is None:
        msg = "Redis pool has not been initialised"
        raise RuntimeError(msg)
    return redis_pool


async def cache_get(conn: redis.Redis, key: str) -> Any | None:
    """Return the JSON-decoded value under ``key``; Redis outages read as a miss."""
    try:
        raw = await conn.get(key)
    except RedisError as exc:
        logger.warning("Cache read %s failed: %s", key, exc)
        return None
    if raw is None:
        return None
    return json.loads(raw)


async def cache_set(conn: redis.Redis, key: str, value: Any, ttl: int) -> None:
    """Store ``value`` as JSON with a TTL; failures are logged and ignored."""
    try:
        await conn.set(key, json.dumps(value, default=str), ex=ttl)
    except RedisError as exc:
        logger.warning("Cache write %s failed: %s", key, exc)
