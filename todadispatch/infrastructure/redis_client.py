"""
Redis client for cross-process coordination.

Only the autosave lock talks to Redis, so the pool is created on first use
and a terminal running without Redis never opens a connection.
"""

from __future__ import annotations

import redis.asyncio as aioredis

from todadispatch.config import settings

_pool: aioredis.ConnectionPool | None = None


async def get_redis() -> aioredis.Redis:
    """Return a Redis client backed by the shared connection pool."""
    global _pool
    if _pool is None:
        _pool = aioredis.ConnectionPool.from_url(
            settings.redis_url, decode_responses=True
        )
    return aioredis.Redis(connection_pool=_pool)


async def close_redis() -> None:
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None
