"""
Redis clients.

The API uses the async pool (login sessions, health). The worker, the
scheduler and the promotion services use the sync pool for the delayed
expiry queue.
"""
from typing import Optional

import redis as sync_redis
import redis.asyncio as aioredis

from app.core.config import settings

redis_pool = aioredis.ConnectionPool.from_url(settings.REDIS_URL, max_connections=20, decode_responses=True)
sync_redis_pool = sync_redis.ConnectionPool.from_url(settings.REDIS_URL, max_connections=10, decode_responses=True)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency"""
    return aioredis.Redis(connection_pool=redis_pool)


def get_sync_redis() -> sync_redis.Redis:
    return sync_redis.Redis(connection_pool=sync_redis_pool)


async def check_redis_connection() -> bool:
    try:
        r = await get_redis()
        return bool(await r.ping())
    except sync_redis.RedisError:
        return False


async def queued_expiry_count() -> Optional[int]:
    """Size of the delayed expiry queue, None when Redis is unreachable"""
    try:
        r = await get_redis()
        return await r.zcard(settings.DELAYED_QUEUE_KEY)
    except sync_redis.RedisError:
        return None
