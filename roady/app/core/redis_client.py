"""
Redis connection for the session token blacklist.

No trip state lives in Redis.
"""

import redis.asyncio as redis
from roady.app.core.config import settings

# Connections are opened lazily on first command
redis_client = redis.from_url(settings.redis_url, decode_responses=settings.redis_decode_responses)


async def get_redis() -> redis.Redis:
    """Client looked up per call, so tests can swap ``redis_client``."""
    return redis_client
