"""
Session token revocation backed by Redis.

A logged-out token is blacklisted until it would have expired anyway.
Lookups fail open: if Redis is unreachable the token signature and expiry
remain the only checks.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from roady.app.core.redis_client import get_redis
from roady.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


def _remaining_ttl(expires_at: Optional[int]) -> int:
    if expires_at is None:
        return settings.access_token_expire_minutes * 60
    remaining = int(expires_at - datetime.now(timezone.utc).timestamp())
    return max(remaining, 1)


async def revoke_token(token: str, user_id: str, expires_at: Optional[int] = None) -> bool:
    """
    Revoke a token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: Owner of the token, stored for auditing
        expires_at: The token's ``exp`` claim (unix seconds)

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        redis = await get_redis()
        await redis.setex(f"{TOKEN_BLACKLIST_PREFIX}{token}", _remaining_ttl(expires_at), str(user_id))
        return True
    except Exception as e:
        logger.warning("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """Check whether a token has been revoked."""
    try:
        redis = await get_redis()
        return await redis.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}") > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False
