"""
Authentication dependencies for FastAPI.

Routes either require a verified caller (``get_current_identity``) or, for
the tracking surface, resolve the caller when present and compare it with
the ``userId`` the client sent (``get_caller_id`` + ``ensure_caller``).
"""

import uuid
from typing import Optional
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from roady.app.core.config import settings
from roady.app.core.exceptions import AuthenticationError, InsufficientPermissionsError
from roady.app.db.session import get_db
from roady.app.services.identity import Identity, resolve_identity

# Errors are raised by the dependencies below so they use the standard envelope
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def session_token(authorization: Optional[str] = Depends(authorization_header)) -> Optional[str]:
    """
    Token from the Authorization header.

    Accepts ``Bearer <token>`` as well as the bare token the mobile client sends.
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() == "bearer":
        return credentials.strip() or None
    return authorization.strip() or None


async def get_current_identity(
    token: Optional[str] = Depends(session_token),
    db: AsyncSession = Depends(get_db)
) -> Identity:
    """
    FastAPI dependency for token authentication.

    Raises:
        AuthenticationError: 401 if the token is missing or cannot be verified
    """
    if token is None:
        raise AuthenticationError("Missing authorization token")
    return await resolve_identity(db, token)


async def get_caller_id(
    token: Optional[str] = Depends(session_token),
    db: AsyncSession = Depends(get_db)
) -> Optional[uuid.UUID]:
    """
    Verified caller id for tracking routes.

    A presented token is always verified. Returns None when no token was sent
    and ``settings.require_auth`` is off.
    """
    if token is None:
        if settings.require_auth:
            raise AuthenticationError("Missing authorization token")
        return None
    identity = await resolve_identity(db, token)
    return identity.user.id


def ensure_caller(caller_id: Optional[uuid.UUID], user_id: uuid.UUID) -> None:
    """Reject requests that act on behalf of a user other than the token's."""
    if caller_id is not None and caller_id != user_id:
        raise InsufficientPermissionsError("Token does not belong to this user")
