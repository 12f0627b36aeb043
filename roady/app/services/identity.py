"""
Identity service.

Issues signed session tokens and resolves them back to a stored user. The
tracker itself only ever asks this module for "which user is calling".
"""

import logging
import uuid
from typing import Any, Dict, NamedTuple, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from roady.app.core.exceptions import AuthenticationError, ConflictError, StorageError
from roady.app.core.jwt import create_access_token, decode_access_token
from roady.app.core.security import get_password_hash, verify_password
from roady.app.core.token_revocation import is_token_revoked
from roady.app.models.user import User

logger = logging.getLogger(__name__)


class Identity(NamedTuple):
    """A verified caller: the stored user, the presented token and its claims."""
    user: User
    token: str
    claims: Dict[str, Any]


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "username": user.username})


async def register_user(db: AsyncSession, email: str, username: str, password: str) -> User:
    """
    Create a user with a hashed password.

    Raises:
        ConflictError: email or username already in use (no row is created)
    """
    try:
        result = await db.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
    except SQLAlchemyError as exc:
        raise StorageError("Could not create user") from exc
    if result.scalars().first() is not None:
        raise ConflictError("Email or username already exists")

    user = User(email=email, username=username, hashed_password=get_password_hash(password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email/username
        await db.rollback()
        raise ConflictError("Email or username already exists")
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError("Could not create user") from exc

    await db.refresh(user)
    logger.info("User registered", extra={"user_id": str(user.id)})
    return user


async def authenticate(db: AsyncSession, email_or_username: str, password: str) -> User:
    """
    Check credentials against the stored hash.

    Raises:
        AuthenticationError: unknown user or wrong password (indistinguishable)
    """
    try:
        result = await db.execute(
            select(User).where(or_(User.email == email_or_username, User.username == email_or_username))
        )
    except SQLAlchemyError as exc:
        raise StorageError("Could not load user") from exc
    user = result.scalars().first()
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Login failed", extra={"login": email_or_username})
        raise AuthenticationError("Invalid credentials")
    return user


async def resolve_identity(db: AsyncSession, token: Optional[str]) -> Identity:
    """
    Resolve a bearer token to the user it was issued for.

    Raises:
        AuthenticationError: missing, malformed, expired or revoked token, or
            the user no longer exists
    """
    if not token:
        raise AuthenticationError("Missing authorization token")

    claims = decode_access_token(token)
    if claims is None:
        raise AuthenticationError("Invalid token")

    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    if await is_token_revoked(token):
        raise AuthenticationError("Token has been revoked")

    try:
        user = await db.get(User, user_id)
    except SQLAlchemyError as exc:
        raise StorageError("Could not load user") from exc
    if user is None:
        raise AuthenticationError("Invalid token")

    return Identity(user=user, token=token, claims=claims)
