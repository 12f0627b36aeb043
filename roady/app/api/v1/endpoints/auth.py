"""
Authentication API endpoints.

Signup, login and session validation for the mobile client.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roady.app.db.session import get_db
from roady.app.schemas.auth import (
    SignUpRequest, LoginRequest, AuthResponse, LogoutResponse, UserResponse
)
from roady.app.core.dependencies import get_current_identity
from roady.app.core.token_revocation import revoke_token
from roady.app.services.identity import Identity, authenticate, issue_token, register_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: SignUpRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user and return a session token.

    An email or username that is already taken yields ``success: false``
    and no new row.
    """
    user = await register_user(db, user_data.email, user_data.username, user_data.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=issue_token(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Login user and return a session token.

    Accepts username or email.
    """
    user = await authenticate(db, credentials.email_or_username, credentials.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=issue_token(user))


@router.get("/me", response_model=AuthResponse)
async def validate_session(identity: Identity = Depends(get_current_identity)):
    """
    Validate the bearer token and return its user with the same token.
    """
    return AuthResponse(user=UserResponse.model_validate(identity.user), token=identity.token)


@router.post("/logout", response_model=LogoutResponse)
async def logout(identity: Identity = Depends(get_current_identity)):
    """
    Revoke the presented token for the rest of its lifetime.
    """
    revoked = await revoke_token(identity.token, str(identity.user.id), identity.claims.get("exp"))
    return LogoutResponse(revoked=revoked)
