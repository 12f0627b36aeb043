"""
Authentication Pydantic schemas.

Defines request and response schemas for the signup/login/me endpoints.
"""

import uuid
from typing import Optional
from pydantic import EmailStr, Field
from roady.app.schemas.common import CamelModel, UTCDateTime


class SignUpRequest(CamelModel):
    """Schema for POST /auth/signup."""
    email: EmailStr = Field(..., description="User email address")
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")


class LoginRequest(CamelModel):
    """
    Schema for POST /auth/login.

    Supports login with either username or email.
    """
    email_or_username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., description="Password")


class UserResponse(CamelModel):
    """Public user fields; the password hash never leaves the server."""
    id: uuid.UUID
    email: str
    username: str
    created_at: UTCDateTime


class AuthResponse(CamelModel):
    """Returned by signup, login and session validation."""
    success: bool = True
    user: UserResponse
    token: str


class LogoutResponse(CamelModel):
    success: bool = True
    revoked: bool
