"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Body of refresh and logout requests."""

    refresh_token: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    user_id: UUID


class TokenPair(BaseModel):
    """Tokens issued on login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"  # noqa: S105


class AccessToken(BaseModel):
    """Token issued on refresh."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    timezone: str
    role: str
    created_at: datetime
