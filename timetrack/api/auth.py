"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from timetrack.api.dependencies import get_auth_service, get_current_user
from timetrack.models.user import User
from timetrack.schemas.auth import (
    AccessToken,
    RefreshRequest,
    RegisterResponse,
    TokenPair,
    UserLogin,
    UserRegister,
    UserResponse,
)
from timetrack.schemas.common import Envelope, MessageResponse
from timetrack.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=Envelope[RegisterResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    user_data: UserRegister,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    user = auth_service.register(user_data.email, user_data.password)
    return {"data": {"user_id": user.id}}


@router.post("/login", response_model=Envelope[TokenPair])
def login(
    credentials: UserLogin,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    access_token, refresh_token = auth_service.login(credentials.email, credentials.password)
    return {"data": {"access_token": access_token, "refresh_token": refresh_token}}


@router.post("/refresh", response_model=Envelope[AccessToken])
def refresh(
    body: RefreshRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Exchange a refresh token for a new access token."""
    return {"data": {"access_token": auth_service.refresh(body.refresh_token)}}


@router.post("/logout", response_model=Envelope[MessageResponse])
def logout(
    body: RefreshRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Revoke a refresh token."""
    return {"data": {"message": auth_service.logout(body.refresh_token)}}


@router.get("/me", response_model=Envelope[UserResponse])
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return {"data": current_user}
