"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from timetrack.database import get_db
from timetrack.errors import unauthorized
from timetrack.models.user import User
from timetrack.services.auth import (
    AuthService,
    TokenExpired,
    TokenInvalid,
    TokenTypeMismatch,
    decode_access_token,
    get_user_by_id,
)
from timetrack.services.report_service import ReportService
from timetrack.services.subject_service import SubjectService
from timetrack.services.time_entry_service import TimeEntryService
from timetrack.services.token_store import RefreshTokenStore

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the bearer access token."""
    if credentials is None or not credentials.credentials:
        raise unauthorized("Access token is required")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenExpired as exc:
        raise unauthorized("Access token has expired") from exc
    except TokenTypeMismatch as exc:
        raise unauthorized("Invalid token type") from exc
    except TokenInvalid as exc:
        raise unauthorized("Invalid access token") from exc

    user = get_user_by_id(db, payload["user_id"])
    if user is None:
        raise unauthorized("User not found")

    return user


def get_token_store(db: Annotated[Session, Depends(get_db)]) -> RefreshTokenStore:
    """Get the refresh token allow-list."""
    return RefreshTokenStore(db)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    token_store: Annotated[RefreshTokenStore, Depends(get_token_store)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, token_store)


def get_subject_service(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> SubjectService:
    """Get subject service for the current user."""
    return SubjectService(db, current_user)


def get_time_entry_service(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TimeEntryService:
    """Get time entry service for the current user."""
    return TimeEntryService(db, current_user)


def get_report_service(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportService:
    """Get report service for the current user."""
    return ReportService(db, current_user)
