"""Authentication service for JWT and password handling."""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timetrack.config import get_settings
from timetrack.errors import conflict, unauthorized
from timetrack.models.user import User
from timetrack.services.token_store import RefreshTokenStore

logger = logging.getLogger(__name__)

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105

INVALID_CREDENTIALS = "invalid credentials"
INVALID_REFRESH_TOKEN = "invalid refresh token"  # noqa: S105

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)


class TokenExpired(Exception):
    """The token's signature is valid but it has expired."""


class TokenInvalid(Exception):
    """The token is malformed or badly signed."""


class TokenTypeMismatch(TokenInvalid):
    """The token verified but its ``type`` claim is not the expected one."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _encode_token(
    user: User, token_type: str, secret: str, lifetime: timedelta
) -> tuple[str, datetime]:
    now = datetime.now(UTC)
    expire = now + lifetime
    to_encode = {
        "user_id": str(user.id),
        "email": user.email,
        "type": token_type,
        "iat": now,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }
    encoded_jwt = jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt, expire


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived JWT access token."""
    token, _ = _encode_token(
        user,
        ACCESS_TOKEN_TYPE,
        settings.jwt_access_secret,
        expires_delta if expires_delta is not None else settings.access_token_expiry,
    )
    return token


def create_refresh_token(
    user: User, expires_delta: timedelta | None = None
) -> tuple[str, datetime]:
    """Create a long-lived JWT refresh token. Returns the token and its expiry."""
    return _encode_token(
        user,
        REFRESH_TOKEN_TYPE,
        settings.jwt_refresh_secret,
        expires_delta if expires_delta is not None else settings.refresh_token_expiry,
    )


def _decode(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise TokenInvalid("malformed or badly signed token") from exc
    if payload.get("type") != expected_type:
        raise TokenTypeMismatch(f"expected a {expected_type} token")
    try:
        payload["user_id"] = UUID(str(payload.get("user_id")))
    except ValueError as exc:
        raise TokenInvalid("token has no valid user_id") from exc
    return payload


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        TokenExpired: the token is past its ``exp``.
        TokenInvalid: the signature, structure or ``type`` claim is wrong.
    """
    return _decode(token, settings.jwt_access_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    """Decode and validate a refresh token (see ``decode_access_token``)."""
    return _decode(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email, ignoring case."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    return db.get(User, user_id)


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


class AuthService:
    """Registration, login and refresh-token lifecycle."""

    def __init__(self, db: Session, token_store: RefreshTokenStore):
        self.db = db
        self.token_store = token_store

    def register(self, email: str, password: str) -> User:
        """Create a new user; the email must not be taken in any casing."""
        if get_user_by_email(self.db, email):
            raise conflict("User with this email already exists")

        user = User(email=normalize_email(email), password_hash=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same address
            self.db.rollback()
            raise conflict("User with this email already exists") from exc
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> tuple[str, str]:
        """Return ``(access_token, refresh_token)`` for valid credentials."""
        user = authenticate_user(self.db, email, password)
        if user is None:
            logger.warning("Failed login attempt")
            raise unauthorized(INVALID_CREDENTIALS)

        access_token = create_access_token(user)
        refresh_token, expires_at = create_refresh_token(user)
        self.token_store.purge_expired()
        self.token_store.add(refresh_token, user.id, expires_at)
        return access_token, refresh_token

    def refresh(self, refresh_token: str) -> str:
        """Exchange an allow-listed refresh token for a fresh access token."""
        try:
            payload = decode_refresh_token(refresh_token)
        except (TokenExpired, TokenInvalid) as exc:
            raise unauthorized(INVALID_REFRESH_TOKEN) from exc

        if not self.token_store.contains(refresh_token):
            logger.warning("Refresh attempted with a revoked token")
            raise unauthorized(INVALID_REFRESH_TOKEN)

        user = get_user_by_id(self.db, payload["user_id"])
        if user is None:
            raise unauthorized(INVALID_REFRESH_TOKEN)

        return create_access_token(user)

    def logout(self, refresh_token: str) -> str:
        """Revoke ``refresh_token`` so it can no longer be exchanged."""
        try:
            decode_refresh_token(refresh_token)
        except (TokenExpired, TokenInvalid) as exc:
            raise unauthorized(INVALID_REFRESH_TOKEN) from exc

        self.token_store.remove(refresh_token)
        return "Successfully logged out"
