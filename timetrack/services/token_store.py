"""Database-backed allow-list of refresh tokens."""

import hashlib
import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from timetrack.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a token; raw tokens are never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class RefreshTokenStore:
    """Tracks which refresh tokens are still valid.

    A token is valid while its hash is present and its expiry is in the
    future. Logging out removes the row, which revokes the token.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, token: str, user_id: UUID, expires_at: datetime) -> None:
        self.db.add(
            RefreshToken(token_hash=hash_token(token), user_id=user_id, expires_at=expires_at)
        )
        self.db.commit()

    def contains(self, token: str) -> bool:
        row = self.db.get(RefreshToken, hash_token(token))
        if row is None:
            return False
        return _as_aware(row.expires_at) > datetime.now(UTC)

    def remove(self, token: str) -> bool:
        """Revoke ``token``. Returns whether it was present."""
        deleted = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token_hash == hash_token(token))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    def purge_expired(self) -> int:
        """Delete rows whose expiry has passed."""
        deleted = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.expires_at <= datetime.now(UTC))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("Purged %d expired refresh tokens", deleted)
        return deleted

    def clear(self) -> None:
        self.db.query(RefreshToken).delete(synchronize_session=False)
        self.db.commit()

    def count(self) -> int:
        return self.db.query(RefreshToken).count()
