"""Refresh token allow-list model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from timetrack.database import Base


class RefreshToken(Base):
    """An issued, not yet revoked refresh token. Only the SHA-256 hash is kept."""

    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), primary_key=True)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
