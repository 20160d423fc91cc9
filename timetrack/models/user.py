"""User model."""

from sqlalchemy import Column, String, UniqueConstraint

from timetrack.database import Base
from timetrack.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

EMAIL_CONSTRAINT = "users_email_key"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """User model for authentication and ownership."""

    __tablename__ = "users"

    # Always stored lower-cased, which makes the unique constraint case-insensitive
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    timezone = Column(String(50), nullable=False, default="Europe/London")
    role = Column(String(20), nullable=False, default="user")

    __table_args__ = (UniqueConstraint("email", name=EMAIL_CONSTRAINT),)
