"""Subject model."""

from sqlalchemy import Column, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import backref, relationship

from timetrack.database import Base
from timetrack.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

SUBJECT_NAME_MAX_LENGTH = 60


class Subject(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A user-defined category that time is logged against."""

    __tablename__ = "subjects"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(SUBJECT_NAME_MAX_LENGTH), nullable=False)
    color = Column(String(7), nullable=True)

    # Relationships
    user = relationship("User", backref=backref("subjects", passive_deletes=True))
    time_entries = relationship("TimeEntry", back_populates="subject", passive_deletes=True)

    __table_args__ = (
        Index("uq_subjects_user_name", user_id, func.lower(name), unique=True),
    )
