"""Time entry model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import backref, relationship

from timetrack.database import Base
from timetrack.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 1440
NOTES_MAX_LENGTH = 500

# Named so the error layer can map violations back to a meaningful message
USER_DATE_CONSTRAINT = "uq_time_entries_user_date"


class TimeEntry(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Minutes spent on a subject on a given date. One entry per user per date."""

    __tablename__ = "time_entries"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    notes = Column(String(NOTES_MAX_LENGTH), nullable=True)

    # Relationships
    user = relationship("User", backref=backref("time_entries", passive_deletes=True))
    subject = relationship("Subject", back_populates="time_entries")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name=USER_DATE_CONSTRAINT),
        CheckConstraint(
            f"duration_minutes >= {MIN_DURATION_MINUTES} "
            f"AND duration_minutes <= {MAX_DURATION_MINUTES}",
            name="ck_time_entries_duration_range",
        ),
        Index("ix_time_entries_user_subject_date", "user_id", "subject_id", "date"),
    )

    @property
    def subject_name(self) -> str | None:
        return self.subject.name if self.subject else None
