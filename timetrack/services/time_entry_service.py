"""Time entry service.

A user has at most one entry per calendar date. Creating a second entry for a
date is rejected with a conflict that carries the existing entry, unless the
caller opts into overwriting it.
"""

import logging
from datetime import date, datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from timetrack.config import get_settings
from timetrack.errors import bad_request, conflict, not_found
from timetrack.models.time_entry import TimeEntry
from timetrack.models.user import User
from timetrack.schemas.time_entry import TimeEntryCreate, TimeEntryResponse, TimeEntryUpdate
from timetrack.services.subject_service import SubjectService

logger = logging.getLogger(__name__)

settings = get_settings()

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

OVERLAP_MESSAGE = "Latest entry exists on this date"
OVERLAP_HINT = "Retry with overwrite_latest_overlap=true to replace the latest entry on this date."


def today_in_reference_timezone() -> date:
    """Today's date in the configured reference timezone."""
    return datetime.now(ZoneInfo(settings.reference_timezone)).date()


class TimeEntryService:
    """Service for time entry operations, scoped to one user."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user
        self.subjects = SubjectService(db, user)

    def _query(self):
        return (
            self.db.query(TimeEntry)
            .options(joinedload(TimeEntry.subject))
            .filter(TimeEntry.user_id == self.user.id)
        )

    def get(self, entry_id: UUID) -> TimeEntry | None:
        return self._query().filter(TimeEntry.id == entry_id).first()

    def get_on_date(self, entry_date: date) -> TimeEntry | None:
        """The latest entry logged on ``entry_date``, if any."""
        return (
            self._query()
            .filter(TimeEntry.date == entry_date)
            .order_by(TimeEntry.created_at.desc())
            .first()
        )

    def _resolve_subject_id(self, subject_id: UUID | None, subject_name: str | None) -> UUID:
        if subject_id is not None:
            if self.subjects.get(subject_id) is None:
                raise not_found("Subject not found")
            return subject_id
        if subject_name:
            return self.subjects.get_or_create(subject_name).id
        raise bad_request("Either subject_id or subject_name is required")

    def _overlap_conflict(self, entry_date: date):
        """Build the conflict error for ``entry_date`` after a failed write."""
        latest = self.get_on_date(entry_date)
        if latest is None:
            # The clashing row vanished between the failed write and this read
            return conflict(OVERLAP_MESSAGE)
        return conflict(
            OVERLAP_MESSAGE,
            details={
                "latest_entry": TimeEntryResponse.model_validate(latest).model_dump(mode="json"),
                "hint": OVERLAP_HINT,
            },
        )

    def create(self, data: TimeEntryCreate) -> TimeEntry:
        """Log time for a date, overwriting that date's entry only when asked."""
        entry_date = data.date or today_in_reference_timezone()
        subject_id = self._resolve_subject_id(data.subject_id, data.subject_name)

        if data.overwrite_latest_overlap:
            existing = self.get_on_date(entry_date)
            if existing is not None:
                existing.subject_id = subject_id
                existing.duration_minutes = data.duration_minutes
                existing.notes = data.notes
                self.db.commit()
                logger.info("Overwrote time entry %s for user %s", existing.id, self.user.id)
                return self._reload(existing.id)

        entry = TimeEntry(
            user_id=self.user.id,
            subject_id=subject_id,
            date=entry_date,
            duration_minutes=data.duration_minutes,
            notes=data.notes,
        )
        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise self._overlap_conflict(entry_date) from None
        logger.info("Created time entry %s for user %s", entry.id, self.user.id)
        return self._reload(entry.id)

    def list_entries(
        self,
        start: date | None = None,
        end: date | None = None,
        subject_id: UUID | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[TimeEntry], int]:
        """Filtered page of entries plus the total number of matches."""
        if page < 1:
            raise bad_request("Page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise bad_request(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        query = self.db.query(TimeEntry).filter(TimeEntry.user_id == self.user.id)
        if start is not None:
            query = query.filter(TimeEntry.date >= start)
        if end is not None:
            query = query.filter(TimeEntry.date <= end)
        if subject_id is not None:
            query = query.filter(TimeEntry.subject_id == subject_id)

        total = query.count()
        entries = (
            query.options(joinedload(TimeEntry.subject))
            .order_by(TimeEntry.date.asc(), TimeEntry.created_at.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return entries, total

    def update(self, entry_id: UUID, data: TimeEntryUpdate) -> TimeEntry:
        """Apply only the fields present in ``data``."""
        entry = self.get(entry_id)
        if entry is None:
            raise not_found("time entry not found")

        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        if not changes:
            return entry

        if "subject_id" in changes and self.subjects.get(changes["subject_id"]) is None:
            raise not_found("Subject not found")

        for field, value in changes.items():
            setattr(entry, field, value)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise self._overlap_conflict(changes.get("date", entry.date)) from None
        return self._reload(entry_id)

    def delete(self, entry_id: UUID) -> None:
        deleted = (
            self.db.query(TimeEntry)
            .filter(TimeEntry.id == entry_id, TimeEntry.user_id == self.user.id)
            .delete(synchronize_session="fetch")
        )
        if not deleted:
            raise not_found("time entry not found")
        self.db.commit()
        logger.info("Deleted time entry %s for user %s", entry_id, self.user.id)

    def _reload(self, entry_id: UUID) -> TimeEntry:
        # Committed instances are expired, so this re-reads server-side timestamps
        return self.get(entry_id)
