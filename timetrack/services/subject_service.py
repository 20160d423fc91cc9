"""Subject service: per-user categories and merging them."""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timetrack.errors import bad_request, conflict, not_found
from timetrack.models.subject import Subject
from timetrack.models.time_entry import TimeEntry
from timetrack.models.user import User

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "subject name already exists"


class SubjectService:
    """Service for subject-related operations. Every query is scoped to one user."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def _query(self):
        return self.db.query(Subject).filter(Subject.user_id == self.user.id)

    def list_subjects(self) -> list[Subject]:
        """All of the user's subjects, ordered by name ignoring case."""
        return self._query().order_by(func.lower(Subject.name), Subject.created_at).all()

    def get(self, subject_id: UUID) -> Subject | None:
        return self._query().filter(Subject.id == subject_id).first()

    def get_or_404(self, subject_id: UUID, message: str = "subject not found") -> Subject:
        subject = self.get(subject_id)
        if subject is None:
            raise not_found(message)
        return subject

    def find_by_name(self, name: str) -> Subject | None:
        return self._query().filter(func.lower(Subject.name) == name.strip().lower()).first()

    def create(self, name: str, color: str | None = None) -> Subject:
        """Create a subject; names are unique per user regardless of case."""
        if self.find_by_name(name):
            raise conflict(DUPLICATE_NAME)

        subject = Subject(user_id=self.user.id, name=name.strip(), color=color)
        self.db.add(subject)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise conflict(DUPLICATE_NAME) from exc
        self.db.refresh(subject)
        logger.info("Created subject %s for user %s", subject.id, self.user.id)
        return subject

    def get_or_create(self, name: str) -> Subject:
        """Find a subject by name (ignoring case) or create it.

        If a concurrent request inserts the same name first, the unique index
        rejects our insert and the winner's row is returned instead.
        """
        existing = self.find_by_name(name)
        if existing:
            return existing

        subject = Subject(user_id=self.user.id, name=name.strip())
        self.db.add(subject)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.find_by_name(name)
            if existing is None:
                raise
            return existing
        logger.info("Auto-created subject %s for user %s", subject.id, self.user.id)
        return subject

    def rename(self, subject_id: UUID, new_name: str) -> Subject:
        subject = self.get_or_404(subject_id)

        clash = self.find_by_name(new_name)
        if clash is not None and clash.id != subject.id:
            raise conflict(DUPLICATE_NAME)

        subject.name = new_name.strip()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise conflict(DUPLICATE_NAME) from exc
        self.db.refresh(subject)
        return subject

    def join(self, source_id: UUID, target_id: UUID, delete_source: bool = True) -> int:
        """Move every entry from ``source_id`` to ``target_id`` in one transaction.

        Returns the number of entries moved. The source subject is deleted in
        the same transaction when ``delete_source`` is set.
        """
        if source_id == target_id:
            raise bad_request("source and target cannot be the same")

        self.get_or_404(source_id, "source subject not found")
        self.get_or_404(target_id, "target subject not found")

        try:
            moved_count = (
                self.db.query(TimeEntry)
                .filter(TimeEntry.subject_id == source_id, TimeEntry.user_id == self.user.id)
                .update({TimeEntry.subject_id: target_id}, synchronize_session="fetch")
            )
            if delete_source:
                self._query().filter(Subject.id == source_id).delete(synchronize_session="fetch")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Joined subject %s into %s for user %s (%d entries moved, source %s)",
            source_id,
            target_id,
            self.user.id,
            moved_count,
            "deleted" if delete_source else "kept",
        )
        return moved_count
