"""Report service: minutes per subject aggregated over days, weeks and months."""

from collections import defaultdict
from collections.abc import Callable, Hashable
from datetime import date, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from timetrack.errors import bad_request
from timetrack.models.subject import Subject
from timetrack.models.time_entry import TimeEntry
from timetrack.models.user import User

DEFAULT_LEADERBOARD_LIMIT = 10
MAX_LEADERBOARD_LIMIT = 100


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


class ReportService:
    """Read-only aggregates over one user's time entries in an inclusive date range."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def _minutes_by_day(self, start: date, end: date):
        """Per (date, subject) minute sums, straight from SQL."""
        minutes = func.sum(TimeEntry.duration_minutes).label("minutes")
        return (
            self.db.query(TimeEntry.date, TimeEntry.subject_id, Subject.name, minutes)
            .join(Subject, Subject.id == TimeEntry.subject_id)
            .filter(
                TimeEntry.user_id == self.user.id,
                TimeEntry.date >= start,
                TimeEntry.date <= end,
            )
            .group_by(TimeEntry.date, TimeEntry.subject_id, Subject.name)
            .all()
        )

    def _rollup(
        self, start: date, end: date, key_name: str, bucket: Callable[[date], Hashable]
    ) -> list[dict[str, Any]]:
        totals: dict[tuple, int] = defaultdict(int)
        for day, subject_id, subject_name, minutes in self._minutes_by_day(start, end):
            totals[(bucket(day), subject_id, subject_name)] += int(minutes)

        rows = [
            {key_name: key, "subject_id": subject_id, "subject_name": name, "minutes": minutes}
            for (key, subject_id, name), minutes in totals.items()
        ]
        rows.sort(key=lambda row: (row[key_name], row["subject_name"]))
        return rows

    def daily(self, start: date, end: date) -> list[dict[str, Any]]:
        return self._rollup(start, end, "date", lambda day: day)

    def weekly(self, start: date, end: date) -> list[dict[str, Any]]:
        return self._rollup(start, end, "week_start", week_start)

    def monthly(self, start: date, end: date) -> list[dict[str, Any]]:
        return self._rollup(start, end, "month", month_key)

    def subject_leaderboard(
        self, start: date, end: date, limit: int = DEFAULT_LEADERBOARD_LIMIT
    ) -> list[dict[str, Any]]:
        """Subjects ranked by total minutes, highest first; subjects with no time are left out."""
        if limit < 1 or limit > MAX_LEADERBOARD_LIMIT:
            raise bad_request(f"limit must be between 1 and {MAX_LEADERBOARD_LIMIT}")

        minutes = func.sum(TimeEntry.duration_minutes)
        rows = (
            self.db.query(TimeEntry.subject_id, Subject.name, minutes.label("minutes"))
            .join(Subject, Subject.id == TimeEntry.subject_id)
            .filter(
                TimeEntry.user_id == self.user.id,
                TimeEntry.date >= start,
                TimeEntry.date <= end,
            )
            .group_by(TimeEntry.subject_id, Subject.name)
            .having(minutes > 0)
            .order_by(minutes.desc(), Subject.name.asc())
            .limit(limit)
            .all()
        )
        return [
            {"subject_id": subject_id, "subject_name": name, "minutes": int(total)}
            for subject_id, name, total in rows
        ]
