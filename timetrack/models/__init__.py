"""SQLAlchemy models."""

from timetrack.models.refresh_token import RefreshToken
from timetrack.models.subject import Subject
from timetrack.models.time_entry import TimeEntry
from timetrack.models.user import User

__all__ = [
    "User",
    "Subject",
    "TimeEntry",
    "RefreshToken",
]
