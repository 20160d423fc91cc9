"""Pydantic schemas for API requests and responses."""

from timetrack.schemas.auth import (
    AccessToken,
    RefreshRequest,
    RegisterResponse,
    TokenPair,
    UserLogin,
    UserRegister,
    UserResponse,
)
from timetrack.schemas.common import Envelope, MessageResponse
from timetrack.schemas.report import (
    DailyReportRow,
    LeaderboardRow,
    MonthlyReportRow,
    WeeklyReportRow,
)
from timetrack.schemas.subject import (
    SubjectCreate,
    SubjectJoin,
    SubjectJoinResult,
    SubjectRename,
    SubjectResponse,
)
from timetrack.schemas.time_entry import TimeEntryCreate, TimeEntryResponse, TimeEntryUpdate

__all__ = [
    "Envelope",
    "MessageResponse",
    "UserRegister",
    "UserLogin",
    "RefreshRequest",
    "RegisterResponse",
    "TokenPair",
    "AccessToken",
    "UserResponse",
    "SubjectCreate",
    "SubjectRename",
    "SubjectJoin",
    "SubjectJoinResult",
    "SubjectResponse",
    "TimeEntryCreate",
    "TimeEntryUpdate",
    "TimeEntryResponse",
    "DailyReportRow",
    "WeeklyReportRow",
    "MonthlyReportRow",
    "LeaderboardRow",
]
