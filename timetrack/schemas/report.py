"""Report schemas."""

from datetime import date as date_type
from uuid import UUID

from pydantic import BaseModel


class SubjectMinutes(BaseModel):
    subject_id: UUID
    subject_name: str
    minutes: int


class DailyReportRow(SubjectMinutes):
    date: date_type


class WeeklyReportRow(SubjectMinutes):
    week_start: date_type


class MonthlyReportRow(SubjectMinutes):
    month: str


class LeaderboardRow(SubjectMinutes):
    pass
