"""Report API endpoints."""

from dataclasses import dataclass
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from timetrack.api.dependencies import get_report_service
from timetrack.errors import bad_request
from timetrack.schemas.common import Envelope
from timetrack.schemas.report import (
    DailyReportRow,
    LeaderboardRow,
    MonthlyReportRow,
    WeeklyReportRow,
)
from timetrack.services.report_service import (
    DEFAULT_LEADERBOARD_LIMIT,
    MAX_LEADERBOARD_LIMIT,
    ReportService,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@dataclass
class DateRange:
    start: date
    end: date


def date_range(start: Annotated[date, Query()], end: Annotated[date, Query()]) -> DateRange:
    """Inclusive ``start``..``end`` query parameters; both required, end not before start."""
    if end < start:
        raise bad_request(
            "End date must be greater than or equal to start date",
            details={"fields": [{"path": "end", "message": "must be on or after start"}]},
        )
    return DateRange(start=start, end=end)


@router.get("/daily", response_model=Envelope[list[DailyReportRow]])
def daily_report(
    period: Annotated[DateRange, Depends(date_range)],
    reports: Annotated[ReportService, Depends(get_report_service)],
):
    """Minutes per subject per day."""
    return {"data": reports.daily(period.start, period.end)}


@router.get("/weekly", response_model=Envelope[list[WeeklyReportRow]])
def weekly_report(
    period: Annotated[DateRange, Depends(date_range)],
    reports: Annotated[ReportService, Depends(get_report_service)],
):
    """Minutes per subject per ISO week (weeks start on Monday)."""
    return {"data": reports.weekly(period.start, period.end)}


@router.get("/monthly", response_model=Envelope[list[MonthlyReportRow]])
def monthly_report(
    period: Annotated[DateRange, Depends(date_range)],
    reports: Annotated[ReportService, Depends(get_report_service)],
):
    """Minutes per subject per calendar month."""
    return {"data": reports.monthly(period.start, period.end)}


@router.get("/subject-leaderboard", response_model=Envelope[list[LeaderboardRow]])
def subject_leaderboard(
    period: Annotated[DateRange, Depends(date_range)],
    reports: Annotated[ReportService, Depends(get_report_service)],
    limit: Annotated[int, Query(ge=1, le=MAX_LEADERBOARD_LIMIT)] = DEFAULT_LEADERBOARD_LIMIT,
):
    """Subjects ranked by total minutes in the range."""
    return {"data": reports.subject_leaderboard(period.start, period.end, limit)}
