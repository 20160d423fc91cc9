"""Time entry API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from timetrack.api.dependencies import get_time_entry_service
from timetrack.schemas.common import Envelope
from timetrack.schemas.time_entry import TimeEntryCreate, TimeEntryResponse, TimeEntryUpdate
from timetrack.services.time_entry_service import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    TimeEntryService,
)

router = APIRouter(prefix="/time-entries", tags=["time-entries"])


@router.post("", response_model=Envelope[TimeEntryResponse], status_code=status.HTTP_201_CREATED)
def create_time_entry(
    entry_data: TimeEntryCreate,
    entries: Annotated[TimeEntryService, Depends(get_time_entry_service)],
):
    """Log time for a date (today in the reference timezone if omitted)."""
    return {"data": entries.create(entry_data)}


@router.get("", response_model=Envelope[list[TimeEntryResponse]])
def get_time_entries(
    response: Response,
    entries: Annotated[TimeEntryService, Depends(get_time_entry_service)],
    start: date | None = None,
    end: date | None = None,
    subject_id: UUID | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    """List entries, filtered and paginated. The total match count is sent in X-Total-Count."""
    items, total = entries.list_entries(
        start=start, end=end, subject_id=subject_id, page=page, limit=limit
    )
    response.headers["X-Total-Count"] = str(total)
    return {"data": items}


@router.put("/{entry_id}", response_model=Envelope[TimeEntryResponse])
def update_time_entry(
    entry_id: UUID,
    entry_data: TimeEntryUpdate,
    entries: Annotated[TimeEntryService, Depends(get_time_entry_service)],
):
    """Update only the fields present in the request body."""
    return {"data": entries.update(entry_id, entry_data)}


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_entry(
    entry_id: UUID,
    entries: Annotated[TimeEntryService, Depends(get_time_entry_service)],
):
    """Delete a time entry."""
    entries.delete(entry_id)
