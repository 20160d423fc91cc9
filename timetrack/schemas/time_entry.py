"""Time entry schemas."""

from datetime import date as date_type
from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from pydantic_core import PydanticCustomError

from timetrack.models.subject import SUBJECT_NAME_MAX_LENGTH
from timetrack.models.time_entry import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    NOTES_MAX_LENGTH,
)

Duration = Annotated[int, Field(ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)]
Notes = Annotated[str, Field(max_length=NOTES_MAX_LENGTH)]
SubjectName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=SUBJECT_NAME_MAX_LENGTH)
]


class TimeEntryCreate(BaseModel):
    """Create a time entry, referencing a subject by id or by name."""

    subject_id: UUID | None = None
    subject_name: SubjectName | None = None
    date: date_type | None = None
    duration_minutes: Duration
    notes: Notes | None = None
    overwrite_latest_overlap: bool = False

    @model_validator(mode="after")
    def require_subject(self) -> "TimeEntryCreate":
        if self.subject_id is None and self.subject_name is None:
            raise PydanticCustomError(
                "subject_required", "Either subject_id or subject_name is required"
            )
        return self


class TimeEntryUpdate(BaseModel):
    """Update a time entry. Only fields present in the request are changed."""

    subject_id: UUID | None = None
    date: date_type | None = None
    duration_minutes: Duration | None = None
    notes: Notes | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "TimeEntryUpdate":
        for name in ("subject_id", "date", "duration_minutes"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise PydanticCustomError("not_nullable", "{field} cannot be null", {"field": name})
        return self


class TimeEntryResponse(BaseModel):
    """Time entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subject_id: UUID
    subject_name: str
    date: date_type
    duration_minutes: int
    notes: str | None
    created_at: datetime
    updated_at: datetime
