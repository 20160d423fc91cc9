"""Subject schemas."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from timetrack.models.subject import SUBJECT_NAME_MAX_LENGTH

SubjectName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=SUBJECT_NAME_MAX_LENGTH)
]


class SubjectCreate(BaseModel):
    """Create a new subject."""

    name: SubjectName
    color: str | None = Field(None, max_length=7)


class SubjectRename(BaseModel):
    """Rename a subject."""

    new_name: SubjectName


class SubjectJoin(BaseModel):
    """Merge ``source_subject_id`` into ``target_subject_id``."""

    source_subject_id: UUID
    target_subject_id: UUID
    delete_source: bool = True


class SubjectResponse(BaseModel):
    """Subject response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    color: str | None
    created_at: datetime
    updated_at: datetime


class SubjectJoinResult(BaseModel):
    moved_count: int
    target_subject_id: UUID
