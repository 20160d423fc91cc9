"""Subject API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from timetrack.api.dependencies import get_subject_service
from timetrack.schemas.common import Envelope
from timetrack.schemas.subject import (
    SubjectCreate,
    SubjectJoin,
    SubjectJoinResult,
    SubjectRename,
    SubjectResponse,
)
from timetrack.services.subject_service import SubjectService

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=Envelope[list[SubjectResponse]])
def get_subjects(
    subjects: Annotated[SubjectService, Depends(get_subject_service)],
):
    """Get all subjects of the current user, sorted by name."""
    return {"data": subjects.list_subjects()}


@router.post("", response_model=Envelope[SubjectResponse], status_code=status.HTTP_201_CREATED)
def create_subject(
    subject_data: SubjectCreate,
    subjects: Annotated[SubjectService, Depends(get_subject_service)],
):
    """Create a new subject."""
    return {"data": subjects.create(subject_data.name, subject_data.color)}


@router.post("/join", response_model=Envelope[SubjectJoinResult])
def join_subjects(
    join_data: SubjectJoin,
    subjects: Annotated[SubjectService, Depends(get_subject_service)],
):
    """Move all entries of the source subject to the target, optionally deleting the source."""
    moved_count = subjects.join(
        join_data.source_subject_id, join_data.target_subject_id, join_data.delete_source
    )
    return {"data": {"moved_count": moved_count, "target_subject_id": join_data.target_subject_id}}


@router.put("/{subject_id}/rename", response_model=Envelope[SubjectResponse])
def rename_subject(
    subject_id: UUID,
    rename_data: SubjectRename,
    subjects: Annotated[SubjectService, Depends(get_subject_service)],
):
    """Rename a subject."""
    return {"data": subjects.rename(subject_id, rename_data.new_name)}
