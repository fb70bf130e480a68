from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.pdca import TTFUStatus
from app.schemas.pdca_evidence import EvidenceRead
from app.schemas.pdca_meeting import MeetingSummary
from app.schemas.user import UserSummary


class TTFUCreate(BaseModel):
    meeting_id: UUID
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    assignee_id: UUID | None = None
    reviewer_id: UUID | None = None
    due_date: datetime | None = None


class TTFUUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    assignee_id: UUID | None = None
    reviewer_id: UUID | None = None
    due_date: datetime | None = None


class TTFUStatusUpdate(BaseModel):
    status: str
    notes: str | None = None


class TTFURead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    title: str
    description: str | None = None
    assignee_id: UUID
    reviewer_id: UUID
    status: TTFUStatus
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    meeting: MeetingSummary
    assignee: UserSummary
    reviewer: UserSummary


class TTFUDetailRead(TTFURead):
    evidence: list[EvidenceRead] = []
