from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.pdca import MeetingRole, TTFUStatus
from app.schemas.user import UserSummary


# ---------------------------------------------------------------------------
# MeetingParticipant
# ---------------------------------------------------------------------------


class ParticipantIn(BaseModel):
    user_id: UUID
    role: str = "participant"


class MeetingJoinRequest(BaseModel):
    role: str = "participant"


class ParticipantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    user_id: UUID
    role: MeetingRole
    created_at: datetime
    user: UserSummary


# ---------------------------------------------------------------------------
# Meeting
# ---------------------------------------------------------------------------


class MeetingBase(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    date: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    notes: str | None = None


class MeetingCreate(MeetingBase):
    participants: list[ParticipantIn] = Field(default_factory=list)


class MeetingUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    date: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    notes: str | None = None


class MeetingSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    date: datetime


class MeetingTTFUSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: TTFUStatus
    assignee_id: UUID
    reviewer_id: UUID
    due_date: datetime | None = None
    created_at: datetime


class MeetingRead(MeetingBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    creator: UserSummary
    participants: list[ParticipantRead] = []


class MeetingDetailRead(MeetingRead):
    ttfus: list[MeetingTTFUSummary] = []
