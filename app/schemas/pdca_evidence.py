from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.pdca import EvidenceKind, ReviewDecision
from app.schemas.user import UserSummary


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


class ReviewCreate(BaseModel):
    decision: str
    comment: str | None = None


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    evidence_id: UUID
    reviewer_id: UUID
    decision: ReviewDecision
    comment: str | None = None
    created_at: datetime
    reviewer: UserSummary


# ---------------------------------------------------------------------------
# Evidence
# ---------------------------------------------------------------------------


class EvidenceCreate(BaseModel):
    kind: str
    url: str | None = Field(default=None, max_length=2048)
    file_ref: str | None = Field(default=None, max_length=1024)
    description: str | None = None


class EvidenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ttfu_id: UUID
    kind: EvidenceKind
    url: str | None = None
    file_ref: str | None = None
    description: str | None = None
    submitted_by: UUID
    created_at: datetime
    submitter: UserSummary
    reviews: list[ReviewRead] = []


# ---------------------------------------------------------------------------
# Evidence file upload
# ---------------------------------------------------------------------------


class UploadURLRequest(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1, max_length=255)


class UploadURLResponse(BaseModel):
    file_ref: str
    upload_url: str


class DownloadURLResponse(BaseModel):
    download_url: str
