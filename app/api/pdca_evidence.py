from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_role
from app.schemas.common import Envelope
from app.schemas.pdca_evidence import (
    DownloadURLResponse,
    EvidenceRead,
    ReviewCreate,
    ReviewRead,
)
from app.services import pdca_evidence as evidence_service
from app.services import pdca_review as review_service
from app.services.auth import Principal
from app.services.response import envelope

router = APIRouter(prefix="/evidence", tags=["evidence"])

require_reviewer = require_role("reviewer", "admin")


@router.get("/{evidence_id}", response_model=Envelope[EvidenceRead])
def get_evidence(evidence_id: str, db: Session = Depends(get_db)):
    return envelope(evidence_service.evidences.get(db, evidence_id))


@router.get("/{evidence_id}/download-url", response_model=Envelope[DownloadURLResponse])
def get_evidence_download_url(evidence_id: str, db: Session = Depends(get_db)):
    return envelope(evidence_service.evidences.download_url(db, evidence_id))


# ------------------------------------------------------------------
# Reviews
# ------------------------------------------------------------------


async def _review_payload(
    request: Request, principal: Principal = Depends(require_reviewer)
) -> ReviewCreate:
    """Parse the review body only once the caller holds a reviewing role."""
    try:
        return ReviewCreate.model_validate_json(await request.body())
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors()]
        ) from exc


@router.post(
    "/{evidence_id}/reviews",
    response_model=Envelope[ReviewRead],
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": ReviewCreate.model_json_schema()}
            },
        }
    },
)
def submit_review(
    evidence_id: str,
    payload: ReviewCreate = Depends(_review_payload),
    principal: Principal = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    return envelope(
        review_service.reviews.create(db, principal, evidence_id, payload)
    )


@router.get("/{evidence_id}/reviews", response_model=Envelope[list[ReviewRead]])
def list_reviews(evidence_id: str, db: Session = Depends(get_db)):
    return envelope(review_service.reviews.list_for_evidence(db, evidence_id))
