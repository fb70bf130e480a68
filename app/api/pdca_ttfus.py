from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_user_auth
from app.config import settings
from app.schemas.common import Envelope, ListResponse
from app.schemas.pdca_evidence import (
    EvidenceCreate,
    EvidenceRead,
    UploadURLRequest,
    UploadURLResponse,
)
from app.schemas.pdca_ttfu import (
    TTFUCreate,
    TTFUDetailRead,
    TTFURead,
    TTFUStatusUpdate,
    TTFUUpdate,
)
from app.services import pdca_evidence as evidence_service
from app.services import pdca_ttfu as ttfu_service
from app.services.auth import Principal
from app.services.response import envelope

router = APIRouter(prefix="/ttfus", tags=["ttfus"])


# ------------------------------------------------------------------
# TTFU CRUD
# ------------------------------------------------------------------


@router.post("", response_model=Envelope[TTFURead], status_code=status.HTTP_201_CREATED)
def create_ttfu(
    payload: TTFUCreate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(ttfu_service.ttfus.create(db, principal, payload))


@router.get("/{ttfu_id}", response_model=Envelope[TTFUDetailRead])
def get_ttfu(ttfu_id: str, db: Session = Depends(get_db)):
    return envelope(ttfu_service.ttfus.get(db, ttfu_id))


@router.get("", response_model=ListResponse[TTFURead])
def list_ttfus(
    meeting_id: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    assignee_id: str | None = None,
    reviewer_id: str | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    db: Session = Depends(get_db),
):
    return ttfu_service.ttfus.list_response(
        db,
        meeting_id,
        status_filter,
        assignee_id,
        reviewer_id,
        order_by=order_by,
        order_dir=order_dir,
        page=page,
        limit=limit,
    )


@router.patch("/{ttfu_id}", response_model=Envelope[TTFURead])
def update_ttfu(
    ttfu_id: str,
    payload: TTFUUpdate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(ttfu_service.ttfus.update(db, principal, ttfu_id, payload))


@router.patch("/{ttfu_id}/status", response_model=Envelope[TTFURead])
def update_ttfu_status(
    ttfu_id: str,
    payload: TTFUStatusUpdate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(
        ttfu_service.ttfus.set_status(
            db, principal, ttfu_id, payload.status, payload.notes
        )
    )


@router.delete("/{ttfu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ttfu(
    ttfu_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    ttfu_service.ttfus.delete(db, principal, ttfu_id)


# ------------------------------------------------------------------
# Evidence sub-endpoints
# ------------------------------------------------------------------


@router.post(
    "/{ttfu_id}/evidence",
    response_model=Envelope[EvidenceRead],
    status_code=status.HTTP_201_CREATED,
)
def submit_evidence(
    ttfu_id: str,
    payload: EvidenceCreate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(evidence_service.evidences.create(db, principal, ttfu_id, payload))


@router.get("/{ttfu_id}/evidence", response_model=Envelope[list[EvidenceRead]])
def list_evidence(ttfu_id: str, db: Session = Depends(get_db)):
    return envelope(evidence_service.evidences.list_for_ttfu(db, ttfu_id))


@router.post(
    "/{ttfu_id}/evidence/upload-url", response_model=Envelope[UploadURLResponse]
)
def create_evidence_upload_url(
    ttfu_id: str, payload: UploadURLRequest, db: Session = Depends(get_db)
):
    return envelope(
        evidence_service.evidences.create_upload_url(
            db, ttfu_id, payload.file_name, payload.mime_type
        )
    )
