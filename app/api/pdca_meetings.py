from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_user_auth
from app.config import settings
from app.schemas.common import Envelope, ListResponse
from app.schemas.pdca_meeting import (
    MeetingCreate,
    MeetingDetailRead,
    MeetingJoinRequest,
    MeetingRead,
    MeetingUpdate,
    ParticipantRead,
)
from app.services import pdca_meeting as meeting_service
from app.services.auth import Principal
from app.services.response import envelope

router = APIRouter(prefix="/meetings", tags=["meetings"])


# ------------------------------------------------------------------
# Meeting CRUD
# ------------------------------------------------------------------


@router.post(
    "", response_model=Envelope[MeetingRead], status_code=status.HTTP_201_CREATED
)
def create_meeting(
    payload: MeetingCreate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(meeting_service.meetings.create(db, principal, payload))


@router.get("/{meeting_id}", response_model=Envelope[MeetingDetailRead])
def get_meeting(meeting_id: str, db: Session = Depends(get_db)):
    return envelope(meeting_service.meetings.get(db, meeting_id))


@router.get("", response_model=ListResponse[MeetingRead])
def list_meetings(
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    order_by: str = Query(default="date"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    db: Session = Depends(get_db),
):
    return meeting_service.meetings.list_response(
        db,
        from_date,
        to_date,
        order_by=order_by,
        order_dir=order_dir,
        page=page,
        limit=limit,
    )


@router.patch("/{meeting_id}", response_model=Envelope[MeetingRead])
def update_meeting(
    meeting_id: str,
    payload: MeetingUpdate,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(
        meeting_service.meetings.update(db, principal, meeting_id, payload)
    )


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meeting(
    meeting_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    meeting_service.meetings.delete(db, principal, meeting_id)


# ------------------------------------------------------------------
# Participants
# ------------------------------------------------------------------


@router.post(
    "/{meeting_id}/join",
    response_model=Envelope[ParticipantRead],
    status_code=status.HTTP_201_CREATED,
)
def join_meeting(
    meeting_id: str,
    payload: MeetingJoinRequest | None = None,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return envelope(
        meeting_service.meeting_participants.join(
            db, principal, meeting_id, payload or MeetingJoinRequest()
        )
    )


@router.get(
    "/{meeting_id}/participants", response_model=Envelope[list[ParticipantRead]]
)
def list_participants(meeting_id: str, db: Session = Depends(get_db)):
    return envelope(meeting_service.meeting_participants.list(db, meeting_id))
