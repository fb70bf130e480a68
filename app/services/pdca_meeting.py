import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.pdca import Meeting, MeetingParticipant, MeetingRole
from app.models.user import User
from app.schemas.pdca_meeting import MeetingCreate, MeetingJoinRequest, MeetingUpdate
from app.services.auth import Principal
from app.services.common import (
    apply_ordering,
    apply_pagination,
    coerce_enum,
    coerce_uuid,
    page_offset,
)
from app.services.response import ListResponseMixin

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _validate_time_window(
    start_time: datetime | None, end_time: datetime | None
) -> None:
    if start_time is None or end_time is None:
        return
    if _as_utc(end_time) <= _as_utc(start_time):
        raise HTTPException(
            status_code=400,
            detail="end_time must be later than start_time",
        )


def _require_manager(meeting: Meeting, principal: Principal) -> None:
    if meeting.created_by != principal.user_id and not principal.is_admin:
        raise HTTPException(
            status_code=403,
            detail="Only the meeting creator or an admin can modify this meeting",
        )


def _filtered(stmt, from_date: datetime | None, to_date: datetime | None):
    if from_date is not None:
        stmt = stmt.where(Meeting.date >= from_date)
    if to_date is not None:
        stmt = stmt.where(Meeting.date <= to_date)
    return stmt


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------


class Meetings(ListResponseMixin):
    @staticmethod
    def create(db: Session, principal: Principal, payload: MeetingCreate) -> Meeting:
        _validate_time_window(payload.start_time, payload.end_time)

        seen = set()
        participants = []
        for entry in payload.participants:
            if entry.user_id in seen:
                raise HTTPException(
                    status_code=400,
                    detail=f"Duplicate participant: {entry.user_id}",
                )
            seen.add(entry.user_id)
            if not db.get(User, entry.user_id):
                raise HTTPException(
                    status_code=404,
                    detail=f"Participant user not found: {entry.user_id}",
                )
            participants.append(
                MeetingParticipant(
                    user_id=entry.user_id,
                    role=coerce_enum(MeetingRole, entry.role, "role"),
                )
            )

        data = payload.model_dump(exclude={"participants"})
        meeting = Meeting(**data, created_by=principal.user_id)
        meeting.participants = participants
        db.add(meeting)
        db.flush()
        db.refresh(meeting)
        logger.info(
            "Created meeting %s with %d participants", meeting.id, len(participants)
        )
        return meeting

    @staticmethod
    def get(db: Session, meeting_id: str) -> Meeting:
        meeting = db.get(Meeting, coerce_uuid(meeting_id))
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        return meeting

    @staticmethod
    def list(
        db: Session,
        from_date: datetime | None,
        to_date: datetime | None,
        order_by: str,
        order_dir: str,
        page: int,
        limit: int,
    ) -> list[Meeting]:
        stmt = _filtered(select(Meeting), from_date, to_date)
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {
                "date": Meeting.date,
                "title": Meeting.title,
                "created_at": Meeting.created_at,
            },
        )
        return list(
            db.scalars(apply_pagination(stmt, limit, page_offset(page, limit))).all()
        )

    @staticmethod
    def count(
        db: Session, from_date: datetime | None, to_date: datetime | None
    ) -> int:
        return db.scalar(_filtered(select(func.count(Meeting.id)), from_date, to_date)) or 0

    @staticmethod
    def update(
        db: Session, principal: Principal, meeting_id: str, payload: MeetingUpdate
    ) -> Meeting:
        meeting = db.get(Meeting, coerce_uuid(meeting_id))
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        _require_manager(meeting, principal)
        data = payload.model_dump(exclude_unset=True)
        for key in ("title", "date"):
            if key in data and data[key] is None:
                raise HTTPException(status_code=400, detail=f"{key} cannot be null")
        _validate_time_window(
            data.get("start_time", meeting.start_time),
            data.get("end_time", meeting.end_time),
        )
        for key, value in data.items():
            setattr(meeting, key, value)
        db.flush()
        db.refresh(meeting)
        logger.info("Updated meeting %s", meeting.id)
        return meeting

    @staticmethod
    def delete(db: Session, principal: Principal, meeting_id: str) -> None:
        meeting = db.get(Meeting, coerce_uuid(meeting_id))
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        _require_manager(meeting, principal)
        db.delete(meeting)
        db.flush()
        logger.info("Deleted meeting %s", meeting_id)


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------


class MeetingParticipants:
    @staticmethod
    def join(
        db: Session,
        principal: Principal,
        meeting_id: str,
        payload: MeetingJoinRequest,
    ) -> MeetingParticipant:
        meeting = db.get(Meeting, coerce_uuid(meeting_id))
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        role = coerce_enum(MeetingRole, payload.role, "role")

        existing = db.scalars(
            select(MeetingParticipant).where(
                MeetingParticipant.meeting_id == meeting.id,
                MeetingParticipant.user_id == principal.user_id,
            )
        ).first()
        if existing:
            raise HTTPException(
                status_code=409,
                detail="Already a participant in this meeting",
            )

        participant = MeetingParticipant(
            meeting_id=meeting.id, user_id=principal.user_id, role=role
        )
        db.add(participant)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=409,
                detail="Already a participant in this meeting",
            )
        db.refresh(participant)
        logger.info(
            "User %s joined meeting %s as %s",
            principal.user_id,
            meeting.id,
            role.value,
        )
        return participant

    @staticmethod
    def list(db: Session, meeting_id: str) -> list[MeetingParticipant]:
        meeting = db.get(Meeting, coerce_uuid(meeting_id))
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        return list(meeting.participants)


meetings = Meetings()
meeting_participants = MeetingParticipants()
