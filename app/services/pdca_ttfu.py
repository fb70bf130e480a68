import logging
import uuid

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.pdca import TTFU, Meeting, TTFUStatus
from app.models.user import User
from app.schemas.pdca_ttfu import TTFUCreate, TTFUUpdate
from app.services.auth import Principal
from app.services.common import (
    apply_ordering,
    apply_pagination,
    coerce_enum,
    coerce_uuid,
    page_offset,
)
from app.services.response import ListResponseMixin
from app.services.user import users

logger = logging.getLogger(__name__)


def _require_user(db: Session, user_id, label: str) -> User:
    user = db.get(User, coerce_uuid(user_id))
    if not user:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return user


def _resolve_reviewer(db: Session, principal: Principal) -> uuid.UUID:
    if principal.can_review:
        return principal.user_id
    reviewer = users.first_reviewer(db)
    if reviewer is None:
        raise HTTPException(status_code=400, detail="No valid reviewer found")
    return reviewer.id


def _filtered(
    stmt,
    meeting_id: str | None,
    status: str | None,
    assignee_id: str | None,
    reviewer_id: str | None,
):
    if meeting_id is not None:
        stmt = stmt.where(TTFU.meeting_id == coerce_uuid(meeting_id))
    if status is not None:
        stmt = stmt.where(TTFU.status == coerce_enum(TTFUStatus, status, "status"))
    if assignee_id is not None:
        stmt = stmt.where(TTFU.assignee_id == coerce_uuid(assignee_id))
    if reviewer_id is not None:
        stmt = stmt.where(TTFU.reviewer_id == coerce_uuid(reviewer_id))
    return stmt


class TTFUs(ListResponseMixin):
    @staticmethod
    def create(db: Session, principal: Principal, payload: TTFUCreate) -> TTFU:
        if not db.get(Meeting, coerce_uuid(payload.meeting_id)):
            raise HTTPException(status_code=404, detail="Meeting not found")

        if payload.assignee_id is not None:
            assignee_id = _require_user(db, payload.assignee_id, "Assignee").id
        else:
            assignee_id = principal.user_id

        if payload.reviewer_id is not None:
            reviewer_id = _require_user(db, payload.reviewer_id, "Reviewer").id
        else:
            reviewer_id = _resolve_reviewer(db, principal)

        ttfu = TTFU(
            meeting_id=payload.meeting_id,
            title=payload.title,
            description=payload.description,
            assignee_id=assignee_id,
            reviewer_id=reviewer_id,
            due_date=payload.due_date,
            status=TTFUStatus.open,
        )
        db.add(ttfu)
        db.flush()
        db.refresh(ttfu)
        logger.info(
            "Created TTFU %s in meeting %s (assignee=%s reviewer=%s)",
            ttfu.id,
            ttfu.meeting_id,
            assignee_id,
            reviewer_id,
        )
        return ttfu

    @staticmethod
    def get(db: Session, ttfu_id: str) -> TTFU:
        ttfu = db.get(TTFU, coerce_uuid(ttfu_id))
        if not ttfu:
            raise HTTPException(status_code=404, detail="TTFU not found")
        return ttfu

    @staticmethod
    def list(
        db: Session,
        meeting_id: str | None,
        status: str | None,
        assignee_id: str | None,
        reviewer_id: str | None,
        order_by: str,
        order_dir: str,
        page: int,
        limit: int,
    ) -> list[TTFU]:
        stmt = _filtered(select(TTFU), meeting_id, status, assignee_id, reviewer_id)
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {
                "created_at": TTFU.created_at,
                "due_date": TTFU.due_date,
                "title": TTFU.title,
            },
        )
        return list(
            db.scalars(apply_pagination(stmt, limit, page_offset(page, limit))).all()
        )

    @staticmethod
    def count(
        db: Session,
        meeting_id: str | None,
        status: str | None,
        assignee_id: str | None,
        reviewer_id: str | None,
    ) -> int:
        stmt = _filtered(
            select(func.count(TTFU.id)), meeting_id, status, assignee_id, reviewer_id
        )
        return db.scalar(stmt) or 0

    @staticmethod
    def update(
        db: Session, principal: Principal, ttfu_id: str, payload: TTFUUpdate
    ) -> TTFU:
        ttfu = db.get(TTFU, coerce_uuid(ttfu_id))
        if not ttfu:
            raise HTTPException(status_code=404, detail="TTFU not found")
        allowed = {ttfu.assignee_id, ttfu.reviewer_id, ttfu.meeting.created_by}
        if principal.user_id not in allowed and not principal.is_admin:
            raise HTTPException(
                status_code=403,
                detail="Not allowed to edit this TTFU",
            )
        data = payload.model_dump(exclude_unset=True)
        if data.get("assignee_id") is not None:
            _require_user(db, data["assignee_id"], "Assignee")
        if data.get("reviewer_id") is not None:
            _require_user(db, data["reviewer_id"], "Reviewer")
        for key in ("assignee_id", "reviewer_id", "title"):
            if key in data and data[key] is None:
                raise HTTPException(status_code=400, detail=f"{key} cannot be null")
        for key, value in data.items():
            setattr(ttfu, key, value)
        db.flush()
        db.refresh(ttfu)
        logger.info("Updated TTFU %s", ttfu.id)
        return ttfu

    @staticmethod
    def set_status(
        db: Session,
        principal: Principal,
        ttfu_id: str,
        status: str,
        notes: str | None = None,
    ) -> TTFU:
        ttfu = db.get(TTFU, coerce_uuid(ttfu_id))
        if not ttfu:
            raise HTTPException(status_code=404, detail="TTFU not found")
        new_status = coerce_enum(TTFUStatus, status, "status")
        previous = ttfu.status
        ttfu.status = new_status
        db.flush()
        db.refresh(ttfu)
        logger.info(
            "TTFU %s status %s -> %s by %s%s",
            ttfu.id,
            previous.value,
            new_status.value,
            principal.user_id,
            f" ({notes})" if notes else "",
        )
        return ttfu

    @staticmethod
    def delete(db: Session, principal: Principal, ttfu_id: str) -> None:
        ttfu = db.get(TTFU, coerce_uuid(ttfu_id))
        if not ttfu:
            raise HTTPException(status_code=404, detail="TTFU not found")
        if ttfu.meeting.created_by != principal.user_id and not principal.is_admin:
            raise HTTPException(
                status_code=403,
                detail="Only the meeting creator or an admin can delete this TTFU",
            )
        db.delete(ttfu)
        db.flush()
        logger.info("Deleted TTFU %s", ttfu_id)


ttfus = TTFUs()
