import logging

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.pdca import Meeting
from app.models.user import GlobalRole, User
from app.schemas.user import UserCreate, UserUpdate
from app.services.auth import hash_password
from app.services.common import (
    apply_ordering,
    apply_pagination,
    coerce_enum,
    coerce_uuid,
    page_offset,
)
from app.services.response import ListResponseMixin

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _filtered(stmt, role: str | None, search: str | None):
    if role is not None:
        stmt = stmt.where(User.global_role == coerce_enum(GlobalRole, role, "role"))
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            func.lower(User.name).like(pattern) | func.lower(User.email).like(pattern)
        )
    return stmt


class Users(ListResponseMixin):
    @staticmethod
    def create(db: Session, payload: UserCreate) -> User:
        email = _normalize_email(payload.email)
        role = coerce_enum(GlobalRole, payload.global_role, "global_role")
        if db.scalars(select(User).where(User.email == email)).first():
            raise HTTPException(status_code=409, detail="Email already registered")

        user = User(
            name=payload.name,
            email=email,
            global_role=role,
            password_hash=hash_password(payload.password) if payload.password else None,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered")
        db.refresh(user)
        logger.info("Created user %s with role %s", user.id, role.value)
        return user

    @staticmethod
    def get(db: Session, user_id: str) -> User:
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    @staticmethod
    def list(
        db: Session,
        role: str | None,
        search: str | None,
        order_by: str,
        order_dir: str,
        page: int,
        limit: int,
    ) -> list[User]:
        stmt = _filtered(select(User), role, search)
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {
                "name": User.name,
                "email": User.email,
                "created_at": User.created_at,
            },
        )
        return list(
            db.scalars(apply_pagination(stmt, limit, page_offset(page, limit))).all()
        )

    @staticmethod
    def count(db: Session, role: str | None, search: str | None) -> int:
        stmt = _filtered(select(func.count(User.id)), role, search)
        return db.scalar(stmt) or 0

    @staticmethod
    def update(db: Session, user_id: str, payload: UserUpdate) -> User:
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        data = payload.model_dump(exclude_unset=True)
        if data.get("global_role") is not None:
            user.global_role = coerce_enum(GlobalRole, data["global_role"], "global_role")
        if data.get("name") is not None:
            user.name = data["name"]
        if data.get("password") is not None:
            user.password_hash = hash_password(data["password"])
        db.flush()
        db.refresh(user)
        logger.info("Updated user %s", user.id)
        return user

    @staticmethod
    def delete(db: Session, user_id: str) -> None:
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        owns_meetings = db.scalar(
            select(func.count(Meeting.id)).where(Meeting.created_by == user.id)
        )
        if owns_meetings:
            raise HTTPException(
                status_code=409,
                detail="User has created meetings and cannot be deleted",
            )
        db.delete(user)
        db.flush()
        logger.info("Deleted user %s", user_id)

    @staticmethod
    def first_reviewer(db: Session) -> User | None:
        """Pick a reviewer for auto-assignment.

        Reviewer-role users win over admins; ties go to the oldest account,
        then the lowest id, so the choice is stable between requests.
        """
        stmt = (
            select(User)
            .where(User.global_role.in_([GlobalRole.reviewer, GlobalRole.admin]))
            .order_by(
                (User.global_role == GlobalRole.admin).asc(),
                User.created_at.asc(),
                User.id.asc(),
            )
            .limit(1)
        )
        return db.scalars(stmt).first()


users = Users()
