import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class MeetingRole(enum.Enum):
    owner = "owner"
    reviewer = "reviewer"
    participant = "participant"


class TTFUStatus(enum.Enum):
    open = "open"
    in_progress = "in_progress"
    done = "done"
    rejected = "rejected"


class EvidenceKind(enum.Enum):
    link = "link"
    file = "file"


class ReviewDecision(enum.Enum):
    approved = "approved"
    rejected = "rejected"
    needs_revision = "needs_revision"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------


class Meeting(Base):
    __tablename__ = "meetings"
    __table_args__ = (
        Index("ix_meetings_date", "date"),
        Index("ix_meetings_created_by", "created_by"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    creator = relationship("User", foreign_keys=[created_by])
    participants = relationship(
        "MeetingParticipant",
        back_populates="meeting",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MeetingParticipant.created_at",
    )
    ttfus = relationship(
        "TTFU",
        back_populates="meeting",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TTFU.created_at.desc()",
    )


class MeetingParticipant(Base):
    __tablename__ = "meeting_participants"
    __table_args__ = (
        UniqueConstraint(
            "meeting_id", "user_id", name="uq_meeting_participants_meeting_user"
        ),
        Index("ix_meeting_participants_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[MeetingRole] = mapped_column(
        Enum(MeetingRole), nullable=False, default=MeetingRole.participant
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    meeting = relationship("Meeting", back_populates="participants")
    user = relationship("User", foreign_keys=[user_id])


# ---------------------------------------------------------------------------
# Things To Follow Up
# ---------------------------------------------------------------------------


class TTFU(Base):
    __tablename__ = "ttfus"
    __table_args__ = (
        Index("ix_ttfus_meeting_id", "meeting_id"),
        Index("ix_ttfus_assignee_id", "assignee_id"),
        Index("ix_ttfus_reviewer_id", "reviewer_id"),
        Index("ix_ttfus_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    assignee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[TTFUStatus] = mapped_column(
        Enum(TTFUStatus), nullable=False, default=TTFUStatus.open
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    meeting = relationship("Meeting", back_populates="ttfus")
    assignee = relationship("User", foreign_keys=[assignee_id])
    reviewer = relationship("User", foreign_keys=[reviewer_id])
    evidence = relationship(
        "Evidence",
        back_populates="ttfu",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Evidence.created_at.desc()",
    )


# ---------------------------------------------------------------------------
# Evidence & Reviews (append-only)
# ---------------------------------------------------------------------------


class Evidence(Base):
    __tablename__ = "evidence"
    __table_args__ = (
        Index("ix_evidence_ttfu_id", "ttfu_id"),
        Index("ix_evidence_submitted_by", "submitted_by"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ttfu_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ttfus.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[EvidenceKind] = mapped_column(Enum(EvidenceKind), nullable=False)
    url: Mapped[str | None] = mapped_column(String(2048))
    file_ref: Mapped[str | None] = mapped_column(String(1024))
    description: Mapped[str | None] = mapped_column(Text)
    submitted_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    ttfu = relationship("TTFU", back_populates="evidence")
    submitter = relationship("User", foreign_keys=[submitted_by])
    reviews = relationship(
        "Review",
        back_populates="evidence",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Review.created_at.desc()",
    )


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint(
            "evidence_id", "reviewer_id", name="uq_reviews_evidence_reviewer"
        ),
        Index("ix_reviews_evidence_id", "evidence_id"),
        Index("ix_reviews_reviewer_id", "reviewer_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    evidence_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("evidence.id", ondelete="CASCADE"), nullable=False
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    decision: Mapped[ReviewDecision] = mapped_column(
        Enum(ReviewDecision), nullable=False
    )
    comment: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    evidence = relationship("Evidence", back_populates="reviews")
    reviewer = relationship("User", foreign_keys=[reviewer_id])
