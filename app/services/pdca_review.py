import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.pdca import Evidence, Review, ReviewDecision
from app.schemas.pdca_evidence import ReviewCreate
from app.services.auth import Principal
from app.services.common import coerce_enum, coerce_uuid

logger = logging.getLogger(__name__)


class Reviews:
    @staticmethod
    def create(
        db: Session, principal: Principal, evidence_id: str, payload: ReviewCreate
    ) -> Review:
        """Record a reviewer's decision on one evidence item.

        Only the TTFU's designated reviewer (or an admin) may review, and
        each reviewer gets one decision per evidence. The TTFU status is
        left alone; it only moves through the status endpoint.
        """
        if not principal.can_review:
            raise HTTPException(
                status_code=403,
                detail="Only reviewers or admins can review evidence",
            )
        decision = coerce_enum(ReviewDecision, payload.decision, "decision")

        evidence = db.get(Evidence, coerce_uuid(evidence_id))
        if not evidence:
            raise HTTPException(status_code=404, detail="Evidence not found")
        if evidence.ttfu.reviewer_id != principal.user_id and not principal.is_admin:
            raise HTTPException(
                status_code=403,
                detail="Only the assigned reviewer or an admin can review this evidence",
            )

        existing = db.scalars(
            select(Review).where(
                Review.evidence_id == evidence.id,
                Review.reviewer_id == principal.user_id,
            )
        ).first()
        if existing:
            raise HTTPException(
                status_code=409,
                detail="You have already reviewed this evidence",
            )

        review = Review(
            evidence_id=evidence.id,
            reviewer_id=principal.user_id,
            decision=decision,
            comment=payload.comment,
        )
        db.add(review)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=409,
                detail="You have already reviewed this evidence",
            )
        db.refresh(review)
        logger.info(
            "Review %s on evidence %s: %s by %s",
            review.id,
            evidence.id,
            decision.value,
            principal.user_id,
        )
        return review

    @staticmethod
    def list_for_evidence(db: Session, evidence_id: str) -> list[Review]:
        evidence = db.get(Evidence, coerce_uuid(evidence_id))
        if not evidence:
            raise HTTPException(status_code=404, detail="Evidence not found")
        stmt = (
            select(Review)
            .where(Review.evidence_id == evidence.id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(db.scalars(stmt).all())


reviews = Reviews()
