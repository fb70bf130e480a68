"""Seed a development database with demo users and one PDCA cycle.

Usage::

    ENVIRONMENT=development python scripts/seed.py

Prints a bearer token per demo user so the API can be exercised directly.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from app.db import Base, SessionLocal, engine
from app.models.user import User
from app.schemas.pdca_evidence import EvidenceCreate, ReviewCreate
from app.schemas.pdca_meeting import MeetingCreate, ParticipantIn
from app.schemas.pdca_ttfu import TTFUCreate
from app.schemas.user import UserCreate
from app.services.auth import Principal, create_access_token
from app.services.pdca_evidence import evidences
from app.services.pdca_meeting import meetings
from app.services.pdca_review import reviews
from app.services.pdca_ttfu import ttfus
from app.services.user import users

DEMO_USERS = [
    ("Ada Admin", "admin@example.com", "admin"),
    ("Sam Supervisor", "supervisor@example.com", "supervisor"),
    ("Riley Reviewer", "reviewer@example.com", "reviewer"),
    ("Uma User", "user@example.com", "user"),
]
DEMO_PASSWORD = "password123"


def _get_or_create_user(db, name: str, email: str, role: str) -> User:
    existing = db.scalars(select(User).where(User.email == email)).first()
    if existing:
        return existing
    return users.create(
        db,
        UserCreate(name=name, email=email, password=DEMO_PASSWORD, global_role=role),
    )


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seeded = {
            role: _get_or_create_user(db, name, email, role)
            for name, email, role in DEMO_USERS
        }
        supervisor = Principal.from_user(seeded["supervisor"])
        reviewer = Principal.from_user(seeded["reviewer"])
        member = Principal.from_user(seeded["user"])

        now = datetime.now(timezone.utc)
        meeting = meetings.create(
            db,
            supervisor,
            MeetingCreate(
                title="Weekly PDCA review",
                date=now,
                start_time=now,
                end_time=now + timedelta(hours=1),
                notes="Seeded meeting",
                participants=[
                    ParticipantIn(user_id=seeded["supervisor"].id, role="owner"),
                    ParticipantIn(user_id=seeded["reviewer"].id, role="reviewer"),
                    ParticipantIn(user_id=seeded["user"].id),
                ],
            ),
        )
        first = ttfus.create(
            db,
            supervisor,
            TTFUCreate(
                meeting_id=meeting.id,
                title="Update the onboarding checklist",
                assignee_id=seeded["user"].id,
                due_date=now + timedelta(days=7),
            ),
        )
        ttfus.create(
            db,
            supervisor,
            TTFUCreate(meeting_id=meeting.id, title="Share the action log"),
        )
        evidence = evidences.create(
            db,
            member,
            first.id,
            EvidenceCreate(
                kind="link",
                url="https://example.com/onboarding-checklist",
                description="Checklist draft",
            ),
        )
        reviews.create(
            db,
            reviewer,
            evidence.id,
            ReviewCreate(decision="needs_revision", comment="Add the VPN step"),
        )

        db.commit()

        print(f"Seeded meeting {meeting.id}")
        for role, user in seeded.items():
            print(f"{role:<11} {user.email:<24} {create_access_token(user)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
