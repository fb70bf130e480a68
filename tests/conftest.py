import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-pdca-tracker-tests-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["S3_ENDPOINT_URL"] = ""
os.environ["S3_ACCESS_KEY"] = ""
os.environ["S3_SECRET_KEY"] = ""

import uuid  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import models  # noqa: E402,F401
from app.db import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.pdca import (  # noqa: E402
    TTFU,
    Evidence,
    EvidenceKind,
    Meeting,
    TTFUStatus,
)
from app.models.user import GlobalRole, User  # noqa: E402
from app.services.auth import Principal, create_access_token  # noqa: E402


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    with TestClient(app) as test_client:
        yield test_client


def make_user(db_session, role=GlobalRole.user, **overrides) -> User:
    suffix = uuid.uuid4().hex[:8]
    defaults = dict(
        name=f"{role.value.title()} {suffix}",
        email=f"{role.value}-{suffix}@example.com",
        global_role=role,
    )
    defaults.update(overrides)
    user = User(**defaults)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def make_meeting(db_session, creator, **overrides) -> Meeting:
    defaults = dict(
        title="Weekly sync",
        date=datetime.now(timezone.utc),
        created_by=creator.id,
    )
    defaults.update(overrides)
    meeting = Meeting(**defaults)
    db_session.add(meeting)
    db_session.commit()
    db_session.refresh(meeting)
    return meeting


def make_ttfu(db_session, meeting, assignee, reviewer, **overrides) -> TTFU:
    defaults = dict(
        meeting_id=meeting.id,
        title="Follow up",
        assignee_id=assignee.id,
        reviewer_id=reviewer.id,
        status=TTFUStatus.open,
    )
    defaults.update(overrides)
    ttfu = TTFU(**defaults)
    db_session.add(ttfu)
    db_session.commit()
    db_session.refresh(ttfu)
    return ttfu


def make_evidence(db_session, ttfu, submitter, **overrides) -> Evidence:
    defaults = dict(
        ttfu_id=ttfu.id,
        kind=EvidenceKind.link,
        url="https://example.com/proof",
        submitted_by=submitter.id,
    )
    defaults.update(overrides)
    evidence = Evidence(**defaults)
    db_session.add(evidence)
    db_session.commit()
    db_session.refresh(evidence)
    return evidence


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def principal_for(user) -> Principal:
    return Principal.from_user(user)


@pytest.fixture()
def admin(db_session):
    return make_user(db_session, GlobalRole.admin)


@pytest.fixture()
def supervisor(db_session):
    return make_user(db_session, GlobalRole.supervisor)


@pytest.fixture()
def reviewer(db_session):
    return make_user(db_session, GlobalRole.reviewer)


@pytest.fixture()
def person(db_session):
    return make_user(db_session, GlobalRole.user)


@pytest.fixture()
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture()
def supervisor_headers(supervisor):
    return bearer(supervisor)


@pytest.fixture()
def reviewer_headers(reviewer):
    return bearer(reviewer)


@pytest.fixture()
def auth_headers(person):
    return bearer(person)
