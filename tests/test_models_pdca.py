import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.models.pdca import (
    TTFU,
    Evidence,
    MeetingParticipant,
    MeetingRole,
    Review,
    ReviewDecision,
    TTFUStatus,
)
from app.models.user import GlobalRole
from conftest import make_evidence, make_meeting, make_ttfu, make_user


def _count(db_session, model):
    return db_session.scalar(select(func.count(model.id)))


class TestMeetingModel:
    def test_defaults(self, db_session, supervisor):
        meeting = make_meeting(db_session, supervisor)
        assert meeting.id is not None
        assert meeting.created_at is not None
        assert meeting.creator.id == supervisor.id
        assert meeting.participants == []
        assert meeting.ttfus == []

    def test_participant_unique_per_meeting(self, db_session, supervisor, person):
        meeting = make_meeting(db_session, supervisor)
        db_session.add(
            MeetingParticipant(meeting_id=meeting.id, user_id=person.id)
        )
        db_session.commit()
        db_session.add(
            MeetingParticipant(
                meeting_id=meeting.id, user_id=person.id, role=MeetingRole.reviewer
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_delete_cascades_to_ttfus_evidence_and_reviews(
        self, db_session, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        db_session.add(MeetingParticipant(meeting_id=meeting.id, user_id=person.id))
        db_session.commit()
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        db_session.add(
            Review(
                evidence_id=evidence.id,
                reviewer_id=reviewer.id,
                decision=ReviewDecision.approved,
            )
        )
        db_session.commit()

        db_session.delete(meeting)
        db_session.commit()

        assert _count(db_session, MeetingParticipant) == 0
        assert _count(db_session, TTFU) == 0
        assert _count(db_session, Evidence) == 0
        assert _count(db_session, Review) == 0


class TestTTFUModel:
    def test_status_defaults_to_open(self, db_session, supervisor, reviewer, person):
        meeting = make_meeting(db_session, supervisor)
        ttfu = TTFU(
            meeting_id=meeting.id,
            title="Defaults",
            assignee_id=person.id,
            reviewer_id=reviewer.id,
        )
        db_session.add(ttfu)
        db_session.commit()
        db_session.refresh(ttfu)
        assert ttfu.status == TTFUStatus.open
        assert ttfu.meeting.id == meeting.id
        assert ttfu.assignee.id == person.id
        assert ttfu.reviewer.id == reviewer.id

    def test_deleting_assignee_cascades(self, db_session, supervisor, reviewer):
        meeting = make_meeting(db_session, supervisor)
        assignee = make_user(db_session, GlobalRole.user)
        make_ttfu(db_session, meeting, assignee, reviewer)
        db_session.delete(assignee)
        db_session.commit()
        assert _count(db_session, TTFU) == 0


class TestReviewModel:
    def test_one_review_per_reviewer_and_evidence(
        self, db_session, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        db_session.add(
            Review(
                evidence_id=evidence.id,
                reviewer_id=reviewer.id,
                decision=ReviewDecision.approved,
            )
        )
        db_session.commit()
        db_session.add(
            Review(
                evidence_id=evidence.id,
                reviewer_id=reviewer.id,
                decision=ReviewDecision.rejected,
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
        assert _count(db_session, Review) == 1
