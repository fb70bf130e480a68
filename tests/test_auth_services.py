import uuid

import jwt
import pytest

from app.config import settings
from app.models.user import GlobalRole
from app.services.auth import (
    Principal,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from conftest import make_user


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed) is True
        assert verify_password("wrong horse", hashed) is False

    def test_verify_without_hash(self):
        assert verify_password("anything", None) is False


class TestAccessTokens:
    def test_round_trip(self, db_session, reviewer):
        payload = decode_access_token(create_access_token(reviewer))
        assert payload["sub"] == str(reviewer.id)
        assert payload["role"] == "reviewer"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self, db_session, person):
        token = create_access_token(person, expires_in=-10)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_type_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_bad_signature_rejected(self, db_session, person):
        token = jwt.encode(
            {"sub": str(person.id), "type": "access"},
            "some-other-secret-that-is-long-enough-1234",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)


class TestPrincipal:
    def test_from_user(self, db_session):
        user = make_user(db_session, GlobalRole.supervisor, name="Sam")
        principal = Principal.from_user(user)
        assert principal.user_id == user.id
        assert principal.role == GlobalRole.supervisor
        assert principal.name == "Sam"
        assert principal.is_admin is False
        assert principal.can_review is False

    @pytest.mark.parametrize(
        "role,can_review,is_admin",
        [
            (GlobalRole.admin, True, True),
            (GlobalRole.reviewer, True, False),
            (GlobalRole.supervisor, False, False),
            (GlobalRole.user, False, False),
        ],
    )
    def test_role_flags(self, role, can_review, is_admin):
        principal = Principal(user_id=uuid.uuid4(), role=role)
        assert principal.can_review is can_review
        assert principal.is_admin is is_admin
