"""Request principal, password hashing and bearer-token helpers.

The login flow itself lives outside this service. Tokens are plain HS256
JWTs whose ``sub`` claim is the user id; every request resolves its token
once into a :class:`Principal` that is handed to the service layer.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.config import settings
from app.models.user import GlobalRole, User

REVIEW_ROLES = frozenset({GlobalRole.reviewer, GlobalRole.admin})


@dataclass(frozen=True)
class Principal:
    user_id: uuid.UUID
    role: GlobalRole
    name: str = ""
    email: str = ""

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.global_role,
            name=user.name,
            email=user.email,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == GlobalRole.admin

    @property
    def can_review(self) -> bool:
        return self.role in REVIEW_ROLES


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """Check a password against its stored hash; used by the external login flow."""
    if not password_hash:
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), password_hash.encode("utf-8")
    )


def create_access_token(user: User, expires_in: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = settings.jwt_access_expires if expires_in is None else expires_in
    payload = {
        "sub": str(user.id),
        "role": user.global_role.value,
        "type": "access",
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token.

    Raises ``jwt.InvalidTokenError`` (or a subclass such as
    ``ExpiredSignatureError``) when the token cannot be trusted.
    """
    payload = jwt.decode(
        token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError(
            f"Expected access token, got {payload.get('type')}"
        )
    if not payload.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return payload
