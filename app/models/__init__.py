from app.models.user import GlobalRole, User  # noqa: F401
from app.models.pdca import (  # noqa: F401
    TTFU,
    Evidence,
    EvidenceKind,
    Meeting,
    MeetingParticipant,
    MeetingRole,
    Review,
    ReviewDecision,
    TTFUStatus,
)
