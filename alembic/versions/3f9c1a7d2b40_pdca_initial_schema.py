"""pdca initial schema

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "3f9c1a7d2b40"
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    "globalrole": ("admin", "supervisor", "reviewer", "user"),
    "meetingrole": ("owner", "reviewer", "participant"),
    "ttfustatus": ("open", "in_progress", "done", "rejected"),
    "evidencekind": ("link", "file"),
    "reviewdecision": ("approved", "rejected", "needs_revision"),
}


def _enum_column(name: str) -> sa.Enum:
    return sa.Enum(*ENUMS[name], name=name, create_type=False)


def upgrade() -> None:
    # --- Enums ---
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(op.get_bind(), checkfirst=True)

    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column(
            "global_role",
            _enum_column("globalrole"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_global_role", "users", ["global_role"])

    # --- Meetings ---
    op.create_table(
        "meetings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meetings_date", "meetings", ["date"])
    op.create_index("ix_meetings_created_by", "meetings", ["created_by"])

    op.create_table(
        "meeting_participants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("meeting_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "role",
            _enum_column("meetingrole"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["meeting_id"], ["meetings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "meeting_id", "user_id", name="uq_meeting_participants_meeting_user"
        ),
    )
    op.create_index(
        "ix_meeting_participants_user_id", "meeting_participants", ["user_id"]
    )

    # --- TTFUs ---
    op.create_table(
        "ttfus",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("meeting_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assignee_id", sa.Uuid(), nullable=False),
        sa.Column("reviewer_id", sa.Uuid(), nullable=False),
        sa.Column(
            "status",
            _enum_column("ttfustatus"),
            nullable=False,
        ),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["meeting_id"], ["meetings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assignee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ttfus_meeting_id", "ttfus", ["meeting_id"])
    op.create_index("ix_ttfus_assignee_id", "ttfus", ["assignee_id"])
    op.create_index("ix_ttfus_reviewer_id", "ttfus", ["reviewer_id"])
    op.create_index("ix_ttfus_status", "ttfus", ["status"])

    # --- Evidence & reviews ---
    op.create_table(
        "evidence",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("ttfu_id", sa.Uuid(), nullable=False),
        sa.Column(
            "kind",
            _enum_column("evidencekind"),
            nullable=False,
        ),
        sa.Column("url", sa.String(length=2048), nullable=True),
        sa.Column("file_ref", sa.String(length=1024), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("submitted_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["ttfu_id"], ["ttfus.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submitted_by"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_evidence_ttfu_id", "evidence", ["ttfu_id"])
    op.create_index("ix_evidence_submitted_by", "evidence", ["submitted_by"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("evidence_id", sa.Uuid(), nullable=False),
        sa.Column("reviewer_id", sa.Uuid(), nullable=False),
        sa.Column(
            "decision",
            _enum_column("reviewdecision"),
            nullable=False,
        ),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["evidence_id"], ["evidence.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "evidence_id", "reviewer_id", name="uq_reviews_evidence_reviewer"
        ),
    )
    op.create_index("ix_reviews_evidence_id", "reviews", ["evidence_id"])
    op.create_index("ix_reviews_reviewer_id", "reviews", ["reviewer_id"])


def downgrade() -> None:
    op.drop_index("ix_reviews_reviewer_id", table_name="reviews")
    op.drop_index("ix_reviews_evidence_id", table_name="reviews")
    op.drop_table("reviews")

    op.drop_index("ix_evidence_submitted_by", table_name="evidence")
    op.drop_index("ix_evidence_ttfu_id", table_name="evidence")
    op.drop_table("evidence")

    op.drop_index("ix_ttfus_status", table_name="ttfus")
    op.drop_index("ix_ttfus_reviewer_id", table_name="ttfus")
    op.drop_index("ix_ttfus_assignee_id", table_name="ttfus")
    op.drop_index("ix_ttfus_meeting_id", table_name="ttfus")
    op.drop_table("ttfus")

    op.drop_index("ix_meeting_participants_user_id", table_name="meeting_participants")
    op.drop_table("meeting_participants")

    op.drop_index("ix_meetings_created_by", table_name="meetings")
    op.drop_index("ix_meetings_date", table_name="meetings")
    op.drop_table("meetings")

    op.drop_index("ix_users_global_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    for enum_name in reversed(list(ENUMS)):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
