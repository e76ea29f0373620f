"""create profiles, problems, test cases, submissions and streak events

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(name: str) -> bool:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    return name in inspector.get_table_names()


def upgrade() -> None:
    if not _has_table("profiles"):
        op.create_table(
            "profiles",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=255), nullable=True),
            sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
            sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("streak_last_success", sa.Date(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.CheckConstraint("longest_streak >= current_streak", name="ck_profiles_longest_ge_current"),
        )
        op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    if not _has_table("problems"):
        op.create_table(
            "problems",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )

    if not _has_table("test_cases"):
        op.create_table(
            "test_cases",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("problem_id", sa.Uuid(), sa.ForeignKey("problems.id", ondelete="CASCADE"), nullable=False),
            sa.Column("kind", sa.String(length=16), nullable=False),
            sa.Column("input", sa.Text(), nullable=False, server_default=""),
            sa.Column("expected_output", sa.Text(), nullable=False, server_default=""),
            sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
            sa.CheckConstraint("kind IN ('SAMPLE', 'HIDDEN')", name="ck_test_cases_kind"),
        )
        op.create_index("ix_test_cases_problem_id", "test_cases", ["problem_id"])

    if not _has_table("submissions"):
        op.create_table(
            "submissions",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("user_id", sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
            sa.Column("problem_id", sa.Uuid(), sa.ForeignKey("problems.id", ondelete="CASCADE"), nullable=False),
            sa.Column("language", sa.String(length=32), nullable=False),
            sa.Column("code", sa.Text(), nullable=False),
            sa.Column("result", sa.String(length=32), nullable=False, server_default="PENDING"),
            sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("runtime_ms", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("output", sa.Text(), nullable=True),
            sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.CheckConstraint(
                "result IN ('PENDING', 'ACCEPTED', 'WRONG_ANSWER', 'ERROR')", name="ck_submissions_result"
            ),
            sa.CheckConstraint("score >= 0 AND score <= 100", name="ck_submissions_score"),
        )
        op.create_index("ix_submissions_problem_id", "submissions", ["problem_id"])
        op.create_index("ix_submissions_user_submitted_at", "submissions", ["user_id", "submitted_at"])

    if not _has_table("streak_events"):
        op.create_table(
            "streak_events",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("user_id", sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
            sa.Column("event_date", sa.Date(), nullable=False),
            sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.UniqueConstraint("user_id", "event_date", name="uq_streak_events_user_day"),
        )
        op.create_index("ix_streak_events_user_id", "streak_events", ["user_id"])


def downgrade() -> None:
    op.drop_table("streak_events")
    op.drop_table("submissions")
    op.drop_table("test_cases")
    op.drop_table("problems")
    op.drop_table("profiles")
