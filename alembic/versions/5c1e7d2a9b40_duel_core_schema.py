"""duel_core_schema

Revision ID: 5c1e7d2a9b40
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e7d2a9b40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("idx_users_username", "users", ["username"])

    op.create_table(
        "quiz_sets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('ACTIVE','ARCHIVED')", name="ck_quiz_sets_status"),
        sa.PrimaryKeyConstraint("id", name="pk_quiz_sets"),
    )
    op.create_index("idx_quiz_sets_status", "quiz_sets", ["status"])

    op.create_table(
        "quiz_set_questions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("quiz_set_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("choices", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("correct_choice_index", sa.SmallInteger(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.CheckConstraint("position >= 0", name="ck_quiz_set_questions_position_non_negative"),
        sa.CheckConstraint(
            "correct_choice_index >= 0",
            name="ck_quiz_set_questions_correct_choice_non_negative",
        ),
        sa.ForeignKeyConstraint(
            ["quiz_set_id"],
            ["quiz_sets.id"],
            name="fk_quiz_set_questions_quiz_set_id_quiz_sets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_quiz_set_questions"),
        sa.UniqueConstraint("quiz_set_id", "position", name="uq_quiz_set_questions_set_position"),
    )

    op.create_table(
        "duel_challenges",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quiz_set_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quiz_title", sa.Text(), nullable=False),
        sa.Column("challenger_user_id", sa.BigInteger(), nullable=False),
        sa.Column("opponent_user_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("questions", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("rated", sa.Boolean(), nullable=False),
        sa.Column("winner_user_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("declined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending','accepted','declined','expired','completed')",
            name="ck_duel_challenges_status",
        ),
        sa.CheckConstraint(
            "challenger_user_id <> opponent_user_id",
            name="ck_duel_challenges_distinct_participants",
        ),
        sa.CheckConstraint(
            "question_count >= 1",
            name="ck_duel_challenges_question_count_positive",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_duel_challenges"),
    )
    op.create_index(
        "idx_duel_challenges_challenger_created",
        "duel_challenges",
        ["challenger_user_id", "created_at"],
    )
    op.create_index(
        "idx_duel_challenges_opponent_created",
        "duel_challenges",
        ["opponent_user_id", "created_at"],
    )
    op.create_index(
        "idx_duel_challenges_status_expires",
        "duel_challenges",
        ["status", "expires_at"],
    )

    op.create_table(
        "duel_attempts",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("score >= 0", name="ck_duel_attempts_score_non_negative"),
        sa.CheckConstraint("score <= total", name="ck_duel_attempts_score_within_total"),
        sa.CheckConstraint("duration_seconds >= 1", name="ck_duel_attempts_duration_positive"),
        sa.ForeignKeyConstraint(
            ["challenge_id"],
            ["duel_challenges.id"],
            name="fk_duel_attempts_challenge_id_duel_challenges",
        ),
        sa.PrimaryKeyConstraint("challenge_id", "user_id", name="pk_duel_attempts"),
    )

    op.create_table(
        "duel_rating_events",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("challenger_user_id", sa.BigInteger(), nullable=False),
        sa.Column("opponent_user_id", sa.BigInteger(), nullable=False),
        sa.Column("challenger_delta", sa.Integer(), nullable=False),
        sa.Column("opponent_delta", sa.Integer(), nullable=False),
        sa.Column("challenger_after", sa.Integer(), nullable=False),
        sa.Column("opponent_after", sa.Integer(), nullable=False),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["challenge_id"],
            ["duel_challenges.id"],
            name="fk_duel_rating_events_challenge_id_duel_challenges",
        ),
        sa.PrimaryKeyConstraint("challenge_id", name="pk_duel_rating_events"),
    )
    op.create_index(
        "idx_duel_rating_events_challenger_scored",
        "duel_rating_events",
        ["challenger_user_id", "scored_at"],
    )
    op.create_index(
        "idx_duel_rating_events_opponent_scored",
        "duel_rating_events",
        ["opponent_user_id", "scored_at"],
    )

    op.create_table(
        "ratings",
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("elo", sa.Integer(), nullable=False),
        sa.Column("games_played", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("games_played >= 0", name="ck_ratings_games_played_non_negative"),
        sa.PrimaryKeyConstraint("user_id", name="pk_ratings"),
    )
    op.create_index("idx_ratings_elo", "ratings", ["elo"])


def downgrade() -> None:
    op.drop_index("idx_ratings_elo", table_name="ratings")
    op.drop_table("ratings")

    op.drop_index("idx_duel_rating_events_opponent_scored", table_name="duel_rating_events")
    op.drop_index("idx_duel_rating_events_challenger_scored", table_name="duel_rating_events")
    op.drop_table("duel_rating_events")

    op.drop_table("duel_attempts")

    op.drop_index("idx_duel_challenges_status_expires", table_name="duel_challenges")
    op.drop_index("idx_duel_challenges_opponent_created", table_name="duel_challenges")
    op.drop_index("idx_duel_challenges_challenger_created", table_name="duel_challenges")
    op.drop_table("duel_challenges")

    op.drop_table("quiz_set_questions")
    op.drop_index("idx_quiz_sets_status", table_name="quiz_sets")
    op.drop_table("quiz_sets")

    op.drop_index("idx_users_username", table_name="users")
    op.drop_table("users")
