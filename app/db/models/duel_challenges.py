from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class DuelChallenge(Base):
    __tablename__ = "duel_challenges"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','accepted','declined','expired','completed')",
            name="ck_duel_challenges_status",
        ),
        CheckConstraint(
            "challenger_user_id <> opponent_user_id",
            name="ck_duel_challenges_distinct_participants",
        ),
        CheckConstraint("question_count >= 1", name="ck_duel_challenges_question_count_positive"),
        Index("idx_duel_challenges_challenger_created", "challenger_user_id", "created_at"),
        Index("idx_duel_challenges_opponent_created", "opponent_user_id", "created_at"),
        Index("idx_duel_challenges_status_expires", "status", "expires_at"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    quiz_set_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    quiz_title: Mapped[str] = mapped_column(Text, nullable=False)
    challenger_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    opponent_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    question_count: Mapped[int] = mapped_column(Integer, nullable=False)
    questions: Mapped[list[dict[str, object]]] = mapped_column(JSONB, nullable=False)
    rated: Mapped[bool] = mapped_column(Boolean, nullable=False)
    winner_user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    declined_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
