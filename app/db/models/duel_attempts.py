from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class DuelAttempt(Base):
    __tablename__ = "duel_attempts"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_duel_attempts_score_non_negative"),
        CheckConstraint("score <= total", name="ck_duel_attempts_score_within_total"),
        CheckConstraint("duration_seconds >= 1", name="ck_duel_attempts_duration_positive"),
    )

    challenge_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("duel_challenges.id"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
