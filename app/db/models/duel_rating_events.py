from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class DuelRatingEvent(Base):
    __tablename__ = "duel_rating_events"
    __table_args__ = (
        Index("idx_duel_rating_events_challenger_scored", "challenger_user_id", "scored_at"),
        Index("idx_duel_rating_events_opponent_scored", "opponent_user_id", "scored_at"),
    )

    challenge_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("duel_challenges.id"),
        primary_key=True,
    )
    challenger_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    opponent_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    challenger_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    opponent_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    challenger_after: Mapped[int] = mapped_column(Integer, nullable=False)
    opponent_after: Mapped[int] = mapped_column(Integer, nullable=False)
    scored_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
