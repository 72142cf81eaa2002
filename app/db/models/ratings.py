from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("games_played >= 0", name="ck_ratings_games_played_non_negative"),
        Index("idx_ratings_elo", "elo"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    elo: Mapped[int] = mapped_column(Integer, nullable=False)
    games_played: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
