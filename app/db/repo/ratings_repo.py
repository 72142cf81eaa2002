from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.ratings import Rating


class RatingsRepo:
    @staticmethod
    async def get_by_user_id(session: AsyncSession, user_id: int) -> Rating | None:
        return await session.get(Rating, user_id)

    @staticmethod
    async def map_by_user_ids(
        session: AsyncSession,
        user_ids: Sequence[int],
    ) -> dict[int, Rating]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return {}
        stmt = (
            select(Rating)
            .where(Rating.user_id.in_(ids))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return {row.user_id: row for row in result.scalars().all()}

    @staticmethod
    async def apply_delta(
        session: AsyncSession,
        *,
        user_id: int,
        delta: int,
        initial_rating: int,
        rating_floor: int,
        now_utc: datetime,
    ) -> int:
        """Adds delta to the stored rating in one statement and returns the new elo."""
        stmt = postgresql_insert(Rating).values(
            user_id=user_id,
            elo=max(rating_floor, initial_rating + delta),
            games_played=1,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Rating.user_id],
            set_={
                "elo": func.greatest(rating_floor, Rating.elo + delta),
                "games_played": Rating.games_played + 1,
                "updated_at": now_utc,
            },
        ).returning(Rating.elo)
        result = await session.execute(stmt)
        return int(result.scalar_one())
