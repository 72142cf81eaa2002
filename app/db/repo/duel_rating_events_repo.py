from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_rating_events import DuelRatingEvent


class DuelRatingEventsRepo:
    @staticmethod
    async def get_by_challenge_id(
        session: AsyncSession,
        challenge_id: UUID,
    ) -> DuelRatingEvent | None:
        return await session.get(DuelRatingEvent, challenge_id)

    @staticmethod
    async def try_create(
        session: AsyncSession,
        *,
        challenge_id: UUID,
        challenger_user_id: int,
        opponent_user_id: int,
        challenger_delta: int,
        opponent_delta: int,
        challenger_after: int,
        opponent_after: int,
        scored_at: datetime,
    ) -> bool:
        stmt = (
            postgresql_insert(DuelRatingEvent)
            .values(
                challenge_id=challenge_id,
                challenger_user_id=challenger_user_id,
                opponent_user_id=opponent_user_id,
                challenger_delta=challenger_delta,
                opponent_delta=opponent_delta,
                challenger_after=challenger_after,
                opponent_after=opponent_after,
                scored_at=scored_at,
            )
            .on_conflict_do_nothing(index_elements=[DuelRatingEvent.challenge_id])
            .returning(DuelRatingEvent.challenge_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
