from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_attempts import DuelAttempt


class DuelAttemptsRepo:
    @staticmethod
    async def try_create(
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        score: int,
        total: int,
        duration_seconds: int,
        submitted_at: datetime,
    ) -> bool:
        stmt = (
            postgresql_insert(DuelAttempt)
            .values(
                challenge_id=challenge_id,
                user_id=user_id,
                score=score,
                total=total,
                duration_seconds=duration_seconds,
                submitted_at=submitted_at,
            )
            .on_conflict_do_nothing(index_elements=[DuelAttempt.challenge_id, DuelAttempt.user_id])
            .returning(DuelAttempt.user_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_for_challenge(session: AsyncSession, challenge_id: UUID) -> list[DuelAttempt]:
        stmt = (
            select(DuelAttempt)
            .where(DuelAttempt.challenge_id == challenge_id)
            .order_by(DuelAttempt.submitted_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_for_user(
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
    ) -> DuelAttempt | None:
        stmt = select(DuelAttempt).where(
            DuelAttempt.challenge_id == challenge_id,
            DuelAttempt.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
