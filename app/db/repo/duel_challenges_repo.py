from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_challenges import DuelChallenge


class DuelChallengesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, challenge_id: UUID) -> DuelChallenge | None:
        # Conditional updates bypass the identity map, so always refresh from the row.
        stmt = (
            select(DuelChallenge)
            .where(DuelChallenge.id == challenge_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, challenge: DuelChallenge) -> DuelChallenge:
        session.add(challenge)
        await session.flush()
        return challenge

    @staticmethod
    async def compare_and_set_status(
        session: AsyncSession,
        *,
        challenge_id: UUID,
        expected_status: str,
        new_status: str,
        now_utc: datetime,
        expires_after_utc: datetime | None = None,
        expires_before_utc: datetime | None = None,
        values: dict[str, Any] | None = None,
    ) -> bool:
        """Single-statement status transition; True only for the writer that moved the row."""
        stmt = (
            update(DuelChallenge)
            .where(
                DuelChallenge.id == challenge_id,
                DuelChallenge.status == expected_status,
            )
            .values(status=new_status, updated_at=now_utc, **(values or {}))
            .returning(DuelChallenge.id)
            .execution_options(synchronize_session=False)
        )
        if expires_after_utc is not None:
            stmt = stmt.where(DuelChallenge.expires_at >= expires_after_utc)
        if expires_before_utc is not None:
            stmt = stmt.where(DuelChallenge.expires_at < expires_before_utc)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def set_winner(
        session: AsyncSession,
        *,
        challenge_id: UUID,
        winner_user_id: int | None,
        now_utc: datetime,
    ) -> None:
        stmt = (
            update(DuelChallenge)
            .where(DuelChallenge.id == challenge_id)
            .values(winner_user_id=winner_user_id, updated_at=now_utc)
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)

    @staticmethod
    async def list_recent_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        limit: int,
    ) -> list[DuelChallenge]:
        resolved_limit = max(1, int(limit))
        stmt = (
            select(DuelChallenge)
            .where(
                or_(
                    DuelChallenge.challenger_user_id == user_id,
                    DuelChallenge.opponent_user_id == user_id,
                )
            )
            .order_by(DuelChallenge.created_at.desc())
            .limit(resolved_limit)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
