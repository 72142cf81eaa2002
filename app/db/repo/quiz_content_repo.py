from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_set_questions import QuizSetQuestion
from app.db.models.quiz_sets import QuizSet


class QuizContentRepo:
    @staticmethod
    async def get_active_set(session: AsyncSession, quiz_set_id: UUID) -> QuizSet | None:
        stmt = select(QuizSet).where(QuizSet.id == quiz_set_id, QuizSet.status == "ACTIVE")
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_questions(session: AsyncSession, quiz_set_id: UUID) -> list[QuizSetQuestion]:
        stmt = (
            select(QuizSetQuestion)
            .where(QuizSetQuestion.quiz_set_id == quiz_set_id)
            .order_by(QuizSetQuestion.position.asc(), QuizSetQuestion.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
