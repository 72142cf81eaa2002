from __future__ import annotations

from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.quiz_content_repo import QuizContentRepo
from app.db.repo.users_repo import UsersRepo
from app.game.duels.types import QuizContent, QuizQuestionView


class QuizContentProvider(Protocol):
    async def get_quiz(self, session: AsyncSession, *, quiz_set_id: UUID) -> QuizContent | None: ...


class ProfileProvider(Protocol):
    async def get_display_name(self, session: AsyncSession, *, user_id: int) -> str: ...


class DbQuizContentProvider:
    """Reads quiz sets straight from the content tables."""

    async def get_quiz(self, session: AsyncSession, *, quiz_set_id: UUID) -> QuizContent | None:
        quiz_set = await QuizContentRepo.get_active_set(session, quiz_set_id)
        if quiz_set is None:
            return None
        rows = await QuizContentRepo.list_questions(session, quiz_set_id)
        return QuizContent(
            quiz_set_id=quiz_set.id,
            title=quiz_set.title,
            questions=tuple(
                QuizQuestionView(
                    prompt=row.prompt,
                    choices=tuple(str(choice) for choice in row.choices),
                    correct_choice_index=int(row.correct_choice_index),
                    explanation=row.explanation,
                )
                for row in rows
            ),
        )


class DbProfileProvider:
    async def get_display_name(self, session: AsyncSession, *, user_id: int) -> str:
        user = await UsersRepo.get_by_id(session, user_id)
        if user is None:
            return fallback_display_name(user_id)
        return user.display_name or user.username or fallback_display_name(user_id)


def fallback_display_name(user_id: int) -> str:
    return f"Player {user_id}"
