from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from app.db.models.quiz_set_questions import QuizSetQuestion
from app.db.models.quiz_sets import QuizSet
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal

UTC = timezone.utc


async def _create_user(user_id: int, *, display_name: str | None = None) -> int:
    async with SessionLocal.begin() as session:
        user = await UsersRepo.create(
            session,
            user_id=user_id,
            username=f"user{user_id}",
            display_name=display_name,
        )
        return user.id


async def _create_quiz_set(
    *,
    question_count: int,
    now_utc: datetime,
    title: str = "European capitals",
    status: str = "ACTIVE",
) -> UUID:
    quiz_set_id = uuid4()
    async with SessionLocal.begin() as session:
        session.add(
            QuizSet(
                id=quiz_set_id,
                title=title,
                status=status,
                created_at=now_utc,
                updated_at=now_utc,
            )
        )
        await session.flush()
        for position in range(question_count):
            session.add(
                QuizSetQuestion(
                    quiz_set_id=quiz_set_id,
                    position=position,
                    prompt=f"Capital #{position}?",
                    choices=["Berlin", "Paris", "Rome", "Madrid"],
                    correct_choice_index=position % 4,
                    explanation=None,
                )
            )
        await session.flush()
    return quiz_set_id
