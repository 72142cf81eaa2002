from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_challenges import DuelChallenge
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.game.duels.constants import DUEL_STATUS_PENDING, is_rated_question_count
from app.game.duels.errors import DuelInvalidOpponentError, DuelQuizSetNotFoundError
from app.game.duels.providers import QuizContentProvider
from app.game.duels.types import DuelChallengeSnapshot

from .duels_internal import _build_duel_snapshot, _duel_expires_at, _serialize_questions

logger = structlog.get_logger("app.game.duels.create")


async def create_duel_challenge(
    session: AsyncSession,
    *,
    challenger_user_id: int,
    opponent_user_id: int,
    quiz_set_id: UUID,
    now_utc: datetime,
    content_provider: QuizContentProvider,
) -> DuelChallengeSnapshot:
    if challenger_user_id == opponent_user_id:
        raise DuelInvalidOpponentError

    # The only content read for this challenge; title, count and questions are frozen here.
    content = await content_provider.get_quiz(session, quiz_set_id=quiz_set_id)
    if content is None or not content.questions:
        raise DuelQuizSetNotFoundError

    question_count = len(content.questions)
    challenge = await DuelChallengesRepo.create(
        session,
        challenge=DuelChallenge(
            id=uuid4(),
            quiz_set_id=quiz_set_id,
            quiz_title=content.title,
            challenger_user_id=challenger_user_id,
            opponent_user_id=opponent_user_id,
            status=DUEL_STATUS_PENDING,
            question_count=question_count,
            questions=_serialize_questions(content),
            rated=is_rated_question_count(question_count),
            winner_user_id=None,
            created_at=now_utc,
            expires_at=_duel_expires_at(now_utc=now_utc),
            accepted_at=None,
            declined_at=None,
            expired_at=None,
            completed_at=None,
            updated_at=now_utc,
        ),
    )
    logger.info(
        "duel_created",
        challenge_id=str(challenge.id),
        challenger_user_id=challenger_user_id,
        opponent_user_id=opponent_user_id,
        quiz_set_id=str(quiz_set_id),
        question_count=question_count,
        rated=challenge.rated,
        expires_at=challenge.expires_at.isoformat(),
    )
    return _build_duel_snapshot(challenge)
