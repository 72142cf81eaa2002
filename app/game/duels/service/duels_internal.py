from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_attempts import DuelAttempt
from app.db.models.duel_challenges import DuelChallenge
from app.db.models.duel_rating_events import DuelRatingEvent
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.game.duels.constants import DUEL_ACCEPTANCE_WINDOW_SECONDS, DUEL_STATUS_PENDING
from app.game.duels.errors import DuelNotFoundError, DuelNotParticipantError
from app.game.duels.types import (
    DuelAttemptView,
    DuelChallengeSnapshot,
    DuelRatingEventView,
    QuizContent,
    QuizQuestionView,
)


def _duel_expires_at(*, now_utc: datetime) -> datetime:
    return now_utc + timedelta(seconds=DUEL_ACCEPTANCE_WINDOW_SECONDS)


def _is_duel_past_deadline(*, challenge: DuelChallenge, now_utc: datetime) -> bool:
    return challenge.status == DUEL_STATUS_PENDING and now_utc > challenge.expires_at


def _is_participant(*, challenge: DuelChallenge, user_id: int) -> bool:
    return user_id in (challenge.challenger_user_id, challenge.opponent_user_id)


async def _load_duel(session: AsyncSession, *, challenge_id: UUID) -> DuelChallenge:
    challenge = await DuelChallengesRepo.get_by_id(session, challenge_id)
    if challenge is None:
        raise DuelNotFoundError
    return challenge


async def _load_duel_for_participant(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
) -> DuelChallenge:
    challenge = await _load_duel(session, challenge_id=challenge_id)
    if not _is_participant(challenge=challenge, user_id=user_id):
        raise DuelNotParticipantError
    return challenge


def _serialize_questions(content: QuizContent) -> list[dict[str, object]]:
    return [
        {
            "prompt": question.prompt,
            "choices": list(question.choices),
            "correct_choice_index": question.correct_choice_index,
            "explanation": question.explanation,
        }
        for question in content.questions
    ]


def _questions_from_snapshot(raw: Iterable[dict[str, object]]) -> tuple[QuizQuestionView, ...]:
    return tuple(
        QuizQuestionView(
            prompt=str(item["prompt"]),
            choices=tuple(str(choice) for choice in item.get("choices") or ()),
            correct_choice_index=int(item["correct_choice_index"]),
            explanation=(str(item["explanation"]) if item.get("explanation") is not None else None),
        )
        for item in raw
    )


def _build_duel_snapshot(challenge: DuelChallenge) -> DuelChallengeSnapshot:
    return DuelChallengeSnapshot(
        challenge_id=challenge.id,
        quiz_set_id=challenge.quiz_set_id,
        quiz_title=challenge.quiz_title,
        challenger_user_id=challenge.challenger_user_id,
        opponent_user_id=challenge.opponent_user_id,
        status=challenge.status,
        question_count=challenge.question_count,
        rated=challenge.rated,
        created_at=challenge.created_at,
        expires_at=challenge.expires_at,
        accepted_at=challenge.accepted_at,
        completed_at=challenge.completed_at,
        winner_user_id=challenge.winner_user_id,
    )


def _build_attempt_view(attempt: DuelAttempt) -> DuelAttemptView:
    return DuelAttemptView(
        user_id=attempt.user_id,
        score=attempt.score,
        total=attempt.total,
        duration_seconds=attempt.duration_seconds,
        submitted_at=attempt.submitted_at,
    )


def _build_rating_event_view(event: DuelRatingEvent) -> DuelRatingEventView:
    return DuelRatingEventView(
        challenge_id=event.challenge_id,
        challenger_user_id=event.challenger_user_id,
        opponent_user_id=event.opponent_user_id,
        challenger_delta=int(event.challenger_delta or 0),
        opponent_delta=int(event.opponent_delta or 0),
        challenger_after=event.challenger_after,
        opponent_after=event.opponent_after,
        scored_at=event.scored_at,
    )
