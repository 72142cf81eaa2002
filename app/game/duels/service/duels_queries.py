from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_challenges import DuelChallenge
from app.db.repo.duel_attempts_repo import DuelAttemptsRepo
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.db.repo.duel_rating_events_repo import DuelRatingEventsRepo
from app.db.repo.ratings_repo import RatingsRepo
from app.game.duels.constants import (
    DUEL_LIST_LIMIT,
    DUEL_STATUS_ACCEPTED,
    DUEL_STATUS_COMPLETED,
    DUEL_STATUS_EXPIRED,
    ELO_INITIAL_RATING,
)
from app.game.duels.errors import DuelExpiredError, DuelInvalidStateError
from app.game.duels.providers import ProfileProvider
from app.game.duels.types import DuelChallengeView, QuizQuestionView, UserRatingView

from .duels_expiry import declare_duel_expired_if_due
from .duels_internal import (
    _build_attempt_view,
    _build_duel_snapshot,
    _build_rating_event_view,
    _is_duel_past_deadline,
    _load_duel_for_participant,
    _questions_from_snapshot,
)


async def _build_duel_view(
    session: AsyncSession,
    *,
    challenge: DuelChallenge,
    viewer_user_id: int,
    profile_provider: ProfileProvider,
) -> DuelChallengeView:
    attempts = await DuelAttemptsRepo.list_for_challenge(session, challenge.id)
    is_completed = challenge.status == DUEL_STATUS_COMPLETED
    # The other side's score stays hidden until the duel is decided.
    visible_attempts = tuple(
        _build_attempt_view(attempt)
        for attempt in attempts
        if is_completed or attempt.user_id == viewer_user_id
    )
    rating_event = None
    if is_completed and challenge.rated:
        event = await DuelRatingEventsRepo.get_by_challenge_id(session, challenge.id)
        if event is not None:
            rating_event = _build_rating_event_view(event)
    return DuelChallengeView(
        snapshot=_build_duel_snapshot(challenge),
        challenger_name=await profile_provider.get_display_name(
            session, user_id=challenge.challenger_user_id
        ),
        opponent_name=await profile_provider.get_display_name(
            session, user_id=challenge.opponent_user_id
        ),
        attempts=visible_attempts,
        rating_event=rating_event,
    )


async def get_duel_challenge_view(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    profile_provider: ProfileProvider,
) -> DuelChallengeView:
    challenge = await _load_duel_for_participant(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
    )
    if _is_duel_past_deadline(challenge=challenge, now_utc=now_utc):
        await declare_duel_expired_if_due(session, challenge_id=challenge_id, now_utc=now_utc)
        challenge = await _load_duel_for_participant(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
        )
    return await _build_duel_view(
        session,
        challenge=challenge,
        viewer_user_id=user_id,
        profile_provider=profile_provider,
    )


async def list_duel_challenges_for_user(
    session: AsyncSession,
    *,
    user_id: int,
    now_utc: datetime,
    profile_provider: ProfileProvider,
    limit: int = DUEL_LIST_LIMIT,
) -> list[DuelChallengeView]:
    resolved_limit = min(max(1, int(limit)), DUEL_LIST_LIMIT)
    rows = await DuelChallengesRepo.list_recent_for_user(
        session,
        user_id=user_id,
        limit=resolved_limit,
    )
    views: list[DuelChallengeView] = []
    for challenge in rows:
        if _is_duel_past_deadline(challenge=challenge, now_utc=now_utc):
            await declare_duel_expired_if_due(session, challenge_id=challenge.id, now_utc=now_utc)
            refreshed = await DuelChallengesRepo.get_by_id(session, challenge.id)
            challenge = refreshed if refreshed is not None else challenge
        views.append(
            await _build_duel_view(
                session,
                challenge=challenge,
                viewer_user_id=user_id,
                profile_provider=profile_provider,
            )
        )
    return views


async def get_duel_questions_for_user(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
) -> tuple[QuizQuestionView, ...]:
    """Questions frozen at creation; served only once both sides may play."""
    challenge = await _load_duel_for_participant(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
    )
    if _is_duel_past_deadline(challenge=challenge, now_utc=now_utc):
        await declare_duel_expired_if_due(session, challenge_id=challenge_id, now_utc=now_utc)
        raise DuelExpiredError
    if challenge.status == DUEL_STATUS_EXPIRED:
        raise DuelExpiredError
    if challenge.status not in {DUEL_STATUS_ACCEPTED, DUEL_STATUS_COMPLETED}:
        raise DuelInvalidStateError
    return _questions_from_snapshot(challenge.questions)


async def get_user_rating(session: AsyncSession, *, user_id: int) -> UserRatingView:
    rating = await RatingsRepo.get_by_user_id(session, user_id)
    if rating is None:
        return UserRatingView(user_id=user_id, elo=ELO_INITIAL_RATING, games_played=0)
    return UserRatingView(user_id=user_id, elo=rating.elo, games_played=rating.games_played)
