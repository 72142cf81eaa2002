"""Completion coordinator for accepted duels.

Runs after every stored attempt. The ``accepted -> completed`` conditional
update is the single serialization point: whoever moves the row determines
the winner and applies ratings; everyone else gets ``DuelStorageConflictError``.
This module is the only writer of rating rows and rating events.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_challenges import DuelChallenge
from app.db.repo.duel_attempts_repo import DuelAttemptsRepo
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.db.repo.duel_rating_events_repo import DuelRatingEventsRepo
from app.db.repo.ratings_repo import RatingsRepo
from app.game.duels.constants import (
    DUEL_STATUS_ACCEPTED,
    DUEL_STATUS_COMPLETED,
    ELO_INITIAL_RATING,
    ELO_K_FACTOR,
    ELO_RATING_FLOOR,
)
from app.game.duels.errors import DuelStorageConflictError
from app.game.duels.outcome import resolve_duel_outcome, winner_for_outcome
from app.game.duels.rating import compute_elo
from app.game.duels.types import DuelCompletionResult, DuelRatingEventView

from .duels_internal import _build_attempt_view, _load_duel

logger = structlog.get_logger("app.game.duels.completion")


async def complete_duel_if_ready(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    now_utc: datetime,
) -> DuelCompletionResult | None:
    """Returns None while an attempt is missing; raises on a lost completion race."""
    challenge = await _load_duel(session, challenge_id=challenge_id)
    if challenge.status == DUEL_STATUS_COMPLETED:
        raise DuelStorageConflictError
    if challenge.status != DUEL_STATUS_ACCEPTED:
        return None

    attempts = {
        attempt.user_id: _build_attempt_view(attempt)
        for attempt in await DuelAttemptsRepo.list_for_challenge(session, challenge_id)
    }
    challenger_attempt = attempts.get(challenge.challenger_user_id)
    opponent_attempt = attempts.get(challenge.opponent_user_id)
    if challenger_attempt is None or opponent_attempt is None:
        return None

    completed_now = await DuelChallengesRepo.compare_and_set_status(
        session,
        challenge_id=challenge_id,
        expected_status=DUEL_STATUS_ACCEPTED,
        new_status=DUEL_STATUS_COMPLETED,
        now_utc=now_utc,
        values={"completed_at": now_utc},
    )
    if not completed_now:
        logger.info("duel_completion_lost_race", challenge_id=str(challenge_id))
        raise DuelStorageConflictError

    outcome = resolve_duel_outcome(
        challenger_attempt=challenger_attempt,
        opponent_attempt=opponent_attempt,
    )
    winner_user_id = winner_for_outcome(
        outcome=outcome,
        challenger_user_id=challenge.challenger_user_id,
        opponent_user_id=challenge.opponent_user_id,
    )
    await DuelChallengesRepo.set_winner(
        session,
        challenge_id=challenge_id,
        winner_user_id=winner_user_id,
        now_utc=now_utc,
    )

    rating_event = None
    if challenge.rated:
        rating_event = await _apply_duel_rating(
            session,
            challenge=challenge,
            outcome=outcome,
            now_utc=now_utc,
        )

    logger.info(
        "duel_completed",
        challenge_id=str(challenge_id),
        winner_user_id=winner_user_id,
        rated=challenge.rated,
        challenger_score=challenger_attempt.score,
        opponent_score=opponent_attempt.score,
        challenger_duration_seconds=challenger_attempt.duration_seconds,
        opponent_duration_seconds=opponent_attempt.duration_seconds,
    )
    return DuelCompletionResult(
        challenge_id=challenge_id,
        winner_user_id=winner_user_id,
        rating_event=rating_event,
    )


async def _apply_duel_rating(
    session: AsyncSession,
    *,
    challenge: DuelChallenge,
    outcome: str,
    now_utc: datetime,
) -> DuelRatingEventView:
    ratings = await RatingsRepo.map_by_user_ids(
        session,
        (challenge.challenger_user_id, challenge.opponent_user_id),
    )
    challenger_rating = ratings.get(challenge.challenger_user_id)
    opponent_rating = ratings.get(challenge.opponent_user_id)
    elo = compute_elo(
        rating_a=challenger_rating.elo if challenger_rating is not None else ELO_INITIAL_RATING,
        rating_b=opponent_rating.elo if opponent_rating is not None else ELO_INITIAL_RATING,
        outcome=outcome,
        k_factor=ELO_K_FACTOR,
        rating_floor=ELO_RATING_FLOOR,
    )

    deltas = {
        challenge.challenger_user_id: elo.delta_a,
        challenge.opponent_user_id: elo.delta_b,
    }
    after: dict[int, int] = {}
    # Fixed user order keeps row locks consistent across duels sharing a player.
    for user_id in sorted(deltas):
        after[user_id] = await RatingsRepo.apply_delta(
            session,
            user_id=user_id,
            delta=deltas[user_id],
            initial_rating=ELO_INITIAL_RATING,
            rating_floor=ELO_RATING_FLOOR,
            now_utc=now_utc,
        )

    event = DuelRatingEventView(
        challenge_id=challenge.id,
        challenger_user_id=challenge.challenger_user_id,
        opponent_user_id=challenge.opponent_user_id,
        challenger_delta=elo.delta_a,
        opponent_delta=elo.delta_b,
        challenger_after=after[challenge.challenger_user_id],
        opponent_after=after[challenge.opponent_user_id],
        scored_at=now_utc,
    )
    created = await DuelRatingEventsRepo.try_create(
        session,
        challenge_id=event.challenge_id,
        challenger_user_id=event.challenger_user_id,
        opponent_user_id=event.opponent_user_id,
        challenger_delta=event.challenger_delta,
        opponent_delta=event.opponent_delta,
        challenger_after=event.challenger_after,
        opponent_after=event.opponent_after,
        scored_at=event.scored_at,
    )
    if not created:
        raise DuelStorageConflictError

    logger.info(
        "duel_rating_applied",
        challenge_id=str(challenge.id),
        challenger_delta=event.challenger_delta,
        opponent_delta=event.opponent_delta,
        challenger_after=event.challenger_after,
        opponent_after=event.opponent_after,
    )
    return event
