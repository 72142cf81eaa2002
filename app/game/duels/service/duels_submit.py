from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.duel_attempts_repo import DuelAttemptsRepo
from app.game.duels.constants import (
    DUEL_MAX_DURATION_SECONDS,
    DUEL_STATUS_ACCEPTED,
    DUEL_STATUS_EXPIRED,
)
from app.game.duels.errors import (
    DuelAlreadySubmittedError,
    DuelExpiredError,
    DuelInvalidDurationError,
    DuelInvalidScoreError,
    DuelInvalidStateError,
)
from app.game.duels.types import DuelChallengeSnapshot

from .duels_expiry import declare_duel_expired_if_due
from .duels_internal import (
    _build_duel_snapshot,
    _is_duel_past_deadline,
    _load_duel_for_participant,
)

logger = structlog.get_logger("app.game.duels.submit")


async def record_duel_attempt(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    score: int,
    duration_seconds: int,
    now_utc: datetime,
) -> DuelChallengeSnapshot:
    """Stores the caller's single attempt; create-only, never an update."""
    challenge = await _load_duel_for_participant(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
    )
    existing = await DuelAttemptsRepo.get_for_user(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
    )
    if existing is not None:
        raise DuelAlreadySubmittedError
    if _is_duel_past_deadline(challenge=challenge, now_utc=now_utc):
        await declare_duel_expired_if_due(session, challenge_id=challenge_id, now_utc=now_utc)
        raise DuelExpiredError
    if challenge.status == DUEL_STATUS_EXPIRED:
        raise DuelExpiredError
    if challenge.status != DUEL_STATUS_ACCEPTED:
        raise DuelInvalidStateError
    if duration_seconds < 1 or duration_seconds > DUEL_MAX_DURATION_SECONDS:
        raise DuelInvalidDurationError

    # total comes from the count frozen at creation, never from live content.
    total = challenge.question_count
    if score < 0 or score > total:
        raise DuelInvalidScoreError

    created = await DuelAttemptsRepo.try_create(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
        score=score,
        total=total,
        duration_seconds=duration_seconds,
        submitted_at=now_utc,
    )
    if not created:
        raise DuelAlreadySubmittedError

    logger.info(
        "duel_attempt_submitted",
        challenge_id=str(challenge_id),
        user_id=user_id,
        score=score,
        total=total,
        duration_seconds=duration_seconds,
    )
    return _build_duel_snapshot(challenge)
