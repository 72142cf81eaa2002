from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.duel_challenges import DuelChallenge
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.game.duels.constants import (
    DUEL_STATUS_ACCEPTED,
    DUEL_STATUS_DECLINED,
    DUEL_STATUS_EXPIRED,
    DUEL_STATUS_PENDING,
    is_duel_transition_allowed,
)
from app.game.duels.errors import (
    DuelExpiredError,
    DuelInvalidStateError,
    DuelNotParticipantError,
    DuelStorageConflictError,
)
from app.game.duels.types import DuelChallengeSnapshot

from .duels_internal import _build_duel_snapshot, _is_duel_past_deadline, _load_duel

logger = structlog.get_logger("app.game.duels.respond")


def _assert_opponent_can_respond(
    *,
    challenge: DuelChallenge,
    user_id: int,
    now_utc: datetime,
    new_status: str,
) -> None:
    if challenge.opponent_user_id != user_id:
        raise DuelNotParticipantError
    if challenge.status == DUEL_STATUS_EXPIRED or _is_duel_past_deadline(
        challenge=challenge,
        now_utc=now_utc,
    ):
        raise DuelExpiredError
    if not is_duel_transition_allowed(from_status=challenge.status, to_status=new_status):
        raise DuelInvalidStateError


async def _respond_to_duel(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
    new_status: str,
    timestamp_field: str,
) -> DuelChallengeSnapshot:
    challenge = await _load_duel(session, challenge_id=challenge_id)
    _assert_opponent_can_respond(
        challenge=challenge,
        user_id=user_id,
        now_utc=now_utc,
        new_status=new_status,
    )

    moved = await DuelChallengesRepo.compare_and_set_status(
        session,
        challenge_id=challenge_id,
        expected_status=DUEL_STATUS_PENDING,
        new_status=new_status,
        now_utc=now_utc,
        expires_after_utc=now_utc,
        values={timestamp_field: now_utc},
    )
    if not moved:
        raise DuelStorageConflictError

    challenge = await _load_duel(session, challenge_id=challenge_id)
    logger.info(
        f"duel_{new_status}",
        challenge_id=str(challenge_id),
        opponent_user_id=user_id,
        challenger_user_id=challenge.challenger_user_id,
    )
    return _build_duel_snapshot(challenge)


async def accept_duel_challenge(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
) -> DuelChallengeSnapshot:
    """pending -> accepted, opponent only.

    Expects lazy expiry to have run for ``now_utc`` in an earlier transaction;
    a row still pending past its deadline is reported as expired without
    being written here.
    """
    return await _respond_to_duel(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
        now_utc=now_utc,
        new_status=DUEL_STATUS_ACCEPTED,
        timestamp_field="accepted_at",
    )


async def decline_duel_challenge(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    user_id: int,
    now_utc: datetime,
) -> DuelChallengeSnapshot:
    return await _respond_to_duel(
        session,
        challenge_id=challenge_id,
        user_id=user_id,
        now_utc=now_utc,
        new_status=DUEL_STATUS_DECLINED,
        timestamp_field="declined_at",
    )
