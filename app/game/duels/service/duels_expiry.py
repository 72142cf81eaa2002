from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.game.duels.constants import DUEL_STATUS_EXPIRED, DUEL_STATUS_PENDING

logger = structlog.get_logger("app.game.duels.expiry")


async def declare_duel_expired_if_due(
    session: AsyncSession,
    *,
    challenge_id: UUID,
    now_utc: datetime,
) -> bool:
    """Lazy expiry: moves a pending challenge past its deadline to expired.

    Safe to call from any read path; a no-op unless the row is still pending
    and ``now_utc > expires_at``.
    """
    expired_now = await DuelChallengesRepo.compare_and_set_status(
        session,
        challenge_id=challenge_id,
        expected_status=DUEL_STATUS_PENDING,
        new_status=DUEL_STATUS_EXPIRED,
        now_utc=now_utc,
        expires_before_utc=now_utc,
        values={"expired_at": now_utc},
    )
    if expired_now:
        logger.info("duel_expired", challenge_id=str(challenge_id))
    return expired_now
