"""Transaction orchestration for the duel engine.

Service functions never commit; this facade decides where each transaction
starts and ends. Writes that must survive a later failure (lazy expiry, a
stored attempt) are committed in their own transaction before the next step
runs, and lost conditional writes are recoded into the state that won.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import SessionLocal
from app.game.duels.constants import (
    DUEL_LIST_LIMIT,
    DUEL_STATUS_ACCEPTED,
    DUEL_STATUS_COMPLETED,
    DUEL_STATUS_DECLINED,
    DUEL_STATUS_EXPIRED,
)
from app.game.duels.errors import (
    DuelAlreadySubmittedError,
    DuelExpiredError,
    DuelInvalidStateError,
    DuelStorageConflictError,
)
from app.game.duels.providers import (
    DbProfileProvider,
    DbQuizContentProvider,
    ProfileProvider,
    QuizContentProvider,
)
from app.game.duels.service import DuelService
from app.game.duels.service.duels_internal import _load_duel
from app.game.duels.types import (
    DuelChallengeSnapshot,
    DuelChallengeView,
    DuelSubmitResult,
    QuizQuestionView,
    UserRatingView,
)

logger = structlog.get_logger("app.game.duels.facade")


class _SessionFactory(Protocol):
    def begin(self) -> AbstractAsyncContextManager[AsyncSession]: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DuelServiceFacade:
    def __init__(
        self,
        *,
        session_factory: _SessionFactory = SessionLocal,
        content_provider: QuizContentProvider | None = None,
        profile_provider: ProfileProvider | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._content_provider = content_provider or DbQuizContentProvider()
        self._profile_provider = profile_provider or DbProfileProvider()
        self._clock = clock

    async def create_challenge(
        self,
        *,
        challenger_user_id: int,
        opponent_user_id: int,
        quiz_set_id: UUID,
    ) -> DuelChallengeSnapshot:
        async with self._session_factory.begin() as session:
            return await DuelService.create_challenge(
                session,
                challenger_user_id=challenger_user_id,
                opponent_user_id=opponent_user_id,
                quiz_set_id=quiz_set_id,
                now_utc=self._clock(),
                content_provider=self._content_provider,
            )

    async def accept_challenge(self, *, challenge_id: UUID, user_id: int) -> DuelChallengeView:
        return await self._respond(
            challenge_id=challenge_id,
            user_id=user_id,
            target_status=DUEL_STATUS_ACCEPTED,
        )

    async def decline_challenge(self, *, challenge_id: UUID, user_id: int) -> DuelChallengeView:
        return await self._respond(
            challenge_id=challenge_id,
            user_id=user_id,
            target_status=DUEL_STATUS_DECLINED,
        )

    async def submit_attempt(
        self,
        *,
        challenge_id: UUID,
        user_id: int,
        score: int,
        duration_seconds: int,
    ) -> DuelSubmitResult:
        now_utc = self._clock()
        await self._expire_if_due(challenge_id=challenge_id, now_utc=now_utc)
        try:
            async with self._session_factory.begin() as session:
                await DuelService.record_attempt(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    score=score,
                    duration_seconds=duration_seconds,
                    now_utc=now_utc,
                )
        except DuelAlreadySubmittedError:
            # A retry after a crash between storing and completing still finishes the duel.
            await self._complete_if_ready(challenge_id=challenge_id, now_utc=now_utc)
            raise

        return await self._complete_if_ready(challenge_id=challenge_id, now_utc=now_utc)

    async def get_challenge(self, *, challenge_id: UUID, user_id: int) -> DuelChallengeView:
        async with self._session_factory.begin() as session:
            return await DuelService.get_challenge_view(
                session,
                challenge_id=challenge_id,
                user_id=user_id,
                now_utc=self._clock(),
                profile_provider=self._profile_provider,
            )

    async def get_challenge_questions(
        self,
        *,
        challenge_id: UUID,
        user_id: int,
    ) -> tuple[QuizQuestionView, ...]:
        now_utc = self._clock()
        await self._expire_if_due(challenge_id=challenge_id, now_utc=now_utc)
        async with self._session_factory.begin() as session:
            return await DuelService.get_challenge_questions(
                session,
                challenge_id=challenge_id,
                user_id=user_id,
                now_utc=now_utc,
            )

    async def list_challenges(
        self,
        *,
        user_id: int,
        limit: int = DUEL_LIST_LIMIT,
    ) -> list[DuelChallengeView]:
        async with self._session_factory.begin() as session:
            return await DuelService.list_challenges_for_user(
                session,
                user_id=user_id,
                now_utc=self._clock(),
                profile_provider=self._profile_provider,
                limit=limit,
            )

    async def get_rating(self, *, user_id: int) -> UserRatingView:
        async with self._session_factory.begin() as session:
            return await DuelService.get_user_rating(session, user_id=user_id)

    async def declare_expired_if_due(self, *, challenge_id: UUID) -> bool:
        async with self._session_factory.begin() as session:
            return await DuelService.declare_expired_if_due(
                session,
                challenge_id=challenge_id,
                now_utc=self._clock(),
            )

    async def _respond(
        self,
        *,
        challenge_id: UUID,
        user_id: int,
        target_status: str,
    ) -> DuelChallengeView:
        now_utc = self._clock()
        await self._expire_if_due(challenge_id=challenge_id, now_utc=now_utc)

        respond = (
            DuelService.accept_challenge
            if target_status == DUEL_STATUS_ACCEPTED
            else DuelService.decline_challenge
        )
        try:
            async with self._session_factory.begin() as session:
                await respond(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    now_utc=now_utc,
                )
                return await self._build_view(
                    session,
                    challenge_id=challenge_id,
                    user_id=user_id,
                    now_utc=now_utc,
                )
        except DuelStorageConflictError:
            logger.info(
                "duel_response_conflict",
                challenge_id=str(challenge_id),
                user_id=user_id,
                target_status=target_status,
            )

        async with self._session_factory.begin() as session:
            challenge = await _load_duel(session, challenge_id=challenge_id)
            if challenge.status == DUEL_STATUS_EXPIRED:
                raise DuelExpiredError
            if challenge.status != target_status:
                raise DuelInvalidStateError
            return await self._build_view(
                session,
                challenge_id=challenge_id,
                user_id=user_id,
                now_utc=now_utc,
            )

    async def _expire_if_due(self, *, challenge_id: UUID, now_utc: datetime) -> None:
        # Committed on its own so a rejection raised afterwards cannot roll the expiry back.
        async with self._session_factory.begin() as session:
            await DuelService.declare_expired_if_due(
                session,
                challenge_id=challenge_id,
                now_utc=now_utc,
            )

    async def _complete_if_ready(self, *, challenge_id: UUID, now_utc: datetime) -> DuelSubmitResult:
        try:
            async with self._session_factory.begin() as session:
                completion = await DuelService.complete_if_ready(
                    session,
                    challenge_id=challenge_id,
                    now_utc=now_utc,
                )
                if completion is not None:
                    return DuelSubmitResult(
                        challenge_id=challenge_id,
                        status=DUEL_STATUS_COMPLETED,
                        winner_user_id=completion.winner_user_id,
                        completed_now=True,
                    )
                challenge = await _load_duel(session, challenge_id=challenge_id)
                return DuelSubmitResult(
                    challenge_id=challenge_id,
                    status=challenge.status,
                    winner_user_id=challenge.winner_user_id,
                )
        except DuelStorageConflictError:
            pass

        # Another request completed the duel; report its result as ours.
        async with self._session_factory.begin() as session:
            challenge = await _load_duel(session, challenge_id=challenge_id)
            return DuelSubmitResult(
                challenge_id=challenge_id,
                status=challenge.status,
                winner_user_id=challenge.winner_user_id,
            )

    async def _build_view(
        self,
        session: AsyncSession,
        *,
        challenge_id: UUID,
        user_id: int,
        now_utc: datetime,
    ) -> DuelChallengeView:
        return await DuelService.get_challenge_view(
            session,
            challenge_id=challenge_id,
            user_id=user_id,
            now_utc=now_utc,
            profile_provider=self._profile_provider,
        )
