from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, Query, Request

from app.api.routes.duels_models import (
    DuelAttemptModel,
    DuelAttemptRequest,
    DuelAttemptResponse,
    DuelCallerRequest,
    DuelChallengeListResponse,
    DuelChallengeResponse,
    DuelCreateRequest,
    DuelCreateResponse,
    DuelQuestionModel,
    DuelQuestionsResponse,
    DuelRatingEventModel,
    RatingResponse,
)
from app.core.config import get_settings
from app.game.duels.constants import DUEL_LIST_LIMIT
from app.game.duels.errors import (
    DuelAlreadySubmittedError,
    DuelExpiredError,
    DuelInvalidDurationError,
    DuelInvalidOpponentError,
    DuelInvalidScoreError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelNotParticipantError,
    DuelQuizSetNotFoundError,
)
from app.game.duels.service_facade import DuelServiceFacade
from app.game.duels.types import DuelChallengeView
from app.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

router = APIRouter(tags=["internal", "duels"])
logger = structlog.get_logger(__name__)

duel_facade = DuelServiceFacade()

T = TypeVar("T")


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=getattr(settings, "internal_api_trusted_proxies", ""),
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_duels_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning(
            "internal_duels_auth_failed",
            reason="invalid_credentials",
            client_ip=client_ip,
        )
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


async def _call_duel_service(call: Awaitable[T]) -> T:
    try:
        return await call
    except DuelNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_DUEL_NOT_FOUND"}) from exc
    except DuelQuizSetNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_QUIZ_SET_NOT_FOUND"}) from exc
    except DuelNotParticipantError as exc:
        raise HTTPException(status_code=403, detail={"code": "E_NOT_PARTICIPANT"}) from exc
    except DuelInvalidStateError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_INVALID_STATE"}) from exc
    except DuelAlreadySubmittedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_ALREADY_SUBMITTED"}) from exc
    except DuelExpiredError as exc:
        raise HTTPException(status_code=410, detail={"code": "E_DUEL_EXPIRED"}) from exc
    except DuelInvalidOpponentError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_OPPONENT"}) from exc
    except DuelInvalidDurationError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_DURATION"}) from exc
    except DuelInvalidScoreError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_SCORE"}) from exc


def _view_as_response(view: DuelChallengeView) -> DuelChallengeResponse:
    snapshot = view.snapshot
    rating_event = None
    if view.rating_event is not None:
        rating_event = DuelRatingEventModel(
            challenger_delta=view.rating_event.challenger_delta,
            opponent_delta=view.rating_event.opponent_delta,
            challenger_after=view.rating_event.challenger_after,
            opponent_after=view.rating_event.opponent_after,
            scored_at=view.rating_event.scored_at,
        )
    return DuelChallengeResponse(
        challenge_id=snapshot.challenge_id,
        quiz_set_id=snapshot.quiz_set_id,
        quiz_title=snapshot.quiz_title,
        status=snapshot.status,
        rated=snapshot.rated,
        question_count=snapshot.question_count,
        challenger_user_id=snapshot.challenger_user_id,
        challenger_name=view.challenger_name,
        opponent_user_id=snapshot.opponent_user_id,
        opponent_name=view.opponent_name,
        winner_user_id=snapshot.winner_user_id,
        created_at=snapshot.created_at,
        expires_at=snapshot.expires_at,
        accepted_at=snapshot.accepted_at,
        completed_at=snapshot.completed_at,
        attempts=[
            DuelAttemptModel(
                user_id=attempt.user_id,
                score=attempt.score,
                total=attempt.total,
                duration_seconds=attempt.duration_seconds,
                submitted_at=attempt.submitted_at,
            )
            for attempt in view.attempts
        ],
        rating_event=rating_event,
    )


@router.post("/internal/duels", response_model=DuelCreateResponse)
async def create_duel(payload: DuelCreateRequest, request: Request) -> DuelCreateResponse:
    _assert_internal_access(request)

    snapshot = await _call_duel_service(
        duel_facade.create_challenge(
            challenger_user_id=payload.challenger_user_id,
            opponent_user_id=payload.opponent_user_id,
            quiz_set_id=payload.quiz_set_id,
        )
    )
    return DuelCreateResponse(
        challenge_id=snapshot.challenge_id,
        status=snapshot.status,
        expires_at=snapshot.expires_at,
        rated=snapshot.rated,
        question_count=snapshot.question_count,
    )


@router.get("/internal/duels", response_model=DuelChallengeListResponse)
async def list_duels(
    request: Request,
    caller_user_id: int = Query(gt=0),
    limit: int = Query(default=DUEL_LIST_LIMIT, ge=1, le=DUEL_LIST_LIMIT),
) -> DuelChallengeListResponse:
    _assert_internal_access(request)

    views = await _call_duel_service(
        duel_facade.list_challenges(user_id=caller_user_id, limit=limit)
    )
    return DuelChallengeListResponse(challenges=[_view_as_response(view) for view in views])


@router.get("/internal/duels/{challenge_id}", response_model=DuelChallengeResponse)
async def get_duel(
    challenge_id: UUID,
    request: Request,
    caller_user_id: int = Query(gt=0),
) -> DuelChallengeResponse:
    _assert_internal_access(request)

    view = await _call_duel_service(
        duel_facade.get_challenge(challenge_id=challenge_id, user_id=caller_user_id)
    )
    return _view_as_response(view)


@router.get("/internal/duels/{challenge_id}/questions", response_model=DuelQuestionsResponse)
async def get_duel_questions(
    challenge_id: UUID,
    request: Request,
    caller_user_id: int = Query(gt=0),
) -> DuelQuestionsResponse:
    _assert_internal_access(request)

    questions = await _call_duel_service(
        duel_facade.get_challenge_questions(challenge_id=challenge_id, user_id=caller_user_id)
    )
    return DuelQuestionsResponse(
        challenge_id=challenge_id,
        questions=[
            DuelQuestionModel(
                position=position,
                prompt=question.prompt,
                choices=list(question.choices),
                correct_choice_index=question.correct_choice_index,
                explanation=question.explanation,
            )
            for position, question in enumerate(questions, start=1)
        ],
    )


@router.post("/internal/duels/{challenge_id}/accept", response_model=DuelChallengeResponse)
async def accept_duel(
    challenge_id: UUID,
    payload: DuelCallerRequest,
    request: Request,
) -> DuelChallengeResponse:
    _assert_internal_access(request)

    view = await _call_duel_service(
        duel_facade.accept_challenge(challenge_id=challenge_id, user_id=payload.caller_user_id)
    )
    return _view_as_response(view)


@router.post("/internal/duels/{challenge_id}/decline", response_model=DuelChallengeResponse)
async def decline_duel(
    challenge_id: UUID,
    payload: DuelCallerRequest,
    request: Request,
) -> DuelChallengeResponse:
    _assert_internal_access(request)

    view = await _call_duel_service(
        duel_facade.decline_challenge(challenge_id=challenge_id, user_id=payload.caller_user_id)
    )
    return _view_as_response(view)


@router.post("/internal/duels/{challenge_id}/attempts", response_model=DuelAttemptResponse)
async def submit_duel_attempt(
    challenge_id: UUID,
    payload: DuelAttemptRequest,
    request: Request,
) -> DuelAttemptResponse:
    _assert_internal_access(request)

    result = await _call_duel_service(
        duel_facade.submit_attempt(
            challenge_id=challenge_id,
            user_id=payload.caller_user_id,
            score=payload.score,
            duration_seconds=payload.duration_seconds,
        )
    )
    return DuelAttemptResponse(
        challenge_id=result.challenge_id,
        status=result.status,
        winner_user_id=result.winner_user_id,
        completed_now=result.completed_now,
    )


@router.get("/internal/ratings/{user_id}", response_model=RatingResponse)
async def get_rating(user_id: int, request: Request) -> RatingResponse:
    _assert_internal_access(request)

    rating = await duel_facade.get_rating(user_id=user_id)
    return RatingResponse(
        user_id=rating.user_id,
        elo=rating.elo,
        games_played=rating.games_played,
    )
