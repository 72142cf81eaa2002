from __future__ import annotations

from datetime import timedelta
from uuid import UUID

import pytest

from app.game.duels.errors import (
    DuelExpiredError,
    DuelInvalidStateError,
    DuelNotParticipantError,
)
from app.game.duels.service import (
    accept_duel_challenge,
    complete_duel_if_ready,
    create_duel_challenge,
    get_duel_challenge_view,
    get_duel_questions_for_user,
    get_user_rating,
    list_duel_challenges_for_user,
    record_duel_attempt,
)
from tests.game.duel_store_fixtures import (
    CHALLENGER_ID,
    NOW_UTC,
    OPPONENT_ID,
    OUTSIDER_ID,
    FakeContentProvider,
    FakeProfileProvider,
    InMemoryDuelStore,
    _quiz,
)


async def _create(*, question_count: int = 6, now_utc=NOW_UTC, opponent_user_id: int = OPPONENT_ID):
    quiz = _quiz(question_count)
    snapshot = await create_duel_challenge(
        object(),
        challenger_user_id=CHALLENGER_ID,
        opponent_user_id=opponent_user_id,
        quiz_set_id=quiz.quiz_set_id,
        now_utc=now_utc,
        content_provider=FakeContentProvider(quiz),
    )
    return snapshot.challenge_id, quiz


async def _view(challenge_id: UUID, user_id: int, *, now_utc=NOW_UTC):
    return await get_duel_challenge_view(
        object(),
        challenge_id=challenge_id,
        user_id=user_id,
        now_utc=now_utc,
        profile_provider=FakeProfileProvider(),
    )


@pytest.mark.asyncio
async def test_view_hides_opponent_attempt_until_completed(monkeypatch: pytest.MonkeyPatch) -> None:
    InMemoryDuelStore().install(monkeypatch)
    challenge_id, _ = await _create()
    await accept_duel_challenge(object(), challenge_id=challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC)
    await record_duel_attempt(
        object(),
        challenge_id=challenge_id,
        user_id=CHALLENGER_ID,
        score=5,
        duration_seconds=40,
        now_utc=NOW_UTC,
    )

    challenger_view = await _view(challenge_id, CHALLENGER_ID)
    opponent_view = await _view(challenge_id, OPPONENT_ID)

    assert challenger_view.challenger_name == "Alice"
    assert challenger_view.opponent_name == "Bob"
    assert [attempt.user_id for attempt in challenger_view.attempts] == [CHALLENGER_ID]
    assert opponent_view.attempts == ()
    assert opponent_view.rating_event is None


@pytest.mark.asyncio
async def test_view_of_completed_duel_shows_both_attempts_and_rating(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    InMemoryDuelStore().install(monkeypatch)
    challenge_id, _ = await _create()
    await accept_duel_challenge(object(), challenge_id=challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC)
    for user_id, score in ((CHALLENGER_ID, 5), (OPPONENT_ID, 2)):
        await record_duel_attempt(
            object(),
            challenge_id=challenge_id,
            user_id=user_id,
            score=score,
            duration_seconds=40,
            now_utc=NOW_UTC,
        )
    await complete_duel_if_ready(object(), challenge_id=challenge_id, now_utc=NOW_UTC)

    view = await _view(challenge_id, OPPONENT_ID)

    assert view.snapshot.status == "completed"
    assert view.snapshot.winner_user_id == CHALLENGER_ID
    assert {attempt.user_id for attempt in view.attempts} == {CHALLENGER_ID, OPPONENT_ID}
    assert view.rating_event is not None
    assert view.rating_event.challenger_delta == 16


@pytest.mark.asyncio
async def test_view_rejects_outsider(monkeypatch: pytest.MonkeyPatch) -> None:
    InMemoryDuelStore().install(monkeypatch)
    challenge_id, _ = await _create()

    with pytest.raises(DuelNotParticipantError):
        await _view(challenge_id, OUTSIDER_ID)


@pytest.mark.asyncio
async def test_view_expires_overdue_pending_duel(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    challenge_id, _ = await _create()
    late = NOW_UTC + timedelta(hours=73)

    view = await _view(challenge_id, CHALLENGER_ID, now_utc=late)

    assert view.snapshot.status == "expired"
    assert store.challenges[challenge_id]["expired_at"] == late


@pytest.mark.asyncio
async def test_questions_are_served_from_frozen_snapshot_once_accepted(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    InMemoryDuelStore().install(monkeypatch)
    challenge_id, quiz = await _create(question_count=5)

    with pytest.raises(DuelInvalidStateError):
        await get_duel_questions_for_user(
            object(),
            challenge_id=challenge_id,
            user_id=OPPONENT_ID,
            now_utc=NOW_UTC,
        )

    await accept_duel_challenge(object(), challenge_id=challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC)
    questions = await get_duel_questions_for_user(
        object(),
        challenge_id=challenge_id,
        user_id=OPPONENT_ID,
        now_utc=NOW_UTC,
    )

    assert questions == quiz.questions


@pytest.mark.asyncio
async def test_questions_on_overdue_pending_duel_expire_it(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    challenge_id, _ = await _create()
    late = NOW_UTC + timedelta(hours=72, seconds=1)

    with pytest.raises(DuelExpiredError):
        await get_duel_questions_for_user(
            object(),
            challenge_id=challenge_id,
            user_id=CHALLENGER_ID,
            now_utc=late,
        )

    assert store.status_of(challenge_id) == "expired"
    assert store.challenges[challenge_id]["expired_at"] == late


@pytest.mark.asyncio
async def test_list_returns_newest_first_and_expires_overdue_rows(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    old_id, _ = await _create(now_utc=NOW_UTC - timedelta(days=5))
    new_id, _ = await _create(now_utc=NOW_UTC)
    await _create(now_utc=NOW_UTC, opponent_user_id=OUTSIDER_ID)

    views = await list_duel_challenges_for_user(
        object(),
        user_id=OPPONENT_ID,
        now_utc=NOW_UTC,
        profile_provider=FakeProfileProvider(),
    )

    assert [view.snapshot.challenge_id for view in views] == [new_id, old_id]
    assert [view.snapshot.status for view in views] == ["pending", "expired"]
    assert store.status_of(old_id) == "expired"


@pytest.mark.asyncio
async def test_list_respects_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    InMemoryDuelStore().install(monkeypatch)
    for offset in range(3):
        await _create(now_utc=NOW_UTC + timedelta(minutes=offset))

    views = await list_duel_challenges_for_user(
        object(),
        user_id=CHALLENGER_ID,
        now_utc=NOW_UTC + timedelta(minutes=5),
        profile_provider=FakeProfileProvider(),
        limit=2,
    )

    assert len(views) == 2


@pytest.mark.asyncio
async def test_rating_defaults_for_unseen_user(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    store.seed_rating(CHALLENGER_ID, elo=1333, games_played=7)

    unseen = await get_user_rating(object(), user_id=OUTSIDER_ID)
    known = await get_user_rating(object(), user_id=CHALLENGER_ID)

    assert (unseen.elo, unseen.games_played) == (1200, 0)
    assert (known.elo, known.games_played) == (1333, 7)
