from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from app.game.duels.errors import (
    DuelExpiredError,
    DuelInvalidOpponentError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelNotParticipantError,
    DuelQuizSetNotFoundError,
    DuelStorageConflictError,
)
from app.game.duels.service import (
    accept_duel_challenge,
    create_duel_challenge,
    declare_duel_expired_if_due,
    decline_duel_challenge,
)
from tests.game.duel_store_fixtures import (
    CHALLENGER_ID,
    NOW_UTC,
    OPPONENT_ID,
    OUTSIDER_ID,
    FakeContentProvider,
    InMemoryDuelStore,
    _quiz,
)


async def _create(store: InMemoryDuelStore, *, question_count: int = 10):
    quiz = _quiz(question_count)
    snapshot = await create_duel_challenge(
        object(),
        challenger_user_id=CHALLENGER_ID,
        opponent_user_id=OPPONENT_ID,
        quiz_set_id=quiz.quiz_set_id,
        now_utc=NOW_UTC,
        content_provider=FakeContentProvider(quiz),
    )
    return snapshot, quiz


@pytest.mark.asyncio
async def test_create_duel_freezes_quiz_and_sets_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)

    snapshot, quiz = await _create(store, question_count=10)

    assert snapshot.status == "pending"
    assert snapshot.rated is True
    assert snapshot.question_count == 10
    assert snapshot.quiz_title == "Capitals"
    assert snapshot.expires_at == NOW_UTC + timedelta(hours=72)
    row = store.challenges[snapshot.challenge_id]
    assert len(row["questions"]) == 10
    assert row["questions"][0]["prompt"] == quiz.questions[0].prompt
    assert row["questions"][1]["explanation"] == "Because 2."


@pytest.mark.asyncio
async def test_create_duel_below_threshold_is_unrated(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)

    snapshot, _ = await _create(store, question_count=4)

    assert snapshot.rated is False


@pytest.mark.asyncio
async def test_create_duel_with_exactly_threshold_questions_is_rated(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)

    snapshot, _ = await _create(store, question_count=5)

    assert snapshot.rated is True


@pytest.mark.asyncio
async def test_create_duel_rejects_self_challenge(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    quiz = _quiz(5)
    provider = FakeContentProvider(quiz)

    with pytest.raises(DuelInvalidOpponentError):
        await create_duel_challenge(
            object(),
            challenger_user_id=CHALLENGER_ID,
            opponent_user_id=CHALLENGER_ID,
            quiz_set_id=quiz.quiz_set_id,
            now_utc=NOW_UTC,
            content_provider=provider,
        )
    assert provider.calls == []
    assert store.challenges == {}


@pytest.mark.asyncio
async def test_create_duel_rejects_unknown_or_empty_quiz_set(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    InMemoryDuelStore().install(monkeypatch)
    empty_quiz = _quiz(0)
    provider = FakeContentProvider(empty_quiz)

    for quiz_set_id in (uuid4(), empty_quiz.quiz_set_id):
        with pytest.raises(DuelQuizSetNotFoundError):
            await create_duel_challenge(
                object(),
                challenger_user_id=CHALLENGER_ID,
                opponent_user_id=OPPONENT_ID,
                quiz_set_id=quiz_set_id,
                now_utc=NOW_UTC,
                content_provider=provider,
            )


@pytest.mark.asyncio
async def test_accept_moves_pending_to_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)
    accepted_at = NOW_UTC + timedelta(hours=1)

    accepted = await accept_duel_challenge(
        object(),
        challenge_id=snapshot.challenge_id,
        user_id=OPPONENT_ID,
        now_utc=accepted_at,
    )

    assert accepted.status == "accepted"
    assert accepted.accepted_at == accepted_at


@pytest.mark.asyncio
async def test_accept_rejects_challenger_and_outsider(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    for user_id in (CHALLENGER_ID, OUTSIDER_ID):
        with pytest.raises(DuelNotParticipantError):
            await accept_duel_challenge(
                object(),
                challenge_id=snapshot.challenge_id,
                user_id=user_id,
                now_utc=NOW_UTC,
            )
    assert store.status_of(snapshot.challenge_id) == "pending"


@pytest.mark.asyncio
async def test_accept_twice_fails_with_invalid_state(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)
    await accept_duel_challenge(
        object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
    )

    with pytest.raises(DuelInvalidStateError):
        await accept_duel_challenge(
            object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
        )


@pytest.mark.asyncio
async def test_accept_unknown_duel_fails_with_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    InMemoryDuelStore().install(monkeypatch)

    with pytest.raises(DuelNotFoundError):
        await accept_duel_challenge(object(), challenge_id=uuid4(), user_id=OPPONENT_ID, now_utc=NOW_UTC)


@pytest.mark.asyncio
async def test_accept_at_exact_deadline_still_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    accepted = await accept_duel_challenge(
        object(),
        challenge_id=snapshot.challenge_id,
        user_id=OPPONENT_ID,
        now_utc=snapshot.expires_at,
    )

    assert accepted.status == "accepted"


@pytest.mark.asyncio
async def test_accept_past_deadline_after_lazy_expiry_fails_with_expired(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)
    late = snapshot.expires_at + timedelta(seconds=1)

    assert await declare_duel_expired_if_due(object(), challenge_id=snapshot.challenge_id, now_utc=late)
    with pytest.raises(DuelExpiredError):
        await accept_duel_challenge(
            object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=late
        )

    assert store.status_of(snapshot.challenge_id) == "expired"
    assert store.challenges[snapshot.challenge_id]["expired_at"] == late


@pytest.mark.asyncio
async def test_accept_past_deadline_without_expiry_pass_reports_expired(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    with pytest.raises(DuelExpiredError):
        await accept_duel_challenge(
            object(),
            challenge_id=snapshot.challenge_id,
            user_id=OPPONENT_ID,
            now_utc=snapshot.expires_at + timedelta(minutes=5),
        )


@pytest.mark.asyncio
async def test_declare_expired_is_noop_before_deadline_and_for_accepted(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    assert not await declare_duel_expired_if_due(
        object(), challenge_id=snapshot.challenge_id, now_utc=snapshot.expires_at
    )
    await accept_duel_challenge(
        object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
    )
    assert not await declare_duel_expired_if_due(
        object(),
        challenge_id=snapshot.challenge_id,
        now_utc=snapshot.expires_at + timedelta(days=30),
    )
    assert store.status_of(snapshot.challenge_id) == "accepted"


@pytest.mark.asyncio
async def test_decline_moves_pending_to_declined_and_blocks_accept(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    declined = await decline_duel_challenge(
        object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
    )

    assert declined.status == "declined"
    assert store.challenges[snapshot.challenge_id]["declined_at"] == NOW_UTC
    with pytest.raises(DuelInvalidStateError):
        await accept_duel_challenge(
            object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
        )


@pytest.mark.asyncio
async def test_decline_by_challenger_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)

    with pytest.raises(DuelNotParticipantError):
        await decline_duel_challenge(
            object(), challenge_id=snapshot.challenge_id, user_id=CHALLENGER_ID, now_utc=NOW_UTC
        )


@pytest.mark.asyncio
async def test_accept_losing_conditional_write_raises_storage_conflict(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryDuelStore().install(monkeypatch)
    snapshot, _ = await _create(store)
    real_compare_and_set = store.compare_and_set_status

    async def _decline_first(session, **kwargs):  # noqa: ANN001
        store.challenges[snapshot.challenge_id]["status"] = "declined"
        return await real_compare_and_set(session, **kwargs)

    monkeypatch.setattr(
        "app.game.duels.service.duels_respond.DuelChallengesRepo.compare_and_set_status",
        staticmethod(_decline_first),
    )

    with pytest.raises(DuelStorageConflictError):
        await accept_duel_challenge(
            object(), challenge_id=snapshot.challenge_id, user_id=OPPONENT_ID, now_utc=NOW_UTC
        )
    assert store.status_of(snapshot.challenge_id) == "declined"
