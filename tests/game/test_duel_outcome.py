from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.game.duels.outcome import resolve_duel_outcome, winner_for_outcome
from app.game.duels.rating import OUTCOME_A_WINS, OUTCOME_B_WINS, OUTCOME_DRAW
from app.game.duels.types import DuelAttemptView

UTC = timezone.utc


def _attempt(user_id: int, *, score: int, duration_seconds: int) -> DuelAttemptView:
    return DuelAttemptView(
        user_id=user_id,
        score=score,
        total=10,
        duration_seconds=duration_seconds,
        submitted_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
    )


@pytest.mark.parametrize(
    ("challenger", "opponent", "expected"),
    [
        ((9, 300), (8, 30), OUTCOME_A_WINS),
        ((4, 10), (5, 500), OUTCOME_B_WINS),
        ((8, 120), (8, 150), OUTCOME_A_WINS),
        ((8, 151), (8, 150), OUTCOME_B_WINS),
        ((8, 120), (8, 120), OUTCOME_DRAW),
        ((0, 1), (0, 1), OUTCOME_DRAW),
    ],
)
def test_resolve_duel_outcome_orders_by_score_then_duration(
    challenger: tuple[int, int],
    opponent: tuple[int, int],
    expected: str,
) -> None:
    outcome = resolve_duel_outcome(
        challenger_attempt=_attempt(1, score=challenger[0], duration_seconds=challenger[1]),
        opponent_attempt=_attempt(2, score=opponent[0], duration_seconds=opponent[1]),
    )
    assert outcome == expected


def test_winner_for_outcome_maps_draw_to_none() -> None:
    assert winner_for_outcome(outcome=OUTCOME_A_WINS, challenger_user_id=1, opponent_user_id=2) == 1
    assert winner_for_outcome(outcome=OUTCOME_B_WINS, challenger_user_id=1, opponent_user_id=2) == 2
    assert winner_for_outcome(outcome=OUTCOME_DRAW, challenger_user_id=1, opponent_user_id=2) is None
