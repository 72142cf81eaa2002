from __future__ import annotations

from app.game.duels.rating import OUTCOME_A_WINS, OUTCOME_B_WINS, OUTCOME_DRAW
from app.game.duels.types import DuelAttemptView


def resolve_duel_outcome(
    *,
    challenger_attempt: DuelAttemptView,
    opponent_attempt: DuelAttemptView,
) -> str:
    """Higher score wins; equal scores go to the faster run; equal both is a draw."""
    if challenger_attempt.score != opponent_attempt.score:
        if challenger_attempt.score > opponent_attempt.score:
            return OUTCOME_A_WINS
        return OUTCOME_B_WINS
    if challenger_attempt.duration_seconds != opponent_attempt.duration_seconds:
        if challenger_attempt.duration_seconds < opponent_attempt.duration_seconds:
            return OUTCOME_A_WINS
        return OUTCOME_B_WINS
    return OUTCOME_DRAW


def winner_for_outcome(
    *,
    outcome: str,
    challenger_user_id: int,
    opponent_user_id: int,
) -> int | None:
    if outcome == OUTCOME_A_WINS:
        return challenger_user_id
    if outcome == OUTCOME_B_WINS:
        return opponent_user_id
    return None
