"""Elo rating arithmetic for rated duels.

Pure functions only: no storage access and no clock, so the tables in the
unit tests can be computed by hand.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.game.duels.constants import ELO_K_FACTOR, ELO_RATING_FLOOR

OUTCOME_A_WINS = "A_WINS"
OUTCOME_B_WINS = "B_WINS"
OUTCOME_DRAW = "DRAW"

_ACTUAL_SCORE_A: dict[str, float] = {
    OUTCOME_A_WINS: 1.0,
    OUTCOME_B_WINS: 0.0,
    OUTCOME_DRAW: 0.5,
}


@dataclass(frozen=True, slots=True)
class EloResult:
    delta_a: int
    delta_b: int
    new_a: int
    new_b: int


def expected_score(rating_a: int, rating_b: int) -> float:
    return 1.0 / (1.0 + math.pow(10.0, (rating_b - rating_a) / 400.0))


def compute_elo(
    *,
    rating_a: int,
    rating_b: int,
    outcome: str,
    k_factor: int = ELO_K_FACTOR,
    rating_floor: int = ELO_RATING_FLOOR,
) -> EloResult:
    """Returns per-side deltas and floored post-game ratings.

    Deltas are rounded independently, so ``delta_a + delta_b`` may drift from
    zero by one point.
    """
    if outcome not in _ACTUAL_SCORE_A:
        raise ValueError(f"unknown duel outcome: {outcome!r}")

    expected_a = expected_score(rating_a, rating_b)
    expected_b = 1.0 - expected_a
    actual_a = _ACTUAL_SCORE_A[outcome]
    actual_b = 1.0 - actual_a

    delta_a = int(round(k_factor * (actual_a - expected_a)))
    delta_b = int(round(k_factor * (actual_b - expected_b)))
    return EloResult(
        delta_a=delta_a,
        delta_b=delta_b,
        new_a=max(rating_floor, rating_a + delta_a),
        new_b=max(rating_floor, rating_b + delta_b),
    )
