from __future__ import annotations

from app.core.config import get_settings

DUEL_STATUS_PENDING = "pending"
DUEL_STATUS_ACCEPTED = "accepted"
DUEL_STATUS_DECLINED = "declined"
DUEL_STATUS_EXPIRED = "expired"
DUEL_STATUS_COMPLETED = "completed"

# Allowed forward moves; anything missing here is rejected as an invalid transition.
DUEL_TRANSITIONS: frozenset[tuple[str, str]] = frozenset(
    {
        (DUEL_STATUS_PENDING, DUEL_STATUS_ACCEPTED),
        (DUEL_STATUS_PENDING, DUEL_STATUS_DECLINED),
        (DUEL_STATUS_PENDING, DUEL_STATUS_EXPIRED),
        (DUEL_STATUS_ACCEPTED, DUEL_STATUS_COMPLETED),
    }
)

DUEL_ACCEPTANCE_WINDOW_SECONDS = max(1, int(get_settings().duel_acceptance_window_hours)) * 3600
DUEL_RATED_MIN_QUESTIONS = max(1, int(get_settings().duel_rated_min_questions))
DUEL_LIST_LIMIT = max(1, int(get_settings().duel_list_limit))
# duel_attempts.duration_seconds is an int4 column.
DUEL_MAX_DURATION_SECONDS = 2**31 - 1

ELO_K_FACTOR = max(1, int(get_settings().duel_elo_k_factor))
ELO_INITIAL_RATING = int(get_settings().duel_elo_initial_rating)
ELO_RATING_FLOOR = int(get_settings().duel_elo_rating_floor)


def is_duel_transition_allowed(*, from_status: str, to_status: str) -> bool:
    return (from_status, to_status) in DUEL_TRANSITIONS


def is_rated_question_count(question_count: int) -> bool:
    return question_count >= DUEL_RATED_MIN_QUESTIONS
