from __future__ import annotations

from .duels_completion import complete_duel_if_ready
from .duels_create import create_duel_challenge
from .duels_expiry import declare_duel_expired_if_due
from .duels_internal import (
    _build_duel_snapshot,
    _duel_expires_at,
    _is_duel_past_deadline,
    _questions_from_snapshot,
    _serialize_questions,
)
from .duels_queries import (
    get_duel_challenge_view,
    get_duel_questions_for_user,
    get_user_rating,
    list_duel_challenges_for_user,
)
from .duels_respond import accept_duel_challenge, decline_duel_challenge
from .duels_submit import record_duel_attempt


class DuelService:
    _duel_expires_at = staticmethod(_duel_expires_at)
    _is_duel_past_deadline = staticmethod(_is_duel_past_deadline)
    _build_duel_snapshot = staticmethod(_build_duel_snapshot)
    _serialize_questions = staticmethod(_serialize_questions)
    _questions_from_snapshot = staticmethod(_questions_from_snapshot)

    create_challenge = staticmethod(create_duel_challenge)
    accept_challenge = staticmethod(accept_duel_challenge)
    decline_challenge = staticmethod(decline_duel_challenge)
    declare_expired_if_due = staticmethod(declare_duel_expired_if_due)
    record_attempt = staticmethod(record_duel_attempt)
    complete_if_ready = staticmethod(complete_duel_if_ready)
    get_challenge_view = staticmethod(get_duel_challenge_view)
    get_challenge_questions = staticmethod(get_duel_questions_for_user)
    list_challenges_for_user = staticmethod(list_duel_challenges_for_user)
    get_user_rating = staticmethod(get_user_rating)


__all__ = [
    "DuelService",
    "accept_duel_challenge",
    "complete_duel_if_ready",
    "create_duel_challenge",
    "declare_duel_expired_if_due",
    "decline_duel_challenge",
    "get_duel_challenge_view",
    "get_duel_questions_for_user",
    "get_user_rating",
    "list_duel_challenges_for_user",
    "record_duel_attempt",
]
