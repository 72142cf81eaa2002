from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class QuizQuestionView:
    prompt: str
    choices: tuple[str, ...]
    correct_choice_index: int
    explanation: str | None = None


@dataclass(frozen=True, slots=True)
class QuizContent:
    quiz_set_id: UUID
    title: str
    questions: tuple[QuizQuestionView, ...]


@dataclass(frozen=True, slots=True)
class DuelAttemptView:
    user_id: int
    score: int
    total: int
    duration_seconds: int
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class DuelRatingEventView:
    challenge_id: UUID
    challenger_user_id: int
    opponent_user_id: int
    challenger_delta: int
    opponent_delta: int
    challenger_after: int
    opponent_after: int
    scored_at: datetime


@dataclass(slots=True)
class DuelChallengeSnapshot:
    challenge_id: UUID
    quiz_set_id: UUID
    quiz_title: str
    challenger_user_id: int
    opponent_user_id: int
    status: str
    question_count: int
    rated: bool
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None
    completed_at: datetime | None = None
    winner_user_id: int | None = None


@dataclass(slots=True)
class DuelChallengeView:
    snapshot: DuelChallengeSnapshot
    challenger_name: str
    opponent_name: str
    attempts: tuple[DuelAttemptView, ...] = ()
    rating_event: DuelRatingEventView | None = None


@dataclass(frozen=True, slots=True)
class DuelCompletionResult:
    challenge_id: UUID
    winner_user_id: int | None
    rating_event: DuelRatingEventView | None = None


@dataclass(frozen=True, slots=True)
class DuelSubmitResult:
    challenge_id: UUID
    status: str
    winner_user_id: int | None = None
    completed_now: bool = False


@dataclass(frozen=True, slots=True)
class UserRatingView:
    user_id: int
    elo: int
    games_played: int
