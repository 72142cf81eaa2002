from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class DuelCreateRequest(BaseModel):
    challenger_user_id: int = Field(gt=0)
    opponent_user_id: int = Field(gt=0)
    quiz_set_id: UUID


class DuelCreateResponse(BaseModel):
    challenge_id: UUID
    status: str
    expires_at: datetime
    rated: bool
    question_count: int = Field(ge=1)


class DuelCallerRequest(BaseModel):
    caller_user_id: int = Field(gt=0)


class DuelAttemptRequest(BaseModel):
    caller_user_id: int = Field(gt=0)
    score: int
    duration_seconds: int


class DuelAttemptResponse(BaseModel):
    challenge_id: UUID
    status: str
    winner_user_id: int | None = None
    completed_now: bool = False


class DuelAttemptModel(BaseModel):
    user_id: int
    score: int = Field(ge=0)
    total: int = Field(ge=1)
    duration_seconds: int = Field(ge=1)
    submitted_at: datetime


class DuelRatingEventModel(BaseModel):
    challenger_delta: int
    opponent_delta: int
    challenger_after: int
    opponent_after: int
    scored_at: datetime


class DuelChallengeResponse(BaseModel):
    challenge_id: UUID
    quiz_set_id: UUID
    quiz_title: str
    status: str
    rated: bool
    question_count: int
    challenger_user_id: int
    challenger_name: str
    opponent_user_id: int
    opponent_name: str
    winner_user_id: int | None = None
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None
    completed_at: datetime | None = None
    attempts: list[DuelAttemptModel]
    rating_event: DuelRatingEventModel | None = None


class DuelChallengeListResponse(BaseModel):
    challenges: list[DuelChallengeResponse]


class DuelQuestionModel(BaseModel):
    position: int = Field(ge=1)
    prompt: str
    choices: list[str]
    correct_choice_index: int = Field(ge=0)
    explanation: str | None = None


class DuelQuestionsResponse(BaseModel):
    challenge_id: UUID
    questions: list[DuelQuestionModel]


class RatingResponse(BaseModel):
    user_id: int
    elo: int
    games_played: int = Field(ge=0)
