from app.game.duels.errors import (
    DuelAlreadySubmittedError,
    DuelError,
    DuelExpiredError,
    DuelInvalidDurationError,
    DuelInvalidOpponentError,
    DuelInvalidScoreError,
    DuelInvalidStateError,
    DuelNotFoundError,
    DuelNotParticipantError,
    DuelQuizSetNotFoundError,
    DuelStorageConflictError,
)
from app.game.duels.rating import EloResult, compute_elo

__all__ = [
    "DuelAlreadySubmittedError",
    "DuelError",
    "DuelExpiredError",
    "DuelInvalidDurationError",
    "DuelInvalidOpponentError",
    "DuelInvalidScoreError",
    "DuelInvalidStateError",
    "DuelNotFoundError",
    "DuelNotParticipantError",
    "DuelQuizSetNotFoundError",
    "DuelStorageConflictError",
    "EloResult",
    "compute_elo",
]
