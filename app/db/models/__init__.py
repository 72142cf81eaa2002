from app.db.models.base import Base
from app.db.models.duel_attempts import DuelAttempt
from app.db.models.duel_challenges import DuelChallenge
from app.db.models.duel_rating_events import DuelRatingEvent
from app.db.models.quiz_set_questions import QuizSetQuestion
from app.db.models.quiz_sets import QuizSet
from app.db.models.ratings import Rating
from app.db.models.users import User

__all__ = [
    "Base",
    "DuelAttempt",
    "DuelChallenge",
    "DuelRatingEvent",
    "QuizSet",
    "QuizSetQuestion",
    "Rating",
    "User",
]
