from app.db.repo.duel_attempts_repo import DuelAttemptsRepo
from app.db.repo.duel_challenges_repo import DuelChallengesRepo
from app.db.repo.duel_rating_events_repo import DuelRatingEventsRepo
from app.db.repo.quiz_content_repo import QuizContentRepo
from app.db.repo.ratings_repo import RatingsRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "DuelAttemptsRepo",
    "DuelChallengesRepo",
    "DuelRatingEventsRepo",
    "QuizContentRepo",
    "RatingsRepo",
    "UsersRepo",
]
