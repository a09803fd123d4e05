from lms_quiz.repositories.base import BaseRepository
from lms_quiz.repositories.user_repo import UserRepository
from lms_quiz.repositories.quiz_repo import QuizRepository
from lms_quiz.repositories.attempt_repo import QuizAttemptRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "QuizRepository",
    "QuizAttemptRepository",
]
