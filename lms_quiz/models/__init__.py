from lms_quiz.models.base import Base
from lms_quiz.models.user import User, UserRole
from lms_quiz.models.quiz import Quiz
from lms_quiz.models.quiz_attempt import QuizAttempt, AttemptStatus
from lms_quiz.models.quiz_answer import QuizAnswer

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Quiz",
    "QuizAttempt",
    "AttemptStatus",
    "QuizAnswer",
]
