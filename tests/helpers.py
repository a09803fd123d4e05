from lms_quiz.core.security import create_access_token
from lms_quiz.models import User
from lms_quiz.services.context import Actor

QUIZ_PASSWORD = "abc"

DEFAULT_QUESTIONS = [
    {
        "id": "1",
        "text": "Which planet is the largest?",
        "type": "mcq",
        "options": ["Jupiter", "Mars", "Venus", "Earth"],
        "correct_options": [1, 0, 0, 0],
        "points": 2,
    },
    {
        "id": "2",
        "text": "Select the prime numbers",
        "type": "multi",
        "options": ["2", "4", "5", "9"],
        "correct_options": [1, 0, 1, 0],
        "points": 3,
        "option_weights": [1.5, -1, 1.5, -1],
    },
    {
        "id": "3",
        "text": "The sun is a star",
        "type": "truefalse",
        "options": ["True", "False"],
        "correct_options": [1, 0],
    },
]


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=user.role, ip="127.0.0.1", user_agent="pytest")


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}
