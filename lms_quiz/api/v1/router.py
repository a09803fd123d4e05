from fastapi import APIRouter
from lms_quiz.api.v1.endpoints import auth, quizzes, quiz_attempts

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

# Include auth routes at /auth
api_router.include_router(
    auth.router,
    prefix="/auth"
)

api_router.include_router(
    quizzes.router,
    prefix=""  # Routes define their own prefix (/quizzes)
)

api_router.include_router(
    quiz_attempts.router,
    prefix=""  # Routes define their own prefix (/quiz-attempts)
)
