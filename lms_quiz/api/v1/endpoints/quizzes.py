"""
Quiz Endpoints

HTTP API for quiz authoring and teacher review.

Endpoints:
----------
- POST   /quizzes                       - Create a quiz (teacher/admin)
- GET    /quizzes                       - List quizzes created by the caller
- GET    /quizzes/{quiz_id}             - Get quiz (answer keys for teacher/admin)
- GET    /quizzes/{quiz_id}/attempts    - List attempts for a quiz
- GET    /quizzes/{quiz_id}/statistics  - Score statistics and ranking
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.db.database import get_db
from lms_quiz.api.deps import get_actor
from lms_quiz.models.quiz_attempt import AttemptStatus
from lms_quiz.schemas.common import ApiResponse
from lms_quiz.schemas.quiz import (
    QuizCreateRequest,
    QuizDetailResponse,
    QuizListResponse,
    QuizStatisticsResponse,
)
from lms_quiz.schemas.quiz_attempt import AttemptListResponse, QuizAttemptResponse
from lms_quiz.services.context import Actor
from lms_quiz.services.quiz_service import QuizService
from lms_quiz.services.quiz_attempt_service import QuizAttemptService
from lms_quiz.services.quiz_statistics import QuizStatisticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


def get_quiz_service(db: AsyncSession = Depends(get_db)) -> QuizService:
    return QuizService(db)


def get_attempt_service(db: AsyncSession = Depends(get_db)) -> QuizAttemptService:
    return QuizAttemptService(db)


def get_statistics_service(db: AsyncSession = Depends(get_db)) -> QuizStatisticsService:
    return QuizStatisticsService(db)


# ============================================================
# CREATE QUIZ
# ============================================================

@router.post(
    "",
    response_model=ApiResponse[QuizDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a quiz",
    description="""
    Creates a quiz with a frozen snapshot of its questions.

    Question ids are generated when omitted. The optional access password
    is stored hashed; students must provide it to enroll.
    """,
)
async def create_quiz(
    request: QuizCreateRequest,
    actor: Actor = Depends(get_actor),
    service: QuizService = Depends(get_quiz_service),
):
    quiz = await service.create_quiz(request, actor)
    return ApiResponse(message="Quiz created", data=quiz)


# ============================================================
# LIST QUIZZES
# ============================================================

@router.get(
    "",
    response_model=ApiResponse[QuizListResponse],
    summary="List quizzes created by the current teacher",
)
async def list_quizzes(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: QuizService = Depends(get_quiz_service),
):
    quizzes, total = await service.list_quizzes(actor, skip=skip, limit=limit)
    return ApiResponse(data=QuizListResponse(quizzes=quizzes, total=total))


# ============================================================
# GET QUIZ
# ============================================================

@router.get(
    "/{quiz_id}",
    response_model=ApiResponse[QuizDetailResponse],
    summary="Get quiz with questions",
    description="Correct options are only included for teachers and admins.",
)
async def get_quiz(
    quiz_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizService = Depends(get_quiz_service),
):
    quiz = await service.get_quiz(quiz_id, actor)
    return ApiResponse(data=quiz)


# ============================================================
# LIST ATTEMPTS
# ============================================================

@router.get(
    "/{quiz_id}/attempts",
    response_model=ApiResponse[AttemptListResponse],
    summary="List attempts for a quiz",
)
async def list_attempts(
    quiz_id: UUID,
    status_filter: Optional[AttemptStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempts, total = await service.list_attempts(
        quiz_id, actor, status=status_filter, skip=skip, limit=limit
    )
    return ApiResponse(data=AttemptListResponse(
        attempts=[QuizAttemptResponse.model_validate(a) for a in attempts],
        total=total,
    ))


# ============================================================
# STATISTICS
# ============================================================

@router.get(
    "/{quiz_id}/statistics",
    response_model=ApiResponse[QuizStatisticsResponse],
    summary="Score statistics and ranking",
    description="Computed over submitted attempts; banned and deleted attempts are excluded.",
)
async def get_statistics(
    quiz_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizStatisticsService = Depends(get_statistics_service),
):
    stats = await service.get_statistics(quiz_id, actor)
    return ApiResponse(data=stats)
