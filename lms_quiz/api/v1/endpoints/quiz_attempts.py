"""
Quiz Attempt Endpoints

HTTP API for taking, moderating and grading quiz attempts.

Endpoints:
----------
- POST   /quiz-attempts/enroll                  - Start an attempt (student)
- PUT    /quiz-attempts/{attempt_id}/save       - Bulk save answers (owner)
- PUT    /quiz-attempts/{attempt_id}/auto-save  - Save one answer (owner)
- PUT    /quiz-attempts/{attempt_id}/submit     - Submit and grade (owner)
- PUT    /quiz-attempts/{attempt_id}/ban        - Ban (teacher/admin)
- DELETE /quiz-attempts/{attempt_id}            - Soft delete (owner or teacher/admin)
- GET    /quiz-attempts/{attempt_id}            - Get attempt
- PUT    /quiz-attempts/{attempt_id}/re-grade   - Recompute score (teacher/admin)
- PUT    /quiz-attempts/{attempt_id}            - Override score (teacher/admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.db.database import get_db
from lms_quiz.api.deps import get_actor
from lms_quiz.schemas.common import ApiResponse
from lms_quiz.schemas.quiz_attempt import (
    EnrollRequest,
    SaveAnswersRequest,
    AutoSaveRequest,
    ScoreUpdateRequest,
    QuizAttemptResponse,
    AutoSaveResponse,
    SubmissionResponse,
)
from lms_quiz.services.context import Actor
from lms_quiz.services.quiz_attempt_service import QuizAttemptService, SubmissionResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz-attempts", tags=["Quiz Attempts"])


def get_attempt_service(db: AsyncSession = Depends(get_db)) -> QuizAttemptService:
    return QuizAttemptService(db)


def _submission_response(result: SubmissionResult) -> SubmissionResponse:
    attempt = QuizAttemptResponse.model_validate(result.attempt)
    report = result.report
    return SubmissionResponse(
        **attempt.model_dump(),
        total_questions=report.total_questions,
        score_percentage=report.score_percentage,
        passed_questions=report.passed_questions,
        failed_questions=report.failed_questions,
    )


# ============================================================
# ENROLL
# ============================================================

@router.post(
    "/enroll",
    response_model=ApiResponse[QuizAttemptResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a quiz",
    description="""
    Starts a new attempt for the calling student.

    Fails when the quiz is closed, the password is wrong, or the student
    already has an attempt in progress, submitted or banned.
    """,
)
async def enroll(
    request: EnrollRequest,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempt = await service.enroll(request.quiz_id, request.hash_password, actor)
    return ApiResponse(
        message="Enrolled in quiz",
        data=QuizAttemptResponse.model_validate(attempt),
    )


# ============================================================
# SAVE / AUTO-SAVE
# ============================================================

@router.put(
    "/{attempt_id}/save",
    response_model=ApiResponse[QuizAttemptResponse],
    summary="Save answers",
)
async def save_answers(
    attempt_id: UUID,
    request: SaveAnswersRequest,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempt = await service.save_answers(attempt_id, actor, request.answers)
    return ApiResponse(
        message="Answers saved",
        data=QuizAttemptResponse.model_validate(attempt),
    )


@router.put(
    "/{attempt_id}/auto-save",
    response_model=ApiResponse[AutoSaveResponse],
    summary="Auto-save one answer",
)
async def auto_save_answer(
    attempt_id: UUID,
    request: AutoSaveRequest,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    result = await service.auto_save_answer(attempt_id, actor, request.answer)
    return ApiResponse(
        message="Answer saved",
        data=AutoSaveResponse(
            attempt=QuizAttemptResponse.model_validate(result.attempt),
            total=result.total,
            answered_total=result.answered_total,
        ),
    )


# ============================================================
# SUBMIT
# ============================================================

@router.put(
    "/{attempt_id}/submit",
    response_model=ApiResponse[SubmissionResponse],
    summary="Submit an attempt",
    description="Grades the stored answers against the quiz snapshot. Allowed once.",
)
async def submit(
    attempt_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    result = await service.submit(attempt_id, actor)
    return ApiResponse(message="Quiz submitted", data=_submission_response(result))


# ============================================================
# MODERATION
# ============================================================

@router.put(
    "/{attempt_id}/ban",
    response_model=ApiResponse[QuizAttemptResponse],
    summary="Ban an attempt",
)
async def ban(
    attempt_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempt = await service.ban(attempt_id, actor)
    return ApiResponse(
        message="Quiz attempt banned",
        data=QuizAttemptResponse.model_validate(attempt),
    )


@router.delete(
    "/{attempt_id}",
    response_model=ApiResponse[None],
    summary="Delete an attempt",
    description="Soft delete; the record is kept with status `deleted`.",
)
async def delete(
    attempt_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    await service.delete(attempt_id, actor)
    return ApiResponse(message="Quiz attempt deleted", data=None)


# ============================================================
# REVIEW & TEACHER GRADING
# ============================================================

@router.get(
    "/{attempt_id}",
    response_model=ApiResponse[QuizAttemptResponse],
    summary="Get an attempt",
)
async def get_attempt(
    attempt_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempt = await service.get_attempt(attempt_id, actor)
    return ApiResponse(data=QuizAttemptResponse.model_validate(attempt))


@router.put(
    "/{attempt_id}/re-grade",
    response_model=ApiResponse[SubmissionResponse],
    summary="Re-grade a submitted attempt",
)
async def regrade(
    attempt_id: UUID,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    result = await service.regrade(attempt_id, actor)
    return ApiResponse(message="Quiz attempt re-graded", data=_submission_response(result))


@router.put(
    "/{attempt_id}",
    response_model=ApiResponse[QuizAttemptResponse],
    summary="Override the score of a submitted attempt",
)
async def update_score(
    attempt_id: UUID,
    request: ScoreUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    attempt = await service.update_score(attempt_id, actor, request.score)
    return ApiResponse(
        message="Score updated",
        data=QuizAttemptResponse.model_validate(attempt),
    )
