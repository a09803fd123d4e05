"""
Quiz Service

Business logic for quiz authoring and display:
- Quiz creation with a frozen question snapshot
- Quiz retrieval (answer keys only for teachers and admins)
- Listing the quizzes a teacher created
"""

import logging
from typing import List, Tuple
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.core.exceptions import ForbiddenError, NotFoundError
from lms_quiz.core.security import get_password_hash
from lms_quiz.models.quiz import Quiz
from lms_quiz.repositories.quiz_repo import QuizRepository
from lms_quiz.schemas.quiz import (
    QuizCreateRequest,
    QuizResponse,
    QuizDetailResponse,
    QuestionResponse,
    QuestionWithAnswerResponse,
)
from lms_quiz.services.context import Actor
from lms_quiz.services.grading import question_points
from lms_quiz.utils.datetime_utils import as_utc

logger = logging.getLogger(__name__)


class QuizService:
    """Service for creating and reading quizzes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.quiz_repo = QuizRepository(db)

    # ============================================================
    # CREATE QUIZ
    # ============================================================

    async def create_quiz(
        self,
        request: QuizCreateRequest,
        actor: Actor,
    ) -> QuizDetailResponse:
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can create quizzes", code="ROLE_NOT_ALLOWED")

        snapshot = []
        for q in request.snapshot_questions:
            snapshot.append({
                "id": q.id or uuid4().hex,
                "text": q.text,
                "type": q.type.value,
                "options": list(q.options),
                "correct_options": list(q.correct_options),
                "points": q.points,
                "option_weights": q.option_weights,
                "explanation": q.explanation,
            })

        quiz = await self.quiz_repo.create(
            created_by=actor.user_id,
            title=request.title,
            description=request.description,
            start_time=as_utc(request.start_time),
            end_time=as_utc(request.end_time),
            hash_password=get_password_hash(request.password) if request.password else None,
            snapshot_questions=snapshot,
        )

        logger.info(f"Quiz {quiz.id} created by {actor.user_id} with {len(snapshot)} questions")
        return self._build_quiz_detail_response(quiz, include_answers=True)

    # ============================================================
    # GET QUIZ
    # ============================================================

    async def get_quiz(self, quiz_id: UUID, actor: Actor) -> QuizDetailResponse:
        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")
        return self._build_quiz_detail_response(quiz, include_answers=actor.is_moderator)

    # ============================================================
    # LIST QUIZZES
    # ============================================================

    async def list_quizzes(
        self,
        actor: Actor,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[QuizResponse], int]:
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can list their quizzes", code="ROLE_NOT_ALLOWED")

        quizzes = await self.quiz_repo.get_by_creator(actor.user_id, skip, limit)
        total = await self.quiz_repo.count_by_creator(actor.user_id)
        return [self._build_quiz_response(q) for q in quizzes], total

    # ============================================================
    # PRIVATE HELPERS
    # ============================================================

    @staticmethod
    def _build_quiz_response(quiz: Quiz) -> QuizResponse:
        return QuizResponse(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            start_time=quiz.start_time,
            end_time=quiz.end_time,
            requires_password=bool(quiz.hash_password),
            question_count=quiz.question_count,
            total_points=quiz.total_points,
            created_by=quiz.created_by,
            created_at=quiz.created_at,
        )

    def _build_quiz_detail_response(
        self,
        quiz: Quiz,
        include_answers: bool,
    ) -> QuizDetailResponse:
        questions = []
        for q in quiz.snapshot_questions or []:
            base = {
                "id": str(q["id"]),
                "text": q.get("text", ""),
                "type": q.get("type", "mcq"),
                "options": q.get("options") or [],
                "points": question_points(q),
            }
            if include_answers:
                questions.append(QuestionWithAnswerResponse(
                    **base,
                    correct_options=q.get("correct_options") or [],
                    option_weights=q.get("option_weights"),
                    explanation=q.get("explanation"),
                ))
            else:
                questions.append(QuestionResponse(**base))

        return QuizDetailResponse(
            **self._build_quiz_response(quiz).model_dump(),
            questions=questions,
        )
