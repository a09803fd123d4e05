"""
Quiz Attempt Service

Business logic for the attempt lifecycle:
- Enrollment (credential, time window and prior-attempt checks)
- Answer buffering (bulk save and single-question auto-save)
- Submission and grading
- Moderation (ban, soft delete) and teacher grading

Every status change is a conditional UPDATE on the expected status, so a
concurrent request that changed the attempt first makes this one fail
instead of overwriting it.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.core.config import settings
from lms_quiz.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from lms_quiz.core.security import verify_password
from lms_quiz.models.quiz import Quiz
from lms_quiz.models.quiz_attempt import AttemptStatus, QuizAttempt
from lms_quiz.repositories.attempt_repo import QuizAttemptRepository
from lms_quiz.repositories.quiz_repo import QuizRepository
from lms_quiz.schemas.quiz_attempt import AnswerInput
from lms_quiz.services.context import Actor
from lms_quiz.services.grading import GradeReport, grade, is_answered
from lms_quiz.utils.datetime_utils import as_utc, utcnow

logger = logging.getLogger(__name__)

_NOT_DELETED = (AttemptStatus.IN_PROGRESS, AttemptStatus.SUBMITTED, AttemptStatus.BANNED)


@dataclass
class AutoSaveResult:
    attempt: QuizAttempt
    total: int
    answered_total: int


@dataclass
class SubmissionResult:
    attempt: QuizAttempt
    report: GradeReport


class QuizAttemptService:
    """Service for taking, moderating and grading quiz attempts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.attempt_repo = QuizAttemptRepository(db)
        self.quiz_repo = QuizRepository(db)

    # ============================================================
    # ENROLL
    # ============================================================

    async def enroll(
        self,
        quiz_id: UUID,
        credential: Optional[str],
        actor: Actor,
    ) -> QuizAttempt:
        if not actor.is_student:
            raise ForbiddenError("Only students can enroll in quizzes", code="ROLE_NOT_ALLOWED")

        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")

        if quiz.hash_password and not verify_password(credential or "", quiz.hash_password):
            raise ForbiddenError("Invalid quiz password", code="INVALID_QUIZ_PASSWORD")

        existing = await self.attempt_repo.find_active(quiz.id, actor.user_id)
        if existing:
            self._reject_existing_attempt(existing)

        now = utcnow()
        self._check_enroll_window(quiz, now)

        try:
            attempt = await self.attempt_repo.create(
                quiz_id=quiz.id,
                user_id=actor.user_id,
                status=AttemptStatus.IN_PROGRESS,
                started_at=now,
                ip_address=actor.ip,
                user_agent=actor.user_agent,
            )
        except IntegrityError:
            # Lost a race against a concurrent enroll for the same pair
            await self.db.rollback()
            raise ConflictError(
                "You already have an attempt in progress for this quiz",
                code="ATTEMPT_ALREADY_ACTIVE",
            )

        logger.info(f"User {actor.user_id} enrolled in quiz {quiz.id} (attempt {attempt.id})")
        return await self.attempt_repo.get_with_answers(attempt.id)

    # ============================================================
    # SAVE / AUTO-SAVE
    # ============================================================

    async def save_answers(
        self,
        attempt_id: UUID,
        actor: Actor,
        answers: List[AnswerInput],
    ) -> QuizAttempt:
        attempt = await self._get_owned_attempt(attempt_id, actor)
        quiz = await self.quiz_repo.get_by_id(attempt.quiz_id)
        await self._write_answers(attempt, quiz, answers)
        return await self.attempt_repo.get_with_answers(attempt.id)

    async def auto_save_answer(
        self,
        attempt_id: UUID,
        actor: Actor,
        answer: AnswerInput,
    ) -> AutoSaveResult:
        attempt = await self._get_owned_attempt(attempt_id, actor)
        quiz = await self.quiz_repo.get_by_id(attempt.quiz_id)
        await self._write_answers(attempt, quiz, [answer])

        attempt = await self.attempt_repo.get_with_answers(attempt.id)
        return AutoSaveResult(
            attempt=attempt,
            total=quiz.question_count if quiz else 0,
            answered_total=sum(1 for a in attempt.answers if is_answered(a.answer, a.text)),
        )

    # ============================================================
    # SUBMIT
    # ============================================================

    async def submit(self, attempt_id: UUID, actor: Actor) -> SubmissionResult:
        attempt = await self._get_owned_attempt(attempt_id, actor)
        self._ensure_submittable(attempt)

        quiz = await self.quiz_repo.get_by_id(attempt.quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")

        now = utcnow()
        end_time = as_utc(quiz.end_time)
        if end_time and now > end_time + timedelta(seconds=settings.SUBMIT_GRACE_SECONDS):
            raise InvalidStateError("Time limit exceeded", code="TIME_LIMIT_EXCEEDED")

        duration = int((now - as_utc(attempt.started_at)).total_seconds())

        # Claim the transition first; answers are read after the row is ours
        claimed = await self.attempt_repo.transition(
            attempt.id,
            [AttemptStatus.IN_PROGRESS],
            status=AttemptStatus.SUBMITTED,
            submitted_at=now,
            duration_seconds=max(duration, 0),
        )
        if not claimed:
            await self.db.rollback()
            current = await self.attempt_repo.get_by_id(attempt.id)
            self._ensure_submittable(current)
            raise ConflictError("You have already submitted this quiz", code="ATTEMPT_ALREADY_SUBMITTED")

        try:
            report = await self._apply_grade(attempt.id, quiz)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Attempt {attempt.id} submitted: {report.score}/{report.total_quiz_score}"
        )
        attempt = await self.attempt_repo.get_with_answers(attempt.id)
        return SubmissionResult(attempt=attempt, report=report)

    # ============================================================
    # MODERATION
    # ============================================================

    async def ban(self, attempt_id: UUID, actor: Actor) -> QuizAttempt:
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can ban attempts", code="ROLE_NOT_ALLOWED")

        attempt = await self._get_attempt(attempt_id)
        if attempt.status == AttemptStatus.DELETED:
            raise InvalidStateError("Quiz attempt has been deleted", code="ATTEMPT_DELETED")

        if attempt.status != AttemptStatus.BANNED:
            banned = await self.attempt_repo.transition(
                attempt.id,
                [AttemptStatus.IN_PROGRESS, AttemptStatus.SUBMITTED],
                status=AttemptStatus.BANNED,
            )
            if not banned:
                await self.db.rollback()
                current = await self.attempt_repo.get_by_id(attempt.id)
                if current.status == AttemptStatus.DELETED:
                    raise InvalidStateError("Quiz attempt has been deleted", code="ATTEMPT_DELETED")
            else:
                await self.db.commit()
                logger.info(f"Attempt {attempt.id} banned by {actor.user_id}")

        return await self.attempt_repo.get_with_answers(attempt.id)

    async def delete(self, attempt_id: UUID, actor: Actor) -> None:
        attempt = await self._get_attempt(attempt_id)

        is_owner = attempt.user_id == actor.user_id
        if not (is_owner or actor.is_moderator):
            raise ForbiddenError("You cannot delete this quiz attempt", code="NOT_ATTEMPT_OWNER")
        if not actor.is_moderator and attempt.status == AttemptStatus.BANNED:
            raise ForbiddenError("You are banned from taking this quiz", code="ATTEMPT_BANNED")

        if attempt.status == AttemptStatus.DELETED:
            return

        expected = _NOT_DELETED if actor.is_moderator else (
            AttemptStatus.IN_PROGRESS, AttemptStatus.SUBMITTED
        )
        deleted = await self.attempt_repo.transition(
            attempt.id, expected, status=AttemptStatus.DELETED
        )
        if not deleted:
            await self.db.rollback()
            current = await self.attempt_repo.get_by_id(attempt.id)
            if current.status == AttemptStatus.BANNED:
                raise ForbiddenError("You are banned from taking this quiz", code="ATTEMPT_BANNED")
            return

        await self.db.commit()
        logger.info(f"Attempt {attempt.id} deleted by {actor.user_id}")

    # ============================================================
    # REVIEW & TEACHER GRADING
    # ============================================================

    async def get_attempt(self, attempt_id: UUID, actor: Actor) -> QuizAttempt:
        attempt = await self._get_attempt(attempt_id)
        if actor.is_moderator:
            return attempt
        if attempt.user_id != actor.user_id:
            raise ForbiddenError("You cannot view this quiz attempt", code="NOT_ATTEMPT_OWNER")
        if attempt.status == AttemptStatus.DELETED:
            raise NotFoundError("Quiz attempt not found", code="ATTEMPT_NOT_FOUND")
        return attempt

    async def list_attempts(
        self,
        quiz_id: UUID,
        actor: Actor,
        status: Optional[AttemptStatus] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[QuizAttempt], int]:
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can list attempts", code="ROLE_NOT_ALLOWED")

        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")

        attempts = await self.attempt_repo.get_by_quiz(quiz_id, status, skip, limit)
        total = await self.attempt_repo.count_by_quiz(quiz_id, status)
        return attempts, total

    async def regrade(self, attempt_id: UUID, actor: Actor) -> SubmissionResult:
        """Recompute a submitted attempt's score against the current snapshot."""
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can re-grade attempts", code="ROLE_NOT_ALLOWED")

        attempt = await self._get_attempt(attempt_id)
        self._ensure_submitted(attempt)

        quiz = await self.quiz_repo.get_by_id(attempt.quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")

        claimed = await self.attempt_repo.transition(
            attempt.id,
            [AttemptStatus.SUBMITTED],
            graded_by=actor.user_id,
            graded_at=utcnow(),
        )
        if not claimed:
            await self.db.rollback()
            self._ensure_submitted(await self.attempt_repo.get_by_id(attempt.id))

        try:
            report = await self._apply_grade(attempt.id, quiz)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Attempt {attempt.id} re-graded by {actor.user_id}: {report.score}")
        attempt = await self.attempt_repo.get_with_answers(attempt.id)
        return SubmissionResult(attempt=attempt, report=report)

    async def update_score(self, attempt_id: UUID, actor: Actor, score: float) -> QuizAttempt:
        """Manually override the score of a submitted attempt."""
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can update scores", code="ROLE_NOT_ALLOWED")

        attempt = await self._get_attempt(attempt_id)
        self._ensure_submitted(attempt)

        total = attempt.total_quiz_score or 0
        if score < 0 or score > total:
            raise InvalidStateError(
                f"Score must be between 0 and {total}",
                code="SCORE_OUT_OF_RANGE",
            )

        updated = await self.attempt_repo.transition(
            attempt.id,
            [AttemptStatus.SUBMITTED],
            score=score,
            graded_by=actor.user_id,
            graded_at=utcnow(),
        )
        if not updated:
            await self.db.rollback()
            self._ensure_submitted(await self.attempt_repo.get_by_id(attempt.id))

        await self.db.commit()
        logger.info(f"Attempt {attempt.id} score set to {score} by {actor.user_id}")
        return await self.attempt_repo.get_with_answers(attempt.id)

    # ============================================================
    # PRIVATE HELPERS
    # ============================================================

    async def _get_attempt(self, attempt_id: UUID) -> QuizAttempt:
        attempt = await self.attempt_repo.get_with_answers(attempt_id)
        if not attempt:
            raise NotFoundError("Quiz attempt not found", code="ATTEMPT_NOT_FOUND")
        return attempt

    async def _get_owned_attempt(self, attempt_id: UUID, actor: Actor) -> QuizAttempt:
        attempt = await self._get_attempt(attempt_id)
        if attempt.user_id != actor.user_id:
            raise ForbiddenError("This quiz attempt does not belong to you", code="NOT_ATTEMPT_OWNER")
        return attempt

    async def _write_answers(
        self,
        attempt: QuizAttempt,
        quiz: Optional[Quiz],
        answers: List[AnswerInput],
    ) -> None:
        if attempt.status != AttemptStatus.IN_PROGRESS:
            raise InvalidStateError("Quiz attempt is not in progress", code="ATTEMPT_NOT_IN_PROGRESS")

        positions = self._question_positions(quiz)

        # Later entries for the same question win
        rows: Dict[str, dict] = {}
        for item in answers:
            rows[item.question_id] = {
                "question_id": item.question_id,
                "position": positions.get(item.question_id, len(positions)),
                "answer": list(item.answer),
                "text": item.text,
                "options": item.options,
                "correct": item.correct,
                "points_earned": item.points_earned,
            }

        # Locks the attempt row until commit; fails once it left in_progress
        still_open = await self.attempt_repo.transition(
            attempt.id, [AttemptStatus.IN_PROGRESS]
        )
        if not still_open:
            await self.db.rollback()
            raise InvalidStateError("Quiz attempt is not in progress", code="ATTEMPT_NOT_IN_PROGRESS")

        try:
            await self.attempt_repo.upsert_answers(attempt.id, list(rows.values()))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _apply_grade(self, attempt_id: UUID, quiz: Quiz) -> GradeReport:
        """Grade stored answers, annotate them and store the totals (no commit)."""
        stored = await self.attempt_repo.get_answers(attempt_id)
        report = grade(
            quiz.snapshot_questions or [],
            {a.question_id: a.answer for a in stored},
        )

        results = report.by_question()
        for answer in stored:
            result = results.get(answer.question_id)
            await self.attempt_repo.annotate_answer(
                attempt_id,
                answer.question_id,
                correct=result.correct if result else False,
                points_earned=result.points_earned if result else 0.0,
            )

        await self.attempt_repo.transition(
            attempt_id,
            [AttemptStatus.SUBMITTED],
            score=report.score,
            total_quiz_score=report.total_quiz_score,
        )
        return report

    @staticmethod
    def _question_positions(quiz: Optional[Quiz]) -> Dict[str, int]:
        if not quiz:
            return {}
        return {
            str(q["id"]): index
            for index, q in enumerate(quiz.snapshot_questions or [])
        }

    @staticmethod
    def _reject_existing_attempt(existing: QuizAttempt) -> None:
        if existing.status == AttemptStatus.SUBMITTED:
            raise ConflictError("You have already completed this quiz", code="QUIZ_ALREADY_COMPLETED")
        if existing.status == AttemptStatus.BANNED:
            raise ForbiddenError("You are banned from taking this quiz", code="ATTEMPT_BANNED")
        raise ConflictError(
            "You already have an attempt in progress for this quiz",
            code="ATTEMPT_ALREADY_ACTIVE",
        )

    @staticmethod
    def _check_enroll_window(quiz: Quiz, now) -> None:
        start_time = as_utc(quiz.start_time)
        end_time = as_utc(quiz.end_time)

        if start_time and now < start_time:
            raise InvalidStateError("This quiz has not started yet", code="QUIZ_CLOSED")
        if end_time and now > end_time:
            raise InvalidStateError("This quiz has ended", code="QUIZ_CLOSED")

        late_window = settings.ENROLL_LATE_WINDOW_MINUTES
        if start_time and late_window and now > start_time + timedelta(minutes=late_window):
            raise InvalidStateError(
                f"You can only enroll within {late_window} minutes after the quiz starts",
                code="QUIZ_CLOSED",
            )

    @staticmethod
    def _ensure_submittable(attempt: QuizAttempt) -> None:
        if attempt.status == AttemptStatus.SUBMITTED:
            raise ConflictError("You have already submitted this quiz", code="ATTEMPT_ALREADY_SUBMITTED")
        if attempt.status != AttemptStatus.IN_PROGRESS:
            raise InvalidStateError("Quiz attempt is not in progress", code="ATTEMPT_NOT_IN_PROGRESS")

    @staticmethod
    def _ensure_submitted(attempt: QuizAttempt) -> None:
        if attempt.status != AttemptStatus.SUBMITTED:
            raise InvalidStateError("Only submitted attempts can be graded", code="ATTEMPT_NOT_SUBMITTED")
