"""
Quiz Statistics

Aggregates over a quiz's submitted attempts. Banned and deleted attempts
never count. The ranking orders students by score (highest first), then by
the time they took (fastest first).
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.core.exceptions import ForbiddenError, NotFoundError
from lms_quiz.models.quiz_attempt import QuizAttempt
from lms_quiz.models.user import User
from lms_quiz.repositories.attempt_repo import QuizAttemptRepository
from lms_quiz.repositories.quiz_repo import QuizRepository
from lms_quiz.schemas.quiz import QuizStatisticsResponse, RankEntry
from lms_quiz.services.context import Actor

logger = logging.getLogger(__name__)


# ============================================================
# Aggregate helpers
# ============================================================

def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def median(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """Population standard deviation around the mean."""
    average = mean(values)
    if average is None:
        return None
    return math.sqrt(sum((v - average) ** 2 for v in values) / len(values))


def rank_attempts(rows: Sequence[Tuple[QuizAttempt, User]]) -> List[RankEntry]:
    def sort_key(row):
        attempt, _ = row
        duration = attempt.duration_seconds
        return (
            -(attempt.score or 0),
            duration if duration is not None else math.inf,
        )

    ranking = []
    for position, (attempt, user) in enumerate(sorted(rows, key=sort_key), start=1):
        ranking.append(RankEntry(
            rank=position,
            user_id=attempt.user_id,
            full_name=user.full_name,
            email=user.email,
            score=attempt.score or 0,
            duration_seconds=attempt.duration_seconds,
        ))
    return ranking


# ============================================================
# Service
# ============================================================

class QuizStatisticsService:
    """Score statistics and ranking for teachers and admins."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.attempt_repo = QuizAttemptRepository(db)
        self.quiz_repo = QuizRepository(db)

    async def get_statistics(self, quiz_id: UUID, actor: Actor) -> QuizStatisticsResponse:
        if not actor.is_moderator:
            raise ForbiddenError("Only teachers and admins can view statistics", code="ROLE_NOT_ALLOWED")

        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", code="QUIZ_NOT_FOUND")

        rows = await self.attempt_repo.get_submitted_with_users(quiz_id)
        scores = [attempt.score or 0 for attempt, _ in rows]

        logger.debug(f"Computing statistics for quiz {quiz_id} over {len(scores)} submissions")

        return QuizStatisticsResponse(
            quiz_id=quiz.id,
            submitted_count=len(scores),
            total_quiz_score=quiz.total_points,
            average=mean(scores),
            median=median(scores),
            min=min(scores) if scores else None,
            max=max(scores) if scores else None,
            standard_deviation=standard_deviation(scores),
            ranking=rank_attempts(rows),
        )
