"""
Quiz Attempt Repository

Data access layer for QuizAttempt and QuizAnswer models.

Status changes go through ``transition``: a conditional UPDATE that only
matches while the row is still in one of the expected statuses. The caller
owns the transaction and decides when to commit.
"""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms_quiz.repositories.base import BaseRepository
from lms_quiz.models.quiz_attempt import QuizAttempt, AttemptStatus
from lms_quiz.models.quiz_answer import QuizAnswer
from lms_quiz.models.user import User


class QuizAttemptRepository(BaseRepository[QuizAttempt]):
    """Repository for QuizAttempt model."""

    def __init__(self, db: AsyncSession):
        super().__init__(QuizAttempt, db)

    async def get_with_answers(self, attempt_id: UUID) -> Optional[QuizAttempt]:
        stmt = (
            select(self.model)
            .options(selectinload(self.model.answers))
            .where(self.model.id == attempt_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_active(self, quiz_id: UUID, user_id: UUID) -> Optional[QuizAttempt]:
        """Latest attempt of the user on the quiz that is not soft-deleted."""
        stmt = (
            select(self.model)
            .where(
                self.model.quiz_id == quiz_id,
                self.model.user_id == user_id,
                self.model.status != AttemptStatus.DELETED,
            )
            .order_by(self.model.started_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_quiz(
        self,
        quiz_id: UUID,
        status: Optional[AttemptStatus] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[QuizAttempt]:
        stmt = select(self.model).where(self.model.quiz_id == quiz_id)
        if status is not None:
            stmt = stmt.where(self.model.status == status)
        stmt = (
            stmt.order_by(self.model.started_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_quiz(
        self,
        quiz_id: UUID,
        status: Optional[AttemptStatus] = None
    ) -> int:
        stmt = (
            select(func.count(self.model.id))
            .where(self.model.quiz_id == quiz_id)
        )
        if status is not None:
            stmt = stmt.where(self.model.status == status)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def transition(
        self,
        attempt_id: UUID,
        expected: Iterable[AttemptStatus],
        **values: Any
    ) -> bool:
        """
        Apply ``values`` only if the attempt is still in an expected status.

        Returns:
            True when the row matched and was updated
        """
        stmt = (
            update(self.model)
            .where(
                self.model.id == attempt_id,
                self.model.status.in_(list(expected)),
            )
            .values(updated_at=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def get_submitted_with_users(self, quiz_id: UUID) -> List[Tuple[QuizAttempt, User]]:
        """Submitted attempts of a quiz paired with their students."""
        stmt = (
            select(self.model, User)
            .join(User, User.id == self.model.user_id)
            .where(
                self.model.quiz_id == quiz_id,
                self.model.status == AttemptStatus.SUBMITTED,
            )
        )
        result = await self.db.execute(stmt)
        return [(attempt, user) for attempt, user in result.all()]

    async def get_answers(self, attempt_id: UUID) -> List[QuizAnswer]:
        stmt = (
            select(QuizAnswer)
            .where(QuizAnswer.attempt_id == attempt_id)
            .order_by(QuizAnswer.position, QuizAnswer.question_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def upsert_answers(self, attempt_id: UUID, rows: List[Dict[str, Any]]) -> None:
        """
        Insert or replace answers keyed by (attempt_id, question_id).

        Each row holds question_id, position, answer, text, options,
        correct and points_earned.
        """
        if not rows:
            return

        values = [
            {"id": uuid.uuid4(), "attempt_id": attempt_id, **row}
            for row in rows
        ]
        stmt = self._insert()(QuizAnswer).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["attempt_id", "question_id"],
            set_={
                "position": stmt.excluded.position,
                "answer": stmt.excluded.answer,
                "text": stmt.excluded.text,
                "options": stmt.excluded.options,
                "correct": stmt.excluded.correct,
                "points_earned": stmt.excluded.points_earned,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)

    async def annotate_answer(
        self,
        attempt_id: UUID,
        question_id: str,
        correct: bool,
        points_earned: float
    ) -> None:
        stmt = (
            update(QuizAnswer)
            .where(
                QuizAnswer.attempt_id == attempt_id,
                QuizAnswer.question_id == question_id,
            )
            .values(correct=correct, points_earned=points_earned, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

    def _insert(self):
        """Dialect-specific INSERT supporting ON CONFLICT."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Answer upsert is not supported on {dialect}")
