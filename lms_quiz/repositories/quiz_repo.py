"""
Quiz Repository

Data access layer for the Quiz model.
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from lms_quiz.repositories.base import BaseRepository
from lms_quiz.models.quiz import Quiz


class QuizRepository(BaseRepository[Quiz]):
    """Repository for Quiz model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Quiz, db)

    async def get_by_creator(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20
    ) -> List[Quiz]:
        stmt = (
            select(self.model)
            .where(self.model.created_by == user_id)
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_creator(self, user_id: UUID) -> int:
        stmt = (
            select(func.count(self.model.id))
            .where(self.model.created_by == user_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0
