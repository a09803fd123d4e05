"""
User Repository

Data access layer for User model.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from lms_quiz.repositories.base import BaseRepository
from lms_quiz.models import User, UserRole
from lms_quiz.schemas.auth import UserRegister
from lms_quiz.core.security import get_password_hash


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    # =================
    # Create user
    # =================
    async def create_user(self, user_data: UserRegister) -> User:
        """Create a new user."""
        return await self.create(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            role=user_data.role,
            is_active=True,
        )
