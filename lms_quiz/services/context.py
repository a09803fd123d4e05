"""
Request actor.

The identity a service call runs on behalf of. Built by the API layer from
the authenticated user and the incoming request, then passed explicitly
into every service operation.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from lms_quiz.models.user import UserRole

MODERATOR_ROLES = frozenset({UserRole.TEACHER, UserRole.ADMIN})


@dataclass(frozen=True)
class Actor:
    user_id: UUID
    role: UserRole
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT
