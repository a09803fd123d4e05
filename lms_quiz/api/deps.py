from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from lms_quiz.db.database import get_db
from lms_quiz.models import User
from lms_quiz.core.exceptions import AuthenticationError
from lms_quiz.services.auth_service import AuthService
from lms_quiz.services.context import Actor

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI; missing tokens are reported as AuthenticationError
security = HTTPBearer(auto_error=False)

# =====================================================
# Get Current user
# =====================================================
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency that validates JWT token and returns current user.

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated", code="NOT_AUTHENTICATED")

    auth_service = AuthService(db)
    return await auth_service.get_current_user(credentials.credentials)


# =====================================================
# Get Actor
# =====================================================
async def get_actor(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> Actor:
    """
    Identity passed into the service layer: who is calling, with which
    role, from where.
    """
    return Actor(
        user_id=current_user.id,
        role=current_user.role,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
