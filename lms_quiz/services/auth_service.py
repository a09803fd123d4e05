from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.models import User
from lms_quiz.repositories.user_repo import UserRepository
from lms_quiz.schemas.auth import UserRegister, UserLogin, TokenResponse, UserResponse
from lms_quiz.core.exceptions import AuthenticationError, ConflictError
from lms_quiz.core.security import (
    verify_password,
    create_access_token,
    verify_access_token,
)

from lms_quiz.core.config import settings


class AuthService:
    """
    Service class for authentication operations.

    """
    def __init__(self, db: AsyncSession):
        """
        Initialize with database session.

        Args:
            db: AsyncSession instance
        """
        self.db = db
        self.user_repo = UserRepository(db)

    # ============================================================
    # User Registration
    # ============================================================
    async def register(self, user_data: UserRegister) -> TokenResponse:
        """
        Register a new user.

        Args:
            user_data: Validated registration data

        Returns:
            TokenResponse with access token and user info

        Raises:
            ConflictError: If email already exists
        """
        existing_user = await self.user_repo.get_by_email(user_data.email)

        if existing_user:
            raise ConflictError("A user with this email already exists", code="EMAIL_ALREADY_EXISTS")

        user = await self.user_repo.create_user(user_data)

        return self._create_token_response(user)

    # ============================================================
    # User Login
    # ============================================================
    async def login(self, login_data: UserLogin) -> TokenResponse:
        """
        Authenticate user and return a token.

        Raises:
            AuthenticationError: If credentials are invalid
        """
        user = await self.user_repo.get_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")

        if not user.is_active:
            raise AuthenticationError("This account has been deactivated", code="ACCOUNT_INACTIVE")

        return self._create_token_response(user)

    # ============================================================
    # Get Current User
    # ============================================================

    async def get_current_user(self, token: str) -> User:
        """
        Get user from access token.

        Raises:
            AuthenticationError: If token is invalid or the user is gone
        """
        subject = verify_access_token(token)

        if not subject:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN")

        try:
            user_id = UUID(subject)
        except ValueError:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN")

        user = await self.user_repo.get_by_id(user_id)

        if not user:
            raise AuthenticationError("User not found", code="INVALID_TOKEN")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated", code="ACCOUNT_INACTIVE")

        return user

    # ============================================================
    # Helper Methods
    # ============================================================

    def _create_token_response(self, user: User) -> TokenResponse:
        access_token = create_access_token(subject=str(user.id), role=user.role.value)

        return TokenResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        )
