from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms_quiz.db.database import get_db
from lms_quiz.schemas.auth import (
    UserRegister,
    UserLogin,
    TokenResponse,
    UserResponse,
)
from lms_quiz.schemas.common import ApiResponse, ErrorResponse
from lms_quiz.services.auth_service import AuthService
from lms_quiz.api.deps import get_current_user
from lms_quiz.models.user import User

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Authentication"])


# ============================================================
# Registration Endpoint
# ============================================================

@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User created successfully"},
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Email already exists"},
    }
)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user account.

    Returns an access token and user info.
    """
    auth_service = AuthService(db)
    token = await auth_service.register(user_data)
    return ApiResponse(message="User registered", data=token)


# ============================================================
# Login Endpoint
# ============================================================
@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    responses={
        200: {"description": "Login successful"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    }
)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Authenticate user and get an access token.

    - **email**: Registered email address
    - **password**: Account password
    """
    auth_service = AuthService(db)
    token = await auth_service.login(login_data)
    return ApiResponse(message="Login successful", data=token)


# ============================================================
# Current User Endpoint
# ============================================================

@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    }
)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return ApiResponse(data=UserResponse.model_validate(current_user))
