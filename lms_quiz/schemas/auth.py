from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from uuid import UUID
import re

from lms_quiz.models.user import UserRole


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class UserRegister(BaseModel):
    """Schema for user registration request"""

    email: EmailStr
    password: str = Field(
        min_length=8,
        max_length=100,
        description="Password must be 8-100 characters"
    )
    full_name: str = Field(
        min_length=2,
        max_length=100,
        description="Full name must be 2-100 characters"
    )
    role: UserRole = UserRole.STUDENT

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """
        Validate password meets strength requirements.

        Requirements:
        - At least 8 characters (already checked by min_length)
        - At least one uppercase letter
        - At least one lowercase letter
        - At least one digit
        """
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        """Admins are provisioned out of band"""
        if v == UserRole.ADMIN:
            raise ValueError("Cannot self-register as admin")
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Remove extra whitespace from name"""
        return " ".join(v.split())

    class Config:
        json_schema_extra = {
            "example": {
                "email": "student@university.edu",
                "password": "SecurePass123",
                "full_name": "Nguyen Van An",
                "role": "student"
            }
        }


class UserLogin(BaseModel):
    """Schema for user login request"""

    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "student@university.edu",
                "password": "SecurePass123"
            }
        }


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class UserResponse(BaseModel):
    """Public user info"""

    id: UUID
    email: EmailStr
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Access token plus the authenticated user"""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
