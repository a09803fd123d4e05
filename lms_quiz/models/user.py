import enum

from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship
from .base import BaseModel


class UserRole(enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda x: [e.value for e in x]
        ),
        default=UserRole.STUDENT,
        nullable=False,
        index=True
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    quizzes = relationship("Quiz", back_populates="creator")
    quiz_attempts = relationship(
        "QuizAttempt",
        back_populates="user",
        foreign_keys="QuizAttempt.user_id",
    )
