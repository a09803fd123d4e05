"""
Quiz Attempt Schemas

Pydantic models for the attempt lifecycle: enroll, save, auto-save,
submit, moderation and teacher grading.

Request fields also accept the camelCase names used by the web client
(``quizId``, ``hashPassword``, ``questionId``).
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

from lms_quiz.models.quiz_attempt import AttemptStatus


# ============================================================
# Request Schemas
# ============================================================

class EnrollRequest(BaseModel):
    """Request to start an attempt on a quiz."""
    quiz_id: UUID = Field(..., validation_alias=AliasChoices("quiz_id", "quizId"))
    hash_password: Optional[str] = Field(
        None,
        max_length=100,
        validation_alias=AliasChoices("hash_password", "hashPassword", "password"),
        description="Quiz access password, when the quiz has one"
    )


class AnswerInput(BaseModel):
    """An answer for one question."""
    question_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("question_id", "questionId"),
    )
    answer: List[int] = Field(
        default_factory=list,
        description="0/1 flag per option, aligned with the question options"
    )
    text: Optional[str] = None
    options: Optional[List[str]] = None
    # Advisory only; recomputed on submission
    correct: Optional[bool] = None
    points_earned: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("points_earned", "pointsEarned"),
    )

    @field_validator("answer")
    @classmethod
    def validate_flags(cls, v: List[int]) -> List[int]:
        if any(flag not in (0, 1) for flag in v):
            raise ValueError("answer must contain only 0 or 1")
        return v


class SaveAnswersRequest(BaseModel):
    """Bulk save: each answer replaces the stored one for its question."""
    answers: List[AnswerInput] = Field(..., min_length=1)


class AutoSaveRequest(BaseModel):
    """Single-question upsert."""
    answer: AnswerInput


class ScoreUpdateRequest(BaseModel):
    """Manual score override by a teacher or admin."""
    score: float = Field(..., ge=0)


# ============================================================
# Response Schemas
# ============================================================

class AnswerResponse(BaseModel):
    question_id: str
    answer: List[int]
    text: Optional[str] = None
    options: Optional[List[str]] = None
    correct: Optional[bool] = None
    points_earned: Optional[float] = None

    class Config:
        from_attributes = True


class QuizAttemptResponse(BaseModel):
    """A quiz attempt with its stored answers."""
    id: UUID
    quiz_id: UUID
    user_id: UUID
    status: AttemptStatus
    answers: List[AnswerResponse]
    score: Optional[float] = None
    total_quiz_score: Optional[float] = None
    duration_seconds: Optional[int] = None
    started_at: datetime
    submitted_at: Optional[datetime] = None
    updated_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    graded_by: Optional[UUID] = None
    graded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AutoSaveResponse(BaseModel):
    """Attempt after an auto-save plus answering progress."""
    attempt: QuizAttemptResponse
    total: int
    answered_total: int


class SubmissionResponse(QuizAttemptResponse):
    """Submitted (or re-graded) attempt with its grade report."""
    total_questions: int
    score_percentage: float
    passed_questions: List[str]
    failed_questions: List[str]


class AttemptListResponse(BaseModel):
    """Paginated list of attempts for a quiz."""
    attempts: List[QuizAttemptResponse]
    total: int
