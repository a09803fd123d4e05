"""
Quiz Schemas

Pydantic models for quiz authoring, quiz display and quiz statistics.
"""

from datetime import datetime
from typing import Optional, List, Union
from uuid import UUID
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================
# Enums
# ============================================================

class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "mcq"
    MULTI_SELECT = "multi"
    TRUE_FALSE = "truefalse"


# ============================================================
# Request Schemas
# ============================================================

class SnapshotQuestionCreate(BaseModel):
    """A question frozen into the quiz at creation time."""
    id: Optional[str] = Field(
        None,
        min_length=1,
        max_length=64,
        description="Question id; generated when omitted"
    )
    text: str = Field(..., min_length=1)
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: List[str] = Field(..., min_length=2)
    correct_options: List[int] = Field(
        ...,
        description="0/1 flag per option, aligned with options"
    )
    points: Optional[float] = Field(None, gt=0)
    option_weights: Optional[List[float]] = Field(
        None,
        description="Partial credit per selected option"
    )
    explanation: Optional[str] = None

    @field_validator("correct_options")
    @classmethod
    def validate_flags(cls, v: List[int]) -> List[int]:
        if any(flag not in (0, 1) for flag in v):
            raise ValueError("correct_options must contain only 0 or 1")
        return v

    @model_validator(mode="after")
    def validate_correct_options(self):
        if len(self.correct_options) != len(self.options):
            raise ValueError("correct_options must have one flag per option")
        if self.option_weights is not None and len(self.option_weights) != len(self.options):
            raise ValueError("option_weights must have one weight per option")

        true_options = sum(self.correct_options)
        if self.type in (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTI_SELECT):
            if true_options < 1:
                raise ValueError(
                    f'Question "{self.text}" must have at least one correct option'
                )
        elif true_options != 1:
            raise ValueError(
                f'Question "{self.text}" must have exactly one correct option'
            )
        return self


class QuizCreateRequest(BaseModel):
    """Request to create a quiz."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    password: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="Access password students must provide to enroll"
    )
    snapshot_questions: List[SnapshotQuestionCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        ids = [q.id for q in self.snapshot_questions if q.id]
        if len(ids) != len(set(ids)):
            raise ValueError("Question ids must be unique")
        return self


# ============================================================
# Response Schemas
# ============================================================

class QuestionResponse(BaseModel):
    """A snapshot question shown to a student (no correct answer)."""
    id: str
    text: str
    type: QuestionType
    options: List[str]
    points: float


class QuestionWithAnswerResponse(QuestionResponse):
    """A snapshot question with its answer key (teachers and admins)."""
    correct_options: List[int]
    option_weights: Optional[List[float]] = None
    explanation: Optional[str] = None


class QuizResponse(BaseModel):
    """Quiz metadata response."""
    id: UUID
    title: str
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    requires_password: bool
    question_count: int
    total_points: float
    created_by: Optional[UUID] = None
    created_at: datetime


class QuizDetailResponse(QuizResponse):
    """Quiz with questions; answer keys only for moderators."""
    questions: List[Union[QuestionWithAnswerResponse, QuestionResponse]]


class QuizListResponse(BaseModel):
    """Paginated list of quizzes."""
    quizzes: List[QuizResponse]
    total: int


class RankEntry(BaseModel):
    rank: int
    user_id: UUID
    full_name: Optional[str] = None
    email: Optional[str] = None
    score: float
    duration_seconds: Optional[int] = None


class QuizStatisticsResponse(BaseModel):
    """Aggregates over submitted attempts (banned and deleted excluded)."""
    quiz_id: UUID
    submitted_count: int
    total_quiz_score: float
    average: Optional[float] = None
    median: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    standard_deviation: Optional[float] = None
    ranking: List[RankEntry]
