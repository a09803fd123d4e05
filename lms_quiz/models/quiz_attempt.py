from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, String, Enum, Index, Uuid, text, func
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel
from .quiz_answer import QuizAnswer


class AttemptStatus(enum.Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    BANNED = "banned"
    DELETED = "deleted"


# Attempts that block a new enrollment for the same (quiz, user)
_HOLDING_STATUSES = "status IN ('in_progress', 'submitted')"


class QuizAttempt(BaseModel):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        Index(
            "uq_quiz_attempts_holding",
            "quiz_id",
            "user_id",
            unique=True,
            postgresql_where=text(_HOLDING_STATUSES),
            sqlite_where=text(_HOLDING_STATUSES),
        ),
        Index("ix_quiz_attempts_user_status", "user_id", "status"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Uuid(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(
        Enum(
            AttemptStatus,
            name="attempt_status",
            values_callable=lambda x: [e.value for e in x]
        ),
        default=AttemptStatus.IN_PROGRESS,
        nullable=False,
        index=True
    )

    # Results (filled on submission)
    score = Column(Float, nullable=True)
    total_quiz_score = Column(Float, nullable=True)
    duration_seconds = Column(Integer, nullable=True)

    # Timing
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    # Client context captured at enrollment
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)

    # Teacher grading
    graded_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="quiz_attempts", foreign_keys=[user_id])
    quiz = relationship("Quiz", back_populates="attempts")
    answers = relationship(
        "QuizAnswer",
        back_populates="attempt",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=[QuizAnswer.position, QuizAnswer.question_id],
    )
