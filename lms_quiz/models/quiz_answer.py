from sqlalchemy import Column, Float, Integer, Boolean, ForeignKey, String, Text, JSON, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .base import BaseModel


class QuizAnswer(BaseModel):
    """One stored answer of an attempt; unique per (attempt, question)."""

    __tablename__ = "quiz_attempt_answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_attempt_answer_question"),
    )

    attempt_id = Column(Uuid(as_uuid=True), ForeignKey("quiz_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    # Snapshot question id (string key inside Quiz.snapshot_questions)
    question_id = Column(String(64), nullable=False)
    # Index of the question in the snapshot; keeps answers in question order
    position = Column(Integer, nullable=False, default=0)

    # Selected options as 0/1 flags, positionally aligned with the question options
    answer = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    text = Column(Text, nullable=True)
    options = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # Advisory until submission, authoritative afterwards
    correct = Column(Boolean, nullable=True)
    points_earned = Column(Float, nullable=True)

    # Relationships
    attempt = relationship("QuizAttempt", back_populates="answers")
