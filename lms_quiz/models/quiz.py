from sqlalchemy import Column, String, ForeignKey, Text, DateTime, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .base import BaseModel


class Quiz(BaseModel):
    __tablename__ = "quizzes"

    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Quiz info
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Availability window (NULL = open on that side)
    start_time = Column(DateTime(timezone=True), nullable=True, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)

    # bcrypt hash of the access password; NULL = no password
    hash_password = Column(String(255), nullable=True)

    # Questions captured at creation, used as the scoring reference:
    # [{"id", "text", "type", "options", "correct_options", "points",
    #   "option_weights", "explanation"}]
    snapshot_questions = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)

    # Relationships
    creator = relationship("User", back_populates="quizzes")
    attempts = relationship("QuizAttempt", back_populates="quiz")

    @property
    def question_count(self) -> int:
        return len(self.snapshot_questions or [])

    @property
    def total_points(self) -> float:
        return float(sum(q.get("points") or 1 for q in (self.snapshot_questions or [])))
