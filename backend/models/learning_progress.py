"""Per-user mastery state for a word."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.config import utcnow
from backend.models.base import Base


class LearningProgress(Base):
    """Scheduling state for a (user, word) pair, created on the first answer."""

    __tablename__ = "learning_progress"
    __table_args__ = (UniqueConstraint("user_id", "word_id", name="uq_progress_user_word"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("words.id"), nullable=False)
    mastery_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incorrect_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reviewed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    next_review_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    preferred_direction: Mapped[str] = mapped_column(
        String(20), nullable=False, default="main_to_trans1"
    )
