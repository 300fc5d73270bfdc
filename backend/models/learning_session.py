"""Learning sessions and the words presented in them."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.config import utcnow
from backend.models.base import Base

SESSION_IN_PROGRESS = "in_progress"
SESSION_COMPLETED = "completed"


class LearningSession(Base):
    __tablename__ = "learning_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID4
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    session_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # new, review, mistakes, important, randomized, custom
    direction: Mapped[str] = mapped_column(String(20), nullable=False)
    sections: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SESSION_IN_PROGRESS)
    total_words: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incorrect_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    session_words: Mapped[list["SessionWord"]] = relationship(back_populates="session")


class SessionWord(Base):
    __tablename__ = "session_words"
    __table_args__ = (UniqueConstraint("session_id", "word_id", name="uq_session_word"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(ForeignKey("learning_sessions.id"), nullable=False)
    word_id: Mapped[int] = mapped_column(ForeignKey("words.id"), nullable=False)
    presentation_order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    presented_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    answered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    session: Mapped["LearningSession"] = relationship(back_populates="session_words")
