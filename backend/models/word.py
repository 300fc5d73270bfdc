"""Vocabulary item owned by a single user."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class Word(Base, TimestampMixin):
    """A word in the user's main language with up to two translations."""

    __tablename__ = "words"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    main_word: Mapped[str] = mapped_column(String(500), nullable=False)
    translation1: Mapped[str | None] = mapped_column(String(500), nullable=True)
    translation2: Mapped[str | None] = mapped_column(String(500), nullable=True)
    example_sentence: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    section: Mapped[str] = mapped_column(String(100), nullable=False)  # chapter or topic label
    important: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped["User"] = relationship(back_populates="words")  # type: ignore[name-defined] # noqa: F821
