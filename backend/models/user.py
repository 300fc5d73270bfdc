from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

DEFAULT_MAIN_LANGUAGE = "German"
DEFAULT_TRANSLATION_LANGUAGES = ["English", "Bangla"]


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    main_language: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_MAIN_LANGUAGE
    )
    translation_languages: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: list(DEFAULT_TRANSLATION_LANGUAGES)
    )
    preferred_voice: Mapped[str | None] = mapped_column(String(100), nullable=True)  # edge-tts short name

    words: Mapped[list["Word"]] = relationship(back_populates="user")  # type: ignore[name-defined] # noqa: F821
