"""Pydantic schemas for API request/response models.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from backend.languages import Direction, check_language, normalize_direction
from backend.srs.selector import SessionType


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Auth ---


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(ApiModel):
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=100)


class LoginRequest(ApiModel):
    email: str
    password: str


class UserResponse(ApiModel):
    id: int
    email: str
    name: str | None
    main_language: str
    translation_languages: list[str]
    preferred_voice: str | None


class LoginResponse(ApiModel):
    token: str
    user: UserResponse


# --- Words ---


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class WordFields(ApiModel):
    main_word: str = Field(min_length=1, max_length=500)
    translation1: str | None = Field(default=None, max_length=500)
    translation2: str | None = Field(default=None, max_length=500)
    example_sentence: str | None = None
    notes: str | None = None
    section: str = Field(min_length=1, max_length=100)

    @field_validator("main_word", "section", mode="before")
    @classmethod
    def _strip_required(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("translation1", "translation2", "example_sentence", "notes")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _require_translation(self) -> "WordFields":
        if not (self.translation1 or self.translation2):
            raise ValueError("Either translation1 or translation2 must be provided")
        return self


class WordCreate(WordFields):
    pass


class WordUpdate(WordFields):
    important: StrictBool | None = None


class WordResponse(ApiModel):
    id: int
    main_word: str
    translation1: str | None
    translation2: str | None
    example_sentence: str | None
    notes: str | None
    section: str
    important: bool
    created_at: datetime
    updated_at: datetime


class WordCreatedResponse(WordResponse):
    message: str


class BatchWordsRequest(ApiModel):
    words: list[WordCreate] = Field(min_length=1, max_length=100)


class BatchTextRequest(ApiModel):
    text: str = Field(min_length=1)
    section: str = Field(min_length=1, max_length=100)


class BatchWordsResponse(ApiModel):
    message: str
    added: int
    skipped: int
    words: list[WordResponse] = []


class ImportantRequest(ApiModel):
    important: StrictBool


class SectionsResponse(ApiModel):
    sections: list[str]


class ImportResponse(ApiModel):
    message: str
    imported: int
    skipped: int


class MessageResponse(ApiModel):
    message: str


# --- Sessions ---


class SessionStartRequest(ApiModel):
    type: SessionType
    direction: Direction
    sections: list[str] = []
    word_count: int | Literal["all"] | None = None

    @field_validator("direction", mode="before")
    @classmethod
    def _legacy_direction(cls, value: object) -> object:
        return normalize_direction(value) if isinstance(value, str) else value

    @field_validator("word_count")
    @classmethod
    def _positive_count(cls, value: int | str | None) -> int | str | None:
        if isinstance(value, int) and value < 1:
            raise ValueError("wordCount must be at least 1")
        return value


class SessionWordResponse(ApiModel):
    id: int
    main_word: str
    translation1: str | None
    translation2: str | None
    example_sentence: str | None
    notes: str | None
    section: str
    important: bool


class SessionStartResponse(ApiModel):
    session_id: str
    words: list[SessionWordResponse]


class AnsweredWordResponse(SessionWordResponse):
    presentation_order: int
    is_correct: bool | None
    answered_at: datetime | None


class SessionResponse(ApiModel):
    id: str
    session_type: str
    direction: str
    sections: list[str]
    status: str
    total_words: int
    correct_answers: int
    incorrect_answers: int
    started_at: datetime
    completed_at: datetime | None


class SessionDetailResponse(ApiModel):
    session: SessionResponse
    words: list[AnsweredWordResponse]


class RecentSessionResponse(SessionResponse):
    accuracy: float
    duration: int | None


class AnswerRequest(ApiModel):
    """An answer for one word. ``isCorrect`` must be a JSON boolean."""

    word_id: int
    is_correct: StrictBool


class AnswerResponse(ApiModel):
    success: bool = True
    mastery_level: int
    next_review_date: datetime
    interval_days: int
    session_completed: bool


# --- Stats ---


class SectionProgress(ApiModel):
    section: str
    total: int
    mastered: int
    mastery_percentage: float


class LearningStatsResponse(ApiModel):
    total_words: int
    mastered_words: int
    due_words: int
    learning_streak: int
    average_accuracy: float
    section_progress: list[SectionProgress]


# --- User preferences ---


class LanguagePreferences(ApiModel):
    main_language: str = Field(min_length=1)
    translation_languages: list[str] = Field(min_length=1)

    @field_validator("main_language")
    @classmethod
    def _supported_main(cls, value: str) -> str:
        return check_language(value)

    @field_validator("translation_languages")
    @classmethod
    def _supported_translations(cls, value: list[str]) -> list[str]:
        return [check_language(lang) for lang in value]


class VoicePreference(ApiModel):
    preferred_voice: str | None = None


class VoicePreferenceUpdate(ApiModel):
    preferred_voice: str = Field(min_length=1)


class DirectionOption(ApiModel):
    value: str
    label: str


# --- Translation & speech ---


class TranslateRequest(ApiModel):
    text: str = Field(min_length=1)
    to: str = Field(min_length=1)


class TranslateResponse(ApiModel):
    translated_text: str


class SpeechRequest(ApiModel):
    text: str = Field(min_length=1)
    voice: str | None = None


class SpeechResponse(ApiModel):
    audio: str  # base64 MP3


class VoicesResponse(ApiModel):
    voices: list[dict]
