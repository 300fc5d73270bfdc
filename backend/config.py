from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Keeps datetimes naive so they stay compatible with SQLite
    (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "Recallio"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'recallio.db'}"
    secret_key: str = "change-me"
    session_expiry_days: int = 30
    bcrypt_rounds: int = 12
    review_intervals: list[int] = [1, 3, 7, 14, 30, 60]  # days, indexed by mastery level
    promotion_threshold: float = 0.7
    mastered_level: int = 3  # at or above: mastered; below: eligible for mistakes sessions
    default_session_words: int = 20
    default_voice: str = "de-DE-AmalaNeural"
    tts_rate: str = "-20%"
    tts_volume: str = "+20%"
    tts_pitch: str = "-10Hz"
    translation_max_retries: int = 3
    debug: bool = False

    model_config = {"env_prefix": "RECALLIO_", "env_file": ".env"}


settings = Settings()
