"""Word-set selection for new learning sessions.

Each session type is a filter over the user's words (optionally limited to
some sections), returned in random order and capped at the requested size.
"""

import logging
from datetime import datetime
from enum import Enum

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.learning_progress import LearningProgress
from backend.models.word import Word

logger = logging.getLogger(__name__)


class SessionType(str, Enum):
    NEW = "new"
    REVIEW = "review"
    MISTAKES = "mistakes"
    IMPORTANT = "important"
    RANDOMIZED = "randomized"
    CUSTOM = "custom"


def _progress_for_user(user_id: int):
    return and_(LearningProgress.word_id == Word.id, LearningProgress.user_id == user_id)


def _filtered(
    stmt: Select,
    session_type: SessionType,
    user_id: int,
    now: datetime,
) -> Select:
    """Apply the session-type filter to a select over Word."""
    if session_type == SessionType.NEW:
        learned = select(LearningProgress.word_id).where(LearningProgress.user_id == user_id)
        return stmt.where(Word.id.not_in(learned))

    if session_type == SessionType.REVIEW:
        return stmt.join(LearningProgress, _progress_for_user(user_id)).where(
            LearningProgress.next_review_date <= now
        )

    if session_type == SessionType.MISTAKES:
        correct = LearningProgress.correct_attempts
        incorrect = LearningProgress.incorrect_attempts
        return stmt.join(LearningProgress, _progress_for_user(user_id)).where(
            LearningProgress.mastery_level < settings.mastered_level,
            or_(
                incorrect > correct,
                correct < settings.promotion_threshold * (correct + incorrect),
            ),
        )

    if session_type == SessionType.IMPORTANT:
        return stmt.where(Word.important.is_(True))

    # randomized / custom: every word in scope
    return stmt


async def select_session_words(
    db: AsyncSession,
    user_id: int,
    session_type: SessionType | str,
    sections: list[str] | None = None,
    word_count: int | None = None,
    now: datetime | None = None,
) -> list[Word]:
    """Select candidate words for a new session.

    Args:
        db: Database session.
        user_id: The user starting the session.
        session_type: One of the SessionType values.
        sections: Section labels to draw from; empty or None means all.
        word_count: Maximum words; None means no cap.
        now: Current time (defaults to utcnow).

    Returns:
        Words in random order, possibly empty.

    Raises:
        ValueError: If word_count is below 1.
    """
    session_type = SessionType(session_type)
    if word_count is not None and word_count < 1:
        raise ValueError("word_count must be at least 1")
    now = now or utcnow()

    stmt = select(Word).where(Word.user_id == user_id)
    if sections:
        stmt = stmt.where(Word.section.in_(sections))
    stmt = _filtered(stmt, session_type, user_id, now).order_by(func.random())
    if word_count is not None:
        stmt = stmt.limit(word_count)

    result = await db.execute(stmt)
    words = list(result.scalars().all())

    logger.info(
        "Selected %d %s words for user %d (sections=%s)",
        len(words),
        session_type.value,
        user_id,
        sections or "all",
    )
    return words
