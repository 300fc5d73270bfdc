"""Learning session lifecycle.

Starts sessions from a selected word set, records answers through the
review scheduler, and closes a session once every word in it is answered.
Each public operation commits at most once, so a failure part-way through
leaves the database as it was.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.languages import parse_direction
from backend.models.learning_progress import LearningProgress
from backend.models.learning_session import (
    SESSION_COMPLETED,
    SESSION_IN_PROGRESS,
    LearningSession,
    SessionWord,
)
from backend.models.word import Word
from backend.srs.scheduler import ProgressState, ProgressStatus, ReviewScheduler
from backend.srs.selector import SessionType, select_session_words

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """The session doesn't exist or belongs to another user."""


class WordNotInSessionError(Exception):
    """The word was not presented in the session."""


class AnswerAlreadyRecordedError(Exception):
    """The word has already been answered in this session."""


class NoWordsAvailableError(Exception):
    """No candidate words matched the requested session type and sections."""


@dataclass
class AnswerOutcome:
    """What changed after recording a single answer."""

    mastery_level: int
    next_review_date: datetime
    interval_days: int
    session_completed: bool


@dataclass
class SessionWordDetail:
    word: Word
    presentation_order: int
    is_correct: bool | None
    answered_at: datetime | None


def default_scheduler() -> ReviewScheduler:
    return ReviewScheduler(
        intervals=settings.review_intervals,
        promotion_threshold=settings.promotion_threshold,
    )


def progress_state(progress: LearningProgress | None) -> ProgressState:
    """Build the scheduler state for a (possibly missing) progress row."""
    if progress is None:
        return ProgressState()
    return ProgressState(
        mastery_level=progress.mastery_level,
        correct_attempts=progress.correct_attempts,
        incorrect_attempts=progress.incorrect_attempts,
        status=ProgressStatus.IN_PROGRESS,
    )


async def get_owned_session(
    db: AsyncSession,
    user_id: int,
    session_id: str,
) -> LearningSession:
    stmt = select(LearningSession).where(
        LearningSession.id == session_id,
        LearningSession.user_id == user_id,
    )
    learning_session = (await db.execute(stmt)).scalar_one_or_none()
    if learning_session is None:
        raise SessionNotFoundError(session_id)
    return learning_session


async def start_session(
    db: AsyncSession,
    user_id: int,
    session_type: SessionType | str,
    direction: str,
    sections: list[str] | None = None,
    word_count: int | None = None,
    now: datetime | None = None,
) -> tuple[LearningSession, list[Word]]:
    """Start a new learning session for a user.

    Args:
        db: Database session.
        user_id: The user starting the session.
        session_type: Which words to draw (new, review, mistakes, ...).
        direction: Learning direction recorded on the session.
        sections: Section labels to draw from; empty means all.
        word_count: Maximum number of words; None means no cap.
        now: Current time (defaults to utcnow).

    Returns:
        The created session and its words in presentation order.

    Raises:
        NoWordsAvailableError: If no words match.
        ValueError: If the session type or direction is unknown.
    """
    now = now or utcnow()
    session_type = SessionType(session_type)
    direction = parse_direction(direction).value
    sections = list(sections or [])

    words = await select_session_words(
        db, user_id, session_type, sections=sections, word_count=word_count, now=now
    )
    if not words:
        raise NoWordsAvailableError(f"No words available for a {session_type.value} session")

    learning_session = LearningSession(
        id=str(uuid.uuid4()),
        user_id=user_id,
        session_type=session_type.value,
        direction=direction,
        sections=sections,
        status=SESSION_IN_PROGRESS,
        total_words=len(words),
        correct_answers=0,
        incorrect_answers=0,
        started_at=now,
    )
    db.add(learning_session)
    db.add_all(
        SessionWord(
            session_id=learning_session.id,
            word_id=word.id,
            presentation_order=order,
            presented_at=now,
        )
        for order, word in enumerate(words, 1)
    )
    await db.commit()

    logger.info(
        "Started %s session %s for user %d: %d words",
        session_type.value,
        learning_session.id,
        user_id,
        len(words),
    )
    return learning_session, words


async def record_answer(
    db: AsyncSession,
    user_id: int,
    session_id: str,
    word_id: int,
    is_correct: bool,
    scheduler: ReviewScheduler | None = None,
    now: datetime | None = None,
) -> AnswerOutcome:
    """Record an answer for a word in a session.

    Updates the word's learning progress through the scheduler, marks the
    session word as answered, and completes the session when no unanswered
    words remain. Everything is committed together.

    Raises:
        SessionNotFoundError: Unknown session, or owned by another user.
        WordNotInSessionError: The word is not part of the session.
        AnswerAlreadyRecordedError: The word was already answered.
    """
    scheduler = scheduler or default_scheduler()
    now = now or utcnow()

    learning_session = await get_owned_session(db, user_id, session_id)

    session_word = (
        await db.execute(
            select(SessionWord).where(
                SessionWord.session_id == session_id,
                SessionWord.word_id == word_id,
            )
        )
    ).scalar_one_or_none()
    if session_word is None:
        raise WordNotInSessionError(word_id)
    if session_word.answered_at is not None:
        raise AnswerAlreadyRecordedError(word_id)

    progress = (
        await db.execute(
            select(LearningProgress).where(
                LearningProgress.user_id == user_id,
                LearningProgress.word_id == word_id,
            )
        )
    ).scalar_one_or_none()

    result = scheduler.review(progress_state(progress), is_correct, now=now)

    if progress is None:
        progress = LearningProgress(
            user_id=user_id,
            word_id=word_id,
            preferred_direction=learning_session.direction,
        )
        db.add(progress)
    progress.mastery_level = result.new_state.mastery_level
    progress.correct_attempts = result.new_state.correct_attempts
    progress.incorrect_attempts = result.new_state.incorrect_attempts
    progress.last_reviewed_at = now
    progress.next_review_date = result.next_review_date

    session_word.is_correct = is_correct
    session_word.answered_at = now
    await db.flush()

    completed = await _complete_if_answered(db, learning_session, now)
    await db.commit()

    return AnswerOutcome(
        mastery_level=result.new_state.mastery_level,
        next_review_date=result.next_review_date,
        interval_days=result.interval_days,
        session_completed=completed,
    )


async def _complete_if_answered(
    db: AsyncSession,
    learning_session: LearningSession,
    now: datetime,
) -> bool:
    """Mark the session completed if every word in it has been answered."""
    if learning_session.status == SESSION_COMPLETED:
        return True

    unanswered = (
        await db.execute(
            select(func.count(SessionWord.id)).where(
                SessionWord.session_id == learning_session.id,
                SessionWord.answered_at.is_(None),
            )
        )
    ).scalar() or 0
    if unanswered:
        return False

    correct = (
        await db.execute(
            select(func.count(SessionWord.id)).where(
                SessionWord.session_id == learning_session.id,
                SessionWord.is_correct.is_(True),
            )
        )
    ).scalar() or 0
    incorrect = (
        await db.execute(
            select(func.count(SessionWord.id)).where(
                SessionWord.session_id == learning_session.id,
                SessionWord.is_correct.is_(False),
            )
        )
    ).scalar() or 0

    learning_session.status = SESSION_COMPLETED
    learning_session.completed_at = now
    learning_session.correct_answers = correct
    learning_session.incorrect_answers = incorrect

    logger.info(
        "Completed session %s: %d correct, %d incorrect",
        learning_session.id,
        correct,
        incorrect,
    )
    return True


async def get_session_detail(
    db: AsyncSession,
    user_id: int,
    session_id: str,
) -> tuple[LearningSession, list[SessionWordDetail]]:
    """Return a session and its words in presentation order with answer state."""
    learning_session = await get_owned_session(db, user_id, session_id)

    stmt = (
        select(SessionWord, Word)
        .join(Word, Word.id == SessionWord.word_id)
        .where(SessionWord.session_id == session_id, Word.user_id == user_id)
        .order_by(SessionWord.presentation_order.asc())
    )
    rows = (await db.execute(stmt)).all()
    details = [
        SessionWordDetail(
            word=word,
            presentation_order=session_word.presentation_order,
            is_correct=session_word.is_correct,
            answered_at=session_word.answered_at,
        )
        for session_word, word in rows
    ]
    return learning_session, details


def session_accuracy(learning_session: LearningSession) -> float:
    answered = learning_session.correct_answers + learning_session.incorrect_answers
    if answered == 0:
        return 0.0
    return learning_session.correct_answers / answered


def session_duration(learning_session: LearningSession) -> int | None:
    """Seconds between start and completion, or None while in progress."""
    if learning_session.completed_at is None:
        return None
    return round((learning_session.completed_at - learning_session.started_at).total_seconds())


async def recent_sessions(
    db: AsyncSession,
    user_id: int,
    limit: int = 20,
) -> list[LearningSession]:
    """Return the user's most recently started sessions, newest first."""
    stmt = (
        select(LearningSession)
        .where(LearningSession.user_id == user_id)
        .order_by(LearningSession.started_at.desc())
        .limit(limit)
    )
    return list((await db.execute(stmt)).scalars().all())


async def reset_learning(db: AsyncSession, user_id: int) -> None:
    """Delete all of a user's sessions and learning progress."""
    user_sessions = select(LearningSession.id).where(LearningSession.user_id == user_id)
    await db.execute(delete(SessionWord).where(SessionWord.session_id.in_(user_sessions)))
    await db.execute(delete(LearningSession).where(LearningSession.user_id == user_id))
    await db.execute(delete(LearningProgress).where(LearningProgress.user_id == user_id))
    await db.commit()
    logger.info("Reset learning history for user %d", user_id)


async def delete_word_history(db: AsyncSession, word_ids: list[int]) -> None:
    """Delete progress and session rows that reference the given words.

    Does not commit; callers delete the words themselves in the same transaction.
    """
    if not word_ids:
        return
    await db.execute(delete(SessionWord).where(SessionWord.word_id.in_(word_ids)))
    await db.execute(delete(LearningProgress).where(LearningProgress.word_id.in_(word_ids)))
