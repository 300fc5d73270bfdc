"""API routes for learning statistics and dashboard data."""

import logging
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import and_, case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import LearningStatsResponse, SectionProgress, WordResponse
from backend.auth import current_user
from backend.config import settings, utcnow
from backend.database import get_session
from backend.models.learning_progress import LearningProgress
from backend.models.learning_session import SESSION_COMPLETED, LearningSession
from backend.models.user import User
from backend.models.word import Word

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/learn", tags=["stats"])


@router.get("/stats", response_model=LearningStatsResponse)
async def get_learning_stats(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> LearningStatsResponse:
    """Get overall learning statistics for the user."""
    now = utcnow()

    # Total words
    total_stmt = select(func.count(Word.id)).where(Word.user_id == user.id)
    total_words = (await db.execute(total_stmt)).scalar() or 0

    # Mastered words
    mastered_stmt = select(func.count(LearningProgress.id)).where(
        and_(
            LearningProgress.user_id == user.id,
            LearningProgress.mastery_level >= settings.mastered_level,
        )
    )
    mastered_words = (await db.execute(mastered_stmt)).scalar() or 0

    # Due words
    due_stmt = select(func.count(LearningProgress.id)).where(
        and_(LearningProgress.user_id == user.id, LearningProgress.next_review_date <= now)
    )
    due_words = (await db.execute(due_stmt)).scalar() or 0

    # Average accuracy over completed sessions that had answers
    answered = LearningSession.correct_answers + LearningSession.incorrect_answers
    accuracy_stmt = select(
        func.avg(LearningSession.correct_answers * 1.0 / func.nullif(answered, 0))
    ).where(
        and_(LearningSession.user_id == user.id, LearningSession.status == SESSION_COMPLETED)
    )
    average_accuracy = (await db.execute(accuracy_stmt)).scalar() or 0.0

    streak = await _calculate_streak(db, user.id, now)
    section_progress = await _section_progress(db, user.id)

    return LearningStatsResponse(
        total_words=total_words,
        mastered_words=mastered_words,
        due_words=due_words,
        learning_streak=streak,
        average_accuracy=round(float(average_accuracy), 3),
        section_progress=section_progress,
    )


@router.get("/due-words", response_model=list[WordResponse])
async def get_due_words(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> list[Word]:
    """List the user's words that are due for review."""
    stmt = (
        select(Word)
        .join(
            LearningProgress,
            and_(LearningProgress.word_id == Word.id, LearningProgress.user_id == user.id),
        )
        .where(Word.user_id == user.id, LearningProgress.next_review_date <= utcnow())
        .order_by(LearningProgress.next_review_date.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def _section_progress(db: AsyncSession, user_id: int) -> list[SectionProgress]:
    mastered = func.count(
        case((LearningProgress.mastery_level >= settings.mastered_level, 1))
    )
    stmt = (
        select(Word.section, func.count(Word.id), mastered)
        .outerjoin(
            LearningProgress,
            and_(LearningProgress.word_id == Word.id, LearningProgress.user_id == user_id),
        )
        .where(Word.user_id == user_id)
        .group_by(Word.section)
        .order_by(Word.section)
    )
    return [
        SectionProgress(
            section=section,
            total=total,
            mastered=mastered_count,
            mastery_percentage=mastered_count / total * 100 if total else 0.0,
        )
        for section, total, mastered_count in (await db.execute(stmt)).all()
    ]


async def _calculate_streak(
    db: AsyncSession,
    user_id: int,
    now: datetime,
) -> int:
    """Count consecutive days with a completed session, ending today or yesterday."""
    stmt = (
        select(distinct(func.date(LearningSession.completed_at)))
        .where(
            and_(
                LearningSession.user_id == user_id,
                LearningSession.status == SESSION_COMPLETED,
                LearningSession.completed_at.is_not(None),
            )
        )
        .order_by(func.date(LearningSession.completed_at).desc())
    )
    days = [_as_date(row[0]) for row in (await db.execute(stmt)).all()]
    if not days:
        return 0

    today = now.date()
    # A streak is still alive if the last session was yesterday
    expected = today if days[0] == today else today - timedelta(days=1)
    streak = 0
    for day in days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def _as_date(value: date | datetime | str) -> date:
    # SQLite returns DATE() results as ISO strings
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))
