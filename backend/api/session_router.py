"""API routes for learning sessions."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    AnsweredWordResponse,
    AnswerRequest,
    AnswerResponse,
    MessageResponse,
    RecentSessionResponse,
    SessionDetailResponse,
    SessionResponse,
    SessionStartRequest,
    SessionStartResponse,
    SessionWordResponse,
)
from backend.auth import current_user
from backend.config import settings
from backend.database import get_session
from backend.models.learning_session import LearningSession
from backend.models.user import User
from backend.srs.session import (
    AnswerAlreadyRecordedError,
    NoWordsAvailableError,
    SessionNotFoundError,
    WordNotInSessionError,
    get_session_detail,
    recent_sessions,
    record_answer,
    reset_learning,
    session_accuracy,
    session_duration,
    start_session,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/learn/sessions", tags=["sessions"])

RECENT_SESSIONS_LIMIT = 20
# The dashboard only shows the last few
DASHBOARD_SESSIONS_LIMIT = 5


def _with_summary(learning_session: LearningSession) -> RecentSessionResponse:
    return RecentSessionResponse(
        **SessionResponse.model_validate(learning_session).model_dump(),
        accuracy=session_accuracy(learning_session),
        duration=session_duration(learning_session),
    )


@router.post("", response_model=SessionStartResponse)
async def session_start(
    request: SessionStartRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> SessionStartResponse:
    """Start a new learning session."""
    if request.word_count == "all":
        word_count = None
    else:
        word_count = request.word_count or settings.default_session_words

    try:
        learning_session, words = await start_session(
            db,
            user.id,
            request.type,
            request.direction.value,
            sections=request.sections,
            word_count=word_count,
        )
    except NoWordsAvailableError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return SessionStartResponse(
        session_id=learning_session.id,
        words=[SessionWordResponse.model_validate(word) for word in words],
    )


@router.get("", response_model=list[RecentSessionResponse])
async def sessions_latest(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> list[RecentSessionResponse]:
    """List the last few sessions for the dashboard."""
    sessions = await recent_sessions(db, user.id, limit=DASHBOARD_SESSIONS_LIMIT)
    return [_with_summary(s) for s in sessions]


@router.get("/recent", response_model=list[RecentSessionResponse])
async def sessions_recent(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> list[RecentSessionResponse]:
    """List recent sessions with accuracy and duration."""
    sessions = await recent_sessions(db, user.id, limit=RECENT_SESSIONS_LIMIT)
    return [_with_summary(s) for s in sessions]


@router.delete("", response_model=MessageResponse)
async def sessions_delete_all(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete all sessions and learning progress for the user."""
    await reset_learning(db, user.id)
    return MessageResponse(message="All sessions deleted successfully")


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def session_detail(
    session_id: str,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> SessionDetailResponse:
    """Get a session with its words in presentation order."""
    try:
        learning_session, details = await get_session_detail(db, user.id, session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc

    return SessionDetailResponse(
        session=SessionResponse.model_validate(learning_session),
        words=[
            AnsweredWordResponse(
                **SessionWordResponse.model_validate(d.word).model_dump(),
                presentation_order=d.presentation_order,
                is_correct=d.is_correct,
                answered_at=d.answered_at,
            )
            for d in details
        ],
    )


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def session_answer(
    session_id: str,
    request: AnswerRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> AnswerResponse:
    """Record an answer for one word of the session."""
    try:
        outcome = await record_answer(db, user.id, session_id, request.word_id, request.is_correct)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
    except WordNotInSessionError as exc:
        raise HTTPException(status_code=404, detail="Word is not part of this session") from exc
    except AnswerAlreadyRecordedError as exc:
        raise HTTPException(status_code=409, detail="Word already answered in this session") from exc

    return AnswerResponse(
        mastery_level=outcome.mastery_level,
        next_review_date=outcome.next_review_date,
        interval_days=outcome.interval_days,
        session_completed=outcome.session_completed,
    )
