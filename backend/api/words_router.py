"""API routes for managing a user's word list."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    BatchTextRequest,
    BatchWordsRequest,
    BatchWordsResponse,
    ImportantRequest,
    ImportResponse,
    MessageResponse,
    SectionsResponse,
    WordCreate,
    WordCreatedResponse,
    WordResponse,
    WordUpdate,
)
from backend.auth import current_user
from backend.config import utcnow
from backend.database import get_session
from backend.languages import language_labels, parse_batch_text
from backend.models.user import User
from backend.models.word import Word
from backend.srs.session import delete_word_history
from backend.utils import chunked
from backend.words_csv import CsvImportError, export_filename, export_words, parse_words_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/words", tags=["words"])

IMPORT_BATCH_SIZE = 100


async def _get_owned_word(db: AsyncSession, user: User, word_id: int) -> Word:
    stmt = select(Word).where(Word.id == word_id, Word.user_id == user.id)
    word = (await db.execute(stmt)).scalar_one_or_none()
    if word is None:
        raise HTTPException(status_code=404, detail="Word not found")
    return word


async def _add_batch(db: AsyncSession, user: User, words: list[WordCreate]) -> BatchWordsResponse:
    """Insert words, skipping any (section, main word) pair the user already has."""
    existing_stmt = select(Word.section, Word.main_word).where(Word.user_id == user.id)
    seen = {(section, main_word) for section, main_word in (await db.execute(existing_stmt)).all()}

    now = utcnow()
    to_insert: list[Word] = []
    for word in words:
        key = (word.section, word.main_word)
        if key in seen:
            continue
        seen.add(key)
        # Staggered timestamps keep the submitted order when sorting by created_at
        created = now + timedelta(milliseconds=100 * len(to_insert))
        to_insert.append(
            Word(user_id=user.id, **word.model_dump(), created_at=created, updated_at=created)
        )
    skipped = len(words) - len(to_insert)

    if not to_insert:
        return BatchWordsResponse(
            message="No new words added. All were duplicates.", added=0, skipped=skipped
        )

    db.add_all(to_insert)
    await db.commit()
    logger.info("User %d added %d words in batch (%d skipped)", user.id, len(to_insert), skipped)
    return BatchWordsResponse(
        message=f"Added {len(to_insert)} new words. Skipped {skipped} duplicate(s).",
        added=len(to_insert),
        skipped=skipped,
        words=[WordResponse.model_validate(word) for word in to_insert],
    )


@router.post("", response_model=WordCreatedResponse)
async def create_word(
    request: WordCreate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> WordCreatedResponse:
    """Add a single word; the main word must be new to the user's collection."""
    duplicate_stmt = select(Word.id).where(
        Word.user_id == user.id, Word.main_word == request.main_word
    )
    if (await db.execute(duplicate_stmt)).first() is not None:
        raise HTTPException(status_code=409, detail="This word already exists in your collection.")

    word = Word(user_id=user.id, **request.model_dump())
    db.add(word)
    await db.commit()
    await db.refresh(word)
    return WordCreatedResponse(
        **WordResponse.model_validate(word).model_dump(), message="Word added successfully"
    )


@router.get("", response_model=list[WordResponse])
async def list_words(
    section: str | None = None,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> list[Word]:
    stmt = select(Word).where(Word.user_id == user.id)
    if section:
        stmt = stmt.where(Word.section == section)
    stmt = stmt.order_by(Word.created_at.asc(), Word.id.asc())
    return list((await db.execute(stmt)).scalars().all())


@router.delete("", response_model=MessageResponse)
async def delete_all_words(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete every word the user owns, along with its learning history."""
    word_ids = list(
        (await db.execute(select(Word.id).where(Word.user_id == user.id))).scalars().all()
    )
    await delete_word_history(db, word_ids)
    await db.execute(delete(Word).where(Word.user_id == user.id))
    await db.commit()
    logger.info("Deleted %d words for user %d", len(word_ids), user.id)
    return MessageResponse(message="All words deleted successfully")


@router.get("/sections", response_model=SectionsResponse)
async def list_sections(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> SectionsResponse:
    """List the user's sections in the order they were first used."""
    stmt = (
        select(Word.section)
        .where(Word.user_id == user.id)
        .group_by(Word.section)
        .order_by(func.min(Word.created_at))
    )
    return SectionsResponse(sections=list((await db.execute(stmt)).scalars().all()))


@router.post("/batch", response_model=BatchWordsResponse)
async def add_words_batch(
    request: BatchWordsRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> BatchWordsResponse:
    return await _add_batch(db, user, request.words)


@router.post("/batch/text", response_model=BatchWordsResponse)
async def add_words_from_text(
    request: BatchTextRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> BatchWordsResponse:
    """Add words written one per line as ``main-translation1-translation2[-sentence]``."""
    labels = language_labels(user.main_language, user.translation_languages)
    parsed = parse_batch_text(request.text, request.section.strip(), labels)
    if parsed.errors:
        raise HTTPException(status_code=400, detail={"error": "Invalid input", "lines": parsed.errors})
    if not parsed.words:
        raise HTTPException(status_code=400, detail="No words found in text")
    if len(parsed.words) > 100:
        raise HTTPException(status_code=400, detail="Maximum 100 words allowed")

    words = [WordCreate.model_validate(entry) for entry in parsed.words]
    return await _add_batch(db, user, words)


@router.get("/export")
async def export_words_csv(
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Download all words as a CSV file."""
    stmt = select(Word).where(Word.user_id == user.id).order_by(Word.created_at.asc(), Word.id.asc())
    words = list((await db.execute(stmt)).scalars().all())
    filename = export_filename(utcnow().date())
    return Response(
        content=export_words(words),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_words_csv(
    file: UploadFile = File(...),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> ImportResponse:
    """Import words from a CSV upload, skipping main words already in the collection."""
    content = await file.read()
    try:
        parsed = parse_words_csv(content)
    except CsvImportError as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc), "details": exc.details}) from exc

    existing = set(
        (await db.execute(select(Word.main_word).where(Word.user_id == user.id))).scalars().all()
    )
    rows = []
    for row in parsed.rows:
        if row["main_word"] in existing:
            continue
        existing.add(row["main_word"])
        rows.append(row)
    skipped = len(parsed.rows) - len(rows)

    for batch in chunked(rows, IMPORT_BATCH_SIZE, "imported words"):
        db.add_all(Word(user_id=user.id, **row) for row in batch)
        await db.flush()
    await db.commit()

    logger.info("User %d imported %d words from %s (%d skipped)", user.id, len(rows), file.filename, skipped)
    return ImportResponse(
        message=f"Imported {len(rows)} new words. Skipped {skipped} duplicate(s).",
        imported=len(rows),
        skipped=skipped,
    )


@router.get("/{word_id}", response_model=WordResponse)
async def get_word(
    word_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> Word:
    return await _get_owned_word(db, user, word_id)


@router.patch("/{word_id}", response_model=WordCreatedResponse)
async def update_word(
    word_id: int,
    request: WordUpdate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> WordCreatedResponse:
    word = await _get_owned_word(db, user, word_id)
    for key, value in request.model_dump(exclude_none=False).items():
        if key == "important" and value is None:
            continue
        setattr(word, key, value)
    await db.commit()
    await db.refresh(word)
    return WordCreatedResponse(
        **WordResponse.model_validate(word).model_dump(), message="Word updated successfully"
    )


@router.delete("/{word_id}", status_code=204)
async def delete_word(
    word_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    word = await _get_owned_word(db, user, word_id)
    await delete_word_history(db, [word.id])
    await db.delete(word)
    await db.commit()
    return Response(status_code=204)


@router.post("/{word_id}/important", response_model=WordResponse)
async def set_important(
    word_id: int,
    request: ImportantRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> Word:
    """Flag or unflag a word for important-word sessions."""
    word = await _get_owned_word(db, user, word_id)
    word.important = request.important
    await db.commit()
    await db.refresh(word)
    return word
