"""API routes for user language and voice preferences."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    DirectionOption,
    LanguagePreferences,
    VoicePreference,
    VoicePreferenceUpdate,
)
from backend.auth import current_user
from backend.database import get_session
from backend.languages import direction_options
from backend.models.user import User

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/languages", response_model=LanguagePreferences)
async def get_languages(user: User = Depends(current_user)) -> LanguagePreferences:
    return LanguagePreferences(
        main_language=user.main_language,
        translation_languages=user.translation_languages,
    )


@router.put("/languages", response_model=LanguagePreferences)
async def update_languages(
    request: LanguagePreferences,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> LanguagePreferences:
    user.main_language = request.main_language
    user.translation_languages = request.translation_languages
    await db.commit()
    return LanguagePreferences(
        main_language=user.main_language,
        translation_languages=user.translation_languages,
    )


@router.get("/voice", response_model=VoicePreference)
async def get_voice(user: User = Depends(current_user)) -> VoicePreference:
    return VoicePreference(preferred_voice=user.preferred_voice)


@router.put("/voice", response_model=VoicePreference)
async def update_voice(
    request: VoicePreferenceUpdate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_session),
) -> VoicePreference:
    user.preferred_voice = request.preferred_voice
    await db.commit()
    return VoicePreference(preferred_voice=user.preferred_voice)


@router.get("/directions", response_model=list[DirectionOption])
async def get_directions(user: User = Depends(current_user)) -> list[dict[str, str]]:
    """Learning directions labelled with the user's languages."""
    return direction_options(user.main_language, user.translation_languages)
