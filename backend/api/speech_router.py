"""API routes for translation and text-to-speech."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from backend.api.schemas import (
    SpeechRequest,
    SpeechResponse,
    TranslateRequest,
    TranslateResponse,
    VoicesResponse,
)
from backend.auth import current_user
from backend.config import settings
from backend.models.user import User
from backend.speech_client import SpeechClient, SpeechError, get_speech_client
from backend.translation_client import TranslationClient, TranslationError, get_translation_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["speech"])


@router.post("/translate", response_model=TranslateResponse)
async def translate(
    request: TranslateRequest,
    user: User = Depends(current_user),
    client: TranslationClient = Depends(get_translation_client),
) -> TranslateResponse:
    """Translate text into another language."""
    try:
        # deep-translator is synchronous (requests)
        translated = await run_in_threadpool(client.translate, request.text, request.to)
    except TranslationError as exc:
        raise HTTPException(status_code=502, detail="Translation failed") from exc
    return TranslateResponse(translated_text=translated)


@router.get("/tts", response_model=VoicesResponse)
async def list_voices(
    user: User = Depends(current_user),
    client: SpeechClient = Depends(get_speech_client),
) -> VoicesResponse:
    try:
        voices = await client.list_voices()
    except SpeechError as exc:
        raise HTTPException(status_code=502, detail="Failed to fetch voices") from exc
    return VoicesResponse(voices=voices)


@router.post("/tts", response_model=SpeechResponse)
async def synthesize(
    request: SpeechRequest,
    user: User = Depends(current_user),
    client: SpeechClient = Depends(get_speech_client),
) -> SpeechResponse:
    """Speak text aloud, returning base64-encoded MP3."""
    voice = request.voice or user.preferred_voice or settings.default_voice
    try:
        audio = await client.synthesize_base64(request.text, voice)
    except SpeechError as exc:
        raise HTTPException(status_code=502, detail="Failed to generate speech") from exc
    return SpeechResponse(audio=audio)
