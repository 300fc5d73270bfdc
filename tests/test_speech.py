"""Tests for the translation and text-to-speech endpoints with fake providers."""

import base64
from collections.abc import Iterator

import pytest
from httpx import AsyncClient

from backend.config import settings
from backend.main import app
from backend.speech_client import SpeechError, get_speech_client
from backend.translation_client import TranslationError, get_translation_client


class FakeTranslator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    def translate(self, text: str, target: str) -> str:
        self.calls.append((text, target))
        if self.fail:
            raise TranslationError("quota exceeded")
        return f"{text} ({target})"


class FakeSpeech:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.voices_used: list[str] = []

    async def list_voices(self) -> list[dict]:
        return [{"name": "de-DE-KatjaNeural", "locale": "de-DE", "gender": "Female", "friendlyName": "Katja"}]

    async def synthesize_base64(self, text: str, voice: str) -> str:
        if self.fail:
            raise SpeechError("connection reset")
        self.voices_used.append(voice)
        return base64.b64encode(b"ID3" + text.encode()).decode()


@pytest.fixture
def translator() -> Iterator[FakeTranslator]:
    fake = FakeTranslator()
    app.dependency_overrides[get_translation_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_translation_client, None)


@pytest.fixture
def speech() -> Iterator[FakeSpeech]:
    fake = FakeSpeech()
    app.dependency_overrides[get_speech_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_speech_client, None)


@pytest.mark.asyncio
async def test_translate(auth_client: AsyncClient, translator: FakeTranslator) -> None:
    response = await auth_client.post("/api/translate", json={"text": "Haus", "to": "en"})
    assert response.status_code == 200
    assert response.json() == {"translatedText": "Haus (en)"}
    assert translator.calls == [("Haus", "en")]


@pytest.mark.asyncio
async def test_translate_failure(auth_client: AsyncClient, translator: FakeTranslator) -> None:
    translator.fail = True
    response = await auth_client.post("/api/translate", json={"text": "Haus", "to": "en"})
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_translate_validation(auth_client: AsyncClient, translator: FakeTranslator) -> None:
    response = await auth_client.post("/api/translate", json={"text": "", "to": "en"})
    assert response.status_code == 400
    assert translator.calls == []


@pytest.mark.asyncio
async def test_translate_requires_login(client: AsyncClient, translator: FakeTranslator) -> None:
    response = await client.post("/api/translate", json={"text": "Haus", "to": "en"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_voices(auth_client: AsyncClient, speech: FakeSpeech) -> None:
    response = await auth_client.get("/api/tts")
    assert response.status_code == 200
    assert response.json()["voices"][0]["name"] == "de-DE-KatjaNeural"


@pytest.mark.asyncio
async def test_speech_voice_choice(auth_client: AsyncClient, speech: FakeSpeech) -> None:
    response = await auth_client.post("/api/tts", json={"text": "Haus"})
    assert response.status_code == 200
    assert base64.b64decode(response.json()["audio"]) == b"ID3Haus"

    await auth_client.put("/api/user/voice", json={"preferredVoice": "de-DE-ConradNeural"})
    await auth_client.post("/api/tts", json={"text": "Haus"})
    await auth_client.post("/api/tts", json={"text": "Haus", "voice": "de-AT-IngridNeural"})

    assert speech.voices_used == [settings.default_voice, "de-DE-ConradNeural", "de-AT-IngridNeural"]


@pytest.mark.asyncio
async def test_speech_failure(auth_client: AsyncClient, speech: FakeSpeech) -> None:
    speech.fail = True
    response = await auth_client.post("/api/tts", json={"text": "Haus"})
    assert response.status_code == 502
