"""Text-to-speech via Microsoft Edge's online voices (edge-tts)."""

import base64
import logging

import edge_tts

from backend.config import settings

logger = logging.getLogger(__name__)


class SpeechError(Exception):
    """Speech synthesis or voice listing failed."""


class SpeechClient:
    """Synthesizes MP3 audio, slowed down a little for learners."""

    def __init__(
        self,
        rate: str = settings.tts_rate,
        volume: str = settings.tts_volume,
        pitch: str = settings.tts_pitch,
    ) -> None:
        self.rate = rate
        self.volume = volume
        self.pitch = pitch

    async def list_voices(self) -> list[dict]:
        try:
            voices = await edge_tts.list_voices()
        except Exception as exc:
            logger.warning("Fetching TTS voices failed: %s", exc)
            raise SpeechError(str(exc)) from exc
        return [
            {
                "name": voice["ShortName"],
                "locale": voice["Locale"],
                "gender": voice.get("Gender"),
                "friendlyName": voice.get("FriendlyName"),
            }
            for voice in voices
        ]

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Return MP3 bytes for text spoken by the given voice."""
        communicate = edge_tts.Communicate(
            text, voice, rate=self.rate, volume=self.volume, pitch=self.pitch
        )
        audio = bytearray()
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio.extend(chunk["data"])
        except Exception as exc:
            logger.warning("Speech synthesis with %s failed: %s", voice, exc)
            raise SpeechError(str(exc)) from exc
        if not audio:
            raise SpeechError("No audio received")
        return bytes(audio)

    async def synthesize_base64(self, text: str, voice: str) -> str:
        return base64.b64encode(await self.synthesize(text, voice)).decode()


_speech_client: SpeechClient | None = None


def get_speech_client() -> SpeechClient:
    """Return the shared SpeechClient, creating it on first call."""
    global _speech_client
    if _speech_client is None:
        _speech_client = SpeechClient()
    return _speech_client
