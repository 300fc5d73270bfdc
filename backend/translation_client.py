"""Google Translate client (via deep-translator) with retry logic."""

import logging

import requests
from deep_translator import GoogleTranslator
from deep_translator.exceptions import BaseError, RequestError, ServerException, TooManyRequests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from backend.config import settings

logger = logging.getLogger(__name__)

# Failures worth another attempt; anything else (bad language, empty text) is final
TRANSIENT_ERRORS = (requests.RequestException, RequestError, ServerException, TooManyRequests)


class TranslationError(Exception):
    """The translation provider failed or rejected the request."""


class TranslationClient:
    """Thin wrapper around the free Google Translate endpoint."""

    def __init__(self, source: str = "auto") -> None:
        self.source = source

    @retry(
        stop=stop_after_attempt(settings.translation_max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
    def _translate(self, text: str, target: str) -> str | None:
        return GoogleTranslator(source=self.source, target=target).translate(text)

    def translate(self, text: str, target: str) -> str:
        """Translate text into the target language (code like ``de`` or name like ``german``)."""
        try:
            translated = self._translate(text, target.strip().lower())
        except (BaseError, *TRANSIENT_ERRORS) as exc:
            logger.warning("Translation to %s failed: %s", target, exc)
            raise TranslationError(str(exc)) from exc
        if not translated:
            raise TranslationError("Empty translation")
        logger.debug("Translated %d chars to %s", len(text), target)
        return translated


# Lazy singleton, replaced through dependency overrides in tests.
_translation_client: TranslationClient | None = None


def get_translation_client() -> TranslationClient:
    """Return the shared TranslationClient, creating it on first call."""
    global _translation_client
    if _translation_client is None:
        _translation_client = TranslationClient()
    return _translation_client
