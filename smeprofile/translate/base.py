"""
Translation provider interface.

This module defines:
- TranslationProvider, the narrow async interface every backend implements
- TranslationResult, the record produced for each translated form field
- create_provider(), which picks a backend from :class:`Settings`

Design:
- Providers translate one string per call and raise TranslationError on any
  failure; they never hand back the untranslated input as if it were a
  translation.
- Fallback handling lives in :class:`~smeprofile.translate.service.TranslationService`,
  not in the providers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from smeprofile.config import Settings

logger = logging.getLogger(__name__)

FALLBACK_SUFFIX = "(Fallback)"


class TranslationError(Exception):
    """Raised by a provider when a translation could not be produced."""


@dataclass
class TranslationResult:
    """Result of translating one text fragment.

    Attributes:
        original_text: Source text
        translated_text: Translation (or fallback-marked text)
        provider: Name of the provider that produced it; ends with
            ``(Fallback)`` when the primary provider failed
    """
    original_text: str
    translated_text: str
    provider: str

    @property
    def used_fallback(self) -> bool:
        return self.provider.endswith(FALLBACK_SUFFIX)

    def to_dict(self) -> dict:
        return {
            "originalText": self.original_text,
            "translatedText": self.translated_text,
            "provider": self.provider,
        }


class TranslationProvider(ABC):
    """Abstract base class for translation backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. 'Google Translate')."""
        pass

    @abstractmethod
    async def translate(self, text: str, source: str = "si", target: str = "en") -> str:
        """Translate ``text`` from ``source`` to ``target``.

        Raises:
            TranslationError: On network, API or empty-result failures
        """
        pass


def create_provider(settings: Settings | None = None) -> TranslationProvider:
    """Create the translation provider selected by ``settings``.

    First match wins:
        1. Google API key present -> GoogleTranslateProvider
        2. LibreTranslate enabled -> LibreTranslateProvider
        3. otherwise -> DictionaryProvider (offline), with a warning
    """
    settings = settings or Settings.from_env()

    if settings.google_api_key:
        from smeprofile.translate.google import GoogleTranslateProvider
        logger.info("Using Google Translate API")
        return GoogleTranslateProvider(settings.google_api_key, timeout=settings.request_timeout)

    if settings.use_libre_translate:
        from smeprofile.translate.libre import LibreTranslateProvider
        kwargs = {"timeout": settings.request_timeout}
        if settings.libre_translate_url:
            kwargs["base_url"] = settings.libre_translate_url
        provider = LibreTranslateProvider(**kwargs)
        logger.info("Using LibreTranslate API at %s", provider.base_url)
        return provider

    from smeprofile.translate.dictionary import DictionaryProvider
    logger.warning(
        "No translation API configured, using the offline dictionary translator. "
        "Set GOOGLE_TRANSLATE_API_KEY or USE_LIBRE_TRANSLATE=true for real translation."
    )
    return DictionaryProvider(delay=settings.offline_delay)
