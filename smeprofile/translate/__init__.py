"""
Translation providers and the form translation service.
"""

from smeprofile.translate.base import (
    TranslationError,
    TranslationProvider,
    TranslationResult,
    create_provider,
)
from smeprofile.translate.dictionary import DictionaryProvider
from smeprofile.translate.service import TranslationService

__all__ = [
    "TranslationError",
    "TranslationProvider",
    "TranslationResult",
    "create_provider",
    "DictionaryProvider",
    "TranslationService",
]
