"""
Translation service: batches form fields through a provider.

The service wraps one injected :class:`TranslationProvider`. When that
provider raises, the field is retried through a fresh offline dictionary
provider and the result's ``provider`` is tagged with ``(Fallback)``, so a
single failing field never aborts the rest of the form.

Usage:
    service = TranslationService.from_settings(settings)
    fields = get_text_fields_for_translation(record)
    translated, results = await service.translate_form_data(record, fields)
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

from smeprofile.config import Settings
from smeprofile.detect import TextField
from smeprofile.paths import set_path
from smeprofile.translate.base import (
    FALLBACK_SUFFIX,
    TranslationProvider,
    TranslationResult,
    create_provider,
)
from smeprofile.translate.dictionary import DictionaryProvider

BatchEntry = Union[str, Sequence[str], Mapping[str, str]]


class TranslationService:
    """Translate single texts, batches and whole form records.

    Args:
        provider: Primary translation provider
        fallback_factory: Builds the offline provider used when the primary
            fails; called once per failed field
        logger: Telemetry sink (defaults to this module's logger)
    """

    def __init__(
        self,
        provider: TranslationProvider,
        fallback_factory: Callable[[], TranslationProvider] = DictionaryProvider,
        logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.fallback_factory = fallback_factory
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings, logger: logging.Logger | None = None) -> TranslationService:
        """Build a service around :func:`create_provider`.

        The offline fallback uses the same ``offline_delay`` as the primary
        offline provider would.
        """
        offline_delay = settings.offline_delay
        return cls(
            create_provider(settings),
            fallback_factory=lambda: DictionaryProvider(delay=offline_delay),
            logger=logger,
        )

    async def translate_text(self, text: str, source: str = "si", target: str = "en") -> TranslationResult:
        """Translate one text, falling back to the offline dictionary on failure."""
        try:
            translated = await self.provider.translate(text, source, target)
            return TranslationResult(
                original_text=text,
                translated_text=translated,
                provider=self.provider.name,
            )
        except Exception as e:
            self.logger.warning(
                "Primary translation provider (%s) failed: %s; falling back to offline dictionary",
                self.provider.name, e,
            )

        fallback = self.fallback_factory()
        translated = await fallback.translate(text, source, target)
        return TranslationResult(
            original_text=text,
            translated_text=translated,
            provider=f"{self.provider.name} {FALLBACK_SUFFIX}",
        )

    async def translate_batch(
        self,
        entries: Iterable[BatchEntry],
        default_source: str = "si",
        default_target: str = "en",
    ) -> list[TranslationResult]:
        """Translate all entries concurrently; results align with the input.

        Each entry is a plain string, a ``(text, source, target)`` sequence,
        or a mapping with ``text`` and optional ``from``/``to`` keys.
        """
        jobs = [self._unpack(entry, default_source, default_target) for entry in entries]
        return list(await asyncio.gather(*(self.translate_text(*request) for request in jobs)))

    @staticmethod
    def _unpack(entry: BatchEntry, default_source: str, default_target: str) -> tuple[str, str, str]:
        if isinstance(entry, str):
            return entry, default_source, default_target
        if isinstance(entry, Mapping):
            return (
                entry["text"],
                entry.get("from") or entry.get("source") or default_source,
                entry.get("to") or entry.get("target") or default_target,
            )
        text, *langs = entry
        source = langs[0] if len(langs) > 0 else default_source
        target = langs[1] if len(langs) > 1 else default_target
        return text, source, target

    async def translate_form_data(
        self,
        form_data: Any,
        text_fields: Iterable[TextField],
    ) -> tuple[Any, list[TranslationResult]]:
        """Translate the Sinhala fields of ``form_data``.

        Returns:
            ``(translated_data, translations)``. With no Sinhala fields the
            original object is returned untouched and no provider is called;
            otherwise ``translated_data`` is a deep copy with each translation
            written back at its original path.
        """
        sinhala_fields = [field for field in text_fields if field.language == "si"]
        if not sinhala_fields:
            return form_data, []

        self.logger.info("Translating %d Sinhala field(s) with %s", len(sinhala_fields), self.provider.name)
        translations = await self.translate_batch(field.text for field in sinhala_fields)

        translated_data = copy.deepcopy(form_data)
        for field, translation in zip(sinhala_fields, translations):
            set_path(translated_data, field.path, translation.translated_text)
            self.logger.debug("%s: %r -> %r", field.path, translation.original_text, translation.translated_text)

        return translated_data, translations
