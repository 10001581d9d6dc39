"""
LibreTranslate provider (open-source translation server).

Public LibreTranslate instances often lack a Sinhala model, so Sinhala
requests are sent with ``source="auto"``. A result that is empty or identical
to the input is rejected rather than passed through.
"""

from __future__ import annotations

import asyncio
from functools import partial

import requests

from smeprofile.translate.base import TranslationError, TranslationProvider

DEFAULT_LIBRE_URL = "https://libretranslate.pussthecat.org"


class LibreTranslateProvider(TranslationProvider):
    """LibreTranslate API provider."""

    def __init__(self, base_url: str = DEFAULT_LIBRE_URL, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "LibreTranslate"

    async def translate(self, text: str, source: str = "si", target: str = "en") -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._post, text, source, target))

    def _post(self, text: str, source: str, target: str) -> str:
        payload = {
            "q": text,
            "source": "auto" if source == "si" else source,
            "target": target,
            "format": "text",
        }
        try:
            response = requests.post(f"{self.base_url}/translate", json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"LibreTranslate request failed: {e}") from e

        if not response.ok:
            raise TranslationError(f"LibreTranslate API error: {response.status_code} {response.reason}")

        try:
            translated = response.json().get("translatedText")
        except (ValueError, AttributeError) as e:
            raise TranslationError(f"Unexpected LibreTranslate response: {e}") from e

        if not translated or translated == text:
            raise TranslationError("No translation returned or same as original")
        return translated
