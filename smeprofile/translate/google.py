"""
Google Cloud Translation (v2 REST) provider.

Requires an API key. Any non-2xx response is treated as a failure.
"""

from __future__ import annotations

import asyncio
from functools import partial

import requests

from smeprofile.translate.base import TranslationError, TranslationProvider

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


class GoogleTranslateProvider(TranslationProvider):
    """Google Translate API provider.

    Usage:
        provider = GoogleTranslateProvider(api_key="...")
        text = await provider.translate("අපි ආහාර සේවය කරමු", "si", "en")
    """

    def __init__(self, api_key: str, timeout: float = 30.0, url: str = GOOGLE_TRANSLATE_URL):
        if not api_key:
            raise ValueError("Google Translate requires an API key")
        self.api_key = api_key
        self.timeout = timeout
        self.url = url

    @property
    def name(self) -> str:
        return "Google Translate"

    async def translate(self, text: str, source: str = "si", target: str = "en") -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._post, text, source, target))

    def _post(self, text: str, source: str, target: str) -> str:
        try:
            response = requests.post(
                self.url,
                params={"key": self.api_key},
                json={"q": text, "source": source, "target": target},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"Google Translate request failed: {e}") from e

        if not response.ok:
            raise TranslationError(f"Google Translate API error: {response.status_code} {response.reason}")

        try:
            return response.json()["data"]["translations"][0]["translatedText"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationError(f"Unexpected Google Translate response: {e}") from e
