"""
Runtime settings for smeprofile.

Settings come from environment variables and are read once, when
:meth:`Settings.from_env` is called at process start. The resulting object is
passed explicitly to the factories that need it (translation provider,
backend client); nothing else in the package reads the environment.

Environment variables:
    GOOGLE_TRANSLATE_API_KEY: Enables the Google Translate provider
    USE_LIBRE_TRANSLATE: ``true``/``1``/``yes`` enables LibreTranslate
    LIBRE_TRANSLATE_URL: LibreTranslate base URL
    SMEPROFILE_BACKEND_URL: Forms backend base URL
    SMEPROFILE_STRATEGY_URL: Strategy-generation service base URL
    SMEPROFILE_TRENDS_URL: Trend service base URL
    SMEPROFILE_TIMEOUT: HTTP timeout in seconds
    SMEPROFILE_OFFLINE_DELAY: Simulated latency of the offline translator

Example:
    >>> settings = Settings.from_env({"USE_LIBRE_TRANSLATE": "true"})
    >>> settings.use_libre_translate
    True
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

APP_NAME = "smeprofile"

DEFAULT_BACKEND_URL = "http://localhost:8000"
DEFAULT_STRATEGY_URL = "http://localhost:8002"
DEFAULT_TRENDS_URL = "http://localhost:8001"
DEFAULT_TIMEOUT = 30.0
DEFAULT_OFFLINE_DELAY = 0.3

# Value shipped in the sample .env files; never a real key
PLACEHOLDER_API_KEY = "your_api_key_here"

_TRUTHY = {"1", "true", "yes", "on"}


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-3:]}"


def _float(raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Expected a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Environment-derived configuration, immutable after construction."""
    google_api_key: Optional[str] = None
    use_libre_translate: bool = False
    libre_translate_url: Optional[str] = None
    backend_url: str = DEFAULT_BACKEND_URL
    strategy_url: str = DEFAULT_STRATEGY_URL
    trends_url: str = DEFAULT_TRENDS_URL
    request_timeout: float = DEFAULT_TIMEOUT
    offline_delay: float = DEFAULT_OFFLINE_DELAY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        api_key = (env.get("GOOGLE_TRANSLATE_API_KEY") or "").strip() or None
        if api_key == PLACEHOLDER_API_KEY:
            api_key = None

        return cls(
            google_api_key=api_key,
            use_libre_translate=(env.get("USE_LIBRE_TRANSLATE") or "").strip().lower() in _TRUTHY,
            libre_translate_url=(env.get("LIBRE_TRANSLATE_URL") or "").strip() or None,
            backend_url=(env.get("SMEPROFILE_BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/"),
            strategy_url=(env.get("SMEPROFILE_STRATEGY_URL") or DEFAULT_STRATEGY_URL).rstrip("/"),
            trends_url=(env.get("SMEPROFILE_TRENDS_URL") or DEFAULT_TRENDS_URL).rstrip("/"),
            request_timeout=_float(env.get("SMEPROFILE_TIMEOUT"), DEFAULT_TIMEOUT),
            offline_delay=_float(env.get("SMEPROFILE_OFFLINE_DELAY"), DEFAULT_OFFLINE_DELAY),
        )

    @property
    def translation_backend(self) -> str:
        """Name of the provider :func:`create_provider` will pick."""
        if self.google_api_key:
            return "google"
        if self.use_libre_translate:
            return "libre"
        return "offline"

    def to_dict(self) -> dict:
        """Serialize for display, with the API key masked."""
        return {
            "translation_backend": self.translation_backend,
            "google_api_key": _mask(self.google_api_key) if self.google_api_key else None,
            "use_libre_translate": self.use_libre_translate,
            "libre_translate_url": self.libre_translate_url,
            "backend_url": self.backend_url,
            "strategy_url": self.strategy_url,
            "trends_url": self.trends_url,
            "request_timeout": self.request_timeout,
            "offline_delay": self.offline_delay,
        }
