"""
HTTP client for the forms backend and its companion services.

Three services are addressed:
- the forms backend (health, submissions, stats)
- the strategy generator (``/strategy/generate``, ``/health``)
- the trend service (``/trends``)

Every method is a coroutine; the blocking ``requests`` call runs in the
default executor. Failures are never retried. A transport error or a
non-2xx status raises :class:`BackendError`, which carries the HTTP status
when there was one.

Usage:
    api = ApiService.from_settings(Settings.from_env())
    health = await api.test_connection()
    receipt = await api.submit_form(payload)
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Optional

import requests

from smeprofile.config import (
    DEFAULT_BACKEND_URL,
    DEFAULT_STRATEGY_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_TRENDS_URL,
    Settings,
)

logger = logging.getLogger(__name__)

FORMS_PREFIX = "/api/v1/forms"


class BackendError(Exception):
    """A backend call failed.

    Attributes:
        status_code: HTTP status, or None for transport failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiService:
    """Async wrapper around the backend REST endpoints.

    Args:
        base_url: Forms backend root
        strategy_url: Strategy generator root
        trends_url: Trend service root
        timeout: Per-request timeout in seconds
        session: Optional ``requests.Session`` (tests inject a mock)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        strategy_url: str = DEFAULT_STRATEGY_URL,
        trends_url: str = DEFAULT_TRENDS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.strategy_url = strategy_url.rstrip("/")
        self.trends_url = trends_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> ApiService:
        return cls(
            base_url=settings.backend_url,
            strategy_url=settings.strategy_url,
            trends_url=settings.trends_url,
            timeout=settings.request_timeout,
        )

    async def _request(self, method: str, url: str, failure: str, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._send, method, url, failure, **kwargs))

    def _send(self, method: str, url: str, failure: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise BackendError(f"{failure}: {e}") from e

        if not response.ok:
            detail = response.text or response.reason
            raise BackendError(f"{failure} ({response.status_code}): {detail}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{failure}: response is not JSON", response.status_code) from e

    # Forms backend

    async def test_connection(self) -> dict:
        """GET ``/health``; returns ``{"status": ..., "database": ...}``."""
        return await self._request("GET", f"{self.base_url}/health", "Health check failed")

    async def submit_form(self, payload: dict) -> Any:
        """POST a backend payload; returns the decoded receipt.

        The receipt is normally an object with ``id`` and ``status``, but any
        JSON body from a 2xx response is returned as is: the form was stored.
        """
        result = await self._request(
            "POST", f"{self.base_url}{FORMS_PREFIX}/submit", "Form submission failed", json=payload,
        )
        receipt = result if isinstance(result, dict) else {}
        logger.info("Form submitted: id=%s status=%s", receipt.get("id"), receipt.get("status"))
        return result

    async def get_submissions(self, page: int = 1, limit: int = 50) -> dict:
        return await self._request(
            "GET",
            f"{self.base_url}{FORMS_PREFIX}/submissions",
            "Failed to fetch submissions",
            params={"page": page, "limit": limit},
        )

    async def get_submission(self, submission_id: str) -> dict:
        try:
            return await self._request(
                "GET", f"{self.base_url}{FORMS_PREFIX}/submissions/{submission_id}", "Failed to fetch submission",
            )
        except BackendError as e:
            if e.status_code == 404:
                raise BackendError("Submission not found", 404) from e
            raise

    async def get_stats(self) -> dict:
        return await self._request("GET", f"{self.base_url}{FORMS_PREFIX}/stats", "Failed to fetch stats")

    async def update_submission_status(self, submission_id: str, status: str) -> dict:
        return await self._request(
            "PUT",
            f"{self.base_url}{FORMS_PREFIX}/submissions/{submission_id}/status",
            "Failed to update submission status",
            json={"status": status},
        )

    async def delete_submission(self, submission_id: str) -> dict:
        return await self._request(
            "DELETE", f"{self.base_url}{FORMS_PREFIX}/submissions/{submission_id}", "Failed to delete submission",
        )

    # Strategy generator and trend service

    async def generate_strategy(self, sme_profile: dict, trend_data: dict) -> dict:
        """POST ``/strategy/generate`` with the SME profile and trend signals."""
        return await self._request(
            "POST",
            f"{self.strategy_url}/strategy/generate",
            "Strategy generation failed",
            json={"sme_profile": sme_profile, "trend_data": trend_data},
        )

    async def get_trends(self) -> dict:
        return await self._request("GET", f"{self.trends_url}/trends", "Failed to fetch trends")

    async def test_strategy_generator(self) -> dict:
        return await self._request("GET", f"{self.strategy_url}/health", "Strategy Generator health check failed")
