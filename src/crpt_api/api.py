"""
Rate-limited document submission to the CRPT registry.

Each submission first asks the local limiter for a grant. A denied
request returns RATE_LIMITED without touching the network; a granted one
is POSTed to the registry and its response is classified into an outcome
or a typed failure.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from crpt_api.config import Settings, get_settings
from crpt_api.http.client import HttpClient, SyncHttpClient
from crpt_api.models import DocumentPayload
from crpt_api.outcome import SubmissionOutcome, classify_response
from crpt_api.quota.limiter import SlidingWindowLimiter, TimeUnit, WindowConfig

logger = logging.getLogger(__name__)

PRODUCTION_BASE_URL = "https://ismp.crpt.ru/"
CREATE_DOCUMENT_PATH = "api/v3/lk/documents/create"


def _default_headers(api_token: str | None) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if api_token:
        headers["Authorization"] = f"Bearer {api_token}"
    return headers


def _limiter(
    time_unit: TimeUnit | str,
    request_limit: int,
    clock: Callable[[], float] | None,
) -> SlidingWindowLimiter:
    config = WindowConfig.per(time_unit, request_limit)
    return SlidingWindowLimiter(config, clock=clock or time.monotonic)


def _log_denial(rate_limiter: SlidingWindowLimiter) -> None:
    retry_after = rate_limiter.retry_after()
    if retry_after is None:
        logger.warning(f"Rate limit hit ({rate_limiter.limit} per {rate_limiter.window_seconds}s)")
    else:
        logger.warning(
            f"Rate limit hit ({rate_limiter.limit} per {rate_limiter.window_seconds}s), "
            f"capacity frees in {retry_after:.3f}s"
        )


def _require_payload(payload: DocumentPayload | None) -> DocumentPayload:
    if payload is None:
        raise ValueError("payload is required")
    return payload


class CrptApi:
    """
    Async client for creating documents in the CRPT registry.

    Example:
        ```python
        api = CrptApi.create(TimeUnit.SECONDS, 5, api_token="...")
        async with api:
            outcome = await api.submit_document(DocumentPayload(doc_type="LP_INTRODUCE_GOODS"))
            if outcome.is_rate_limited:
                ...
        ```

    The limiter check is synchronous and never suspends; the only await
    is on the registry response, so concurrent callers never block each
    other's admission checks.
    """

    def __init__(
        self,
        http_client: HttpClient,
        rate_limiter: SlidingWindowLimiter,
    ) -> None:
        """
        Initialize the client.

        Args:
            http_client: Transport used to reach the registry
            rate_limiter: Limiter consulted before every request
        """
        self._http = http_client
        self._rate_limiter = rate_limiter

    @property
    def rate_limiter(self) -> SlidingWindowLimiter:
        return self._rate_limiter

    @classmethod
    def create(
        cls,
        time_unit: TimeUnit | str,
        request_limit: int,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        clock: Callable[[], float] | None = None,
        **http_kwargs: Any,
    ) -> CrptApi:
        """
        Build a client allowing ``request_limit`` requests per ``time_unit``.

        Args:
            time_unit: Window length
            request_limit: Maximum requests per window
            base_url: Registry base URL (production registry by default)
            api_token: Bearer token sent with each request
            clock: Time source for the limiter (monotonic by default)
            **http_kwargs: Extra HttpClient arguments (timeout, transport)
        """
        http_client = HttpClient(
            base_url=base_url or PRODUCTION_BASE_URL,
            headers=_default_headers(api_token),
            **http_kwargs,
        )
        return cls(http_client, _limiter(time_unit, request_limit, clock))

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **http_kwargs: Any) -> CrptApi:
        """Build a client from application settings."""
        settings = settings or get_settings()
        http_kwargs.setdefault("timeout", settings.http_timeout)
        http_client = HttpClient(
            base_url=settings.base_url,
            headers=_default_headers(settings.api_token),
            **http_kwargs,
        )
        return cls(http_client, SlidingWindowLimiter(settings.window))

    async def submit_document(self, payload: DocumentPayload) -> SubmissionOutcome:
        """
        Submit one document, honoring the rate limit.

        Args:
            payload: Document to create

        Returns:
            SUCCESS with the registry response, or RATE_LIMITED when the
            local quota is exhausted (no request is sent)

        Raises:
            ClientError: The registry rejected the request (4xx)
            ServerError: The registry failed (5xx)
            TransportError: No usable response was obtained
        """
        payload = _require_payload(payload)

        if not self._rate_limiter.try_acquire():
            _log_denial(self._rate_limiter)
            return SubmissionOutcome.rate_limited()

        response = await self._http.post(CREATE_DOCUMENT_PATH, json=payload.to_json())
        outcome = classify_response(response)
        logger.info(f"Document created (id={outcome.response.id})")
        return outcome

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._http.close()

    async def __aenter__(self) -> CrptApi:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


class SyncCrptApi:
    """Blocking version of CrptApi for thread-based callers."""

    def __init__(
        self,
        http_client: SyncHttpClient,
        rate_limiter: SlidingWindowLimiter,
    ) -> None:
        self._http = http_client
        self._rate_limiter = rate_limiter

    @property
    def rate_limiter(self) -> SlidingWindowLimiter:
        return self._rate_limiter

    @classmethod
    def create(
        cls,
        time_unit: TimeUnit | str,
        request_limit: int,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        clock: Callable[[], float] | None = None,
        **http_kwargs: Any,
    ) -> SyncCrptApi:
        http_client = SyncHttpClient(
            base_url=base_url or PRODUCTION_BASE_URL,
            headers=_default_headers(api_token),
            **http_kwargs,
        )
        return cls(http_client, _limiter(time_unit, request_limit, clock))

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **http_kwargs: Any) -> SyncCrptApi:
        settings = settings or get_settings()
        http_kwargs.setdefault("timeout", settings.http_timeout)
        http_client = SyncHttpClient(
            base_url=settings.base_url,
            headers=_default_headers(settings.api_token),
            **http_kwargs,
        )
        return cls(http_client, SlidingWindowLimiter(settings.window))

    def submit_document(self, payload: DocumentPayload) -> SubmissionOutcome:
        """Submit one document, honoring the rate limit. See CrptApi.submit_document."""
        payload = _require_payload(payload)

        if not self._rate_limiter.try_acquire():
            _log_denial(self._rate_limiter)
            return SubmissionOutcome.rate_limited()

        response = self._http.post(CREATE_DOCUMENT_PATH, json=payload.to_json())
        outcome = classify_response(response)
        logger.info(f"Document created (id={outcome.response.id})")
        return outcome

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> SyncCrptApi:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
