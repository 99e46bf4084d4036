"""HTTP transport for the registry API with timeouts and failure mapping."""

import logging
import threading
from typing import Any

import httpx

from crpt_api.errors import TransportError

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Async HTTP client used to reach the registry.

    Wraps a lazily created httpx.AsyncClient. Each call sends exactly one
    request: there is no retry or backoff. Any failure before a response
    status is obtained (connection refused, timeout, protocol error) is
    raised as TransportError; responses of every status are returned to
    the caller for classification.
    """

    DEFAULT_TIMEOUT = httpx.Timeout(
        connect=10.0,
        read=30.0,
        write=10.0,
        pool=10.0,
    )

    def __init__(
        self,
        base_url: str | None = None,
        timeout: httpx.Timeout | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            base_url: Optional base URL for all requests
            timeout: Request timeout configuration
            headers: Default headers for all requests
            transport: Custom httpx transport (e.g. httpx.MockTransport)
        """
        self._base_url = base_url
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._default_headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url or "",
                timeout=self._timeout,
                headers=self._default_headers,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a single HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL, relative to the base URL
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response of any status

        Raises:
            TransportError: When no response was obtained
        """
        client = await self._get_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout on {method} {url}: {e}")
            raise TransportError(f"Timeout: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"Request failed on {method} {url}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


class SyncHttpClient:
    """
    Synchronous twin of HttpClient.

    Useful for thread-based callers that cannot run an event loop.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: httpx.Timeout | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the sync HTTP client."""
        self._base_url = base_url
        self._timeout = timeout or HttpClient.DEFAULT_TIMEOUT
        self._default_headers = headers or {}
        self._transport = transport
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the sync HTTP client, once across threads."""
        with self._lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(
                    base_url=self._base_url or "",
                    timeout=self._timeout,
                    headers=self._default_headers,
                    transport=self._transport,
                    follow_redirects=True,
                )
            return self._client

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a single HTTP request, raising TransportError on failure."""
        client = self._get_client()
        try:
            return client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout on {method} {url}: {e}")
            raise TransportError(f"Timeout: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"Request failed on {method} {url}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        """Close the HTTP client."""
        with self._lock:
            if self._client is not None and not self._client.is_closed:
                self._client.close()
                self._client = None

    def __enter__(self) -> "SyncHttpClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
