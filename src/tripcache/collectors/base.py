"""
Abstract base class for provider collectors.

Defines session handling, status-code mapping and the cache-aware request
flow shared by every third-party adapter.
"""

import asyncio
from abc import ABC
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

import aiohttp
import structlog

from tripcache import __version__
from tripcache.core.exceptions import (
    AuthenticationError,
    NetworkError,
    ProviderNotFoundError,
    ProviderResponseError,
    RateLimitError,
    ValidationError,
)
from tripcache.core.models import ProviderEndpoint
from tripcache.core.validation import MAX_RESPONSE_SIZE, validate_response_size

if TYPE_CHECKING:
    from tripcache.cache.response import ResponseCache

logger = structlog.get_logger(logger_name=__name__)


class Collector(ABC):
    """Abstract base class for provider collectors.

    All collectors share session management, error mapping and the
    check-cache / call / populate sequence. Subclasses implement the
    provider-specific requests.
    """

    PROVIDER = "provider"

    # Maximum response size (10 MB) - can be overridden by subclasses
    MAX_RESPONSE_SIZE = MAX_RESPONSE_SIZE

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: int = 30,
        cache: Optional["ResponseCache"] = None,
    ):
        """Initialize the collector.

        Args:
            session: Optional aiohttp session. If not provided, one will
                     be created when needed.
            timeout: Request timeout in seconds.
            cache: Optional response cache consulted before live calls.
        """
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.cache = cache

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Collector":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _cached(
        self,
        endpoint: ProviderEndpoint,
        parameters: dict[str, Any],
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Serve from cache when possible, otherwise fetch and cache.

        Without a cache every call goes to the provider.
        """
        if self.cache is None:
            return await fetch()
        return await self.cache.get_or_fetch(endpoint, parameters, fetch)

    def _build_headers(self) -> dict[str, str]:
        """Build common request headers.

        Override in subclasses to add authentication or other headers.
        """
        return {
            "User-Agent": f"tripcache/{__version__}",
            "Accept": "application/json",
        }

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        resource: str = "",
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        """Perform a request and decode its JSON body.

        Args:
            method: HTTP method.
            url: Request URL.
            resource: Human-readable name of what was requested, for errors.
            headers: Request headers; defaults to ``_build_headers()``.
            **kwargs: Passed through to ``ClientSession.request``.

        Raises:
            ProviderError: Any subclass matching the failure.
        """
        try:
            async with self.session.request(
                method,
                url,
                headers=headers if headers is not None else self._build_headers(),
                **kwargs,
            ) as resp:
                try:
                    self._check_response_size(resp)
                except ValidationError as e:
                    raise ProviderResponseError(self.PROVIDER, str(e))
                await self._raise_for_status(resp, url, resource or url)
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise ProviderResponseError(self.PROVIDER, f"Body is not valid JSON: {e}")

        except asyncio.TimeoutError:
            logger.warning("provider_request_timeout", provider=self.PROVIDER, url=url)
            raise NetworkError(
                url,
                details=f"Timed out after {self.timeout.total}s",
                provider=self.PROVIDER,
            )
        except aiohttp.ClientError as e:
            logger.warning("provider_request_failed", provider=self.PROVIDER, url=url, error=str(e))
            raise NetworkError(url, details=str(e), provider=self.PROVIDER)

    async def _raise_for_status(
        self,
        resp: aiohttp.ClientResponse,
        url: str,
        resource: str,
    ) -> None:
        """Map a non-success status onto the exception hierarchy."""
        if 200 <= resp.status < 300:
            return

        if resp.status == 404:
            raise ProviderNotFoundError(self.PROVIDER, resource)
        if resp.status == 429:
            retry_after = resp.headers.get("Retry-After")
            raise RateLimitError(
                self.PROVIDER,
                int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        body = await resp.text()
        if resp.status in (401, 403):
            raise AuthenticationError(self.PROVIDER, body[:200] or None)
        raise NetworkError(url, resp.status, body[:200] or None, provider=self.PROVIDER)

    def _check_response_size(self, response: aiohttp.ClientResponse) -> None:
        """Check if response size is within acceptable limits.

        Args:
            response: The aiohttp response object.

        Raises:
            ValidationError: If the response is too large.
        """
        content_length = response.headers.get("Content-Length")
        if content_length is not None and content_length.isdigit():
            validate_response_size(int(content_length), self.MAX_RESPONSE_SIZE)
