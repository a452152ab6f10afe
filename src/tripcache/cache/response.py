"""
Cache access boundary used by provider collectors.

``ResponseCache`` wraps ``CacheStore`` with the policy every caller relies
on: a storage failure on read is a cache miss, a storage failure on write
is a dropped write, and neither ever interrupts the request that triggered
it. Only fingerprint derivation errors propagate, because they mean the
caller broke the parameter contract.
"""

from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from tripcache.cache.sqlite import CacheStore, utc_now
from tripcache.core.exceptions import CacheError, ValidationError
from tripcache.core.fingerprint import derive_fingerprint
from tripcache.core.models import CacheEntry, CacheResult, ProviderEndpoint
from tripcache.core.validation import validate_parameters, validate_ttl_seconds

logger = structlog.get_logger(logger_name=__name__)

Clock = Callable[[], datetime]
Endpoint = Union[str, ProviderEndpoint]
TTL = Union[int, float, timedelta]

DEFAULT_TTL = timedelta(days=7)


def _endpoint_label(endpoint: Endpoint) -> str:
    return endpoint.value if isinstance(endpoint, ProviderEndpoint) else endpoint


class ResponseCache:
    """Read/write access to cached provider responses with TTL enforcement."""

    def __init__(
        self,
        store: CacheStore,
        default_ttl: TTL = DEFAULT_TTL,
        clock: Clock = utc_now,
    ):
        """Initialize the access layer.

        Args:
            store: Backing store.
            default_ttl: Lifetime for entries written without an explicit TTL,
                as a timedelta or a number of seconds.
            clock: Returns the current aware datetime; injectable for tests.
        """
        self.store = store
        self.default_ttl = self._as_timedelta(default_ttl)
        self.clock = clock

    @staticmethod
    def _as_timedelta(ttl: TTL) -> timedelta:
        if isinstance(ttl, timedelta):
            seconds = ttl.total_seconds()
        else:
            seconds = float(ttl)
        return timedelta(seconds=validate_ttl_seconds(seconds))

    def get(self, provider_endpoint: Endpoint, parameters: Any) -> Optional[Any]:
        """Return the cached payload for a request, or None.

        Expired entries are treated as absent and evicted on the way out.
        Storage failures are logged and reported as a miss.

        Raises:
            KeyDerivationError: If the endpoint or parameters are invalid.
        """
        endpoint = _endpoint_label(provider_endpoint)
        fingerprint = derive_fingerprint(endpoint, parameters)

        try:
            entry = self.store.get_entry(fingerprint)
        except CacheError as e:
            logger.warning("cache_get_failed", endpoint=endpoint, error=str(e))
            return None

        if entry is None:
            logger.debug("cache_miss", endpoint=endpoint, fingerprint=fingerprint)
            return None

        now = self.clock()
        if entry.is_expired(now):
            logger.debug("cache_expired", endpoint=endpoint, fingerprint=fingerprint)
            try:
                self.store.evict(fingerprint, now)
            except CacheError as e:
                logger.warning("cache_evict_failed", endpoint=endpoint, error=str(e))
            return None

        logger.debug("cache_hit", endpoint=endpoint, fingerprint=fingerprint)
        return entry.payload

    def set(
        self,
        provider_endpoint: Endpoint,
        parameters: Any,
        payload: Any,
        ttl: Optional[TTL] = None,
    ) -> CacheResult:
        """Store a provider response.

        Args:
            provider_endpoint: Label of the logical API call.
            parameters: Flat parameter mapping the payload was fetched with.
            payload: JSON-serializable response body.
            ttl: Lifetime as timedelta or seconds; defaults to ``default_ttl``.

        Returns:
            CacheResult; a failed result means the write was dropped.

        Raises:
            KeyDerivationError: If the endpoint or parameters are invalid.
        """
        endpoint = _endpoint_label(provider_endpoint)
        fingerprint = derive_fingerprint(endpoint, parameters)

        try:
            lifetime = self.default_ttl if ttl is None else self._as_timedelta(ttl)
        except ValidationError as e:
            logger.warning("cache_set_failed", endpoint=endpoint, error=str(e))
            return CacheResult.failure(CacheError("set", str(e)))

        now = self.clock()
        entry = CacheEntry(
            fingerprint=fingerprint,
            provider_endpoint=endpoint,
            parameters=validate_parameters(parameters),
            payload=payload,
            created_at=now,
            expires_at=now + lifetime,
        )

        try:
            self.store.upsert(entry)
        except CacheError as e:
            logger.warning("cache_set_failed", endpoint=endpoint, error=str(e))
            return CacheResult.failure(e)

        logger.debug(
            "cache_set",
            endpoint=endpoint,
            fingerprint=fingerprint,
            ttl_seconds=lifetime.total_seconds(),
        )
        return CacheResult.success(fingerprint)

    async def get_or_fetch(
        self,
        provider_endpoint: Endpoint,
        parameters: Any,
        fetch: Callable[[], Awaitable[Any]],
        ttl: Optional[TTL] = None,
    ) -> Any:
        """Return the cached payload or fetch, cache and return a fresh one.

        Errors raised by ``fetch`` propagate and nothing is cached.

        Args:
            provider_endpoint: Label of the logical API call.
            parameters: Flat parameter mapping identifying the request.
            fetch: Async callable performing the live provider call.
            ttl: Optional lifetime override.
        """
        cached = self.get(provider_endpoint, parameters)
        if cached is not None:
            return cached

        payload = await fetch()
        self.set(provider_endpoint, parameters, payload, ttl)
        return payload
