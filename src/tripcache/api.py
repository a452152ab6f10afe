"""
High-level programmatic API for tripcache.

This module wires settings, the cache and the provider clients together.
For more control, construct the underlying classes directly.

Example:
    import asyncio
    from tripcache import discover

    profile = asyncio.run(discover("lisbon"))
    print(profile.city_name, len(profile.attractions))
"""

import asyncio
from datetime import timedelta
from typing import Any

import aiohttp
import structlog

from tripcache.cache.maintenance import CacheMaintenance
from tripcache.cache.response import ResponseCache
from tripcache.cache.sqlite import CacheStore
from tripcache.collectors.amadeus import AmadeusClient
from tripcache.collectors.gemini import GeminiClient
from tripcache.config import Settings, get_settings
from tripcache.core.exceptions import CacheError, ConfigurationError
from tripcache.core.models import CityProfile
from tripcache.discovery.service import open_discovery

logger = structlog.get_logger(logger_name=__name__)


def open_store(settings: Settings | None = None) -> CacheStore:
    """Open the SQLite store named by the settings."""
    settings = settings or get_settings()
    return CacheStore(settings.cache_db_path, timeout=settings.cache_store_timeout)


def open_cache(settings: Settings | None = None) -> ResponseCache:
    """Open the response cache with the configured default TTL."""
    settings = settings or get_settings()
    return ResponseCache(
        open_store(settings),
        default_ttl=timedelta(seconds=settings.cache_ttl_seconds),
    )


def open_maintenance(settings: Settings | None = None) -> CacheMaintenance:
    """Open the maintenance operations with the configured sweep interval."""
    settings = settings or get_settings()
    return CacheMaintenance(
        open_store(settings),
        sweep_interval=timedelta(seconds=settings.cache_sweep_interval_seconds),
    )


def _lookup_cache(settings: Settings, use_cache: bool) -> ResponseCache | None:
    """Open the cache for a lookup, or return None if it is disabled or unusable.

    Lookups go live when the store cannot be opened.
    """
    if not use_cache:
        return None
    try:
        return open_cache(settings)
    except CacheError as e:
        logger.warning("cache_unavailable", db_path=str(settings.cache_db_path), error=str(e))
        return None


async def discover(
    query: str,
    *,
    settings: Settings | None = None,
    use_cache: bool = True,
) -> CityProfile:
    """Build a city profile for a location query.

    Args:
        query: Free-text location (e.g. "kyoto" or "Porto, Portugal").
        settings: Optional settings; defaults to the environment.
        use_cache: Whether to read and write the response cache.

    Returns:
        CityProfile with description, points of interest and a photo when
        the corresponding providers are configured.
    """
    settings = settings or get_settings()
    cache = _lookup_cache(settings, use_cache)
    async with open_discovery(settings, cache) as discovery:
        return await discovery.discover(query)


async def search_locations(
    keyword: str,
    sub_type: str = "CITY,AIRPORT",
    *,
    settings: Settings | None = None,
    use_cache: bool = True,
) -> Any:
    """Search Amadeus locations by keyword.

    Raises:
        ConfigurationError: If Amadeus credentials are not configured.
    """
    settings = settings or get_settings()
    if not settings.has_amadeus:
        raise ConfigurationError("AMADEUS_CLIENT_ID / AMADEUS_CLIENT_SECRET")

    cache = _lookup_cache(settings, use_cache)
    timeout = aiohttp.ClientTimeout(total=settings.request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = AmadeusClient(
            settings.amadeus_client_id,
            settings.amadeus_client_secret,
            hostname=settings.amadeus_hostname,
            session=session,
            cache=cache,
        )
        return await client.search_locations(keyword, sub_type)


async def ask(
    message: str,
    *,
    city_name: str | None = None,
    settings: Settings | None = None,
) -> str:
    """Ask the travel assistant a question, optionally about one city.

    Answers are conversational and never cached.

    Returns:
        The assistant's Markdown-formatted answer.

    Raises:
        ConfigurationError: If the Gemini API key is not configured.
        ValidationError: If the message is empty.
    """
    settings = settings or get_settings()
    timeout = aiohttp.ClientTimeout(total=settings.request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = GeminiClient(settings.gemini_api_key, model=settings.gemini_model, session=session)
        return await client.ask(message, city_name=city_name)


def discover_sync(query: str, *, use_cache: bool = True) -> CityProfile:
    """Synchronous wrapper for discover().

    For use in non-async contexts. Runs a fresh event loop.
    """
    return asyncio.run(discover(query, use_cache=use_cache))
