"""
tripcache

Travel discovery backed by a content-addressed response cache. Provider
calls (Amadeus, Gemini, Google Places, Unsplash) are fingerprinted by
endpoint and parameters and served from a SQLite TTL cache on repeat.

Quick Start:
    >>> import asyncio
    >>> from tripcache import discover
    >>> profile = asyncio.run(discover("paris"))
    >>> print(profile.city_name, profile.country)
    Paris France

    # Or work with the cache directly:
    >>> from tripcache import open_cache
    >>> cache = open_cache()
    >>> result = cache.set("locations", {"keyword": "paris"}, {"data": []})
    >>> cache.get("locations", {"keyword": "paris"})
    {'data': []}
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from tripcache.api import (
    ask,
    discover,
    discover_sync,
    open_cache,
    open_maintenance,
    open_store,
    search_locations,
)

# Cache components
from tripcache.cache import CacheMaintenance, CacheStore, ResponseCache
from tripcache.core.fingerprint import derive_fingerprint

# Exceptions
from tripcache.core.exceptions import (
    CacheError,
    ConfigurationError,
    KeyDerivationError,
    ProviderError,
    TripCacheError,
)

# Data models
from tripcache.core.models import (
    CacheEntry,
    CacheResult,
    CacheStats,
    CityPhoto,
    CityProfile,
    PointOfInterest,
    ProviderEndpoint,
    ScheduledSweep,
    SweepRecord,
)

__all__ = [
    # Version
    "__version__",
    # High-level API
    "ask",
    "discover",
    "discover_sync",
    "open_cache",
    "open_maintenance",
    "open_store",
    "search_locations",
    # Cache
    "CacheMaintenance",
    "CacheStore",
    "ResponseCache",
    "derive_fingerprint",
    # Models
    "CacheEntry",
    "CacheResult",
    "CacheStats",
    "CityPhoto",
    "CityProfile",
    "PointOfInterest",
    "ProviderEndpoint",
    "ScheduledSweep",
    "SweepRecord",
    # Exceptions
    "TripCacheError",
    "CacheError",
    "ConfigurationError",
    "KeyDerivationError",
    "ProviderError",
]
