"""
Core module for tripcache.

Contains data models, fingerprint derivation, validation and exceptions.
"""

from tripcache.core.exceptions import (
    CacheError,
    ConfigurationError,
    KeyDerivationError,
    ProviderError,
    TripCacheError,
    ValidationError,
)
from tripcache.core.fingerprint import derive_fingerprint
from tripcache.core.models import (
    CacheEntry,
    CacheResult,
    CacheStats,
    CityProfile,
    MaintenanceOperation,
    ProviderEndpoint,
    SweepRecord,
)

__all__ = [
    # Models
    "CacheEntry",
    "CacheResult",
    "CacheStats",
    "CityProfile",
    "MaintenanceOperation",
    "ProviderEndpoint",
    "SweepRecord",
    # Fingerprints
    "derive_fingerprint",
    # Exceptions
    "TripCacheError",
    "CacheError",
    "ConfigurationError",
    "KeyDerivationError",
    "ProviderError",
    "ValidationError",
]
