"""
Cache module for storing provider responses.

Provides a SQLite store, the fault-tolerant access layer collectors use,
and maintenance operations.
"""

from tripcache.cache.maintenance import CacheMaintenance
from tripcache.cache.response import ResponseCache
from tripcache.cache.sqlite import CacheStore

__all__ = ["CacheMaintenance", "CacheStore", "ResponseCache"]
