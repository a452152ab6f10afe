"""
Provider collectors for fetching travel data from external sources.

This module provides async clients for Amadeus, Gemini, Google Places and Unsplash.
"""

from tripcache.collectors.amadeus import AmadeusClient
from tripcache.collectors.base import Collector
from tripcache.collectors.gemini import GeminiClient
from tripcache.collectors.places import GooglePlacesClient
from tripcache.collectors.unsplash import UnsplashClient

__all__ = [
    "Collector",
    "AmadeusClient",
    "GeminiClient",
    "GooglePlacesClient",
    "UnsplashClient",
]
