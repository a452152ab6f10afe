"""
City discovery service.

Builds a ``CityProfile`` for a free-text location: the generated city
description first, then a hero photo and nearby points of interest in
parallel. Only the city description is required; failures of the other
providers are recorded on the profile and the rest is still returned.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import aiohttp
import structlog

from tripcache.cache.response import ResponseCache
from tripcache.collectors.amadeus import AmadeusClient
from tripcache.collectors.gemini import GeminiClient
from tripcache.collectors.places import GooglePlacesClient
from tripcache.collectors.unsplash import UnsplashClient
from tripcache.config import Settings
from tripcache.core.exceptions import ProviderError
from tripcache.core.models import CityPhoto, CityProfile

logger = structlog.get_logger(logger_name=__name__)


class CityDiscovery:
    """Aggregate travel data for a city from all configured providers."""

    def __init__(
        self,
        gemini: GeminiClient,
        places: Optional[GooglePlacesClient] = None,
        unsplash: Optional[UnsplashClient] = None,
        amadeus: Optional[AmadeusClient] = None,
    ):
        """Initialize the service with already constructed clients.

        Args:
            gemini: Client producing the city description (required).
            places: Primary photo source.
            unsplash: Fallback photo source.
            amadeus: Points-of-interest source.
        """
        self.gemini = gemini
        self.places = places
        self.unsplash = unsplash
        self.amadeus = amadeus

    async def discover(self, query: str) -> CityProfile:
        """Build a city profile for a location query.

        Raises:
            ProviderError: If the city description cannot be produced.
        """
        structlog.contextvars.bind_contextvars(city_query=query)
        try:
            info = await self.gemini.city_info(query)
            profile = CityProfile.from_city_info(query, info)

            photo, pois = await asyncio.gather(
                self._find_photo(profile),
                self._find_points_of_interest(profile),
            )
            profile.photo = photo
            profile.points_of_interest = pois

            logger.info(
                "city_discovered",
                city=profile.city_name,
                has_photo=photo is not None,
                poi_count=len(pois),
                errors=list(profile.errors),
            )
            return profile
        finally:
            structlog.contextvars.unbind_contextvars("city_query")

    async def _find_photo(self, profile: CityProfile) -> Optional[CityPhoto]:
        if self.places is not None:
            try:
                photo = await self.places.city_photo(profile.city_name, profile.country or None)
                if photo:
                    return photo
            except ProviderError as e:
                profile.errors[self.places.PROVIDER] = str(e)

        if self.unsplash is not None:
            query = " ".join(p for p in (profile.city_name, profile.country, "city") if p)
            try:
                return await self.unsplash.city_photo(query)
            except ProviderError as e:
                profile.errors[self.unsplash.PROVIDER] = str(e)

        return None

    async def _find_points_of_interest(self, profile: CityProfile) -> list[dict[str, Any]]:
        if self.amadeus is None or profile.coordinates is None:
            return []

        try:
            data = await self.amadeus.points_of_interest(
                profile.coordinates.latitude,
                profile.coordinates.longitude,
            )
        except ProviderError as e:
            profile.errors[self.amadeus.PROVIDER] = str(e)
            return []

        pois = data.get("data") if isinstance(data, dict) else None
        if not isinstance(pois, list):
            return []
        return [poi for poi in pois if isinstance(poi, dict)]


@asynccontextmanager
async def open_discovery(
    settings: Settings,
    cache: Optional[ResponseCache] = None,
) -> AsyncIterator[CityDiscovery]:
    """Construct a ``CityDiscovery`` sharing one HTTP session.

    Providers without credentials are left out. The session is closed on exit.

    Raises:
        ConfigurationError: If the Gemini API key is missing.
    """
    timeout = aiohttp.ClientTimeout(total=settings.request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        gemini = GeminiClient(
            settings.gemini_api_key,
            model=settings.gemini_model,
            session=session,
            cache=cache,
        )
        places = (
            GooglePlacesClient(settings.google_places_api_key, session=session, cache=cache)
            if settings.google_places_api_key
            else None
        )
        unsplash = (
            UnsplashClient(settings.unsplash_access_key, session=session, cache=cache)
            if settings.unsplash_access_key
            else None
        )
        amadeus = (
            AmadeusClient(
                settings.amadeus_client_id,
                settings.amadeus_client_secret,
                hostname=settings.amadeus_hostname,
                session=session,
                cache=cache,
            )
            if settings.has_amadeus
            else None
        )
        yield CityDiscovery(gemini, places=places, unsplash=unsplash, amadeus=amadeus)
