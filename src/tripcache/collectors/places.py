"""
Google Places client for city hero photos.

Runs a text search restricted to localities, picks the most city-like
result and returns its largest photo. Cached payloads hold the photo
resource name rather than the media URL, since that URL embeds the API key.
"""

from typing import Any, Optional, TYPE_CHECKING
from urllib.parse import quote

import aiohttp
import structlog

from tripcache.collectors.base import Collector
from tripcache.core.exceptions import ConfigurationError
from tripcache.core.models import CityPhoto, ProviderEndpoint

if TYPE_CHECKING:
    from tripcache.cache.response import ResponseCache

logger = structlog.get_logger(logger_name=__name__)

# Checked in this order when choosing which place to take a photo from
PREFERRED_TYPES = (
    "locality",
    "administrative_area_level_1",
    "administrative_area_level_2",
    "political",
    "tourist_attraction",
)

CITY_TYPES = {"locality", "political", "administrative_area_level_1", "administrative_area_level_2"}
SUBCITY_TYPES = {"neighborhood", "sublocality_level_1", "sublocality_level_2", "route", "street_address"}


def _photo_area(photo: dict[str, Any]) -> int:
    return int(photo.get("widthPx") or 0) * int(photo.get("heightPx") or 0)


def _usable_photos(place: dict[str, Any]) -> list[dict[str, Any]]:
    return [p for p in place.get("photos") or [] if isinstance(p, dict) and p.get("name")]


def select_best_photo(places: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Choose the best city photo from text-search results.

    Only places typed as a city (and not as a neighbourhood or street)
    that have named photos are considered. The first place matching a
    preferred type wins; otherwise the place with the most photos. Within
    a place, the largest photo wins.
    """
    candidates = []
    for place in places:
        if not isinstance(place, dict):
            continue
        types = set(place.get("types") or [])
        photos = _usable_photos(place)
        if not photos:
            continue
        if not types & CITY_TYPES or types & SUBCITY_TYPES:
            continue
        candidates.append((place, photos))

    if not candidates:
        return None

    for place_type in PREFERRED_TYPES:
        for place, photos in candidates:
            if place_type in (place.get("types") or []):
                return max(photos, key=_photo_area)

    _, photos = max(candidates, key=lambda c: len(c[1]))
    return max(photos, key=_photo_area)


class GooglePlacesClient(Collector):
    """Async client for the Places API (New)."""

    PROVIDER = "google-places"
    BASE_URL = "https://places.googleapis.com/v1"
    FIELD_MASK = "places.id,places.displayName,places.photos,places.types"
    PHOTO_WIDTH = 1600

    def __init__(
        self,
        api_key: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 30,
        cache: Optional["ResponseCache"] = None,
    ):
        if not api_key:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY")
        super().__init__(session, timeout, cache)
        self.api_key = api_key

    async def city_photo(self, city_name: str, country: Optional[str] = None) -> Optional[CityPhoto]:
        """Find a hero photo for a city.

        Tries "<city> major city", then "<city>, <country> city" when a
        country is known, then "<city> downtown city center".

        Returns:
            CityPhoto, or None when no suitable photo exists.
        """
        params: dict[str, Any] = {"cityName": city_name}
        if country and country.lower() != "unknown":
            params["country"] = country

        payload = await self._cached(
            ProviderEndpoint.GOOGLE_PLACES,
            params,
            lambda: self._find_photo(city_name, params.get("country")),
        )
        return self._to_city_photo(payload)

    async def _find_photo(self, city_name: str, country: Optional[str]) -> dict[str, Any]:
        queries = [f"{city_name} major city"]
        if country:
            queries.append(f"{city_name}, {country} city")
        queries.append(f"{city_name} downtown city center")

        for query in queries:
            places = await self.search_places(query)
            photo = select_best_photo(places)
            if photo:
                attributions = photo.get("authorAttributions") or []
                return {
                    "photoName": photo["name"],
                    "attribution": (
                        attributions[0].get("displayName")
                        if attributions and isinstance(attributions[0], dict)
                        else None
                    ),
                    "query": query,
                }
            logger.debug("places_no_photo", query=query)

        return {"photoName": None, "attribution": None, "query": None}

    async def search_places(self, query: str) -> list[dict[str, Any]]:
        """Run a locality text search."""
        headers = self._build_headers()
        headers.update({
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": self.FIELD_MASK,
        })
        data = await self._request_json(
            "POST",
            f"{self.BASE_URL}/places:searchText",
            resource=f"places matching '{query}'",
            headers=headers,
            json={
                "textQuery": query,
                "maxResultCount": 10,
                "includedType": "locality",
                "languageCode": "en",
            },
        )
        places = data.get("places") if isinstance(data, dict) else None
        return places if isinstance(places, list) else []

    def photo_url(self, photo_name: str, max_width: int = PHOTO_WIDTH) -> str:
        """Build the media URL for a photo resource name."""
        return (
            f"{self.BASE_URL}/{photo_name}/media"
            f"?maxWidthPx={max_width}&key={quote(self.api_key, safe='')}"
        )

    def _to_city_photo(self, payload: Any) -> Optional[CityPhoto]:
        if not isinstance(payload, dict) or not payload.get("photoName"):
            return None
        return CityPhoto(
            url=self.photo_url(payload["photoName"]),
            source=self.PROVIDER,
            attribution=payload.get("attribution"),
        )
