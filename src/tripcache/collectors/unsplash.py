"""
Unsplash client, used as the fallback source for city photos.
"""

from typing import Any, Optional, TYPE_CHECKING

import aiohttp

from tripcache.collectors.base import Collector
from tripcache.core.exceptions import ConfigurationError
from tripcache.core.models import CityPhoto, ProviderEndpoint

if TYPE_CHECKING:
    from tripcache.cache.response import ResponseCache


class UnsplashClient(Collector):
    """Async client for the Unsplash search API."""

    PROVIDER = "unsplash"
    BASE_URL = "https://api.unsplash.com"

    def __init__(
        self,
        access_key: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 30,
        cache: Optional["ResponseCache"] = None,
    ):
        if not access_key:
            raise ConfigurationError("UNSPLASH_ACCESS_KEY")
        super().__init__(session, timeout, cache)
        self.access_key = access_key

    def _build_headers(self) -> dict[str, str]:
        headers = super()._build_headers()
        headers["Authorization"] = f"Client-ID {self.access_key}"
        headers["Accept-Version"] = "v1"
        return headers

    async def city_photo(self, query: str) -> Optional[CityPhoto]:
        """Return the top landscape photo for a query, or None."""
        params = {"query": query, "orientation": "landscape", "per_page": 1}
        payload = await self._cached(
            ProviderEndpoint.UNSPLASH,
            params,
            lambda: self._search(params),
        )
        return self._to_city_photo(payload)

    async def _search(self, params: dict[str, Any]) -> dict[str, Any]:
        data = await self._request_json(
            "GET",
            f"{self.BASE_URL}/search/photos",
            resource=f"photos of '{params['query']}'",
            params=params,
        )
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return {"photoUrl": None}

        photo = results[0]
        return {
            "photoUrl": (photo.get("urls") or {}).get("regular"),
            "attribution": (photo.get("user") or {}).get("name"),
            "link": (photo.get("links") or {}).get("html"),
        }

    def _to_city_photo(self, payload: Any) -> Optional[CityPhoto]:
        if not isinstance(payload, dict) or not payload.get("photoUrl"):
            return None
        return CityPhoto(
            url=payload["photoUrl"],
            source=self.PROVIDER,
            attribution=payload.get("attribution"),
            link=payload.get("link"),
        )
