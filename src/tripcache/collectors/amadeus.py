"""
Amadeus Self-Service API client.

Covers the four calls the travel UI needs: location search, hotel offers,
points of interest and flight offers. Every call is cached under its own
endpoint label, keyed on the exact query parameters sent upstream.

Authentication uses the OAuth2 client-credentials grant. The access token
lives on the client instance and is refreshed shortly before it expires.
"""

import time
from typing import Any, Optional, TYPE_CHECKING

import aiohttp
import structlog

from tripcache.collectors.base import Collector
from tripcache.core.exceptions import AuthenticationError, ConfigurationError
from tripcache.core.models import ProviderEndpoint

if TYPE_CHECKING:
    from tripcache.cache.response import ResponseCache

logger = structlog.get_logger(logger_name=__name__)


class AmadeusClient(Collector):
    """Async client for the Amadeus travel APIs."""

    PROVIDER = "amadeus"

    HOSTS = {
        "test": "https://test.api.amadeus.com",
        "production": "https://api.amadeus.com",
    }

    # Renew the token this many seconds before Amadeus says it expires
    TOKEN_REFRESH_MARGIN = 60

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        hostname: str = "test",
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 30,
        cache: Optional["ResponseCache"] = None,
    ):
        """Initialize the Amadeus client.

        Args:
            client_id: Amadeus API key.
            client_secret: Amadeus API secret.
            hostname: "test" or "production".
            session: Optional aiohttp session.
            timeout: Request timeout in seconds.
            cache: Optional response cache.

        Raises:
            ConfigurationError: If credentials or hostname are unusable.
        """
        if not client_id or not client_secret:
            raise ConfigurationError(
                "AMADEUS_CLIENT_ID / AMADEUS_CLIENT_SECRET",
                "Both Amadeus credentials are required.",
            )
        if hostname not in self.HOSTS:
            raise ConfigurationError(
                "AMADEUS_HOSTNAME",
                f"Expected one of {', '.join(self.HOSTS)}, got '{hostname}'.",
            )

        super().__init__(session, timeout, cache)
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = self.HOSTS[hostname]

        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    async def _get_access_token(self) -> str:
        """Return a valid access token, requesting a new one if needed."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        url = f"{self.base_url}/v1/security/oauth2/token"
        data = await self._request_json(
            "POST",
            url,
            resource="access token",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
        )

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(self.PROVIDER, "Token response had no access_token")

        expires_in = int(data.get("expires_in", 1799))
        self._access_token = token
        self._token_expires_at = time.monotonic() + max(expires_in - self.TOKEN_REFRESH_MARGIN, 0)
        logger.debug("amadeus_token_refreshed", expires_in=expires_in)
        return token

    async def _get(self, path: str, params: dict[str, Any], resource: str) -> Any:
        token = await self._get_access_token()
        headers = self._build_headers()
        headers["Authorization"] = f"Bearer {token}"
        return await self._request_json(
            "GET",
            f"{self.base_url}{path}",
            resource=resource,
            headers=headers,
            params=params,
        )

    async def search_locations(self, keyword: str, sub_type: str = "CITY,AIRPORT") -> Any:
        """Search cities and airports by keyword.

        Args:
            keyword: Free-text search term (e.g. "paris").
            sub_type: Comma-separated Amadeus location sub-types.

        Returns:
            Raw Amadeus response body.
        """
        params = {"keyword": keyword, "subType": sub_type, "page[limit]": 10}
        return await self._cached(
            ProviderEndpoint.LOCATIONS,
            params,
            lambda: self._get("/v1/reference-data/locations", params, f"locations '{keyword}'"),
        )

    async def search_hotels(
        self,
        city_code: str,
        check_in: str,
        check_out: str,
        adults: int = 1,
        radius: int = 5,
        radius_unit: str = "KM",
    ) -> Any:
        """Search hotel offers in a city for a stay.

        Args:
            city_code: IATA city code (e.g. "PAR").
            check_in: Check-in date, YYYY-MM-DD.
            check_out: Check-out date, YYYY-MM-DD.
            adults: Number of adult guests.
            radius: Search radius around the city centre.
            radius_unit: "KM" or "MILE".
        """
        params = {
            "cityCode": city_code,
            "checkInDate": check_in,
            "checkOutDate": check_out,
            "adults": adults,
            "radius": radius,
            "radiusUnit": radius_unit,
            "currency": "USD",
        }
        return await self._cached(
            ProviderEndpoint.HOTELS,
            params,
            lambda: self._get("/v2/shopping/hotel-offers", params, f"hotels in {city_code}"),
        )

    async def points_of_interest(
        self,
        latitude: float,
        longitude: float,
        radius: int = 20,
        category: Optional[str] = None,
    ) -> Any:
        """List points of interest around a coordinate.

        Args:
            latitude: Latitude of the centre point.
            longitude: Longitude of the centre point.
            radius: Radius in kilometres.
            category: Optional category filter (e.g. "SIGHTS", "RESTAURANT").
        """
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "radius": radius,
        }
        if category:
            params["categoryFilter"] = category

        return await self._cached(
            ProviderEndpoint.POI,
            params,
            lambda: self._get(
                "/v1/reference-data/locations/pois",
                params,
                f"points of interest near {latitude},{longitude}",
            ),
        )

    async def search_flights(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
        adults: int = 1,
        travel_class: str = "ECONOMY",
    ) -> Any:
        """Search flight offers.

        Args:
            origin: IATA origin code.
            destination: IATA destination code.
            departure_date: YYYY-MM-DD.
            return_date: Optional YYYY-MM-DD for round trips.
            adults: Number of adult passengers.
            travel_class: ECONOMY, PREMIUM_ECONOMY, BUSINESS or FIRST.
        """
        params: dict[str, Any] = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date,
            "adults": adults,
            "travelClass": travel_class,
            "currencyCode": "USD",
            "max": 20,
        }
        if return_date:
            params["returnDate"] = return_date

        return await self._cached(
            ProviderEndpoint.FLIGHTS,
            params,
            lambda: self._get(
                "/v2/shopping/flight-offers",
                params,
                f"flights {origin}-{destination}",
            ),
        )
