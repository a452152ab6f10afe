"""
Pytest fixtures and configuration for tripcache tests.

Provides a controllable clock, temporary cache stores, mock HTTP sessions
and sample provider payloads.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tripcache.cache.maintenance import CacheMaintenance
from tripcache.cache.response import ResponseCache
from tripcache.cache.sqlite import CacheStore
from tripcache.config import Settings

# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock fixed at a known instant."""
    return FakeClock(datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc))


# =============================================================================
# Cache Fixtures
# =============================================================================


@pytest.fixture
def tmp_cache_db(tmp_path: Path) -> Path:
    """Create a temporary cache database path."""
    return tmp_path / "cache" / "test_cache.db"


@pytest.fixture
def store(tmp_cache_db: Path) -> CacheStore:
    """Create a store backed by a temporary database."""
    return CacheStore(tmp_cache_db, timeout=1.0)


@pytest.fixture
def cache(store: CacheStore, clock: FakeClock) -> ResponseCache:
    """Create a response cache driven by the fake clock."""
    return ResponseCache(store, clock=clock)


@pytest.fixture
def maintenance(store: CacheStore, clock: FakeClock) -> CacheMaintenance:
    """Create maintenance operations driven by the fake clock."""
    return CacheMaintenance(store, clock=clock)


@pytest.fixture
def settings(tmp_cache_db: Path) -> Settings:
    """Create settings that never touch the real environment or home directory."""
    return Settings(
        _env_file=None,
        cache_db_path=tmp_cache_db,
        gemini_api_key="test-gemini-key",
        google_places_api_key="test-places-key",
        unsplash_access_key="test-unsplash-key",
        amadeus_client_id="test-id",
        amadeus_client_secret="test-secret",
    )


# =============================================================================
# HTTP Fixtures
# =============================================================================


def make_response(status: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    """Build a mock aiohttp response."""
    resp = MagicMock()
    resp.status = status
    resp.headers = {}
    resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)
    return resp


def make_session(*responses: MagicMock) -> MagicMock:
    """Build a mock aiohttp session whose request() yields the responses in order."""
    contexts = []
    for resp in responses:
        ctx = MagicMock()
        ctx.__aenter__ = AsyncMock(return_value=resp)
        ctx.__aexit__ = AsyncMock(return_value=False)
        contexts.append(ctx)

    session = MagicMock()
    session.request = MagicMock(side_effect=contexts)
    session.close = AsyncMock()
    return session


@pytest.fixture
def amadeus_token_response() -> MagicMock:
    """Create a successful Amadeus OAuth token response."""
    return make_response(json_data={
        "type": "amadeusOAuth2Token",
        "access_token": "token-abc",
        "expires_in": 1799,
    })


# =============================================================================
# Provider Payload Fixtures
# =============================================================================


@pytest.fixture
def sample_city_info() -> dict[str, Any]:
    """Create a sample generated city profile."""
    return {
        "cityName": "Paris",
        "country": "France",
        "cityDescription": "Paris is the capital of France and a global centre for art and food.",
        "coordinates": {"latitude": 48.8566, "longitude": 2.3522},
        "attractions": [
            {
                "name": "Eiffel Tower",
                "description": "Wrought-iron tower on the Champ de Mars.",
                "website": "https://www.toureiffel.paris/",
                "googleMapsLink": "https://maps.app.goo.gl/eiffel",
            },
        ],
        "kitchens": [
            {
                "name": "Le Comptoir",
                "description": "Bistro in Saint-Germain.",
                "website": "N/A",
                "googleMapsLink": "https://maps.app.goo.gl/comptoir",
            },
        ],
        "stays": [],
    }


@pytest.fixture
def sample_places_response() -> dict[str, Any]:
    """Create a sample Places text-search response."""
    return {
        "places": [
            {
                "id": "n1",
                "displayName": {"text": "Le Marais", "languageCode": "en"},
                "types": ["neighborhood", "political"],
                "photos": [{"name": "places/n1/photos/a", "widthPx": 4000, "heightPx": 3000}],
            },
            {
                "id": "p1",
                "displayName": {"text": "Paris", "languageCode": "en"},
                "types": ["locality", "political"],
                "photos": [
                    {"name": "places/p1/photos/small", "widthPx": 800, "heightPx": 600},
                    {
                        "name": "places/p1/photos/large",
                        "widthPx": 2400,
                        "heightPx": 1600,
                        "authorAttributions": [{"displayName": "Jane Doe"}],
                    },
                ],
            },
        ]
    }
