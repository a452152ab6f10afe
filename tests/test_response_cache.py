"""
Tests for the ResponseCache access layer.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from tripcache.cache.response import ResponseCache
from tripcache.cache.sqlite import CacheStore
from tripcache.core.exceptions import CacheError, KeyDerivationError
from tripcache.core.fingerprint import derive_fingerprint
from tripcache.core.models import ProviderEndpoint


@pytest.fixture
def broken_store() -> MagicMock:
    """Create a store whose every operation fails."""
    store = MagicMock(spec=CacheStore)
    for name in ("get_entry", "upsert", "evict", "delete", "delete_expired", "delete_all"):
        getattr(store, name).side_effect = CacheError(name, "database is locked")
    return store


class TestGetAndSet:
    """Tests for basic reads and writes."""

    def test_miss_on_empty_store(self, cache):
        """Test that an empty store returns None."""
        assert cache.get("locations", {"keyword": "paris"}) is None

    def test_round_trip(self, cache):
        """Test that a stored payload is returned unchanged."""
        payload = {"data": [{"name": "PARIS", "iataCode": "PAR"}], "meta": {"count": 1}}

        result = cache.set("locations", {"keyword": "paris"}, payload)

        assert result.ok
        assert cache.get("locations", {"keyword": "paris"}) == payload

    def test_set_returns_fingerprint(self, cache):
        """Test that a successful set reports the fingerprint."""
        result = cache.set("gemini", {"locationQuery": "rome"}, {"cityName": "Rome"})

        assert result.value == derive_fingerprint("gemini", {"locationQuery": "rome"})

    def test_accepts_endpoint_enum(self, cache):
        """Test that enum and string endpoint labels are interchangeable."""
        cache.set(ProviderEndpoint.GOOGLE_PLACES, {"cityName": "Oslo"}, {"photoName": "x"})

        assert cache.get("google-places", {"cityName": "Oslo"}) == {"photoName": "x"}

    def test_overwrite_keeps_latest(self, cache, store):
        """Test that a second set replaces the first without duplicating rows."""
        params = {"cityCode": "PAR", "adults": 1}
        cache.set("hotels", params, {"offers": 1})
        cache.set("hotels", params, {"offers": 2})

        assert cache.get("hotels", params) == {"offers": 2}
        assert store.count("hotels") == 1

    def test_scalar_and_list_payloads(self, cache):
        """Test that non-dict JSON payloads round-trip."""
        cache.set("unsplash", {"query": "a"}, [1, 2, 3])
        cache.set("unsplash", {"query": "b"}, "text")

        assert cache.get("unsplash", {"query": "a"}) == [1, 2, 3]
        assert cache.get("unsplash", {"query": "b"}) == "text"

    def test_end_to_end_locations_scenario(self, cache):
        """Test miss, write with reordered parameters, then hit."""
        assert cache.get("locations", {"keyword": "paris", "subType": "CITY,AIRPORT"}) is None

        cache.set("locations", {"subType": "CITY,AIRPORT", "keyword": "paris"}, {"cities": ["Paris"]})

        assert cache.get("locations", {"keyword": "paris", "subType": "CITY,AIRPORT"}) == {
            "cities": ["Paris"]
        }


class TestExpiry:
    """Tests for TTL enforcement."""

    def test_expires_after_ttl(self, cache, clock):
        """Test that an entry is absent once its TTL has passed."""
        cache.set("poi", {"latitude": 1.0}, {"data": []}, ttl=timedelta(milliseconds=1))
        clock.advance(milliseconds=2)

        assert cache.get("poi", {"latitude": 1.0}) is None

    def test_live_until_ttl(self, cache, clock):
        """Test that an entry is still served just before expiry."""
        cache.set("poi", {"latitude": 1.0}, {"data": []}, ttl=60)
        clock.advance(seconds=59)

        assert cache.get("poi", {"latitude": 1.0}) == {"data": []}

    def test_expired_at_exact_boundary(self, cache, clock):
        """Test that expires_at == now counts as expired."""
        cache.set("poi", {"latitude": 1.0}, {"data": []}, ttl=60)
        clock.advance(seconds=60)

        assert cache.get("poi", {"latitude": 1.0}) is None

    def test_default_ttl_is_seven_days(self, cache, clock):
        """Test the default lifetime."""
        cache.set("flights", {"max": 20}, {"data": []})

        clock.advance(days=6, hours=23)
        assert cache.get("flights", {"max": 20}) == {"data": []}

        clock.advance(hours=1)
        assert cache.get("flights", {"max": 20}) is None

    def test_configured_default_ttl(self, store, clock):
        """Test a custom default TTL in seconds."""
        cache = ResponseCache(store, default_ttl=10, clock=clock)
        cache.set("gemini", {"locationQuery": "x"}, {"a": 1})
        clock.advance(seconds=11)

        assert cache.get("gemini", {"locationQuery": "x"}) is None

    def test_expired_read_evicts_row(self, cache, store, clock):
        """Test lazy deletion on an expired read."""
        params = {"keyword": "lima"}
        cache.set("locations", params, {"data": []}, ttl=1)
        clock.advance(seconds=5)

        cache.get("locations", params)

        assert store.get_entry(derive_fingerprint("locations", params)) is None

    def test_eviction_failure_is_ignored(self, cache, store, clock, monkeypatch):
        """Test that a failed lazy delete still reports a miss."""
        cache.set("locations", {"keyword": "lima"}, {"data": []}, ttl=1)
        clock.advance(seconds=5)
        monkeypatch.setattr(store, "evict", MagicMock(side_effect=CacheError("evict", "locked")))

        assert cache.get("locations", {"keyword": "lima"}) is None

    def test_negative_ttl_is_a_failed_write(self, cache):
        """Test that an invalid TTL drops the write instead of raising."""
        result = cache.set("gemini", {"locationQuery": "x"}, {"a": 1}, ttl=-5)

        assert not result.ok
        assert cache.get("gemini", {"locationQuery": "x"}) is None


class TestFailurePolicy:
    """Tests for degrading on store failures."""

    def test_get_failure_is_a_miss(self, broken_store, clock):
        """Test that a store failure on read returns None."""
        cache = ResponseCache(broken_store, clock=clock)

        assert cache.get("locations", {"keyword": "paris"}) is None

    def test_set_failure_is_reported_not_raised(self, broken_store, clock):
        """Test that a store failure on write returns a failed result."""
        cache = ResponseCache(broken_store, clock=clock)

        result = cache.set("locations", {"keyword": "paris"}, {"data": []})

        assert not result.ok
        assert isinstance(result.error, CacheError)
        assert not result

    def test_unserializable_payload_is_a_failed_write(self, cache):
        """Test that a payload json cannot encode is dropped."""
        result = cache.set("gemini", {"locationQuery": "x"}, {"when": object()})

        assert not result.ok
        assert cache.get("gemini", {"locationQuery": "x"}) is None

    def test_key_errors_propagate_from_get(self, broken_store, clock):
        """Test that invalid parameters raise even when the store is down."""
        cache = ResponseCache(broken_store, clock=clock)

        with pytest.raises(KeyDerivationError):
            cache.get("locations", {"keyword": ["paris"]})

    def test_key_errors_propagate_from_set(self, cache):
        """Test that invalid parameters on write raise."""
        with pytest.raises(KeyDerivationError):
            cache.set("locations", {"keyword": {"q": "paris"}}, {"data": []})


class TestGetOrFetch:
    """Tests for the combined check / fetch / populate flow."""

    @pytest.mark.asyncio
    async def test_fetches_once_then_serves_cache(self, cache):
        """Test that the second call does not invoke the provider."""
        fetch = AsyncMock(return_value={"cityName": "Lisbon"})

        first = await cache.get_or_fetch("gemini", {"locationQuery": "lisbon"}, fetch)
        second = await cache.get_or_fetch("gemini", {"locationQuery": "lisbon"}, fetch)

        assert first == second == {"cityName": "Lisbon"}
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_error_is_not_cached(self, cache):
        """Test that a provider failure propagates and stores nothing."""
        fetch = AsyncMock(side_effect=RuntimeError("provider down"))

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("gemini", {"locationQuery": "lisbon"}, fetch)

        assert cache.get("gemini", {"locationQuery": "lisbon"}) is None

    @pytest.mark.asyncio
    async def test_store_outage_still_returns_payload(self, broken_store, clock):
        """Test that a cache outage only costs a live call."""
        cache = ResponseCache(broken_store, clock=clock)
        fetch = AsyncMock(return_value={"data": [1]})

        result = await cache.get_or_fetch("poi", {"radius": 20}, fetch)

        assert result == {"data": [1]}
        fetch.assert_awaited_once()
