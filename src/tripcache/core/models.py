"""
Core data models for tripcache.

This module defines the data structures shared by the cache subsystem,
the provider collectors and the discovery service.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from tripcache.core.exceptions import CacheError


class ProviderEndpoint(Enum):
    """Labels for the logical provider calls that get cached."""

    LOCATIONS = "locations"
    HOTELS = "hotels"
    POI = "poi"
    FLIGHTS = "flights"
    GEMINI = "gemini"
    UNSPLASH = "unsplash"
    GOOGLE_PLACES = "google-places"

    def __str__(self) -> str:
        return self.value


class MaintenanceOperation(Enum):
    """Kinds of maintenance recorded in the maintenance log."""

    SWEEP = "sweep"
    FLUSH = "flush"

    def __str__(self) -> str:
        return self.value


@dataclass
class CacheEntry:
    """A single cached provider response."""

    fingerprint: str
    provider_endpoint: str
    parameters: dict[str, Any]
    payload: Any
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return True once ``now`` has reached the expiry time."""
        return self.expires_at <= now

    @property
    def ttl(self) -> timedelta:
        """Return the lifetime the entry was written with."""
        return self.expires_at - self.created_at


@dataclass
class SweepRecord:
    """One row of the append-only maintenance log."""

    timestamp: datetime
    operation: MaintenanceOperation
    deleted_count: int
    duration_ms: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "operation": self.operation.value,
            "deleted_count": self.deleted_count,
            "duration_ms": round(self.duration_ms, 2),
        }


@dataclass
class CacheStats:
    """Snapshot of the cache contents."""

    total: int
    active: int
    expired: int
    by_endpoint: dict[str, int] = field(default_factory=dict)
    active_by_endpoint: dict[str, int] = field(default_factory=dict)
    db_path: str = ""
    db_size_bytes: int = 0
    last_sweep: SweepRecord | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "total": self.total,
            "active": self.active,
            "expired": self.expired,
            "by_endpoint": self.by_endpoint,
            "active_by_endpoint": self.active_by_endpoint,
            "db_path": self.db_path,
            "db_size_bytes": self.db_size_bytes,
            "last_sweep": self.last_sweep.to_dict() if self.last_sweep else None,
        }


@dataclass
class CacheResult:
    """Outcome of a best-effort cache operation.

    Cache writes and maintenance never raise into the request flow; they
    report failure through this value instead. Callers are free to ignore it.
    """

    ok: bool
    value: Any = None
    error: CacheError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None) -> "CacheResult":
        """Build a successful result."""
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: CacheError) -> "CacheResult":
        """Build a failed result carrying the error."""
        return cls(ok=False, error=error)


@dataclass
class ScheduledSweep:
    """Outcome of an interval-gated sweep."""

    ran: bool
    interval: timedelta
    since_last: timedelta | None = None
    result: CacheResult | None = None

    @property
    def next_due_in(self) -> timedelta:
        """Time remaining until the next sweep is due."""
        if self.ran or self.since_last is None:
            return self.interval
        return max(self.interval - self.since_last, timedelta(0))

    @property
    def ok(self) -> bool:
        """True unless a sweep ran and failed."""
        return self.result is None or self.result.ok


@dataclass
class Coordinates:
    """Latitude/longitude pair."""

    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data: Any) -> "Coordinates | None":
        """Parse ``{"latitude": .., "longitude": ..}``; None if unusable."""
        if not isinstance(data, dict):
            return None
        try:
            return cls(float(data["latitude"]), float(data["longitude"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class PointOfInterest:
    """An attraction, restaurant or place to stay."""

    name: str
    description: str = ""
    website: str | None = None
    maps_link: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PointOfInterest":
        """Create from a provider dictionary (camelCase keys)."""
        website = data.get("website")
        if website in ("", "N/A"):
            website = None
        return cls(
            name=data.get("name", ""),
            description=data.get("description", "") or "",
            website=website,
            maps_link=data.get("googleMapsLink") or None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "googleMapsLink": self.maps_link,
        }


@dataclass
class CityPhoto:
    """A hero image for a city."""

    url: str
    source: str
    attribution: str | None = None
    link: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "url": self.url,
            "source": self.source,
            "attribution": self.attribution,
            "link": self.link,
        }


def _points(items: Any) -> list[PointOfInterest]:
    if not isinstance(items, list):
        return []
    return [PointOfInterest.from_dict(item) for item in items if isinstance(item, dict)]


@dataclass
class CityProfile:
    """Everything the discovery service could gather about one city."""

    query: str
    city_name: str
    country: str = ""
    description: str = ""
    coordinates: Coordinates | None = None
    attractions: list[PointOfInterest] = field(default_factory=list)
    kitchens: list[PointOfInterest] = field(default_factory=list)
    stays: list[PointOfInterest] = field(default_factory=list)
    photo: CityPhoto | None = None
    points_of_interest: list[dict[str, Any]] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_city_info(cls, query: str, data: dict) -> "CityProfile":
        """Create from a generated city-info payload."""
        return cls(
            query=query,
            city_name=data.get("cityName") or query,
            country=data.get("country", "") or "",
            description=data.get("cityDescription", "") or "",
            coordinates=Coordinates.from_dict(data.get("coordinates")),
            attractions=_points(data.get("attractions")),
            kitchens=_points(data.get("kitchens")),
            stays=_points(data.get("stays")),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "query": self.query,
            "cityName": self.city_name,
            "country": self.country,
            "cityDescription": self.description,
            "coordinates": (
                {"latitude": self.coordinates.latitude, "longitude": self.coordinates.longitude}
                if self.coordinates
                else None
            ),
            "attractions": [p.to_dict() for p in self.attractions],
            "kitchens": [p.to_dict() for p in self.kitchens],
            "stays": [p.to_dict() for p in self.stays],
            "photo": self.photo.to_dict() if self.photo else None,
            "pointsOfInterest": self.points_of_interest,
            "errors": self.errors,
        }
