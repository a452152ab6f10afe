"""
Application settings loaded from environment variables via pydantic-settings.

Environment variables win over a local ``.env`` file, which wins over the
defaults below. Field ``gemini_api_key`` maps to ``GEMINI_API_KEY`` and so on.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

SEVEN_DAYS = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    """tripcache settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Cache ===
    cache_db_path: Path = Path.home() / ".tripcache" / "cache.db"
    cache_ttl_seconds: int = SEVEN_DAYS
    cache_sweep_interval_seconds: int = SEVEN_DAYS
    cache_store_timeout: float = 10.0

    # === Providers ===
    request_timeout: int = 30
    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    amadeus_hostname: str = "test"  # "test" or "production"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    google_places_api_key: str = ""
    unsplash_access_key: str = ""

    # === Logging ===
    log_level: str = "WARNING"
    log_json: bool = False

    @property
    def has_amadeus(self) -> bool:
        """True when both Amadeus credentials are configured."""
        return bool(self.amadeus_client_id and self.amadeus_client_secret)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
