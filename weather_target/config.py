"""
Central configuration loaded from environment variables with sensible defaults.
All secrets come from env vars; no hardcoded credentials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class SamplerConfig:
    # Temperate / populated band
    temperate_probability: float = float(os.getenv("WT_TEMPERATE_PROB", "0.80"))
    temperate_low: float = float(os.getenv("WT_TEMPERATE_LOW", "-40.0"))
    temperate_high: float = float(os.getenv("WT_TEMPERATE_HIGH", "60.0"))
    # Tropical band
    tropical_probability: float = float(os.getenv("WT_TROPICAL_PROB", "0.15"))
    tropical_low: float = float(os.getenv("WT_TROPICAL_LOW", "-23.5"))
    tropical_high: float = float(os.getenv("WT_TROPICAL_HIGH", "23.5"))
    # Anywhere gets whatever probability is left over

    @property
    def anywhere_probability(self) -> float:
        return 1.0 - self.temperate_probability - self.tropical_probability


@dataclass(frozen=True)
class ResolverConfig:
    # Country for which "City, State" is shown instead of "City, Country".
    # Empty string disables the special case.
    home_country: str = os.getenv("WT_HOME_COUNTRY", "United States")


@dataclass(frozen=True)
class SelectionConfig:
    max_attempts: int = int(os.getenv("WT_MAX_ATTEMPTS", "15"))
    # Upper bound on one reverse-geocode lookup, retries included (seconds)
    attempt_timeout: float = float(os.getenv("WT_ATTEMPT_TIMEOUT", "20"))
    # Optional override for the bundled fallback catalog / keyword data
    catalog_path: str = os.getenv("WT_CATALOG_PATH", "")
    # Seed for reproducible runs (empty = system entropy)
    random_seed: str = os.getenv("WT_RANDOM_SEED", "")


@dataclass(frozen=True)
class GeocodingConfig:
    provider: str = os.getenv("GEOCODER_PROVIDER", "nominatim")  # nominatim | google
    nominatim_url: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org")
    nominatim_user_agent: str = os.getenv("NOMINATIM_USER_AGENT", "weather-target/1.0")
    google_api_key: str = os.getenv("GOOGLE_GEOCODING_KEY", "")
    language: str = os.getenv("GEOCODER_LANGUAGE", "en")
    request_timeout: float = float(os.getenv("GEOCODER_TIMEOUT", "10"))
    # Rate limiting
    rate_limit_rps: float = float(os.getenv("GEOCODER_RATE_LIMIT", "1.0"))  # Nominatim wants <=1/s
    max_retries: int = int(os.getenv("GEOCODER_MAX_RETRIES", "3"))
    backoff_base: float = float(os.getenv("GEOCODER_BACKOFF_BASE", "2.0"))


@dataclass(frozen=True)
class SchedulerConfig:
    enabled: bool = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    rotate_minutes: int = int(os.getenv("WT_ROTATE_MINUTES", "10"))


@dataclass(frozen=True)
class APIConfig:
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))


@dataclass(frozen=True)
class Settings:
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    env: str = os.getenv("APP_ENV", "development")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
