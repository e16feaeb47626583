"""
Runtime configuration for Radiación UV.

Settings come from environment variables (optionally loaded from a .env file
by main.py via python-dotenv). Every value has a default so the API runs
with zero configuration.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Upstream endpoints
CURRENTUVINDEX_URL = "https://currentuvindex.com/api/v1/uvi"
SENAMHI_UV_URL = "https://www.senamhi.gob.pe/?p=radiacion-uv-numerico"

# Region the city table and altitude bands describe
REGION_TIMEZONE = "America/Lima"

# Reference point used by the /test diagnostic (Lima, Plaza Mayor)
LIMA_LAT = -12.0464
LIMA_LNG = -77.0428


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[config] Invalid value for {name}={raw!r}, using default {default}")
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    log_level: str = "INFO"

    currentuvindex_url: str = CURRENTUVINDEX_URL
    senamhi_uv_url: str = SENAMHI_UV_URL

    # Independent timeouts per provider (seconds)
    realtime_timeout_seconds: float = 10.0
    scrape_timeout_seconds: float = 15.0

    cache_ttl_minutes: float = 30.0
    region_timezone: str = REGION_TIMEZONE

    # Scraped values further away than this are ignored
    backup_max_distance_km: float = 200.0

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        settings = cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            environment=os.getenv("ENVIRONMENT", "production"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            currentuvindex_url=os.getenv("CURRENTUVINDEX_URL", CURRENTUVINDEX_URL),
            senamhi_uv_url=os.getenv("SENAMHI_UV_URL", SENAMHI_UV_URL),
            realtime_timeout_seconds=_env_float("REALTIME_TIMEOUT_SECONDS", 10.0),
            scrape_timeout_seconds=_env_float("SCRAPE_TIMEOUT_SECONDS", 15.0),
            cache_ttl_minutes=_env_float("CACHE_TTL_MINUTES", 30.0),
            region_timezone=os.getenv("REGION_TIMEZONE", REGION_TIMEZONE),
            backup_max_distance_km=_env_float("BACKUP_MAX_DISTANCE_KM", 200.0),
        )
        logger.debug(f"[config] Loaded settings: {settings}")
        return settings
