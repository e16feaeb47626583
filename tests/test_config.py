"""
Tests for environment-driven settings.

Run with: python -m pytest tests/test_config.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from radiacion_uv.config import CURRENTUVINDEX_URL, Settings

ENV_VARS = [
    "HOST", "PORT", "ENVIRONMENT", "LOG_LEVEL", "CURRENTUVINDEX_URL",
    "SENAMHI_UV_URL", "REALTIME_TIMEOUT_SECONDS", "SCRAPE_TIMEOUT_SECONDS",
    "CACHE_TTL_MINUTES", "REGION_TIMEZONE",
    "BACKUP_MAX_DISTANCE_KM",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env):
        settings = Settings.from_env()
        logger.info(f"[TEST] Default settings: {settings}")

        assert settings.port == 3000
        assert settings.environment == "production"
        assert settings.currentuvindex_url == CURRENTUVINDEX_URL
        assert settings.realtime_timeout_seconds == 10.0
        assert settings.scrape_timeout_seconds == 15.0
        assert settings.cache_ttl_minutes == 30.0
        assert settings.region_timezone == "America/Lima"
        assert settings.backup_max_distance_km == 200.0
        assert not settings.is_development

    def test_overrides(self, clean_env):
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("ENVIRONMENT", "Development")
        clean_env.setenv("CACHE_TTL_MINUTES", "5")

        settings = Settings.from_env()
        assert settings.port == 8080
        assert settings.is_development
        assert settings.cache_ttl_minutes == 5.0

    def test_invalid_number_falls_back(self, clean_env):
        clean_env.setenv("PORT", "not-a-port")
        clean_env.setenv("REALTIME_TIMEOUT_SECONDS", "")

        settings = Settings.from_env()
        assert settings.port == 3000
        assert settings.realtime_timeout_seconds == 10.0


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
