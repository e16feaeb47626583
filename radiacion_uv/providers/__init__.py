"""
Providers package for Radiación UV

Upstream UV data sources, in order of precedence:

1. CurrentUVIndex - Real-time index + hourly forecast (primary)
2. SENAMHI        - Scraped city values, matched by proximity (backup)

Both return None instead of raising when they have nothing usable.
"""

from radiacion_uv.providers.current_uv_index import (
    CurrentUVIndexProvider,
    ForecastPoint,
    RealtimeUV,
    parse_current_uv_payload,
)

from radiacion_uv.providers.senamhi import (
    SenamhiProvider,
    extract_uv_readings,
)

__all__ = [
    # CurrentUVIndex (primary)
    "CurrentUVIndexProvider",
    "ForecastPoint",
    "RealtimeUV",
    "parse_current_uv_payload",
    # SENAMHI (backup)
    "SenamhiProvider",
    "extract_uv_readings",
]
