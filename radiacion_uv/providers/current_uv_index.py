"""
CurrentUVIndex Provider for Radiación UV

Primary, real-time source. Free API, no key required:

    GET https://currentuvindex.com/api/v1/uvi?latitude=..&longitude=..

Response (abridged):
    {
        "ok": true,
        "now": {"time": "2026-10-18T19:00:00Z", "uvi": 7.2},
        "forecast": [{"time": "2026-10-18T20:00:00Z", "uvi": 6.1}, ...],
        "history": [...]
    }

The forecast is hourly and covers several days. "Today's max" is computed
against the calendar date the API reports in now.time, not the server's.
"""

import logging
from typing import Any, List, Optional, TypedDict

import httpx

from radiacion_uv.config import CURRENTUVINDEX_URL
from radiacion_uv.resilience import MalformedPayloadError, fetch_or_none

logger = logging.getLogger(__name__)


class ForecastPoint(TypedDict):
    time: str
    uvi: float


class RealtimeUV(TypedDict):
    """Normalized realtime reading."""
    uv_actual: float
    uv_maximo_hoy: float
    hora: str
    forecast: List[ForecastPoint]
    fuente: str


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_current_uv_payload(data: Any) -> RealtimeUV:
    """
    Validate and normalize a CurrentUVIndex JSON body.

    Raises:
        MalformedPayloadError: if the body is not a successful UV payload
    """
    if not isinstance(data, dict) or not data.get("ok"):
        raise MalformedPayloadError("Payload missing 'ok' flag")

    now = data.get("now")
    if not isinstance(now, dict) or not _is_number(now.get("uvi")) or not now.get("time"):
        raise MalformedPayloadError("Payload missing 'now' reading")

    forecast: List[ForecastPoint] = []
    raw_forecast = data.get("forecast") or []
    if not isinstance(raw_forecast, list):
        raise MalformedPayloadError("'forecast' is not a list")

    for item in raw_forecast:
        if isinstance(item, dict) and item.get("time") and _is_number(item.get("uvi")):
            forecast.append({"time": str(item["time"]), "uvi": float(item["uvi"])})

    dropped = len(raw_forecast) - len(forecast)
    if dropped:
        logger.debug(f"[CurrentUVIndexProvider] Dropped {dropped} malformed forecast entries")

    current = float(now["uvi"])
    now_time = str(now["time"])

    # Provider calendar: the date part of now.time
    today = now_time[:10]
    max_today = current
    for point in forecast:
        if point["time"].startswith(today) and point["uvi"] > max_today:
            max_today = point["uvi"]

    return {
        "uv_actual": current,
        "uv_maximo_hoy": max_today,
        "hora": now_time,
        "forecast": forecast,
        "fuente": "CurrentUVIndex API",
    }


class CurrentUVIndexProvider:
    """
    Provider for real-time UV index and hourly UV forecast.

    Never raises: fetch() returns None on any failure.
    """

    NAME = "CurrentUVIndexProvider"

    HEADERS = {
        "User-Agent": "Mozilla/5.0 (compatible; RadiacionUV-API/2.0)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        url: str = CURRENTUVINDEX_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport
        logger.debug(f"[{self.NAME}] Initialized ({url}, timeout {timeout}s)")

    async def _request(self, lat: float, lng: float) -> RealtimeUV:
        params = {"latitude": lat, "longitude": lng}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            logger.info(f"[{self.NAME}] GET {self.url} ({lat}, {lng})")
            resp = await client.get(self.url, params=params, headers=self.HEADERS)
            logger.debug(f"[{self.NAME}] Response status: {resp.status_code}")
            resp.raise_for_status()
            data = resp.json()

        result = parse_current_uv_payload(data)
        logger.info(f"[{self.NAME}] [OK] UV now={result['uv_actual']}, "
                    f"max today={result['uv_maximo_hoy']}, "
                    f"{len(result['forecast'])} forecast hours")
        return result

    async def fetch(self, lat: float, lng: float) -> Optional[RealtimeUV]:
        """
        Fetch current UV and forecast for a coordinate.

        Returns:
            RealtimeUV, or None on timeout, HTTP error or malformed payload
        """
        return await fetch_or_none(self._request, self.NAME, lat, lng)

