"""
Solar Physics Module for Radiación UV

Heuristic estimators used when no upstream provider answers.

These are NOT radiative-transfer models. They combine a handful of
multiplicative factors (latitude, altitude, hour, season, haze) around a
fixed base value:

- UV index:  base 12, seasonal peak anchored to the southern summer (December)
- Radiation: base 800 W/m2, seasonal peak anchored to June

The two estimators are parameterized independently and are not expected to
agree with each other.
"""

import math
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

UV_BASE = 12.0
RADIATION_BASE = 800.0  # W/m2


def _hour_factor(hour: int) -> float:
    """Sunrise-to-sunset bell curve, zero outside ~06:00-18:00."""
    return max(0.0, math.sin(math.pi * (hour - 6) / 12))


def estimate_uv(lat: float, lng: float, at_time: datetime, altitude: float = 0) -> float:
    """
    Estimate the UV index for a location and local time.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees (unused by the heuristic)
        at_time: Local time at the location
        altitude: Elevation in meters

    Returns:
        UV index >= 0, rounded to one decimal
    """
    hour = at_time.hour
    month = at_time.month
    day = at_time.day

    lat_factor = 1 - (abs(lat) / 90) * 0.4
    alt_factor = 1 + (altitude / 1000) * 0.15
    hour_factor = _hour_factor(hour)
    month_factor = 1 + 0.3 * math.cos(2 * math.pi * (month - 12) / 12)
    day_factor = 1 + 0.1 * math.sin(2 * math.pi * day / 365)

    # Midday haze
    cloud_factor = 0.9 if 10 <= hour <= 16 else 1.0

    uv = UV_BASE * lat_factor * alt_factor * hour_factor * month_factor * day_factor * cloud_factor
    result = round(max(0.0, uv), 1)

    logger.debug(f"[solar_physics] estimate_uv lat={lat} alt={altitude} "
                 f"hour={hour} month={month} -> {result}")
    return result


def estimate_radiation(lat: float, lng: float, at_time: datetime, altitude: float = 0) -> int:
    """
    Estimate global solar radiation.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees (unused by the heuristic)
        at_time: Local time at the location
        altitude: Elevation in meters

    Returns:
        Radiation in W/m2 (>= 0, integer)
    """
    hour = at_time.hour
    month = at_time.month

    hour_factor = _hour_factor(hour)
    alt_factor = 1 + (altitude / 10000) * 0.25
    lat_factor = 1 - (abs(lat) / 90) * 0.3
    month_factor = 1 + 0.2 * math.cos(2 * math.pi * (month - 6) / 12)

    radiation = RADIATION_BASE * hour_factor * alt_factor * lat_factor * month_factor
    result = int(round(max(0.0, radiation)))

    logger.debug(f"[solar_physics] estimate_radiation lat={lat} alt={altitude} "
                 f"hour={hour} month={month} -> {result} W/m2")
    return result


def uv_to_radiation(index: float) -> int:
    """
    Convert a measured UV index into a radiation figure.

    Fixed x90 multiplier. This is a display heuristic, not physics.
    """
    return int(round(index * 90))
