"""
Peruvian city gazetteer, proximity matcher and altitude bands.

The SENAMHI backup source reports UV values by city name, not by
coordinate. To use those values for an arbitrary (lat, lng) we:

1. Fold the scraped name (lowercase, strip Spanish diacritics)
2. Match it against a fixed, ORDERED table of city names, where a match
   means either string contains the other
3. Keep the matched city closest to the target

Distances use a flat-earth approximation (degrees x 111 km). Good enough
for "is this within 200 km", nothing more.
"""

import logging
import math
from typing import Dict, Iterable, List, NamedTuple, Optional, TypedDict

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111


class CityReference(NamedTuple):
    name: str
    lat: float
    lng: float


class CityUV(TypedDict):
    """One scraped (city, UV value) observation."""
    ciudad: str
    uv: float


class NearestCity(TypedDict):
    ciudad: str
    uv: float
    distancia_km: int
    coordenadas_referencia: Dict[str, float]


# Iteration order matters: on equal distance the earlier entry wins.
CITY_REFERENCES: tuple = (
    CityReference("lima", -12.0464, -77.0428),
    CityReference("callao", -12.0566, -77.1181),
    CityReference("cusco", -13.5319, -71.9675),
    CityReference("arequipa", -16.3409, -71.5675),
    CityReference("trujillo", -8.0819, -79.1094),
    CityReference("chiclayo", -6.7714, -79.8397),
    CityReference("iquitos", -3.7833, -73.3094),
    CityReference("puno", -15.8422, -70.0199),
    CityReference("cajamarca", -7.1381, -78.4894),
    CityReference("piura", -5.2008, -80.6267),
    CityReference("huancayo", -12.0653, -75.2097),
    CityReference("ayacucho", -13.1583, -74.2233),
    CityReference("huaraz", -9.5312, -77.5283),
    CityReference("tarapoto", -6.5008, -76.3622),
    CityReference("pucallpa", -8.3789, -74.5744),
    CityReference("tacna", -18.0147, -70.2675),
    CityReference("tumbes", -3.5664, -80.4514),
    CityReference("huanuco", -9.9306, -76.2422),
    CityReference("ica", -14.0678, -75.7267),
    CityReference("moquegua", -17.1964, -70.9350),
)

_FOLD_TABLE = str.maketrans({
    **dict.fromkeys("áàäâ", "a"),
    **dict.fromkeys("éèëê", "e"),
    **dict.fromkeys("íìïî", "i"),
    **dict.fromkeys("óòöô", "o"),
    **dict.fromkeys("úùüû", "u"),
    "ñ": "n",
})


def normalize_city_name(name: str) -> str:
    """Lowercase and fold Spanish diacritics ("Huánuco" -> "huanuco")."""
    return name.lower().translate(_FOLD_TABLE)


def names_match(observed: str, reference: str) -> bool:
    """Bidirectional substring containment on already-normalized names."""
    return reference in observed or observed in reference


def find_nearest_city(
    lat: float,
    lng: float,
    observations: Optional[Iterable[CityUV]],
) -> Optional[NearestCity]:
    """
    Find the scraped observation whose matched city is closest to (lat, lng).

    Args:
        lat: Target latitude
        lng: Target longitude
        observations: Scraped (ciudad, uv) pairs

    Returns:
        NearestCity with the observation's scraped name and value, or None
        if no observation name matches the gazetteer
    """
    observations = list(observations or [])
    if not observations:
        return None

    best: Optional[NearestCity] = None
    best_distance = math.inf

    for obs in observations:
        observed = normalize_city_name(obs["ciudad"])

        for city in CITY_REFERENCES:
            if not names_match(observed, city.name):
                continue

            distance = math.sqrt((city.lat - lat) ** 2 + (city.lng - lng) ** 2)
            if distance < best_distance:
                best_distance = distance
                best = {
                    "ciudad": obs["ciudad"],
                    "uv": obs["uv"],
                    "distancia_km": int(round(distance * KM_PER_DEGREE)),
                    "coordenadas_referencia": {"lat": city.lat, "lng": city.lng},
                }

    if best is None:
        logger.debug(f"[gazetteer] No gazetteer match among {len(observations)} observations")
    else:
        logger.debug(f"[gazetteer] Nearest match: {best['ciudad']} (~{best['distancia_km']}km)")

    return best


# Ordered bounding rules: (predicate, meters, label). First match wins.
ALTITUDE_RULES: List[tuple] = [
    (lambda lat, lng: lat > -6 and lng > -75, 150, "Selva norte"),
    (lambda lat, lng: lat > -12 and lng > -76, 400, "Selva central"),
    (lambda lat, lng: lat > -15 and lng > -76, 200, "Selva sur"),
    (lambda lat, lng: lng < -76, 100, "Costa"),
    (lambda lat, lng: lng < -70 and lat < -14, 3800, "Altiplano"),
    (lambda lat, lng: lng < -72, 3200, "Sierra alta"),
]

DEFAULT_ALTITUDE = 2500  # Sierra media


def estimate_altitude(lat: float, lng: float) -> int:
    """
    Coarse altitude (meters) for a Peruvian coordinate.

    Lima (-12.0464, -77.0428) falls in the coastal band: 100 m.
    """
    for predicate, meters, label in ALTITUDE_RULES:
        if predicate(lat, lng):
            logger.debug(f"[gazetteer] Altitude band for ({lat}, {lng}): {label} ({meters}m)")
            return meters
    return DEFAULT_ALTITUDE
