"""
UV Reconciler for Radiación UV

Per-request pipeline:

    CacheCheck -> ConcurrentFetch -> Precedence -> Classify -> CacheWrite -> Respond

Precedence (most authoritative first):
1. CurrentUVIndex: forecast hour matching the local hour (or closest), real.
   Radiation is derived as index x 90.
2. SENAMHI: nearest matched city within 200 km, real. Radiation estimated.
3. Local estimate for both values, not real.

Both providers are awaited with gather(return_exceptions=True): one slow or
failing source never prevents the other from being used. /radiacion always
answers with a complete record.
"""

import asyncio
import copy
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

import pandas as pd

from radiacion_uv.cache_manager import UVCache, utc_now
from radiacion_uv.classification import classify_uv
from radiacion_uv.config import LIMA_LAT, LIMA_LNG, Settings
from radiacion_uv.errors import ForecastUnavailableError
from radiacion_uv.gazetteer import CityUV, estimate_altitude, find_nearest_city
from radiacion_uv.providers.current_uv_index import (
    CurrentUVIndexProvider,
    ForecastPoint,
    RealtimeUV,
)
from radiacion_uv.providers.senamhi import SenamhiProvider
from radiacion_uv.solar_physics import estimate_radiation, estimate_uv, uv_to_radiation

logger = logging.getLogger(__name__)

FORECAST_HOURS = 24

PRECISION_REALTIME = "Alta (datos en tiempo real)"
PRECISION_BACKUP = "Media (datos SENAMHI)"
PRECISION_ESTIMATE = "Media (estimación)"

SOURCE_REALTIME = "CurrentUVIndex API (tiempo real)"
SOURCE_UV_ESTIMATE = "Cálculo estimado UV"
SOURCE_RADIATION_ESTIMATE = "Cálculo estimado radiación"


class AlertKind(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


def make_alert(kind: AlertKind, mensaje: str, detalle: str) -> Dict[str, str]:
    return {"tipo": kind.value, "mensaje": mensaje, "detalle": detalle}


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_instant(value: str) -> Optional[datetime]:
    """Parse an API timestamp. Naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def select_forecast_for_hour(
    forecast: List[ForecastPoint],
    hour: int,
    tz: ZoneInfo,
) -> Optional[ForecastPoint]:
    """
    Pick the forecast entry for a local hour of day.

    An exact hour match wins (first one in array order). Otherwise the entry
    with the smallest absolute hour difference, first encountered on ties.
    """
    best: Optional[ForecastPoint] = None
    best_diff = None

    for point in forecast:
        instant = parse_instant(point["time"])
        if instant is None:
            continue

        diff = abs(instant.astimezone(tz).hour - hour)
        if diff == 0:
            return point
        if best_diff is None or diff < best_diff:
            best, best_diff = point, diff

    return best


class UVReconciler:
    """
    Orchestrates providers, cache and fallback estimates.

    Collaborators are injected so the app lifespan owns their lifecycle and
    tests can substitute them.
    """

    def __init__(
        self,
        cache: UVCache,
        realtime: CurrentUVIndexProvider,
        backup: SenamhiProvider,
        settings: Optional[Settings] = None,
        clock=utc_now,
    ):
        self.cache = cache
        self.realtime = realtime
        self.backup = backup
        self.settings = settings or Settings()
        self.clock = clock
        self.tz = ZoneInfo(self.settings.region_timezone)

    async def _fetch_sources(
        self, lat: float, lng: float
    ) -> Tuple[Optional[RealtimeUV], Optional[List[CityUV]]]:
        """Run both providers concurrently and wait for both to settle."""
        outcomes = await asyncio.gather(
            self.realtime.fetch(lat, lng),
            self.backup.fetch(),
            return_exceptions=True,
        )

        settled = []
        for name, outcome in zip(("realtime", "backup"), outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"[UVReconciler] {name} provider raised {type(outcome).__name__}: {outcome}")
                settled.append(None)
            else:
                settled.append(outcome)

        return settled[0], settled[1]

    async def get_radiation(
        self,
        lat: float,
        lng: float,
        altitude: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Build the UV / radiation record for a coordinate.

        Args:
            lat: Latitude (validated by the caller)
            lng: Longitude (validated by the caller)
            altitude: Meters; estimated from the coordinate when None

        Returns:
            Result record (never with null UV or radiation)
        """
        altitud = altitude if altitude is not None else estimate_altitude(lat, lng)

        # CacheCheck
        key = self.cache.make_key(lat, lng)
        entry = self.cache.get(key)
        if entry is not None:
            age = entry.age_minutes_at(self.clock())
            logger.info(f"[UVReconciler] Using cache for {key} ({age:.1f} min old)")
            return {
                **copy.deepcopy(entry.payload),
                "desde_cache": True,
                "cache_edad_minutos": int(age + 0.5),
            }

        logger.info(f"[UVReconciler] New query: lat={lat}, lng={lng}, alt={altitud}")

        # ConcurrentFetch
        realtime_data, backup_data = await self._fetch_sources(lat, lng)

        now = self.clock()
        local_now = now.astimezone(self.tz)

        uv_real: Optional[float] = None
        radiation_real: Optional[int] = None
        sources: List[str] = []
        precision = PRECISION_ESTIMATE
        alerts: List[Dict[str, str]] = []
        forecast: List[ForecastPoint] = []

        # Precedence (a): realtime
        if realtime_data:
            forecast = realtime_data["forecast"][:FORECAST_HOURS]
            point = select_forecast_for_hour(realtime_data["forecast"], local_now.hour, self.tz)
            uv_real = point["uvi"] if point is not None else realtime_data["uv_actual"]
            radiation_real = uv_to_radiation(uv_real)
            sources.append(SOURCE_REALTIME)
            precision = PRECISION_REALTIME
            logger.info(f"[UVReconciler] Realtime UV for hour {local_now.hour}: {uv_real}")
        else:
            alerts.append(make_alert(
                AlertKind.WARNING,
                "API principal no disponible",
                "CurrentUVIndex no responde, usando datos alternativos",
            ))

        # Precedence (b): SENAMHI by proximity
        if uv_real is None and backup_data:
            nearest = find_nearest_city(lat, lng, backup_data)
            if nearest and nearest["distancia_km"] < self.settings.backup_max_distance_km:
                uv_real = nearest["uv"]
                sources.append(f"SENAMHI Web ({nearest['ciudad']}, ~{nearest['distancia_km']}km)")
                precision = PRECISION_BACKUP
                logger.info(f"[UVReconciler] Backup UV from {nearest['ciudad']}: {uv_real}")
            else:
                logger.info("[UVReconciler] No SENAMHI city close enough")

        # Precedence (c): estimate
        if uv_real is None:
            alerts.append(make_alert(
                AlertKind.ERROR,
                "APIs no responden",
                "Usando datos estimados. Los servicios externos pueden estar "
                "temporalmente inaccesibles.",
            ))

        uv_index = uv_real if uv_real is not None else estimate_uv(lat, lng, local_now, altitud)
        radiation = (radiation_real if radiation_real is not None
                     else estimate_radiation(lat, lng, local_now, altitud))

        if uv_real is None:
            sources.append(SOURCE_UV_ESTIMATE)
        if radiation_real is None:
            sources.append(SOURCE_RADIATION_ESTIMATE)

        # Classify
        classification = classify_uv(uv_index)

        result = {
            "coordenadas": {
                "lat": lat,
                "lng": lng,
                "altitud": int(round(altitud)),
            },
            "uv": {
                "indice": uv_index,
                "nivel": classification.nivel,
                "riesgo": classification.risk,
                "color": classification.color,
                "fuente_real": uv_real is not None,
            },
            "radiacion_solar": {
                "valor": radiation,
                "unidad": "W/m²",
                "fuente_real": radiation_real is not None,
            },
            "forecast": forecast,
            "fuentes_datos": sources,
            "precision": precision,
            "alertas": alerts,
            "hora_local": local_now.strftime("%H:%M:%S"),
            "timestamp": iso_timestamp(now),
        }

        # CacheWrite
        self.cache.put(key, copy.deepcopy(result))

        logger.info(f"[UVReconciler] Response: UV={uv_index}, radiation={radiation}, "
                    f"sources=[{', '.join(sources)}]")
        return result

    async def get_forecast(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Hourly and daily UV forecast from the realtime provider.

        There is no fallback forecast generator.

        Raises:
            ForecastUnavailableError: when the realtime provider has no forecast
        """
        logger.info(f"[UVReconciler] Forecast query: lat={lat}, lng={lng}")
        data = await self.realtime.fetch(lat, lng)

        if not data or not data["forecast"]:
            raise ForecastUnavailableError(
                "No se pudo obtener el pronóstico",
                {"mensaje": "El servicio de pronóstico no está disponible en este momento"},
            )

        df = pd.DataFrame(data["forecast"])
        df["instant"] = pd.to_datetime(df["time"], utc=True, errors="coerce", format="ISO8601")
        df = df.dropna(subset=["instant"]).reset_index(drop=True)
        local = df["instant"].dt.tz_convert(self.tz)
        df["hora"] = local.dt.strftime("%H:%M")
        df["fecha"] = local.dt.strftime("%d/%m")

        hourly = []
        for row in df.itertuples(index=False):
            uv = float(row.uvi)
            classification = classify_uv(uv)
            hourly.append({
                "hora": row.hora,
                "fecha": row.fecha,
                "uv": uv,
                "nivel": classification.nivel,
                "color": classification.color,
            })

        daily = []
        for fecha, group in df.groupby("fecha", sort=False):
            daily.append({
                "fecha": fecha,
                "uv_maximo": max(0.0, float(group["uvi"].max())),
                "horas": [hourly[i] for i in group.index],
            })

        logger.info(f"[UVReconciler] Forecast: {len(hourly)} hours over {len(daily)} days")

        return {
            "coordenadas": {"lat": lat, "lng": lng},
            "uv_actual": data["uv_actual"],
            "pronostico_horas": hourly[:FORECAST_HOURS],
            "pronostico_dias": daily,
            "fuente": data["fuente"],
            "timestamp": iso_timestamp(self.clock()),
        }

    async def check_providers(self) -> Dict[str, Any]:
        """Diagnostic call of each provider against Lima."""
        results: Dict[str, Any] = {
            "timestamp": iso_timestamp(self.clock()),
            "coordenadas_prueba": {"lat": LIMA_LAT, "lng": LIMA_LNG},
        }

        logger.info("[UVReconciler] Probing CurrentUVIndex...")
        start = time.perf_counter()
        realtime_data = await self.realtime.fetch(LIMA_LAT, LIMA_LNG)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        results["currentuvindex"] = {
            "estado": "Funcionando ✅" if realtime_data else "Sin datos ⚠️",
            "tiempo_respuesta": f"{elapsed_ms}ms",
            "datos": {
                "uv_actual": realtime_data["uv_actual"],
                "uv_maximo_hoy": realtime_data["uv_maximo_hoy"],
                "pronostico_horas": len(realtime_data["forecast"]),
            } if realtime_data else None,
        }

        logger.info("[UVReconciler] Probing SENAMHI...")
        start = time.perf_counter()
        backup_data = await self.backup.fetch()
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        results["senamhi_backup"] = {
            "estado": (f"Funcionando ✅ ({len(backup_data)} ciudades)"
                       if backup_data else "Sin datos ⚠️"),
            "tiempo_respuesta": f"{elapsed_ms}ms",
            "ciudades": backup_data[:3] if backup_data else [],
        }

        results["cache"] = self.cache.get_status()

        if realtime_data:
            results["recomendacion"] = "✅ Sistema funcionando correctamente con API principal"
        elif backup_data:
            results["recomendacion"] = "⚠️ API principal no disponible, usando backup SENAMHI"
        else:
            results["recomendacion"] = ("❌ Todas las APIs externas no disponibles, "
                                        "usando cálculos estimados")

        return results
