"""FastAPI application for Radiación UV.

Endpoints:
- GET  /            API information
- GET  /radiacion   UV index and solar radiation for a coordinate
- GET  /pronostico  Hourly and daily UV forecast
- GET  /test        Check both upstream providers
- POST /cache/clear Empty the result cache
- GET  /status      Uptime, memory, cache size

Example:
    >>> from radiacion_uv.api import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn radiacion_uv.api:create_app --factory
"""

import logging
import math
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from radiacion_uv import __version__
from radiacion_uv.cache_manager import UVCache
from radiacion_uv.config import Settings
from radiacion_uv.errors import CoordinateValidationError, RadiacionUVError
from radiacion_uv.providers import CurrentUVIndexProvider, SenamhiProvider
from radiacion_uv.reconciler import UVReconciler, iso_timestamp

logger = logging.getLogger(__name__)

API_VERSION = __version__

EXAMPLE_RADIACION = "/radiacion?lat=-12.0464&lng=-77.0428"
EXAMPLE_PRONOSTICO = "/pronostico?lat=-12.0464&lng=-77.0428"

ENDPOINTS = [
    "GET /",
    "GET /radiacion?lat=X&lng=Y",
    "GET /pronostico?lat=X&lng=Y",
    "GET /test",
    "POST /cache/clear",
    "GET /status",
]

COORDINATE_FORMAT = {
    "lat": "Latitud en grados decimales (-90 a 90)",
    "lng": "Longitud en grados decimales (-180 a 180)",
    "altitude": "Altitud en metros (opcional)",
}


def build_reconciler(settings: Settings) -> UVReconciler:
    """Wire cache and providers from settings."""
    cache = UVCache(ttl_minutes=settings.cache_ttl_minutes)
    realtime = CurrentUVIndexProvider(
        url=settings.currentuvindex_url,
        timeout=settings.realtime_timeout_seconds,
    )
    backup = SenamhiProvider(
        url=settings.senamhi_uv_url,
        timeout=settings.scrape_timeout_seconds,
    )
    return UVReconciler(cache, realtime, backup, settings=settings)


def _parse_number(raw: str, field: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise CoordinateValidationError(
            f"Parámetro {field} debe ser numérico",
            {"recibido": raw, "formato": COORDINATE_FORMAT},
        )
    if not math.isfinite(value):
        raise CoordinateValidationError(
            f"Parámetro {field} debe ser numérico",
            {"recibido": raw, "formato": COORDINATE_FORMAT},
        )
    return value


def parse_coordinates(
    lat: Optional[str],
    lng: Optional[str],
    example: str,
) -> tuple:
    """
    Validate raw query values.

    Raises:
        CoordinateValidationError: missing, non-numeric or out of range
    """
    if not lat or not lng:
        raise CoordinateValidationError(
            "Parámetros requeridos: lat y lng",
            {"ejemplo": example, "formato": COORDINATE_FORMAT},
        )

    latitude = _parse_number(lat, "lat")
    longitude = _parse_number(lng, "lng")

    if latitude < -90 or latitude > 90:
        raise CoordinateValidationError(
            "Latitud debe estar entre -90 y 90 grados",
            {"recibido": latitude},
        )
    if longitude < -180 or longitude > 180:
        raise CoordinateValidationError(
            "Longitud debe estar entre -180 y 180 grados",
            {"recibido": longitude},
        )

    return latitude, longitude


def _memory_peak_mb() -> Optional[int]:
    """Peak RSS in MB, or None where the resource module is unavailable."""
    if sys.platform == "win32":
        return None

    import resource
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # bytes on macOS, kilobytes on Linux
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return int(round(peak / divisor))


def _format_uptime(seconds: float) -> str:
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m {int(round(seconds % 60))}s"


def get_reconciler(request: Request) -> UVReconciler:
    return request.app.state.reconciler


def create_app(
    settings: Optional[Settings] = None,
    reconciler: Optional[UVReconciler] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Runtime settings (read from the environment if omitted)
        reconciler: Pre-built reconciler; built from settings at startup if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "reconciler", None) is None:
            app.state.reconciler = build_reconciler(settings)
        app.state.started_at = time.monotonic()
        logger.info(f"[api] Radiación UV v{API_VERSION} started "
                    f"(cache TTL {app.state.reconciler.cache.ttl_minutes:g} min)")
        yield
        removed = app.state.reconciler.cache.clear()
        logger.info(f"[api] Shutting down, dropped {removed} cache entries")

    app = FastAPI(
        title="API de Radiación UV",
        description="Radiación UV en tiempo real para Perú: CurrentUVIndex, SENAMHI y estimación local",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.reconciler = reconciler
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RadiacionUVError)
    async def radiacion_error_handler(request: Request, exc: RadiacionUVError):
        logger.warning(f"[api] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            path = request.url.path
            if request.url.query:
                path = f"{path}?{request.url.query}"
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint no encontrado",
                    "ruta_solicitada": path,
                    "metodo": request.method,
                    "endpoints_disponibles": ENDPOINTS,
                    "ejemplo": EXAMPLE_RADIACION,
                },
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"[api] Unhandled error on {request.url.path}: {exc}", exc_info=True)
        content = {
            "error": "Error interno del servidor",
            "mensaje": "No se pudo procesar la solicitud",
            "timestamp": iso_timestamp(datetime.now(timezone.utc)),
        }
        if settings.is_development:
            content["detalle"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    @app.get("/", tags=["info"])
    async def root(reconciler: UVReconciler = Depends(get_reconciler)):
        """API information."""
        cache = reconciler.cache
        return {
            "nombre": "API de Radiación UV con datos en tiempo real",
            "descripcion": "Consulta radiación UV usando CurrentUVIndex API (sin key) y SENAMHI como backup",
            "version": API_VERSION,
            "fuentes_datos": [
                "CurrentUVIndex API (principal - tiempo real)",
                "SENAMHI Web (backup - índice UV)",
                "Cálculos propios (fallback)",
            ],
            "uso": "GET /radiacion?lat=LATITUD&lng=LONGITUD",
            "ejemplo": EXAMPLE_RADIACION,
            "endpoints": {
                "GET /": "Información de la API",
                "GET /radiacion": "Consultar radiación UV por coordenadas",
                "GET /pronostico": "Pronóstico UV para las próximas horas/días",
                "GET /test": "Probar conexión con las APIs",
                "POST /cache/clear": "Limpiar cache",
                "GET /status": "Estado del servidor",
            },
            "caracteristicas": {
                "Sin API Key": "No requiere registro ni autenticación",
                "Tiempo real": "Datos actualizados cada hora",
                "Pronóstico": "Hasta 5 días de pronóstico UV",
                "Cache inteligente": (f"{cache.size} entradas, duración: "
                                      f"{cache.ttl_minutes:g} minutos"),
            },
            "timestamp": iso_timestamp(datetime.now(timezone.utc)),
        }

    @app.get("/radiacion", tags=["uv"])
    async def radiacion(
        lat: Optional[str] = None,
        lng: Optional[str] = None,
        altitude: Optional[str] = None,
        reconciler: UVReconciler = Depends(get_reconciler),
    ):
        """UV index and solar radiation for a coordinate."""
        latitude, longitude = parse_coordinates(lat, lng, EXAMPLE_RADIACION)
        altitud = _parse_number(altitude, "altitude") if altitude else None
        return await reconciler.get_radiation(latitude, longitude, altitud)

    @app.get("/pronostico", tags=["uv"])
    async def pronostico(
        lat: Optional[str] = None,
        lng: Optional[str] = None,
        reconciler: UVReconciler = Depends(get_reconciler),
    ):
        """Hourly (next 24h) and daily-max UV forecast."""
        latitude, longitude = parse_coordinates(lat, lng, EXAMPLE_PRONOSTICO)
        return await reconciler.get_forecast(latitude, longitude)

    @app.get("/test", tags=["info"])
    async def test_providers(reconciler: UVReconciler = Depends(get_reconciler)):
        """Check both upstream providers."""
        return await reconciler.check_providers()

    @app.post("/cache/clear", tags=["cache"])
    async def clear_cache(reconciler: UVReconciler = Depends(get_reconciler)):
        """Empty the result cache."""
        removed = reconciler.cache.clear()
        return {
            "mensaje": "Cache limpiado exitosamente",
            "entradas_eliminadas": removed,
            "timestamp": iso_timestamp(datetime.now(timezone.utc)),
        }

    @app.get("/status", tags=["info"])
    async def status(request: Request, reconciler: UVReconciler = Depends(get_reconciler)):
        """Server status."""
        uptime = time.monotonic() - request.app.state.started_at
        return {
            "estado": "Funcionando ✅",
            "uptime": {
                "segundos": int(round(uptime)),
                "formato": _format_uptime(uptime),
            },
            "memoria": {
                "pico_mb": _memory_peak_mb(),
            },
            "cache": reconciler.cache.get_status(),
            "version": API_VERSION,
            "timestamp": iso_timestamp(datetime.now(timezone.utc)),
        }

    return app
