"""
Radiación UV: Real-Time UV Index API for Peru

Serves UV index and solar radiation for any coordinate, reconciling
CurrentUVIndex (real time) with SENAMHI (scraped backup) and falling back to
a local estimate when both are down.

Usage:
    python main.py                         # start the HTTP server
    python main.py serve --port 8080
    python main.py consultar --lat -12.0464 --lng -77.0428
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime

import uvicorn
from colorama import Fore, Style, init
from dotenv import load_dotenv

from radiacion_uv import __version__
from radiacion_uv.api import build_reconciler, create_app, parse_coordinates
from radiacion_uv.config import Settings
from radiacion_uv.errors import CoordinateValidationError

# Load environment variables
load_dotenv()

# Initialize colorama for Windows terminal colors
init()

# Ensure logs directory exists
os.makedirs("logs", exist_ok=True)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler("logs/radiacion_uv.log", mode='a', encoding='utf-8'),
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Radiación UV - UV index API (CurrentUVIndex + SENAMHI + estimate)'
    )
    subparsers = parser.add_subparsers(dest='command')

    serve = subparsers.add_parser('serve', help='Start the HTTP server (default)')
    serve.add_argument('--host', default=None, help='Bind address (default: HOST or 0.0.0.0)')
    serve.add_argument('--port', type=int, default=None, help='Port (default: PORT or 3000)')

    query = subparsers.add_parser('consultar', help='Query one coordinate and print JSON')
    query.add_argument('--lat', required=True)
    query.add_argument('--lng', required=True)
    query.add_argument('--altitude', type=float, default=None)

    return parser.parse_args(argv)


def print_banner(settings: Settings, host: str, port: int):
    """Print the startup banner."""
    base = f"http://localhost:{port}"
    print(f"\n{Fore.YELLOW}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.YELLOW}   API de Radiación UV v{__version__}{Style.RESET_ALL}")
    print(f"{Fore.YELLOW}   Puerto: {port}{Style.RESET_ALL}")
    print(f"{Fore.YELLOW}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [ENDPOINTS]{Style.RESET_ALL}")
    print(f"      {base}/radiacion?lat=-12.0464&lng=-77.0428")
    print(f"      {base}/pronostico?lat=-12.0464&lng=-77.0428")
    print(f"      {base}/test")
    print(f"      {base}/status")
    print(f"{Fore.WHITE}   [SOURCES]{Style.RESET_ALL} CurrentUVIndex > SENAMHI (<{settings.backup_max_distance_km:g}km) > Estimate")
    print(f"{Fore.WHITE}   [CACHE]{Style.RESET_ALL}   {settings.cache_ttl_minutes:g} min")
    print(f"{Fore.WHITE}   [START]{Style.RESET_ALL}   {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"{Fore.YELLOW}{'=' * 60}{Style.RESET_ALL}\n")


def serve(settings: Settings, host: str, port: int) -> int:
    """Run the API under uvicorn."""
    print_banner(settings, host, port)
    logger.info(f"[main] Starting server on {host}:{port} ({settings.environment})")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


async def consultar(settings: Settings, lat: str, lng: str, altitude=None) -> int:
    """One-shot reconciliation printed to stdout."""
    try:
        latitude, longitude = parse_coordinates(lat, lng, "--lat -12.0464 --lng -77.0428")
    except CoordinateValidationError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e.message}")
        return 2

    reconciler = build_reconciler(settings)
    result = await reconciler.get_radiation(latitude, longitude, altitude)

    uv = result["uv"]
    color = Fore.GREEN if uv["fuente_real"] else Fore.YELLOW
    print(f"{color}UV {uv['indice']} ({uv['nivel']}){Style.RESET_ALL} - {result['precision']}")
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    settings = Settings.from_env()

    if args.command == 'consultar':
        return asyncio.run(consultar(settings, args.lat, args.lng, args.altitude))

    host = getattr(args, 'host', None) or settings.host
    port = getattr(args, 'port', None) or settings.port
    return serve(settings, host, port)


if __name__ == "__main__":
    sys.exit(main())
