"""
Radiación UV: Real-Time UV Index API for Peru

Answers "what is the UV index / solar radiation at (lat, lng) right now"
by querying two upstream sources concurrently and reconciling them.

Fallback chain (most authoritative first):
- CurrentUVIndex API  - hourly UV time series, no API key required
- SENAMHI Web         - scraped city UV values, matched by proximity
- Local estimate      - heuristic formulas in solar_physics.py

Architecture:
    providers/       - Upstream data sources:
                       * current_uv_index.py - CurrentUVIndex (primary)
                       * senamhi.py          - SENAMHI HTML scrape (backup)
    reconciler.py    - Concurrent fetch + precedence + result assembly
    cache_manager.py - 30-minute TTL cache keyed by rounded coordinates
    gazetteer.py     - Peruvian city table, proximity matcher, altitude bands
    classification.py - UV index -> level/color/risk
    solar_physics.py - Heuristic UV and radiation estimators
    api.py           - FastAPI application

Entry Points:
    main.py              - Start the HTTP server (uvicorn)
    main.py consultar    - One-shot query printed as JSON
"""

__version__ = "3.0.0"
__author__ = "Radiación UV"
