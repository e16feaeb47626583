"""
Shared fixtures: a controllable clock, canned upstream data and fake
providers so nothing touches the network.
"""

import asyncio
import copy
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from radiacion_uv.cache_manager import UVCache
from radiacion_uv.config import Settings
from radiacion_uv.providers import parse_current_uv_payload
from radiacion_uv.reconciler import UVReconciler


# 19:00 UTC is 14:00 in Lima
NOW_UTC = datetime(2026, 10, 18, 19, 0, tzinfo=timezone.utc)

CURRENT_UV_BODY = {
    "ok": True,
    "now": {"time": "2026-10-18T19:00:00Z", "uvi": 7.2},
    "forecast": [
        {"time": "2026-10-18T17:00:00Z", "uvi": 9.1},
        {"time": "2026-10-18T19:00:00Z", "uvi": 7.2},
        {"time": "2026-10-18T20:00:00Z", "uvi": 8.4},
        {"time": "2026-10-18T21:00:00Z", "uvi": 6.0},
        {"time": "2026-10-19T17:00:00Z", "uvi": 11.3},
    ],
}


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = NOW_UTC):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeRealtimeProvider:
    """Stands in for CurrentUVIndexProvider."""

    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch(self, lat, lng):
        self.calls.append((lat, lng))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)


class FakeBackupProvider:
    """Stands in for SenamhiProvider."""

    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def realtime_data():
    return parse_current_uv_payload(CURRENT_UV_BODY)


@pytest.fixture
def realtime():
    """Realtime provider with no data until a test sets .result or .error."""
    return FakeRealtimeProvider()


@pytest.fixture
def backup():
    """Backup provider with no data until a test sets .result or .error."""
    return FakeBackupProvider()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def reconciler(realtime, backup, settings, clock):
    cache = UVCache(ttl_minutes=settings.cache_ttl_minutes, clock=clock)
    return UVReconciler(cache, realtime, backup, settings=settings, clock=clock)
