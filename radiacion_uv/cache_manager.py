"""
Result Cache for Radiación UV

In-memory, process-wide cache of full /radiacion results.

- Key: coordinates rounded to 4 decimals ("-12.0464_-77.0428"). Requests
  that round to the same key share an entry.
- TTL: 30 minutes, checked lazily on read. An expired entry is deleted when
  it is read, there is no background sweep.
- Writes always overwrite (last write wins).

The cache is owned by the application: created in the FastAPI lifespan,
cleared at shutdown, and injected into the reconciler.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 30


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """Cached payload with its insertion time."""
    key: str
    payload: Dict[str, Any]
    created_at: datetime

    def age_at(self, now: datetime) -> timedelta:
        return now - self.created_at

    def age_minutes_at(self, now: datetime) -> float:
        return self.age_at(now).total_seconds() / 60


class UVCache:
    """
    TTL cache keyed by rounded coordinates.

    All operations touch a single key of a plain dict and run on the event
    loop thread, so each one is atomic.
    """

    def __init__(
        self,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        logger.info(f"[UVCache] Initialized (TTL: {ttl_minutes:g} min)")

    @staticmethod
    def make_key(lat: float, lng: float) -> str:
        """Build the cache key for a coordinate."""
        return f"{lat:.4f}_{lng:.4f}"

    @property
    def ttl_minutes(self) -> float:
        return self.ttl.total_seconds() / 60

    @property
    def size(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Return the entry for key if it is still fresh.

        Expired entries are removed as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.age_at(self.clock()) >= self.ttl:
            logger.info(f"[UVCache] EXPIRED {key} ({entry.age_minutes_at(self.clock()):.1f} min old)")
            del self._entries[key]
            return None

        logger.info(f"[UVCache] HIT {key}")
        return entry

    def put(self, key: str, payload: Dict[str, Any]) -> CacheEntry:
        """Store payload under key, replacing any existing entry."""
        entry = CacheEntry(key=key, payload=payload, created_at=self.clock())
        self._entries[key] = entry
        logger.debug(f"[UVCache] PUT {key} ({self.size} entries)")
        return entry

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        removed = len(self._entries)
        self._entries.clear()
        logger.info(f"[UVCache] Cleared {removed} entries")
        return removed

    def get_status(self) -> dict:
        return {
            "entradas": self.size,
            "duracion_minutos": self.ttl_minutes,
        }
