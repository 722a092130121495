"""
Time-bounded cache of upstream price responses.

Entries are keyed by the normalized asset-id query (``"bitcoin,ethereum"``)
and are never partially updated: every ``put`` replaces the whole entry.
Stale entries are not evicted, only ignored on read.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from app.core.config import cache_logger, settings
from app.core.utils import Clock


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached upstream response.

    Attributes:
        query_key: Normalized, comma-joined lowercase asset ids.
        payload: The provider's response body, unmodified.
        fetched_at: When the payload was fetched.
    """

    query_key: str
    payload: dict[str, Any]
    fetched_at: datetime


class PriceCache:
    """In-memory TTL cache for price payloads."""

    def __init__(self, ttl_seconds: float | None = None, clock: Clock | None = None):
        self.ttl = timedelta(
            seconds=ttl_seconds
            if ttl_seconds is not None
            else settings.PRICE_CACHE_TTL_SECONDS
        )
        self._clock = clock or Clock()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, query_key: str) -> CacheEntry | None:
        """Return the entry for ``query_key``, fresh or not."""
        return self._entries.get(query_key)

    def put(self, query_key: str, payload: dict[str, Any]) -> CacheEntry:
        """Store ``payload`` stamped with the current time, replacing any prior entry."""
        entry = CacheEntry(
            query_key=query_key,
            payload=payload,
            fetched_at=self._clock.now(),
        )
        self._entries[query_key] = entry
        cache_logger.debug(f"Cached prices for '{query_key}'")
        return entry

    def is_fresh(self, entry: CacheEntry, now: datetime | None = None) -> bool:
        """True while ``entry`` is younger than the TTL."""
        now = now or self._clock.now()
        return now - entry.fetched_at < self.ttl

    def clear(self) -> None:
        self._entries.clear()
        cache_logger.info("Price cache cleared")
