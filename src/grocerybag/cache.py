"""In-memory response cache for the inventory endpoint."""

import time
from collections.abc import Callable

from grocerybag.ingest.schemas import InventoryResponse

CacheKey = tuple[str, str, str]


class InventoryCache:
    """Time-boxed map from (store, query, zip) to an inventory response.

    Entries expire ``ttl`` seconds after they are stored. Expired entries
    are dropped on lookup and purged whenever a new entry is stored. The
    clock is injectable for tests.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, InventoryResponse]] = {}

    @staticmethod
    def key(store: str, query: str, zip_code: str) -> CacheKey:
        return (store, query, zip_code)

    def get(self, store: str, query: str, zip_code: str) -> InventoryResponse | None:
        """Return the cached response, or None if missing or expired."""
        key = self.key(store, query, zip_code)
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, response = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[key]
            return None
        return response

    def set(self, store: str, query: str, zip_code: str, response: InventoryResponse) -> None:
        now = self._clock()
        self.purge_expired(now)
        self._entries[self.key(store, query, zip_code)] = (now, response)

    def purge_expired(self, now: float | None = None) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock() if now is None else now
        expired = [
            key for key, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
