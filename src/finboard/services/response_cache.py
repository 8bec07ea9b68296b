"""
# Response Cache

In-process TTL cache for market-data responses, keyed by
`provider:endpoint:<params as sorted JSON>`. Expired entries read as a miss. They are
evicted when read and on every write, so they do not accumulate.
"""

import json
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from finboard.config import settings
from finboard.managers.logging_manager import get_logger

logger = get_logger(prefix="[ResponseCache]")


def cache_key(provider: str, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
    return f"{provider}:{endpoint}:{json.dumps(dict(params or {}), sort_keys=True)}"


class ResponseCache:
    """
    TTL cache for provider responses.

    Args:
        ttl_seconds: Entry lifetime; defaults to `settings.MARKET_DATA_CACHE_TTL_SECONDS`.
        clock: Monotonic time source.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.MARKET_DATA_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, data = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[key]
            logger.debug(f"Expired cache entry {key}")
            return None
        return data

    def _evict_expired(self, now: float):
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    def set(self, key: str, data: Any):
        now = self._clock()
        self._evict_expired(now)
        self._entries[key] = (now, data)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
