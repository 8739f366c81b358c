"""
Short-lived read-through cache for upstream reads and assembled series.

Entries expire by age only; nothing invalidates them early. `prune()` drops
entries that have already expired and is driven by the background scheduler.
"""
from typing import Any, Awaitable, Callable, Dict, Hashable, Tuple
import logging
import time

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    def __init__(self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, stored_at: float, now: float) -> bool:
        return (now - stored_at) < self.ttl_seconds

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry[0], self._clock()):
            return default
        return entry[1]

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Serve `key` from cache if fresh, otherwise await `loader()` and store it."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = await loader()
        self.set(key, value)
        return value

    def prune(self) -> int:
        now = self._clock()
        expired = [key for key, (stored_at, _) in list(self._entries.items()) if not self._is_fresh(stored_at, now)]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug(f"Pruned {len(expired)} expired cache entries")
        return len(expired)
