"""
In-process cache for Pokémon lookups.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from cachetools import TTLCache

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ITEMS = 100

ABILITIES_PREFIX = "pokemon-abilities"
DETAILS_PREFIX = "pokemon-details"

_MISSING = object()


class CacheManager:
    """TTL and size bounded cache in front of PokeAPI.

    Values may legitimately be falsy (a Pokémon without abilities caches
    ``[]``), so lookups compare against a sentinel instead of truthiness.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_items: int = DEFAULT_MAX_ITEMS,
        *,
        metrics: Optional["MetricsCollector"] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_items = max_items
        self.metrics = metrics
        self.logger = get_logger("pokemon.cache_manager")

        self._cache: TTLCache = TTLCache(maxsize=max_items, ttl=ttl_seconds, timer=timer)
        # key -> [lock, holders]; dropped once nobody waits on the key
        self._key_locks: Dict[str, List[Any]] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def abilities_key(name: str) -> str:
        return f"{ABILITIES_PREFIX}-{name}"

    @staticmethod
    def details_key(name: str) -> str:
        return f"{DETAILS_PREFIX}-{name}"

    @staticmethod
    def _cache_type(key: str) -> str:
        return "details" if key.startswith(DETAILS_PREFIX) else "abilities"

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for ``key`` or None, counting hit/miss."""
        value = self._cache.get(key, _MISSING)
        if value is _MISSING:
            self._record_access(key, hit=False)
            return None
        self._record_access(key, hit=True)
        return value

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        self.logger.debug("Cached value", key=key, ttl=self.ttl_seconds)
        self._record_size()

    def delete(self, key: str) -> bool:
        """Remove ``key``; True when an entry was actually dropped."""
        removed = self._cache.pop(key, _MISSING) is not _MISSING
        if removed:
            self.logger.info("Cache entry invalidated", key=key)
            self._record_size()
        return removed

    def delete_pokemon(self, name: str) -> int:
        """Drop every entry cached for one Pokémon."""
        return sum(self.delete(key) for key in (self.abilities_key(name), self.details_key(name)))

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        self._cache.expire()
        removed = len(self._cache)
        self._cache.clear()
        self.logger.info("Cache cleared", removed=removed)
        self._record_size()
        return removed

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Tuple[Any, bool]:
        """Return ``(value, from_cache)``, calling ``loader`` at most once per miss.

        Concurrent callers for the same key wait on a per-key lock and are
        served from the cache once the first caller has stored the value.
        Loader exceptions propagate and nothing is cached.
        """
        value = self._cache.get(key, _MISSING)
        if value is not _MISSING:
            self._record_access(key, hit=True)
            return value, True
        self._record_access(key, hit=False)

        entry = self._key_locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                value = self._cache.get(key, _MISSING)
                if value is not _MISSING:
                    return value, True

                value = await loader()
                self.set(key, value)
                return value, False
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                self._key_locks.pop(key, None)

    def stats(self) -> Dict[str, Any]:
        """Snapshot of cache occupancy and hit counters."""
        self._cache.expire()
        total = self.hits + self.misses
        return {
            "size": len(self._cache),
            "max_size": self.max_items,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "hit_ratio": round(self.hits / total, 4) if total else 0.0,
            "keys": sorted(self._cache.keys()),
        }

    def _record_access(self, key: str, hit: bool) -> None:
        if hit:
            self.hits += 1
        else:
            self.misses += 1

        if not self.metrics:
            return
        metric = "cache_hits_total" if hit else "cache_misses_total"
        self.metrics.increment_counter(metric, cache_type=self._cache_type(key))

    def _record_size(self) -> None:
        if self.metrics:
            self.metrics.set_gauge("cache_entries", len(self._cache), cache_type="all")
