import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from deepfilter_data_model.expression_types import MISSING
from deepfilter_engine.monitoring.performance_monitor import (
    record_cache_eviction, record_cache_hit, record_cache_miss
)

logger = logging.getLogger(__name__)


class LRUCache:
    """
    Thread safe LRU cache with optional time-to-live.

    Entries are refreshed (moved to the most recent end and re-stamped) on
    every hit. ``get_or_create`` runs the factory at most once per key while
    the entry lives, even under concurrent callers.

    Args:
        name: label used for logging and the cache hit/miss counters
        max_size: maximum number of entries before the least recently used is evicted
        ttl_seconds: entry lifetime in seconds, ``None`` for no expiry
    """

    def __init__(self, name: str, max_size: int, ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.name = name
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
            if value is MISSING:
                self._record_miss()
                return default
            self._record_hit()
            return value

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = (value, self._clock())
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)
                self._evictions += 1
                record_cache_eviction(self.name)
                logger.debug(f"{self.name} cache evicted an entry (size={len(self._entries)})")

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        with self._lock:
            value = self._lookup(key)
            if value is not MISSING:
                self._record_hit()
                return value
            self._record_miss()
            value = factory()
            self.put(key, value)
            return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return self._lookup(key, touch=False) is not MISSING

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "ttl_seconds": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": (self._hits / total * 100) if total else 0.0,
            }

    def _lookup(self, key: Hashable, touch: bool = True) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        value, stamp = entry
        now = self._clock()
        if self._ttl is not None and now - stamp > self._ttl:
            del self._entries[key]
            return MISSING
        if touch:
            self._entries.move_to_end(key)
            self._entries[key] = (value, now)
        return value

    def _record_hit(self) -> None:
        self._hits += 1
        record_cache_hit(self.name)

    def _record_miss(self) -> None:
        self._misses += 1
        record_cache_miss(self.name)
