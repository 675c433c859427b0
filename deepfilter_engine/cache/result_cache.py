import logging
import threading
import weakref
from collections import OrderedDict
from typing import Any, Dict, Hashable, List, Optional

from deepfilter_engine.cache.lru_cache import LRUCache
from deepfilter_engine.monitoring.performance_monitor import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)


class _SourceSlot:
    """Results cached for one source collection."""

    __slots__ = ("ref", "strong", "length", "entries")

    def __init__(self, source: Any, max_entries: int, on_collect):
        self.ref: Optional[weakref.ref] = None
        self.strong: Any = None
        try:
            self.ref = weakref.ref(source, on_collect)
        except TypeError:
            # lists and tuples cannot be weakly referenced
            self.strong = source
        self.length = len(source)
        self.entries = LRUCache("result_entries", max_entries)

    def target(self) -> Any:
        if self.ref is not None:
            return self.ref()
        return self.strong


class ResultCache:
    """
    Filtered results keyed by (source collection, structural key).

    Entries live only as long as their source: weakly referenced sources drop
    their slot when collected, other sources are held in a bounded LRU of
    collections. A slot is discarded when the source's length changed since
    its results were stored. Length is the only staleness check: replacing
    items in place (``items[0] = other``) keeps serving the old results until
    the length changes or the cache is cleared.
    """

    def __init__(self, max_collections: int, max_entries_per_collection: int):
        self._max_collections = max_collections
        self._max_entries = max_entries_per_collection
        self._slots: "OrderedDict[int, _SourceSlot]" = OrderedDict()
        self._lock = threading.RLock()

    def get(self, source: Any, key: Hashable) -> Optional[List[Any]]:
        with self._lock:
            slot = self._slot_for(source)
            if slot is None:
                record_cache_miss("result")
                return None
            cached = slot.entries.get(key)
            if cached is None:
                record_cache_miss("result")
                return None
            self._slots.move_to_end(id(source))
            record_cache_hit("result")
            return list(cached)

    def put(self, source: Any, key: Hashable, result: List[Any]) -> None:
        with self._lock:
            slot = self._slot_for(source)
            if slot is None:
                slot = _SourceSlot(source, self._max_entries, self._make_collector(id(source)))
                self._slots[id(source)] = slot
                while len(self._slots) > self._max_collections:
                    self._slots.popitem(last=False)
            self._slots.move_to_end(id(source))
            slot.entries.put(key, list(result))

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()
        logger.debug("Result cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return sum(len(slot.entries) for slot in self._slots.values())

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "collections": len(self._slots),
                "max_collections": self._max_collections,
                "entries": sum(len(slot.entries) for slot in self._slots.values()),
                "max_entries_per_collection": self._max_entries,
            }

    def _slot_for(self, source: Any) -> Optional[_SourceSlot]:
        slot = self._slots.get(id(source))
        if slot is None:
            return None
        if slot.target() is not source or slot.length != len(source):
            del self._slots[id(source)]
            return None
        return slot

    def _make_collector(self, source_id: int):
        def _collect(ref):
            with self._lock:
                slot = self._slots.get(source_id)
                if slot is not None and slot.ref is ref:
                    del self._slots[source_id]
        return _collect
