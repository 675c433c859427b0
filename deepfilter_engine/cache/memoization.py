import logging
import re
import threading
from typing import Any, Callable, Dict, Hashable, Optional

from deepfilter_data_model.expression_types import CompiledPredicate
from deepfilter_data_model.settings import EngineSettings, settings as default_settings
from deepfilter_engine.cache.lru_cache import LRUCache
from deepfilter_engine.cache.result_cache import ResultCache
from deepfilter_exception_model.exception import InvalidExpressionError

logger = logging.getLogger(__name__)


class FilterMemoization:
    """
    Owns the caches one filtering scope shares: compiled predicates, compiled
    regular expressions and filtered results.

    The module default instance backs every entry point unless a caller passes
    its own instance to get an isolated scope.
    """

    def __init__(self, engine_settings: Optional[EngineSettings] = None):
        cfg = engine_settings or default_settings
        self.predicate_cache = LRUCache("predicate", cfg.predicate_cache_size,
                                        cfg.predicate_cache_ttl_seconds)
        self.regex_cache = LRUCache("regex", cfg.regex_cache_size)
        self.result_cache = ResultCache(cfg.result_cache_collections,
                                        cfg.result_cache_entries_per_collection)

    def get_or_create_predicate(self, key: Hashable,
                                factory: Callable[[], CompiledPredicate]) -> CompiledPredicate:
        return self.predicate_cache.get_or_create(key, factory)

    def compile_regex(self, pattern: str, flags: int = 0) -> "re.Pattern":
        """
        Compile ``pattern`` once per (pattern, flags).

        Raises:
            InvalidExpressionError: if the pattern is not a valid regular expression.
        """

        def _compile():
            try:
                return re.compile(pattern, flags)
            except re.error as e:
                raise InvalidExpressionError(f"Invalid regular expression {pattern!r}: {e}",
                                             expression=pattern) from e

        return self.regex_cache.get_or_create((pattern, flags), _compile)

    def clear(self) -> None:
        self.predicate_cache.clear()
        self.regex_cache.clear()
        self.result_cache.clear()
        logger.info("Filter caches cleared")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "predicate_cache_size": len(self.predicate_cache),
            "regex_cache_size": len(self.regex_cache),
            "result_cache_size": len(self.result_cache),
            "predicate_cache": self.predicate_cache.get_stats(),
            "regex_cache": self.regex_cache.get_stats(),
            "result_cache": self.result_cache.get_stats(),
        }


_default_memoization: Optional[FilterMemoization] = None
_default_lock = threading.Lock()


def get_default_memoization() -> FilterMemoization:
    global _default_memoization
    if _default_memoization is None:
        with _default_lock:
            if _default_memoization is None:
                _default_memoization = FilterMemoization()
    return _default_memoization
