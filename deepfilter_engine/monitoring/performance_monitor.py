import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

FILTER_CALLS = Counter('deepfilter_filter_calls_total', 'Filter entry point invocations', ['entry_point'])
PHASE_LATENCY = Histogram('deepfilter_phase_latency_seconds', 'Latency of filter phases', ['phase'])
CACHE_HITS = Counter('deepfilter_cache_hits_total', 'Cache hits', ['cache'])
CACHE_MISSES = Counter('deepfilter_cache_misses_total', 'Cache misses', ['cache'])
CACHE_EVICTIONS = Counter('deepfilter_cache_evictions_total', 'Cache evictions', ['cache'])


class PerformanceMonitor:
    """Times filter phases into PHASE_LATENCY when monitoring is enabled for a call."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def record_call(self, entry_point: str) -> None:
        FILTER_CALLS.labels(entry_point=entry_point).inc()

    @contextmanager
    def phase(self, name: str):
        if not self.enabled:
            yield
            return
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            PHASE_LATENCY.labels(phase=name).observe(elapsed)
            logger.debug(f"Phase {name} took {elapsed * 1000:.3f}ms")


def record_cache_hit(cache: str) -> None:
    CACHE_HITS.labels(cache=cache).inc()


def record_cache_miss(cache: str) -> None:
    CACHE_MISSES.labels(cache=cache).inc()


def record_cache_eviction(cache: str) -> None:
    CACHE_EVICTIONS.labels(cache=cache).inc()
