"""
Lazy and early-exit variants of filter_collection.

Every function validates its input and compiles the predicate before it
returns, so a malformed expression raises on the call rather than on the
first ``next()``. These variants do not apply ``order_by`` or ``limit``.
"""
from typing import Any, AsyncIterator, Iterable, Iterator, List, Optional

from deepfilter_data_model.expression_types import Chunk, CompiledPredicate, Expression
from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_engine.engine.filter_engine import Options
from deepfilter_engine.monitoring.performance_monitor import PerformanceMonitor
from deepfilter_engine.predicate.predicate_factory import create_predicate_fn
from deepfilter_engine.validation.expression_validator import (
    validate_collection, validate_expression, validate_options, validate_positive
)
from deepfilter_exception_model.exception import InvalidInputError


def _compile(expression: Expression, options: Options, entry_point: str,
             memoization: Optional[FilterMemoization]) -> CompiledPredicate:
    config = validate_options(options)
    monitor = PerformanceMonitor(config.enable_performance_monitoring)
    monitor.record_call(entry_point)
    with monitor.phase("validation"):
        expression = validate_expression(expression, config, memoization)
    with monitor.phase("predicate_creation"):
        return create_predicate_fn(expression, config, memoization)


def filter_lazy(iterable: Iterable[Any], expression: Expression, options: Options = None,
                memoization: Optional[FilterMemoization] = None) -> Iterator[Any]:
    """Yield matching items one at a time; works on unbounded iterables."""
    if isinstance(iterable, (str, bytes, bytearray)) or not hasattr(iterable, "__iter__"):
        raise InvalidInputError("filter_lazy: expected an iterable", "filter_lazy", type(iterable).__name__)
    predicate = _compile(expression, options, "filter_lazy", memoization)

    def _generate():
        for item in iterable:
            if predicate(item):
                yield item

    return _generate()


def filter_lazy_async(async_iterable: Any, expression: Expression, options: Options = None,
                      memoization: Optional[FilterMemoization] = None) -> AsyncIterator[Any]:
    """Async counterpart of filter_lazy; suspends only where the source awaits."""
    if not hasattr(async_iterable, "__aiter__"):
        raise InvalidInputError("filter_lazy_async: expected an async iterable", "filter_lazy_async",
                                type(async_iterable).__name__)
    predicate = _compile(expression, options, "filter_lazy_async", memoization)

    async def _generate():
        async for item in async_iterable:
            if predicate(item):
                yield item

    return _generate()


def filter_lazy_chunked(collection: Any, expression: Expression, chunk_size: int = 1000,
                        options: Options = None,
                        memoization: Optional[FilterMemoization] = None) -> Iterator[Chunk]:
    """Yield matches in lists of ``chunk_size``; the last chunk may be shorter."""
    items = validate_collection(collection, "filter_lazy_chunked")
    validate_positive(chunk_size, "chunk_size", "filter_lazy_chunked")
    predicate = _compile(expression, options, "filter_lazy_chunked", memoization)

    def _generate():
        chunk: Chunk = []
        for item in items:
            if predicate(item):
                chunk.append(item)
                if len(chunk) >= chunk_size:
                    yield chunk
                    chunk = []
        if chunk:
            yield chunk

    return _generate()


def filter_chunked(collection: Any, expression: Expression, chunk_size: int = 1000,
                   options: Options = None,
                   memoization: Optional[FilterMemoization] = None) -> List[Chunk]:
    items = validate_collection(collection, "filter_chunked")
    validate_positive(chunk_size, "chunk_size", "filter_chunked")
    predicate = _compile(expression, options, "filter_chunked", memoization)

    chunks: List[Chunk] = []
    chunk: Chunk = []
    for item in items:
        if predicate(item):
            chunk.append(item)
            if len(chunk) >= chunk_size:
                chunks.append(chunk)
                chunk = []
    if chunk:
        chunks.append(chunk)
    return chunks


def filter_first(collection: Any, expression: Expression, count: int = 1, options: Options = None,
                 memoization: Optional[FilterMemoization] = None) -> List[Any]:
    """Return up to ``count`` matches, stopping at the last one needed."""
    items = validate_collection(collection, "filter_first")
    validate_positive(count, "count", "filter_first")
    predicate = _compile(expression, options, "filter_first", memoization)

    results = []
    for item in items:
        if predicate(item):
            results.append(item)
            if len(results) >= count:
                break
    return results


def filter_exists(collection: Any, expression: Expression, options: Options = None,
                  memoization: Optional[FilterMemoization] = None) -> bool:
    items = validate_collection(collection, "filter_exists")
    predicate = _compile(expression, options, "filter_exists", memoization)
    return any(predicate(item) for item in items)


def filter_count(collection: Any, expression: Expression, options: Options = None,
                 memoization: Optional[FilterMemoization] = None) -> int:
    items = validate_collection(collection, "filter_count")
    predicate = _compile(expression, options, "filter_count", memoization)
    return sum(1 for item in items if predicate(item))
