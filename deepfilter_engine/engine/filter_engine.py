"""
    Public entry point of the filter engine.

    ┌─────────────────────────────────────────────────────────────────────────────────┐
    │                          filter_collection Workflow                             │
    └─────────────────────────────────────────────────────────────────────────────────┘

    Input: collection + expression + options
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  validate_options(options)          │────►│  ConfigurationError             │
    │  validate_collection(collection)    │────►│  InvalidInputError              │
    │  validate_expression(expression)    │────►│  InvalidExpressionError         │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  enable_cache ?                     │────►│  result cache hit ?             │
    │  key = create_expression_key(...)   │     │  → post-process cached matches  │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │  predicate = create_predicate_fn()  │ ◄─── predicate cache when enable_cache
    └─────────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │  matches = [i for i in items        │
    │             if predicate(i)]        │ ───► stored in the result cache
    └─────────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │  order_by sort, then limit          │
    └─────────────────────────────────────┘
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from deepfilter_data_model.expression_types import Expression
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_data_model.structural_key import create_expression_key
from deepfilter_engine.cache.memoization import FilterMemoization, get_default_memoization
from deepfilter_engine.monitoring.performance_monitor import PerformanceMonitor
from deepfilter_engine.predicate.predicate_factory import create_predicate_fn
from deepfilter_engine.utils.sort import sort_by_fields
from deepfilter_engine.validation.expression_validator import (
    validate_collection, validate_expression, validate_options
)

logger = logging.getLogger(__name__)

Options = Union[None, Mapping[str, Any], FilterConfig]


def apply_post_processing(items: List[Any], config: FilterConfig) -> List[Any]:
    """Sort by ``order_by`` (if any), then truncate to a positive ``limit``."""
    result = items
    fields = config.order_by_fields()
    if fields:
        result = sort_by_fields(result, fields, config.case_sensitive)
    limit = config.effective_limit()
    if limit is not None:
        result = result[:limit]
    return list(result)


def filter_collection(collection: Any, expression: Expression, options: Options = None,
                      memoization: Optional[FilterMemoization] = None) -> List[Any]:
    """
    Return the items of ``collection`` matching ``expression``, in order.

    Raises:
        InvalidInputError: if ``collection`` is not a sequence or numpy array.
        InvalidExpressionError: if ``expression`` is malformed.
        ConfigurationError: if ``options`` are invalid.
    """
    config = validate_options(options)
    monitor = PerformanceMonitor(config.enable_performance_monitoring)
    monitor.record_call("filter_collection")

    memo = memoization or get_default_memoization()

    with monitor.phase("validation"):
        items = validate_collection(collection, "filter_collection")
        expression = validate_expression(expression, config, memo)

    key = None
    if config.enable_cache:
        with monitor.phase("cache_lookup"):
            key = create_expression_key(expression, config)
            cached = memo.result_cache.get(collection, key)
        if cached is not None:
            logger.debug(f"Result cache hit for {len(cached)} matches")
            with monitor.phase("post_processing"):
                return apply_post_processing(cached, config)

    with monitor.phase("predicate_creation"):
        predicate = create_predicate_fn(expression, config, memo)

    with monitor.phase("filtering"):
        matches = [item for item in items if predicate(item)]

    if key is not None:
        memo.result_cache.put(collection, key, matches)

    with monitor.phase("post_processing"):
        return apply_post_processing(matches, config)


def clear_filter_cache(memoization: Optional[FilterMemoization] = None) -> None:
    """Drop cached predicates, patterns and results."""
    (memoization or get_default_memoization()).clear()


def get_filter_cache_stats(memoization: Optional[FilterMemoization] = None) -> Dict[str, Any]:
    return (memoization or get_default_memoization()).get_stats()
