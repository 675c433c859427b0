import logging
from typing import Mapping, Optional

from deepfilter_data_model.constants import ANY_PROPERTY_KEY
from deepfilter_data_model.expression_types import CompiledPredicate, Expression
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_data_model.structural_key import create_expression_key, expression_checksum
from deepfilter_engine.cache.memoization import FilterMemoization, get_default_memoization
from deepfilter_engine.comparison.deep_compare import deep_compare, make_default_comparator
from deepfilter_engine.predicate.object_predicate import create_object_predicate
from deepfilter_engine.predicate.string_predicate import create_string_predicate

logger = logging.getLogger(__name__)


def create_predicate_fn(expression: Expression, config: FilterConfig,
                        memoization: Optional[FilterMemoization] = None) -> CompiledPredicate:
    """
    Compile ``expression`` into ``predicate(item) -> bool``.

    With ``config.enable_cache`` the structural key of (expression, config)
    is looked up first and a miss compiles exactly once.
    """
    memo = memoization or get_default_memoization()
    if not config.enable_cache:
        return _build_predicate(expression, config, memo)

    key = create_expression_key(expression, config)

    def _factory() -> CompiledPredicate:
        logger.debug(f"Compiling predicate {expression_checksum(key)}")
        return _build_predicate(expression, config, memo)

    return memo.get_or_create_predicate(key, _factory)


def _build_predicate(expression: Expression, config: FilterConfig,
                     memoization: FilterMemoization) -> CompiledPredicate:
    if callable(expression):
        return expression

    if isinstance(expression, str):
        return create_string_predicate(expression, config, memoization)

    if isinstance(expression, Mapping):
        return create_object_predicate(
            expression, config,
            lambda member: create_predicate_fn(member, config, memoization),
            memoization,
        )

    comparator = config.custom_comparator or make_default_comparator(config.case_sensitive)
    return lambda item: deep_compare(item, expression, comparator, config, ANY_PROPERTY_KEY,
                                     match_against_any_prop=True)
