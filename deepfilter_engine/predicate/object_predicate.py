"""
    Builds the predicate of a mapping expression.

    Every key is classified once, when the predicate is built, and turned into
    a check; the predicate passes when every check passes.

    ┌──────────────────┬───────────────────────────────────────────────────────────────┐
    │ Tag              │ Check                                                         │
    ├──────────────────┼───────────────────────────────────────────────────────────────┤
    │ LOGICAL          │ $and / $or / $not over full expressions, applied to the item  │
    │ ANY_PROPERTY     │ "$": deep_compare against any field of the item, or the item  │
    │                  │ itself when it is a scalar                                    │
    │ OPERATOR         │ {"$gt": 1, ...}: operator evaluators on the field value       │
    │ NESTED           │ plain mapping: nested predicate on an object value, or on any │
    │                  │ object element of an array value; False beyond max_depth      │
    │ ANY_OF           │ list/tuple: value equals any element, wildcards allowed,      │
    │                  │ "!x" elements exclude                                         │
    │ WILDCARD         │ "%"/"_" string: anchored pattern on a string value            │
    │ EQUALITY         │ strict equality; a leading "!" negates                        │
    └──────────────────┴───────────────────────────────────────────────────────────────┘
"""
import logging
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from deepfilter_data_model.constants import ANY_PROPERTY_KEY, LOGICAL_OPERATORS
from deepfilter_data_model.expression_types import CompiledPredicate
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.cache.memoization import FilterMemoization, get_default_memoization
from deepfilter_engine.comparison.deep_compare import deep_compare, make_default_comparator
from deepfilter_engine.core.record_accessor import (
    get_field, is_array, is_object, iter_array, values_equal
)
from deepfilter_engine.operators.logical_operators import MemberCompiler, compile_logical
from deepfilter_engine.operators.operator_processor import compile_operator_expression, is_operator_expression
from deepfilter_engine.utils.pattern_matching import (
    create_wildcard_regex, has_negation, has_wildcard, remove_negation
)

logger = logging.getLogger(__name__)

ValueMatcher = Callable[[Any], bool]


class KeyTag(Enum):
    LOGICAL = "logical"
    ANY_PROPERTY = "any_property"
    OPERATOR = "operator"
    NESTED = "nested"
    ANY_OF = "any_of"
    WILDCARD = "wildcard"
    EQUALITY = "equality"


def classify_key(key: str, value: Any) -> KeyTag:
    if key in LOGICAL_OPERATORS:
        return KeyTag.LOGICAL
    if key == ANY_PROPERTY_KEY:
        return KeyTag.ANY_PROPERTY
    if is_operator_expression(value):
        return KeyTag.OPERATOR
    if isinstance(value, Mapping):
        return KeyTag.NESTED
    if isinstance(value, (list, tuple)):
        return KeyTag.ANY_OF
    if isinstance(value, str) and has_wildcard(remove_negation(value)):
        return KeyTag.WILDCARD
    return KeyTag.EQUALITY


def _comparator(config: FilterConfig):
    return config.custom_comparator or make_default_comparator(config.case_sensitive)


def _scalar_matcher(expected: Any, config: FilterConfig, memoization: FilterMemoization) -> ValueMatcher:
    """Wildcard pattern or strict equality against one expected element."""
    if isinstance(expected, str) and has_wildcard(expected):
        regex = create_wildcard_regex(expected, config.case_sensitive, memoization)
        return lambda value: isinstance(value, str) and regex.match(value) is not None
    return lambda value: values_equal(value, expected)


def _any_of_matcher(elements, config: FilterConfig, memoization: FilterMemoization) -> ValueMatcher:
    includes: List[ValueMatcher] = []
    excludes: List[ValueMatcher] = []
    for element in elements:
        if isinstance(element, str) and has_negation(element):
            excludes.append(_scalar_matcher(remove_negation(element), config, memoization))
        else:
            includes.append(_scalar_matcher(element, config, memoization))

    def matcher(value: Any) -> bool:
        if includes and not any(m(value) for m in includes):
            return False
        return not any(m(value) for m in excludes)

    return matcher


def create_object_predicate(expression: Mapping[str, Any], config: FilterConfig,
                            compile_member: MemberCompiler,
                            memoization: Optional[FilterMemoization] = None,
                            depth: int = 0) -> CompiledPredicate:
    memo = memoization or get_default_memoization()
    checks: List[CompiledPredicate] = []

    for key, expected in expression.items():
        tag = classify_key(key, expected)

        if tag is KeyTag.LOGICAL:
            checks.append(compile_logical(key, expected, compile_member))

        elif tag is KeyTag.ANY_PROPERTY:
            checks.append(_any_property_check(expected, config))

        elif tag is KeyTag.OPERATOR:
            matcher = compile_operator_expression(expected, config, memo, compile_member)
            checks.append(lambda item, k=key, m=matcher: m(get_field(item, k), item))

        elif tag is KeyTag.NESTED:
            checks.append(_nested_check(key, expected, config, compile_member, memo, depth))

        elif tag is KeyTag.ANY_OF:
            matcher = _any_of_matcher(expected, config, memo)
            checks.append(lambda item, k=key, m=matcher: m(get_field(item, k)))

        else:
            negate = isinstance(expected, str) and has_negation(expected)
            target = remove_negation(expected) if negate else expected
            matcher = _scalar_matcher(target, config, memo)
            if negate:
                checks.append(lambda item, k=key, m=matcher: not m(get_field(item, k)))
            else:
                checks.append(lambda item, k=key, m=matcher: m(get_field(item, k)))

    def predicate(item: Any) -> bool:
        for check in checks:
            if not check(item):
                return False
        return True

    return predicate


def _any_property_check(expected: Any, config: FilterConfig) -> CompiledPredicate:
    comparator = _comparator(config)

    def check(item: Any) -> bool:
        if is_object(item):
            return deep_compare(item, expected, comparator, config, ANY_PROPERTY_KEY,
                                match_against_any_prop=True, dont_match_whole_object=True)
        return deep_compare(item, expected, comparator, config, ANY_PROPERTY_KEY)

    return check


def _nested_check(key: str, expected: Mapping[str, Any], config: FilterConfig,
                  compile_member: MemberCompiler, memoization: FilterMemoization,
                  depth: int) -> CompiledPredicate:
    if depth + 1 > config.max_depth:
        logger.debug(f"Nested expression under {key!r} exceeds max_depth={config.max_depth}")
        return lambda item: False

    nested = create_object_predicate(expected, config, compile_member, memoization, depth + 1)

    def check(item: Any) -> bool:
        value = get_field(item, key)
        if is_object(value):
            return nested(value)
        if is_array(value):
            return any(is_object(element) and nested(element) for element in iter_array(value))
        return False

    return check
