"""
    Recursive comparison of a record value against an expected value.

    ┌─────────────────────────────────────────────────────────────────────────────────┐
    │                            deep_compare Workflow                                │
    └─────────────────────────────────────────────────────────────────────────────────┘

    Input: actual + expected + comparator + config (+ depth)
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  depth > config.max_depth ?         │────►│  return False                   │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  expected is "!..." string ?        │────►│  not deep_compare(remainder)    │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  actual is an array ?               │────►│  any element matches            │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  actual is an object ?              │────►│  any-property search, or        │
    │                                     │     │  all-properties check, or       │
    │                                     │     │  comparator(actual, expected)   │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │  actual is callable ?               │────►│  return False                   │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │  comparator(actual, expected)       │
    └─────────────────────────────────────┘
"""
from typing import Any, Mapping

from deepfilter_data_model.constants import ANY_PROPERTY_KEY, NEGATION_PREFIX
from deepfilter_data_model.expression_types import MISSING, Comparator
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.core.record_accessor import (
    get_field, has_custom_to_string, is_array, is_object, iter_array, iter_fields, to_text
)


def make_default_comparator(case_sensitive: bool) -> Comparator:
    """
    Build the fuzzy scalar comparator: both sides rendered as text and matched
    by substring containment, case folded unless ``case_sensitive``.
    """

    def comparator(actual: Any, expected: Any) -> bool:
        if actual is MISSING:
            return False
        if actual is None or expected is None:
            return actual is None and expected is None
        if is_object(expected) or (is_object(actual) and not has_custom_to_string(actual)):
            return False
        actual_text = to_text(actual)
        expected_text = to_text(expected)
        if not case_sensitive:
            actual_text = actual_text.casefold()
            expected_text = expected_text.casefold()
        return expected_text in actual_text

    return comparator


def deep_compare(actual: Any, expected: Any, comparator: Comparator, config: FilterConfig,
                 any_property_key: str = ANY_PROPERTY_KEY, match_against_any_prop: bool = False,
                 dont_match_whole_object: bool = False, depth: int = 0) -> bool:
    if depth > config.max_depth:
        return False

    if isinstance(expected, str) and expected.startswith(NEGATION_PREFIX):
        return not deep_compare(actual, expected[len(NEGATION_PREFIX):], comparator, config,
                                any_property_key, match_against_any_prop, dont_match_whole_object,
                                depth + 1)

    if is_array(actual):
        return any(
            deep_compare(element, expected, comparator, config, any_property_key,
                         match_against_any_prop, dont_match_whole_object, depth + 1)
            for element in iter_array(actual)
        )

    if is_object(actual):
        return compare_objects(actual, expected, comparator, config, any_property_key,
                               match_against_any_prop, dont_match_whole_object, depth)

    if callable(actual):
        return False

    return comparator(actual, expected)


def compare_objects(actual: Any, expected: Any, comparator: Comparator, config: FilterConfig,
                    any_property_key: str, match_against_any_prop: bool,
                    dont_match_whole_object: bool, depth: int) -> bool:
    if match_against_any_prop:
        return compare_against_any_property(actual, expected, comparator, config, any_property_key,
                                            dont_match_whole_object, depth)
    if isinstance(expected, Mapping):
        return compare_all_properties(actual, expected, comparator, config, any_property_key, depth)
    return comparator(actual, expected)


def compare_against_any_property(actual: Any, expected: Any, comparator: Comparator,
                                 config: FilterConfig, any_property_key: str,
                                 dont_match_whole_object: bool, depth: int) -> bool:
    """True when any field of ``actual`` (sentinel-prefixed names excluded) matches."""
    for name, value in iter_fields(actual):
        if name.startswith(any_property_key):
            continue
        if deep_compare(value, expected, comparator, config, any_property_key, True, False, depth + 1):
            return True

    if dont_match_whole_object:
        return False
    return deep_compare(actual, expected, comparator, config, any_property_key, False, False, depth + 1)


def compare_all_properties(actual: Any, expected: Mapping, comparator: Comparator,
                           config: FilterConfig, any_property_key: str, depth: int) -> bool:
    """True when every key of ``expected`` matches; fails fast."""
    for key, expected_value in expected.items():
        if callable(expected_value) or expected_value is MISSING:
            continue

        match_any_property = key == any_property_key
        actual_value = actual if match_any_property else get_field(actual, key)
        if not deep_compare(actual_value, expected_value, comparator, config, any_property_key,
                            match_any_property, match_any_property, depth + 1):
            return False

    return True
