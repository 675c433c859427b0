"""
    Compiles the operator object of one field into a matcher.

    ┌─────────────────────────────────────────────────────────────────────────────────┐
    │                      compile_operator_expression Workflow                       │
    └─────────────────────────────────────────────────────────────────────────────────┘

    Input: operators (Dict) e.g. {"$gte": 10, "$lt": 20} + config
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │   For each (operator, argument):    │────►│  $and / $or / $not ?            │
    │                                     │     │  compile members once, applied  │
    │                                     │     │  to the whole item              │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │   handler = OPERATOR_HANDLERS[op]   │────►│  Unknown operator?              │
    │                                     │     │  raise InvalidExpressionError   │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐     ┌─────────────────────────────────┐
    │   parsed = handler.parse(argument)  │────►│  Bad argument?                  │
    │   (once, at compile time)           │     │  raise TypeMismatchError /      │
    │                                     │     │  GeospatialError /              │
    │                                     │     │  InvalidExpressionError         │
    └─────────────────────────────────────┘     └─────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │   matcher(value, item):             │
    │     all logical members pass AND    │
    │     every handler.evaluate passes   │
    └─────────────────────────────────────┘
"""
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Tuple

from deepfilter_data_model import constants as ops
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_engine.operators import (
    array_operators, comparison_operators, datetime_operators, geospatial_operators, string_operators
)
from deepfilter_engine.operators.logical_operators import MemberCompiler, compile_logical
from deepfilter_exception_model.exception import InvalidExpressionError

FieldMatcher = Callable[[Any, Any], bool]


class OperatorHandler(NamedTuple):
    parse: Callable[[str, Any, FilterConfig, FilterMemoization], Any]
    evaluate: Callable[[Any, Any, FilterConfig], bool]


def _plain(parse: Callable[[str, Any], Any]):
    return lambda operator, argument, config, memoization: parse(operator, argument)


def _as_is(operator, argument, config, memoization):
    return argument


def _regex(operator, argument, config, memoization):
    return string_operators.parse_regex_argument(operator, argument, config, memoization)


OPERATOR_HANDLERS: Dict[str, OperatorHandler] = {
    # comparison
    ops.OP_GT: OperatorHandler(_plain(comparison_operators.parse_ordered_argument),
                               comparison_operators.evaluate_gt),
    ops.OP_GTE: OperatorHandler(_plain(comparison_operators.parse_ordered_argument),
                                comparison_operators.evaluate_gte),
    ops.OP_LT: OperatorHandler(_plain(comparison_operators.parse_ordered_argument),
                               comparison_operators.evaluate_lt),
    ops.OP_LTE: OperatorHandler(_plain(comparison_operators.parse_ordered_argument),
                                comparison_operators.evaluate_lte),
    ops.OP_EQ: OperatorHandler(_as_is, comparison_operators.evaluate_eq),
    ops.OP_NE: OperatorHandler(_as_is, comparison_operators.evaluate_ne),
    # array
    ops.OP_IN: OperatorHandler(_plain(array_operators.parse_membership_argument), array_operators.evaluate_in),
    ops.OP_NIN: OperatorHandler(_plain(array_operators.parse_membership_argument), array_operators.evaluate_nin),
    ops.OP_CONTAINS: OperatorHandler(_as_is, array_operators.evaluate_contains),
    ops.OP_SIZE: OperatorHandler(_plain(array_operators.parse_size_argument), array_operators.evaluate_size),
    # string
    ops.OP_STARTS_WITH: OperatorHandler(_plain(string_operators.parse_text_argument),
                                        string_operators.evaluate_starts_with),
    ops.OP_ENDS_WITH: OperatorHandler(_plain(string_operators.parse_text_argument),
                                      string_operators.evaluate_ends_with),
    ops.OP_REGEX: OperatorHandler(_regex, string_operators.evaluate_regex),
    ops.OP_MATCH: OperatorHandler(_regex, string_operators.evaluate_regex),
    # geospatial
    ops.OP_NEAR: OperatorHandler(_plain(geospatial_operators.parse_near_argument),
                                 geospatial_operators.evaluate_near),
    ops.OP_GEO_BOX: OperatorHandler(_plain(geospatial_operators.parse_geo_box_argument),
                                    geospatial_operators.evaluate_geo_box),
    ops.OP_GEO_POLYGON: OperatorHandler(_plain(geospatial_operators.parse_geo_polygon_argument),
                                        geospatial_operators.evaluate_geo_polygon),
    # datetime
    ops.OP_RECENT: OperatorHandler(_plain(datetime_operators.parse_relative_time_argument),
                                   datetime_operators.evaluate_recent),
    ops.OP_UPCOMING: OperatorHandler(_plain(datetime_operators.parse_relative_time_argument),
                                     datetime_operators.evaluate_upcoming),
    ops.OP_DAY_OF_WEEK: OperatorHandler(_plain(datetime_operators.parse_day_of_week_argument),
                                        datetime_operators.evaluate_day_of_week),
    ops.OP_TIME_OF_DAY: OperatorHandler(_plain(datetime_operators.parse_time_of_day_argument),
                                        datetime_operators.evaluate_time_of_day),
    ops.OP_AGE: OperatorHandler(_plain(datetime_operators.parse_age_argument), datetime_operators.evaluate_age),
    ops.OP_IS_WEEKDAY: OperatorHandler(_plain(datetime_operators.parse_flag_argument),
                                       datetime_operators.evaluate_is_weekday),
    ops.OP_IS_WEEKEND: OperatorHandler(_plain(datetime_operators.parse_flag_argument),
                                       datetime_operators.evaluate_is_weekend),
    ops.OP_IS_BEFORE: OperatorHandler(_plain(datetime_operators.parse_moment_argument),
                                      datetime_operators.evaluate_is_before),
    ops.OP_IS_AFTER: OperatorHandler(_plain(datetime_operators.parse_moment_argument),
                                     datetime_operators.evaluate_is_after),
}


def is_operator_expression(value: Any) -> bool:
    """A mapping is an operator object when any of its keys is an operator token."""
    return isinstance(value, Mapping) and any(
        isinstance(key, str) and key in ops.OPERATOR_KEYS for key in value
    )


def compile_operator_expression(operators: Mapping[str, Any], config: FilterConfig,
                                memoization: FilterMemoization,
                                compile_member: MemberCompiler) -> FieldMatcher:
    """
    Compile an operator object into ``matcher(value, item) -> bool``; all
    operators must pass.

    Raises:
        InvalidExpressionError: on an unknown operator or a malformed argument.
    """
    item_checks = []
    value_checks: List[Tuple[Callable[[Any, Any, FilterConfig], bool], Any]] = []

    for operator, argument in operators.items():
        if operator in ops.LOGICAL_OPERATORS:
            item_checks.append(compile_logical(operator, argument, compile_member))
            continue
        handler = OPERATOR_HANDLERS.get(operator)
        if handler is None:
            raise InvalidExpressionError(f"Unknown operator {operator}", expression=operators,
                                         operator=operator)
        value_checks.append((handler.evaluate, handler.parse(operator, argument, config, memoization)))

    def matcher(value: Any, item: Any) -> bool:
        for check in item_checks:
            if not check(item):
                return False
        for evaluate, parsed in value_checks:
            if not evaluate(value, parsed, config):
                return False
        return True

    return matcher
