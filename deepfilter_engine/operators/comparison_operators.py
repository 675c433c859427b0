from datetime import date, datetime
from typing import Any, Tuple

from deepfilter_data_model.constants import OP_GT, OP_GTE, OP_LT, OP_LTE
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.core.record_accessor import is_number, unwrap_scalar, values_equal
from deepfilter_engine.utils.date_time import coerce_datetime, to_timestamp
from deepfilter_exception_model.exception import TypeMismatchError

NUMBER = "number"
DATETIME = "datetime"

# (kind, comparable value)
OrderedArgument = Tuple[str, Any]


def parse_ordered_argument(operator: str, argument: Any) -> OrderedArgument:
    """
    Validate the argument of an ordered operator.

    Raises:
        TypeMismatchError: if the argument is neither a number nor a date/datetime.
    """
    argument = unwrap_scalar(argument)
    if is_number(argument):
        return NUMBER, argument
    moment = coerce_datetime(argument) if isinstance(argument, (date, datetime)) else None
    if moment is not None:
        return DATETIME, to_timestamp(moment)
    raise TypeMismatchError(f"{operator} requires a number or a datetime",
                            expected="number | datetime", received=type(argument).__name__,
                            operator=operator)


def _ordered_value(value: Any, kind: str):
    value = unwrap_scalar(value)
    if kind == NUMBER:
        return value if is_number(value) else None
    moment = coerce_datetime(value)
    return to_timestamp(moment) if moment is not None else None


def evaluate_gt(value: Any, argument: OrderedArgument, config: FilterConfig) -> bool:
    kind, bound = argument
    current = _ordered_value(value, kind)
    return current is not None and current > bound


def evaluate_gte(value: Any, argument: OrderedArgument, config: FilterConfig) -> bool:
    kind, bound = argument
    current = _ordered_value(value, kind)
    return current is not None and current >= bound


def evaluate_lt(value: Any, argument: OrderedArgument, config: FilterConfig) -> bool:
    kind, bound = argument
    current = _ordered_value(value, kind)
    return current is not None and current < bound


def evaluate_lte(value: Any, argument: OrderedArgument, config: FilterConfig) -> bool:
    kind, bound = argument
    current = _ordered_value(value, kind)
    return current is not None and current <= bound


def evaluate_eq(value: Any, argument: Any, config: FilterConfig) -> bool:
    return values_equal(value, argument)


def evaluate_ne(value: Any, argument: Any, config: FilterConfig) -> bool:
    return not values_equal(value, argument)


ORDERED_EVALUATORS = {
    OP_GT: evaluate_gt,
    OP_GTE: evaluate_gte,
    OP_LT: evaluate_lt,
    OP_LTE: evaluate_lte,
}
