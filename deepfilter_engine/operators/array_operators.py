from typing import Any, List

from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.core.record_accessor import is_array, iter_array, to_text, unwrap_scalar, values_equal
from deepfilter_exception_model.exception import InvalidExpressionError


def parse_membership_argument(operator: str, argument: Any) -> List[Any]:
    if not is_array(argument):
        raise InvalidExpressionError(f"{operator} requires an array of values", operator=operator,
                                     validation_errors=[f"received {type(argument).__name__}"])
    return list(iter_array(argument))


def parse_size_argument(operator: str, argument: Any) -> int:
    argument = unwrap_scalar(argument)
    if isinstance(argument, bool) or not isinstance(argument, int) or argument < 0:
        raise InvalidExpressionError(f"{operator} requires a non-negative integer", operator=operator,
                                     validation_errors=[f"received {argument!r}"])
    return argument


def evaluate_in(value: Any, argument: List[Any], config: FilterConfig) -> bool:
    return any(values_equal(value, candidate) for candidate in argument)


def evaluate_nin(value: Any, argument: List[Any], config: FilterConfig) -> bool:
    return not evaluate_in(value, argument, config)


def evaluate_contains(value: Any, argument: Any, config: FilterConfig) -> bool:
    """Element membership for arrays, substring search for strings."""
    if is_array(value):
        return any(values_equal(element, argument) for element in iter_array(value))
    if isinstance(value, str):
        needle = argument if isinstance(argument, str) else to_text(argument)
        if config.case_sensitive:
            return needle in value
        return needle.casefold() in value.casefold()
    return False


def evaluate_size(value: Any, argument: int, config: FilterConfig) -> bool:
    if not is_array(value):
        return False
    return len(value) == argument
