import re
from typing import Any

from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_exception_model.exception import InvalidExpressionError


def parse_text_argument(operator: str, argument: Any) -> str:
    if not isinstance(argument, str):
        raise InvalidExpressionError(f"{operator} requires a string", operator=operator,
                                     validation_errors=[f"received {type(argument).__name__}"])
    return argument


def parse_regex_argument(operator: str, argument: Any, config: FilterConfig,
                         memoization: FilterMemoization) -> "re.Pattern":
    """Compile a pattern string once; compiled patterns are used as given."""
    if isinstance(argument, re.Pattern):
        return argument
    if not isinstance(argument, str):
        raise InvalidExpressionError(f"{operator} requires a pattern string or a compiled pattern",
                                     operator=operator,
                                     validation_errors=[f"received {type(argument).__name__}"])
    flags = 0 if config.case_sensitive else re.IGNORECASE
    return memoization.compile_regex(argument, flags)


def _fold(text: str, config: FilterConfig) -> str:
    return text if config.case_sensitive else text.casefold()


def evaluate_starts_with(value: Any, argument: str, config: FilterConfig) -> bool:
    return isinstance(value, str) and _fold(value, config).startswith(_fold(argument, config))


def evaluate_ends_with(value: Any, argument: str, config: FilterConfig) -> bool:
    return isinstance(value, str) and _fold(value, config).endswith(_fold(argument, config))


def evaluate_regex(value: Any, argument: "re.Pattern", config: FilterConfig) -> bool:
    return isinstance(value, str) and argument.search(value) is not None
