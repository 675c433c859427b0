from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence, Union

import numpy as np

from deepfilter_data_model.constants import (
    ANY_PROPERTY_KEY, LOGICAL_OPERATORS, MAX_EXPRESSION_NESTING, OPERATOR_KEYS
)
from deepfilter_data_model.filter_config import FilterConfig, merge_config
from deepfilter_engine.cache.memoization import FilterMemoization, get_default_memoization
from deepfilter_engine.operators.logical_operators import check_logical_argument
from deepfilter_engine.operators.operator_processor import OPERATOR_HANDLERS
from deepfilter_exception_model.exception import (
    ConfigurationError, InvalidExpressionError, InvalidInputError
)

_PRIMITIVES = (str, int, float, bool, Decimal, date, np.generic)


class _Walk(NamedTuple):
    config: FilterConfig
    memoization: FilterMemoization

    def truncated(self, depth: int) -> bool:
        return depth > self.config.max_depth


def validate_expression(expression: Any, config: Optional[FilterConfig] = None,
                        memoization: Optional[FilterMemoization] = None) -> Any:
    """
    Check the shape of ``expression`` before anything is compiled.

    ``depth`` counts nested field objects the way the object predicate does:
    the top level is 0 and every logical member starts again at 0. Objects
    deeper than ``config.max_depth`` compile to a constant ``False``, so past
    that depth only operator arguments are parsed, which makes a malformed
    argument fail the same way at any depth. Nothing beyond
    ``MAX_EXPRESSION_NESTING`` levels is visited, which keeps cyclic
    expressions finite.

    Raises:
        InvalidExpressionError: on a top-level array, a non-string key, an unknown
            ``$`` key, an operator object mixing operator and field keys, a
            logical operator with the wrong arity, or logical operators nested
            deeper than ``MAX_EXPRESSION_NESTING`` levels.
        TypeMismatchError: on a malformed operator argument beyond ``max_depth``.
        GeospatialError: on a malformed geospatial argument beyond ``max_depth``.
    """
    walk = _Walk(config or FilterConfig(), memoization or get_default_memoization())
    _validate_node(expression, "$", walk, 0, 0)
    return expression


def _validate_node(expression: Any, path: str, walk: _Walk, depth: int, nesting: int) -> None:
    if expression is None or isinstance(expression, _PRIMITIVES) or callable(expression):
        return
    if isinstance(expression, Mapping):
        _validate_object(expression, path, walk, depth, nesting)
        return
    if isinstance(expression, (list, tuple, set, frozenset, np.ndarray)):
        raise InvalidExpressionError("An expression must not be an array; use $or or a field list",
                                     expression=expression, validation_errors=[f"{path}: array"])
    raise InvalidExpressionError(f"Unsupported expression type {type(expression).__name__}",
                                 expression=expression, validation_errors=[f"{path}: {type(expression).__name__}"])


def _validate_object(expression: Mapping, path: str, walk: _Walk, depth: int, nesting: int) -> None:
    if nesting > MAX_EXPRESSION_NESTING:
        if walk.truncated(depth):
            return
        raise InvalidExpressionError(f"Logical operators nested deeper than {MAX_EXPRESSION_NESTING} levels",
                                     expression=expression, validation_errors=[path])

    for key, value in expression.items():
        if not isinstance(key, str):
            raise InvalidExpressionError("Expression keys must be strings", expression=expression,
                                         validation_errors=[f"{path}: key {key!r}"])
        where = f"{path}.{key}"

        if key in LOGICAL_OPERATORS:
            _validate_logical(key, value, where, walk, depth, nesting)
        elif key == ANY_PROPERTY_KEY:
            continue
        elif key.startswith("$"):
            if key in OPERATOR_KEYS:
                raise InvalidExpressionError(f"Operator {key} must be applied to a field",
                                             expression=expression, operator=key,
                                             validation_errors=[where])
            raise InvalidExpressionError(f"Unknown operator {key}", expression=expression, operator=key,
                                         validation_errors=[where])
        elif isinstance(value, Mapping):
            _validate_field_mapping(value, where, walk, depth, nesting)


def _validate_field_mapping(value: Mapping, path: str, walk: _Walk, depth: int, nesting: int) -> None:
    dollar_keys = [k for k in value if isinstance(k, str) and k.startswith("$") and k != ANY_PROPERTY_KEY]
    if not dollar_keys:
        _validate_object(value, path, walk, depth + 1, nesting + 1)
        return

    unknown = [k for k in dollar_keys if k not in OPERATOR_KEYS]
    if unknown:
        raise InvalidExpressionError(f"Unknown operator {unknown[0]}", expression=value, operator=unknown[0],
                                     validation_errors=[f"{path}.{k}" for k in unknown])
    if len(dollar_keys) != len(value):
        plain = [str(k) for k in value if k not in dollar_keys]
        raise InvalidExpressionError("Operator objects cannot mix operators and field names",
                                     expression=value,
                                     validation_errors=[f"{path}.{k}" for k in plain])
    for operator in dollar_keys:
        argument = value[operator]
        if operator in LOGICAL_OPERATORS:
            _validate_logical(operator, argument, f"{path}.{operator}", walk, depth, nesting)
        elif walk.truncated(depth):
            # never compiled, so parse the argument here
            OPERATOR_HANDLERS[operator].parse(operator, argument, walk.config, walk.memoization)


def _validate_logical(operator: str, argument: Any, path: str, walk: _Walk, depth: int, nesting: int) -> None:
    check_logical_argument(operator, argument)
    members: Sequence[Any] = [argument] if not isinstance(argument, (list, tuple)) else argument
    member_depth = depth if walk.truncated(depth) else 0
    for index, member in enumerate(members):
        _validate_node(member, f"{path}[{index}]", walk, member_depth, nesting + 1)


def validate_options(options: Union[None, Mapping[str, Any], FilterConfig] = None) -> FilterConfig:
    """
    Raises:
        ConfigurationError: if an option is unknown or has an invalid value.
    """
    return merge_config(options)


def validate_collection(collection: Any, function_name: str) -> List[Any]:
    """
    Accept any sequence except text, or a numpy array, and return its items.

    Raises:
        InvalidInputError: for anything else.
    """
    if isinstance(collection, np.ndarray):
        return collection.tolist() if collection.ndim == 1 else list(collection)
    if isinstance(collection, (str, bytes, bytearray)) or not isinstance(collection, Sequence):
        raise InvalidInputError(f"{function_name}: expected a sequence", function_name,
                                type(collection).__name__)
    return collection if isinstance(collection, list) else list(collection)


def validate_positive(value: Any, option: str, function_name: Optional[str] = None) -> int:
    """
    Raises:
        ConfigurationError: unless ``value`` is an integer >= 1.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        prefix = f"{function_name}: " if function_name else ""
        raise ConfigurationError(f"{prefix}{option} must be a positive integer", option, value)
    return value
