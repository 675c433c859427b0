from typing import Any, Callable, List

from deepfilter_data_model.constants import OP_AND, OP_NOT, OP_OR
from deepfilter_data_model.expression_types import CompiledPredicate
from deepfilter_engine.core.record_accessor import is_array
from deepfilter_exception_model.exception import InvalidExpressionError

MemberCompiler = Callable[[Any], CompiledPredicate]


def check_logical_argument(operator: str, argument: Any) -> None:
    """
    Raises:
        InvalidExpressionError: if ``$and``/``$or`` do not hold an array or ``$not`` holds one.
    """
    if operator in (OP_AND, OP_OR) and not isinstance(argument, (list, tuple)):
        raise InvalidExpressionError(f"{operator} operator requires an array of expressions",
                                     expression=argument, operator=operator)
    if operator == OP_NOT and is_array(argument):
        raise InvalidExpressionError(f"{operator} operator requires a single expression",
                                     expression=argument, operator=operator)


def compile_logical(operator: str, argument: Any, compile_member: MemberCompiler) -> CompiledPredicate:
    """Compile every member once and combine them; ``$and``/``$or`` short-circuit."""
    check_logical_argument(operator, argument)

    if operator == OP_NOT:
        member = compile_member(argument)
        return lambda item: not member(item)

    members: List[CompiledPredicate] = [compile_member(expr) for expr in argument]
    if operator == OP_AND:
        return lambda item: all(member(item) for member in members)
    return lambda item: any(member(item) for member in members)
