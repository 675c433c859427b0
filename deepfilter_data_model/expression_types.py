from typing import Any, Callable, Dict, List, Union


class _Missing:
    """Marker for a field that is absent from a record (distinct from ``None``)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()

Primitive = Union[str, int, float, bool, None]
PredicateFunction = Callable[[Any], bool]
Comparator = Callable[[Any, Any], bool]
ObjectExpression = Dict[str, Any]
Expression = Union[Primitive, PredicateFunction, ObjectExpression]
CompiledPredicate = Callable[[Any], bool]
Chunk = List[Any]
