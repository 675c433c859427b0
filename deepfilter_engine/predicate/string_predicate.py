from typing import Any, Iterator, Optional

from deepfilter_data_model.expression_types import MISSING, CompiledPredicate
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_engine.core.record_accessor import is_array, is_object, iter_array, iter_fields
from deepfilter_engine.utils.pattern_matching import (
    create_wildcard_regex, has_negation, has_wildcard, remove_negation
)


def _candidate_values(item: Any) -> Iterator[Any]:
    if isinstance(item, str):
        yield item
    elif is_array(item):
        yield from iter_array(item)
    elif is_object(item):
        for _, value in iter_fields(item):
            yield value


def create_string_predicate(expression: str, config: FilterConfig,
                            memoization: Optional[FilterMemoization] = None) -> CompiledPredicate:
    """
    Match a string item, or any string field of an object item, against
    ``expression``: case folded equality for plain text, an anchored pattern
    when it holds ``%``/``_`` wildcards. A leading ``!`` negates the match.
    """
    negate = has_negation(expression)
    text = remove_negation(expression)

    if has_wildcard(text):
        regex = create_wildcard_regex(text, config.case_sensitive, memoization)

        def matches(value: Any) -> bool:
            return isinstance(value, str) and regex.match(value) is not None
    else:
        expected = text if config.case_sensitive else text.casefold()

        def matches(value: Any) -> bool:
            if not isinstance(value, str):
                return False
            return (value if config.case_sensitive else value.casefold()) == expected

    def predicate(item: Any) -> bool:
        if item is None or item is MISSING:
            return False
        found = any(matches(value) for value in _candidate_values(item))
        return not found if negate else found

    return predicate
