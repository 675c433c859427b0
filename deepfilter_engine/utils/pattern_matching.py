import re
from typing import Optional

from deepfilter_data_model.constants import NEGATION_PREFIX, WILDCARD_PERCENT, WILDCARD_UNDERSCORE
from deepfilter_engine.cache.memoization import FilterMemoization, get_default_memoization


def has_wildcard(pattern: str) -> bool:
    return WILDCARD_PERCENT in pattern or WILDCARD_UNDERSCORE in pattern


def has_negation(pattern: str) -> bool:
    return pattern.startswith(NEGATION_PREFIX)


def remove_negation(pattern: str) -> str:
    return pattern[len(NEGATION_PREFIX):] if has_negation(pattern) else pattern


def wildcard_to_regex(pattern: str) -> str:
    """``%`` matches any run of characters, ``_`` exactly one; the rest is literal."""
    parts = []
    for char in pattern:
        if char == WILDCARD_PERCENT:
            parts.append(".*")
        elif char == WILDCARD_UNDERSCORE:
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return "^" + "".join(parts) + "$"


def regex_flags(case_sensitive: bool) -> int:
    return re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE


def create_wildcard_regex(pattern: str, case_sensitive: bool,
                          memoization: Optional[FilterMemoization] = None) -> "re.Pattern":
    memo = memoization or get_default_memoization()
    return memo.compile_regex(wildcard_to_regex(pattern), regex_flags(case_sensitive))
