from functools import cmp_to_key
from typing import Any, List, Sequence

from deepfilter_data_model.constants import SORT_ASC
from deepfilter_data_model.expression_types import MISSING
from deepfilter_data_model.filter_config import OrderByField
from deepfilter_engine.core.record_accessor import get_field, is_number, unwrap_scalar
from deepfilter_engine.utils.date_time import coerce_datetime


def _sign(diff) -> int:
    return (diff > 0) - (diff < 0)


def compare_values(a: Any, b: Any, direction: str = SORT_ASC, case_sensitive: bool = False) -> int:
    """
    Three way comparison for sorting. Absent and ``None`` values sort last in
    both directions.
    """
    a_missing = a is None or a is MISSING
    b_missing = b is None or b is MISSING
    if a_missing or b_missing:
        return (a_missing and not b_missing) - (b_missing and not a_missing)

    a, b = unwrap_scalar(a), unwrap_scalar(b)
    if isinstance(a, bool) and isinstance(b, bool):
        result = _sign(int(a) - int(b))
    elif is_number(a) and is_number(b):
        result = (a > b) - (a < b)
    elif coerce_datetime(a) is not None and coerce_datetime(b) is not None:
        result = _sign(coerce_datetime(a).timestamp() - coerce_datetime(b).timestamp())
    elif isinstance(a, str) and isinstance(b, str):
        if not case_sensitive:
            a, b = a.casefold(), b.casefold()
        result = (a > b) - (a < b)
    else:
        a_text, b_text = str(a), str(b)
        result = (a_text > b_text) - (a_text < b_text)

    return result if direction == SORT_ASC else -result


def sort_by_fields(items: Sequence[Any], order_by: List[OrderByField], case_sensitive: bool = False) -> List[Any]:
    """Stable multi-key sort; dotted field names read nested values."""
    if not items or not order_by:
        return list(items)

    def _compare(left, right) -> int:
        for order in order_by:
            result = compare_values(get_field(left, order.field), get_field(right, order.field),
                                    order.direction, case_sensitive)
            if result != 0:
                return result
        return 0

    return sorted(items, key=cmp_to_key(_compare))
