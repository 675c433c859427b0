import dataclasses
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterator, Mapping, Tuple

import numpy as np
from pydantic import BaseModel

from deepfilter_data_model.expression_types import MISSING

_SCALAR_TYPES = (str, bytes, int, float, bool, Decimal, datetime, date, time)


class RecordAccessor:
    """
    Reads fields out of arbitrarily shaped records.

    Supports mappings, pydantic models, dataclasses and plain objects (through
    ``vars()``). A dotted name such as ``"address.city"`` walks nested records
    when no field carries the literal name. Absent fields read as ``MISSING``.
    """

    def get_field(self, record: Any, name: str) -> Any:
        value = self._get_direct(record, name)
        if value is MISSING and "." in name:
            return self.get_path(record, name.split("."))
        return value

    def get_path(self, record: Any, path) -> Any:
        current = record
        for part in path:
            if current is MISSING or current is None:
                return MISSING
            current = self._get_direct(current, part)
        return current

    def iter_fields(self, record: Any) -> Iterator[Tuple[str, Any]]:
        if isinstance(record, Mapping):
            for key, value in record.items():
                yield str(key), value
        elif isinstance(record, BaseModel):
            for name in type(record).model_fields:
                yield name, getattr(record, name)
            for name, value in (record.model_extra or {}).items():
                yield name, value
        elif dataclasses.is_dataclass(record) and not isinstance(record, type):
            for f in dataclasses.fields(record):
                yield f.name, getattr(record, f.name)
        elif hasattr(record, "__dict__"):
            yield from vars(record).items()

    def _get_direct(self, record: Any, name: str) -> Any:
        if isinstance(record, Mapping):
            return record.get(name, MISSING)
        if isinstance(record, BaseModel):
            if name in type(record).model_fields:
                return getattr(record, name)
            return (record.model_extra or {}).get(name, MISSING)
        if dataclasses.is_dataclass(record) and not isinstance(record, type):
            return getattr(record, name, MISSING)
        if hasattr(record, "__dict__"):
            return vars(record).get(name, MISSING)
        return MISSING


default_accessor = RecordAccessor()


def get_field(record: Any, name: str) -> Any:
    return default_accessor.get_field(record, name)


def iter_fields(record: Any) -> Iterator[Tuple[str, Any]]:
    return default_accessor.iter_fields(record)


def unwrap_scalar(value: Any) -> Any:
    """Turn numpy scalars into their Python equivalent."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset, np.ndarray))


def iter_array(value: Any) -> Iterator[Any]:
    if isinstance(value, np.ndarray):
        return iter(value.tolist())
    return iter(value)


def is_object(value: Any) -> bool:
    """True for records: mappings, models, dataclasses and plain instances."""
    if value is None or value is MISSING or isinstance(value, _SCALAR_TYPES):
        return False
    if isinstance(value, (Mapping, BaseModel)):
        return True
    if is_array(value) or callable(value) or isinstance(value, (re.Pattern, np.generic)):
        return False
    if dataclasses.is_dataclass(value):
        return True
    return hasattr(value, "__dict__")


def is_number(value: Any) -> bool:
    value = unwrap_scalar(value)
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def has_custom_to_string(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def to_text(value: Any) -> str:
    value = unwrap_scalar(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def values_equal(a: Any, b: Any) -> bool:
    """
    Structural equality where booleans never equal numbers and ``MISSING``
    only equals itself.
    """
    a = unwrap_scalar(a)
    b = unwrap_scalar(b)
    if a is MISSING or b is MISSING:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, np.ndarray):
        a = a.tolist()
    if isinstance(b, np.ndarray):
        b = b.tolist()
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple, Mapping)) or isinstance(b, (list, tuple, Mapping)):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False
