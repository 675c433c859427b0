"""
Structural cache keys for (expression, config) pairs.

A key is a hashable, type tagged tuple that mirrors the shape of the
expression, so two expressions built independently but with identical
content map to the same key, while ``1``, ``1.0``, ``True`` and ``"1"``
stay distinct. Callables (predicate expressions, custom comparators) key by
identity: the key holds the callable itself, which keeps it alive for as
long as the key is cached. Containers nested deeper than
``MAX_KEY_DEPTH`` levels (including cyclic ones) key by identity too.
"""
import hashlib
import json
import logging
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Hashable, Mapping, Tuple

import numpy as np
from pydantic import BaseModel

from deepfilter_data_model.constants import MAX_EXPRESSION_NESTING
from deepfilter_data_model.expression_types import MISSING
from deepfilter_data_model.filter_config import FilterConfig

logger = logging.getLogger(__name__)

StructuralKey = Tuple[Hashable, ...]

MAX_KEY_DEPTH = 2 * MAX_EXPRESSION_NESTING

_CONTAINERS = (Mapping, list, tuple, set, frozenset, np.ndarray, BaseModel)


class IdentityKey:
    """Hashes and compares by the identity of the object it holds."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __hash__(self) -> int:
        return id(self.value)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, IdentityKey) and other.value is self.value

    def __repr__(self) -> str:
        return f"IdentityKey({type(self.value).__name__}@{id(self.value):#x})"


def canonicalize(value: Any, depth: int = 0) -> Hashable:
    """Return a hashable, type tagged rendition of an expression value."""
    if value is MISSING:
        return ("missing",)
    if value is None:
        return ("none",)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, int):
        return ("int", value)
    if isinstance(value, float):
        return ("float", repr(value))
    if isinstance(value, Decimal):
        return ("decimal", str(value))
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, datetime):
        return ("datetime", value.isoformat())
    if isinstance(value, date):
        return ("date", value.isoformat())
    if isinstance(value, time):
        return ("time", value.isoformat())
    if isinstance(value, timedelta):
        return ("timedelta", value.total_seconds())
    if isinstance(value, re.Pattern):
        return ("regex", value.pattern, value.flags)
    if isinstance(value, _CONTAINERS) and depth >= MAX_KEY_DEPTH:
        return ("ref", IdentityKey(value))
    if isinstance(value, Mapping):
        items = sorted(((str(k), canonicalize(v, depth + 1)) for k, v in value.items()), key=lambda kv: kv[0])
        return ("map", tuple(items))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(canonicalize(v, depth + 1) for v in value))
    # arrays match by equality, lists as any-of
    if isinstance(value, np.ndarray):
        return ("ndarray", tuple(canonicalize(v, depth + 1) for v in value.tolist()))
    if isinstance(value, (set, frozenset)):
        return ("set", tuple(sorted((canonicalize(v, depth + 1) for v in value), key=repr)))
    if isinstance(value, BaseModel):
        return ("model", type(value).__qualname__, canonicalize(value.model_dump(), depth + 1))
    if callable(value):
        try:
            hash(value)
            return ("callable", value)
        except TypeError:
            return ("callable", IdentityKey(value))

    logger.warning(f"Falling back to repr() for cache key part of type {type(value).__name__}")
    return ("repr", type(value).__qualname__, repr(value))


def config_key(config: FilterConfig, include_post_processing: bool = False) -> StructuralKey:
    """
    Key the config fields that change predicate behaviour.

    ``order_by`` and ``limit`` only shape the result list, so they join the
    key only when ``include_post_processing`` is set.
    """
    parts = [
        ("case_sensitive", config.case_sensitive),
        ("max_depth", config.max_depth),
        ("custom_comparator", canonicalize(config.custom_comparator)),
    ]
    if include_post_processing:
        parts.append(("order_by", tuple((f.field, f.direction) for f in config.order_by_fields())))
        parts.append(("limit", config.effective_limit()))
    return tuple(parts)


def create_expression_key(expression: Any, config: FilterConfig,
                          include_post_processing: bool = False) -> StructuralKey:
    """Build the structural key of ``expression`` evaluated under ``config``."""
    return ("expr", canonicalize(expression), config_key(config, include_post_processing))


def expression_checksum(key: StructuralKey) -> str:
    """
    Short digest of a structural key, used to label cache entries in logs.
    Uses JSON when possible, else repr().
    """
    try:
        payload = json.dumps(key, sort_keys=True, default=repr)
    except (TypeError, ValueError):
        payload = repr(key)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
