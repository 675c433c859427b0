from typing import Any, Callable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError

from deepfilter_data_model.constants import SORT_ASC
from deepfilter_exception_model.exception import ConfigurationError


class OrderByField(BaseModel):
    """One sort key of the ``order_by`` option; ``field`` may be a dotted path."""
    field: str = Field(..., min_length=1, description="Field name or dotted path")
    direction: Literal["asc", "desc"] = Field(default=SORT_ASC, description="Sort direction")

    model_config = ConfigDict(frozen=True)


OrderBy = Union[str, OrderByField, List[Union[str, OrderByField]]]


class FilterConfig(BaseModel):
    """Immutable per-call configuration of the filter engine.

    Accepts snake_case field names as well as the camelCase aliases used by
    JSON payloads (``caseSensitive``, ``maxDepth``, ...).
    """
    case_sensitive: StrictBool = Field(default=False, alias="caseSensitive")
    max_depth: StrictInt = Field(default=3, ge=1, le=10, alias="maxDepth")
    enable_cache: StrictBool = Field(default=False, alias="enableCache")
    custom_comparator: Optional[Callable[[Any, Any], bool]] = Field(default=None, alias="customComparator")
    limit: Optional[StrictInt] = Field(default=None, description="Values <= 0 mean no limit")
    order_by: Optional[OrderBy] = Field(default=None, alias="orderBy")
    enable_performance_monitoring: StrictBool = Field(default=False, alias="enablePerformanceMonitoring")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def order_by_fields(self) -> List[OrderByField]:
        """Normalize ``order_by`` into a list of :class:`OrderByField`."""
        if self.order_by is None:
            return []
        entries = self.order_by if isinstance(self.order_by, list) else [self.order_by]
        return [OrderByField(field=e) if isinstance(e, str) else e for e in entries]

    def effective_limit(self) -> Optional[int]:
        if self.limit is not None and self.limit > 0:
            return self.limit
        return None


DEFAULT_CONFIG = FilterConfig()


def merge_config(options: Union[None, Mapping[str, Any], FilterConfig] = None) -> FilterConfig:
    """
    Merge user options over the defaults and return a frozen FilterConfig.

    Raises:
        ConfigurationError: if an option is unknown or has an invalid value.
    """
    if options is None:
        return DEFAULT_CONFIG
    if isinstance(options, FilterConfig):
        return options
    if not isinstance(options, Mapping):
        raise ConfigurationError("Options must be a mapping or a FilterConfig",
                                 "options", type(options).__name__)
    try:
        return FilterConfig.model_validate(dict(options))
    except ValidationError as e:
        first = e.errors()[0]
        option = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(f"Invalid filter options: {first.get('msg')}", option,
                                 first.get("input")) from e
