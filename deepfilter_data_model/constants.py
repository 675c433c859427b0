"""Reserved tokens of the filter expression language."""
from typing import FrozenSet

WILDCARD_PERCENT = "%"
WILDCARD_UNDERSCORE = "_"
NEGATION_PREFIX = "!"
ANY_PROPERTY_KEY = "$"

# comparison
OP_GT = "$gt"
OP_GTE = "$gte"
OP_LT = "$lt"
OP_LTE = "$lte"
OP_EQ = "$eq"
OP_NE = "$ne"

# array
OP_IN = "$in"
OP_NIN = "$nin"
OP_CONTAINS = "$contains"
OP_SIZE = "$size"

# string
OP_STARTS_WITH = "$startsWith"
OP_ENDS_WITH = "$endsWith"
OP_REGEX = "$regex"
OP_MATCH = "$match"

# logical
OP_AND = "$and"
OP_OR = "$or"
OP_NOT = "$not"

# geospatial
OP_NEAR = "$near"
OP_GEO_BOX = "$geoBox"
OP_GEO_POLYGON = "$geoPolygon"

# datetime
OP_RECENT = "$recent"
OP_UPCOMING = "$upcoming"
OP_DAY_OF_WEEK = "$dayOfWeek"
OP_TIME_OF_DAY = "$timeOfDay"
OP_AGE = "$age"
OP_IS_WEEKDAY = "$isWeekday"
OP_IS_WEEKEND = "$isWeekend"
OP_IS_BEFORE = "$isBefore"
OP_IS_AFTER = "$isAfter"

COMPARISON_OPERATORS: FrozenSet[str] = frozenset({OP_GT, OP_GTE, OP_LT, OP_LTE, OP_EQ, OP_NE})
ORDERED_OPERATORS: FrozenSet[str] = frozenset({OP_GT, OP_GTE, OP_LT, OP_LTE})
ARRAY_OPERATORS: FrozenSet[str] = frozenset({OP_IN, OP_NIN, OP_CONTAINS, OP_SIZE})
STRING_OPERATORS: FrozenSet[str] = frozenset({OP_STARTS_WITH, OP_ENDS_WITH, OP_CONTAINS, OP_REGEX, OP_MATCH})
LOGICAL_OPERATORS: FrozenSet[str] = frozenset({OP_AND, OP_OR, OP_NOT})
GEOSPATIAL_OPERATORS: FrozenSet[str] = frozenset({OP_NEAR, OP_GEO_BOX, OP_GEO_POLYGON})
DATETIME_OPERATORS: FrozenSet[str] = frozenset({
    OP_RECENT, OP_UPCOMING, OP_DAY_OF_WEEK, OP_TIME_OF_DAY, OP_AGE,
    OP_IS_WEEKDAY, OP_IS_WEEKEND, OP_IS_BEFORE, OP_IS_AFTER,
})

OPERATOR_KEYS: FrozenSet[str] = (
    COMPARISON_OPERATORS | ARRAY_OPERATORS | STRING_OPERATORS | LOGICAL_OPERATORS
    | GEOSPATIAL_OPERATORS | DATETIME_OPERATORS
)

SORT_ASC = "asc"
SORT_DESC = "desc"

# Nested mappings and logical members along one path. Deeper field nesting
# is constant False anyway; deeper logical composition is rejected.
MAX_EXPRESSION_NESTING = 32

EARTH_RADIUS_METERS = 6_371_000.0

# 0 = Sunday ... 6 = Saturday
WEEKEND_DAYS: FrozenSet[int] = frozenset({0, 6})

DAYS_PER_UNIT = {
    "years": 365.25,
    "months": 30.44,
    "days": 1.0,
}
