from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import numpy as np

from deepfilter_data_model.constants import DAYS_PER_UNIT, WEEKEND_DAYS


def _now(tz=None) -> datetime:
    return datetime.now(tz)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Read dates, datetimes and numpy datetime64 values; anything else is ``None``."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        converted = value.astype("datetime64[us]").item()
        return converted if isinstance(converted, datetime) else None
    return None


def current_time(reference: datetime) -> datetime:
    """Current time, timezone aware when ``reference`` is aware."""
    return _now(reference.tzinfo) if reference.tzinfo is not None else _now()


def to_timestamp(value: datetime) -> float:
    return value.timestamp()


def time_difference(value: datetime, now: Optional[datetime] = None) -> timedelta:
    """``now - value``, negative for future values."""
    now = now or current_time(value)
    return timedelta(seconds=to_timestamp(now) - to_timestamp(value))


def calculate_age(value: datetime, unit: str = "years", now: Optional[datetime] = None) -> float:
    elapsed_days = time_difference(value, now).total_seconds() / 86400.0
    return elapsed_days / DAYS_PER_UNIT[unit]


def day_of_week(value: datetime) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def is_weekend(value: datetime) -> bool:
    return day_of_week(value) in WEEKEND_DAYS


def is_weekday(value: datetime) -> bool:
    return not is_weekend(value)
