import re
from datetime import timedelta
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

_CLOCK_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

ClockBound = Union[StrictInt, str]


class RelativeTimeQuery(BaseModel):
    """Argument of ``$recent`` and ``$upcoming``.

    The first positive unit, checked in the order days, hours, minutes,
    defines the window.
    """
    days: Optional[float] = Field(default=None, ge=0)
    hours: Optional[float] = Field(default=None, ge=0)
    minutes: Optional[float] = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _require_unit(self) -> "RelativeTimeQuery":
        if self.window() is None:
            raise ValueError("one of days, hours or minutes must be positive")
        return self

    def window(self) -> Optional[timedelta]:
        if self.days:
            return timedelta(days=self.days)
        if self.hours:
            return timedelta(hours=self.hours)
        if self.minutes:
            return timedelta(minutes=self.minutes)
        return None


class TimeOfDayQuery(BaseModel):
    """Argument of ``$timeOfDay``.

    Bounds are either whole hours (0-23, the end hour is inclusive up to :59)
    or ``"HH:MM"`` strings. ``start > end`` wraps around midnight.
    """
    start: ClockBound
    end: ClockBound

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("start", "end")
    @classmethod
    def _check_bound(cls, value: ClockBound) -> ClockBound:
        if isinstance(value, int):
            if not 0 <= value <= 23:
                raise ValueError("hour bounds must be within 0-23")
            return value
        if not _CLOCK_PATTERN.match(value):
            raise ValueError("clock bounds must use the HH:MM format")
        return value

    @property
    def start_minute(self) -> int:
        if isinstance(self.start, int):
            return self.start * 60
        return _clock_to_minute(self.start)

    @property
    def end_minute(self) -> int:
        if isinstance(self.end, int):
            return self.end * 60 + 59
        return _clock_to_minute(self.end)


class AgeQuery(BaseModel):
    """Argument of ``$age``: bounds on the time elapsed since a date."""
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    unit: Literal["years", "months", "days"] = "years"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _require_bound(self) -> "AgeQuery":
        if self.min is None and self.max is None:
            raise ValueError("one of min or max is required")
        return self


def _clock_to_minute(clock: str) -> int:
    hours, minutes = _CLOCK_PATTERN.match(clock).groups()
    return int(hours) * 60 + int(minutes)
