from datetime import date, datetime
from typing import Any, FrozenSet, Type, TypeVar

from pydantic import BaseModel, ValidationError

from deepfilter_data_model.datetime_models import AgeQuery, RelativeTimeQuery, TimeOfDayQuery
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.core.record_accessor import is_array, iter_array, unwrap_scalar
from deepfilter_engine.utils.date_time import (
    calculate_age, coerce_datetime, current_time, day_of_week, is_weekday, is_weekend,
    minute_of_day, time_difference, to_timestamp
)
from deepfilter_exception_model.exception import InvalidExpressionError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _describe(error) -> str:
    where = ".".join(str(part) for part in error.get("loc", ()))
    return f"{where}: {error.get('msg')}" if where else error.get("msg")


def _parse_model(model: Type[ModelT], operator: str, argument: Any) -> ModelT:
    if isinstance(argument, model):
        return argument
    try:
        return model.model_validate(argument)
    except ValidationError as e:
        errors = [_describe(err) for err in e.errors()]
        raise InvalidExpressionError(f"Malformed {operator} argument", expression=argument,
                                     operator=operator, validation_errors=errors) from e


def parse_relative_time_argument(operator: str, argument: Any) -> RelativeTimeQuery:
    return _parse_model(RelativeTimeQuery, operator, argument)


def parse_time_of_day_argument(operator: str, argument: Any) -> TimeOfDayQuery:
    return _parse_model(TimeOfDayQuery, operator, argument)


def parse_age_argument(operator: str, argument: Any) -> AgeQuery:
    return _parse_model(AgeQuery, operator, argument)


def parse_day_of_week_argument(operator: str, argument: Any) -> FrozenSet[int]:
    days = [unwrap_scalar(d) for d in iter_array(argument)] if is_array(argument) else None
    if not days or not all(isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6 for d in days):
        raise InvalidExpressionError(f"{operator} requires a non-empty array of weekday indexes 0-6",
                                     expression=argument, operator=operator)
    return frozenset(days)


def parse_flag_argument(operator: str, argument: Any) -> bool:
    argument = unwrap_scalar(argument)
    if not isinstance(argument, bool):
        raise InvalidExpressionError(f"{operator} requires a boolean", expression=argument,
                                     operator=operator)
    return argument


def parse_moment_argument(operator: str, argument: Any) -> datetime:
    moment = coerce_datetime(argument) if isinstance(argument, date) else None
    if moment is None:
        raise InvalidExpressionError(f"{operator} requires a date or datetime", expression=argument,
                                     operator=operator)
    return moment


def evaluate_recent(value: Any, argument: RelativeTimeQuery, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    if moment is None:
        return False
    elapsed = time_difference(moment)
    return elapsed.total_seconds() >= 0 and elapsed <= argument.window()


def evaluate_upcoming(value: Any, argument: RelativeTimeQuery, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    if moment is None:
        return False
    ahead = -time_difference(moment)
    return ahead.total_seconds() >= 0 and ahead <= argument.window()


def evaluate_day_of_week(value: Any, argument: FrozenSet[int], config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    return moment is not None and day_of_week(moment) in argument


def evaluate_time_of_day(value: Any, argument: TimeOfDayQuery, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    if moment is None:
        return False
    minute = minute_of_day(moment)
    start, end = argument.start_minute, argument.end_minute
    if start <= end:
        return start <= minute <= end
    return minute >= start or minute <= end


def evaluate_age(value: Any, argument: AgeQuery, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    if moment is None:
        return False
    age = calculate_age(moment, argument.unit, current_time(moment))
    if argument.min is not None and age < argument.min:
        return False
    if argument.max is not None and age > argument.max:
        return False
    return True


def evaluate_is_weekday(value: Any, argument: bool, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    return moment is not None and is_weekday(moment) == argument


def evaluate_is_weekend(value: Any, argument: bool, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    return moment is not None and is_weekend(moment) == argument


def evaluate_is_before(value: Any, argument: datetime, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    return moment is not None and to_timestamp(moment) < to_timestamp(argument)


def evaluate_is_after(value: Any, argument: datetime, config: FilterConfig) -> bool:
    moment = coerce_datetime(value)
    return moment is not None and to_timestamp(moment) > to_timestamp(argument)
