"""
Exchange holiday table and the trading-day predicate.

The table is a fixed list of closed date ranges (inclusive) published by the
Shanghai and Shenzhen exchanges. Weekends are always closed, including the
make-up working weekends of the national holiday schedule.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Tuple, TypeVar, Union
from zoneinfo import ZoneInfo

from .errors import ParseError

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_TIMEZONE = "Asia/Shanghai"

# Direction for to_trading_day()
BACKWARD = -1
STAY = 0
FORWARD = 1

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[ T]|$)")

DateLike = Union[str, date, datetime]
_D = TypeVar("_D", date, datetime)

# (start, end, name), inclusive, zero-padded so lexical comparison is valid
_HOLIDAY_ROWS = (
    # 2016
    ("2016-01-01", "2016-01-03", "New Year"),
    ("2016-02-07", "2016-02-13", "Spring Festival"),
    ("2016-04-02", "2016-04-04", "Qingming"),
    ("2016-04-29", "2016-05-01", "Labour Day"),
    ("2016-06-09", "2016-06-11", "Dragon Boat"),
    ("2016-09-15", "2016-09-17", "Mid-Autumn"),
    ("2016-10-01", "2016-10-07", "National Day"),
    # 2017
    ("2017-01-01", "2017-01-03", "New Year"),
    ("2017-01-27", "2017-02-02", "Spring Festival"),
    ("2017-04-02", "2017-04-04", "Qingming"),
    ("2017-04-29", "2017-05-01", "Labour Day"),
    ("2017-05-28", "2017-05-30", "Dragon Boat"),
    ("2017-10-01", "2017-10-07", "National Day"),
    # 2018
    ("2018-01-01", "2018-01-03", "New Year"),
    ("2018-02-15", "2018-02-21", "Spring Festival"),
    ("2018-04-05", "2018-04-07", "Qingming"),
    ("2018-04-29", "2018-05-01", "Labour Day"),
    ("2018-06-16", "2018-06-18", "Dragon Boat"),
    ("2018-09-22", "2018-09-24", "Mid-Autumn"),
    ("2018-09-29", "2018-10-07", "National Day"),
    # 2019
    ("2019-01-01", "2019-01-03", "New Year"),
    ("2019-02-04", "2019-02-10", "Spring Festival"),
    ("2019-04-05", "2019-04-07", "Qingming"),
    ("2019-04-29", "2019-05-01", "Labour Day"),
    ("2019-06-07", "2019-06-09", "Dragon Boat"),
    ("2019-09-13", "2019-09-15", "Mid-Autumn"),
    ("2019-10-01", "2019-10-07", "National Day"),
    # 2020
    ("2020-01-01", "2020-01-03", "New Year"),
    ("2020-01-24", "2020-01-30", "Spring Festival"),
    ("2020-04-04", "2020-04-06", "Qingming"),
    ("2020-04-30", "2020-05-04", "Labour Day"),
    ("2020-06-25", "2020-06-27", "Dragon Boat"),
    ("2020-09-30", "2020-10-07", "National Day"),
    # 2021
    ("2021-01-01", "2021-01-03", "New Year"),
    ("2021-02-11", "2021-02-17", "Spring Festival"),
    ("2021-04-03", "2021-04-05", "Qingming"),
    ("2021-04-30", "2021-05-04", "Labour Day"),
    ("2021-06-12", "2021-06-14", "Dragon Boat"),
    ("2021-09-19", "2021-09-21", "Mid-Autumn"),
    ("2021-10-01", "2021-10-07", "National Day"),
    # 2022
    ("2022-01-01", "2022-01-03", "New Year"),
    ("2022-01-31", "2022-02-06", "Spring Festival"),
    ("2022-04-03", "2022-04-05", "Qingming"),
    ("2022-04-30", "2022-05-04", "Labour Day"),
    ("2022-06-03", "2022-06-05", "Dragon Boat"),
    ("2022-09-10", "2022-09-12", "Mid-Autumn"),
    ("2022-10-01", "2022-10-07", "National Day"),
    # 2023
    ("2022-12-31", "2023-01-02", "New Year"),
    ("2023-01-21", "2023-01-27", "Spring Festival"),
    ("2023-04-05", "2023-04-05", "Qingming"),
    ("2023-05-01", "2023-05-03", "Labour Day"),
    ("2023-06-22", "2023-06-24", "Dragon Boat"),
    ("2023-09-29", "2023-10-06", "Mid-Autumn"),
    ("2023-10-01", "2023-10-07", "National Day"),
    # 2024
    ("2023-12-30", "2024-01-01", "New Year"),
    ("2024-02-09", "2024-02-17", "Spring Festival"),
    ("2024-04-04", "2024-04-06", "Qingming"),
    ("2024-05-01", "2024-05-05", "Labour Day"),
    ("2024-06-08", "2024-06-10", "Dragon Boat"),
    ("2024-09-15", "2024-09-17", "Mid-Autumn"),
    ("2024-10-01", "2024-10-07", "National Day"),
    # 2025
    ("2025-01-01", "2025-01-01", "New Year"),
    ("2025-01-28", "2025-02-04", "Spring Festival"),
    ("2025-04-04", "2025-04-06", "Qingming"),
    ("2025-05-01", "2025-05-05", "Labour Day"),
    ("2025-05-31", "2025-06-02", "Dragon Boat"),
    ("2025-10-01", "2025-10-08", "National Day"),
    # 2026
    ("2026-01-01", "2026-01-03", "New Year"),
    ("2026-02-15", "2026-02-23", "Spring Festival"),
    ("2026-04-04", "2026-04-06", "Qingming"),
    ("2026-05-01", "2026-05-05", "Labour Day"),
    ("2026-06-19", "2026-06-21", "Dragon Boat"),
    ("2026-09-25", "2026-09-27", "Mid-Autumn"),
    ("2026-10-01", "2026-10-07", "National Day"),
)


@dataclass(frozen=True)
class HolidayRange:
    """Closed market date range, both ends inclusive"""
    start: str
    end: str
    name: str = ""

    def contains(self, day: str) -> bool:
        return self.start <= day <= self.end


@lru_cache(maxsize=None)
def holidays() -> Tuple[HolidayRange, ...]:
    """Return the holiday table, built on first use."""
    return tuple(HolidayRange(start, end, name) for start, end, name in _HOLIDAY_ROWS)


def date_key(value: DateLike) -> str:
    """Date-only `YYYY-MM-DD` key of a date, datetime or date-prefixed string."""
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FORMAT)
    return value[:10]


def parse_date(value: DateLike) -> date:
    """
    Parse the date part of `value`.

    Strings must be a zero-padded `YYYY-MM-DD`, optionally followed by a
    space or `T` and a time suffix, which is ignored.

    Raises:
        ParseError: If the string is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_PREFIX.match(value):
        raise ParseError(f"Invalid date: {value!r}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(value[:10], DATE_FORMAT).date()
    except ValueError as e:
        raise ParseError(f"Invalid date: {value!r}: {e}") from e


def local_now(tz: str | None = None) -> datetime:
    """Current wall-clock time in the market zone, as a naive datetime."""
    return datetime.now(ZoneInfo(tz or DEFAULT_TIMEZONE)).replace(tzinfo=None)


def is_holiday(value: DateLike) -> bool:
    key = date_key(value)
    return any(holiday.contains(key) for holiday in holidays())


def not_holiday(value: DateLike) -> bool:
    return not is_holiday(value)


def is_weekend(value: DateLike) -> bool:
    """True for Saturday and Sunday. Raises ParseError on a malformed date."""
    return parse_date(value).weekday() >= 5


def is_trading_day(value: DateLike) -> bool:
    """True when the exchange holds a session on this date."""
    return not is_weekend(value) and not is_holiday(value)


def today_is_trading_day(tz: str | None = None) -> bool:
    return is_trading_day(local_now(tz).date())


def to_trading_day(day: _D, direction: int) -> _D:
    """
    Move `day` one calendar day at a time in `direction` until it is a trading day.

    Args:
        day: Starting date or datetime (time of day is preserved)
        direction: BACKWARD (-1), FORWARD (1) or STAY (0)

    Returns:
        `day` itself if it is already a trading day, otherwise the nearest
        trading day in the given direction

    Raises:
        ValueError: If direction is STAY and `day` is not a trading day
    """
    if direction == STAY:
        if not is_trading_day(day):
            raise ValueError(f"{date_key(day)} is not a trading day and direction is STAY")
        return day

    step = timedelta(days=1 if direction > 0 else -1)
    while not is_trading_day(day):
        day = day + step
    return day
