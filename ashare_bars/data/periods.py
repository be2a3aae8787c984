"""
Bar period granularity: day, week or an N-minute window.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering

from .errors import ParseError


class PeriodKind(str, Enum):
    DAY = "day"
    WEEK = "week"
    MINUTE = "minute"


_RANK = {PeriodKind.DAY: 0, PeriodKind.WEEK: 1, PeriodKind.MINUTE: 2}

_MINUTE_PATTERN = re.compile(r"^(\d+)\s*(min|m|minute|minutes)$")
_DAY_ALIASES = {"day", "d", "1d", "daily"}
_WEEK_ALIASES = {"week", "w", "1w", "weekly"}


@total_ordering
@dataclass(frozen=True)
class Period:
    """
    Period a bar or cursor represents.

    Use the constructors `Period.day()`, `Period.week()` and `Period.minute(n)`
    (or the module constants DAY and WEEK). The ordering is only meant for
    sorting and comparison; minute periods sort after day and week and among
    themselves by window size.
    """
    kind: PeriodKind
    minutes: int = 0

    def __post_init__(self):
        if self.kind is PeriodKind.MINUTE:
            if self.minutes <= 0:
                raise ValueError(f"Minute period needs a positive window size, got {self.minutes}")
        elif self.minutes != 0:
            raise ValueError(f"{self.kind.value} period does not take a window size")

    @classmethod
    def day(cls) -> "Period":
        return cls(PeriodKind.DAY)

    @classmethod
    def week(cls) -> "Period":
        return cls(PeriodKind.WEEK)

    @classmethod
    def minute(cls, minutes: int) -> "Period":
        return cls(PeriodKind.MINUTE, minutes)

    @classmethod
    def parse(cls, text: "str | Period") -> "Period":
        """
        Parse a period string.

        Examples:
            >>> Period.parse("day")
            Period(kind=<PeriodKind.DAY: 'day'>, minutes=0)
            >>> str(Period.parse("15min"))
            '15min'
        """
        if isinstance(text, Period):
            return text
        value = str(text).strip().lower()
        if value in _DAY_ALIASES:
            return cls.day()
        if value in _WEEK_ALIASES:
            return cls.week()
        match = _MINUTE_PATTERN.match(value)
        if match:
            minutes = int(match.group(1))
            if minutes > 0:
                return cls.minute(minutes)
        raise ParseError(f"Invalid period: {text!r}. Expected 'day', 'week' or '<n>min'")

    @property
    def is_day(self) -> bool:
        return self.kind is PeriodKind.DAY

    @property
    def is_week(self) -> bool:
        return self.kind is PeriodKind.WEEK

    @property
    def is_minute(self) -> bool:
        return self.kind is PeriodKind.MINUTE

    def __lt__(self, other):
        if not isinstance(other, Period):
            return NotImplemented
        return (_RANK[self.kind], self.minutes) < (_RANK[other.kind], other.minutes)

    def __str__(self) -> str:
        if self.is_minute:
            return f"{self.minutes}min"
        return self.kind.value


DAY = Period.day()
WEEK = Period.week()
