"""
Trading session calendar for the A-share market.

Sessions run 09:30-15:00 local time on every trading day (see holidays.py).
`TradingDay` is the session cursor: a local date-time tagged with a Period,
always normalized to a valid boundary for that period.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from functools import total_ordering
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from .errors import ParseError
from .holidays import (
    BACKWARD,
    DATE_FORMAT,
    DEFAULT_TIMEZONE,
    FORWARD,
    is_trading_day,
    local_now,
    to_trading_day,
)
from .periods import DAY, WEEK, Period

logger = logging.getLogger(__name__)

# Market hours (local time)
SESSION_OPEN = time(9, 30)
SESSION_CLOSE = time(15, 0)

MINUTE_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?$")
_PARSE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")

_ONE_DAY = timedelta(days=1)


def parse_datetime(text: str) -> datetime:
    """
    Parse `YYYY-MM-DD` or `YYYY-MM-DD HH:MM[:SS]` into a naive local datetime.

    Raises:
        ParseError: If the string does not match either layout
    """
    value = text.strip() if isinstance(text, str) else text
    if not isinstance(value, str) or not _DATETIME_PATTERN.match(value):
        raise ParseError(f"Invalid date/time: {text!r}. Expected YYYY-MM-DD[ HH:MM[:SS]]")
    value = value.replace("T", " ")
    for fmt in _PARSE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ParseError(f"Invalid date/time: {text!r}")


def _midnight(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time())


def _session_open(day: date) -> datetime:
    return datetime.combine(day, SESSION_OPEN)


def _session_close(day: date) -> datetime:
    return datetime.combine(day, SESSION_CLOSE)


def _to_local(now: Optional[datetime], tz: Optional[str]) -> datetime:
    if now is None:
        return local_now(tz)
    if now.tzinfo is not None:
        return now.astimezone(ZoneInfo(tz or DEFAULT_TIMEZONE)).replace(tzinfo=None)
    return now


@total_ordering
@dataclass(frozen=True, eq=False)
class TradingDay:
    """
    Session cursor.

    For DAY and WEEK periods `instant` is midnight of a date; for minute
    periods it is a time inside (open, close] of a session, aligned to the
    window size from the open. Minute bars are labelled by the end of the
    interval they cover, so 09:35 is the first 5-minute slot and 15:00 the last.

    Equality, ordering and hashing use the instant. A minute cursor at or
    before the open (`open_time()`, or a parsed `09:30`) is the same slot as the
    previous session's close and compares equal to it.

    `next()`/`previous()` move one session whatever the period, so on a WEEK
    cursor they leave Monday; `add`/`sub` re-anchor to Monday first.
    """
    instant: datetime
    period: Period = field(default=DAY)

    def __post_init__(self):
        if not self.period.is_minute:
            object.__setattr__(self, "instant", _midnight(self.instant))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, period: Optional[Period] = None) -> "TradingDay":
        """
        Parse a date or date-time string.

        A date-only string gives a DAY cursor, a string with a time gives a
        1-minute cursor. Either way a non-trading date is snapped back to
        the previous trading day. When `period` is given the cursor is
        re-tagged with `with_period`.

        Raises:
            ParseError: If the string is malformed
        """
        instant = parse_datetime(text)
        has_time = len(text.strip()) > 10
        cursor = cls(to_trading_day(instant, BACKWARD), Period.minute(1) if has_time else DAY)
        if period is not None:
            cursor = cursor.with_period(period)
        return cursor

    @classmethod
    def from_datetime(cls, value: datetime, period: Period = DAY) -> "TradingDay":
        """
        Convert a raw local datetime into the nearest valid boundary for `period`.

        - DAY: the date, snapped back to a trading day
        - WEEK: Monday of the (snapped) day's week
        - Minute(n): end of the n-minute window containing `value`. Times at
          or before the open map to the first window, times after the close
          map to the close, and non-trading days map to the close of the
          previous session.
        """
        if not period.is_minute:
            cursor = cls(to_trading_day(_midnight(value), BACKWARD), DAY)
            return cursor.with_period(period)

        if not is_trading_day(value):
            previous = to_trading_day(_midnight(value), BACKWARD)
            return cls(_session_close(previous.date()), period)

        day = value.date()
        open_, close = _session_open(day), _session_close(day)
        if value >= close:
            return cls(close, period)

        window = timedelta(minutes=period.minutes)
        elapsed = max(value - open_, timedelta(0))
        slots = max(1, -(-elapsed // window))
        return cls(min(open_ + slots * window, close), period)

    @classmethod
    def resolve(cls, day: Optional[str] = None, tz: Optional[str] = None) -> "TradingDay":
        """Parse `day` when given, otherwise return `latest()`."""
        if day:
            return cls.parse(day)
        return cls.latest(tz=tz)

    @classmethod
    def latest(cls, now: Optional[datetime] = None, tz: Optional[str] = None) -> "TradingDay":
        """
        The current session, or the most recent one if today's has not opened yet.

        Args:
            now: Wall-clock time to evaluate at (defaults to the current time
                in `tz`); aware datetimes are converted to `tz`
            tz: Market timezone name (defaults to Asia/Shanghai)
        """
        now = _to_local(now, tz)
        latest = cls(to_trading_day(_midnight(now), BACKWARD))
        if now < latest.open_time().instant:
            latest = latest.previous()
        return latest

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def date(self) -> date:
        return self.instant.date()

    def with_period(self, period: Period) -> "TradingDay":
        """Re-tag with `period`. Switching to WEEK also snaps to that week's Monday."""
        cursor = replace(self, period=period)
        if period.is_week:
            return cursor.week_start_day()
        return cursor

    def is_now_closed(self, now: Optional[datetime] = None, tz: Optional[str] = None) -> bool:
        return self.close_time().instant < _to_local(now, tz)

    # ------------------------------------------------------------------
    # Period boundaries
    # ------------------------------------------------------------------

    def _minute_period(self) -> Period:
        return self.period if self.period.is_minute else Period.minute(1)

    def open_time(self) -> "TradingDay":
        return TradingDay(_session_open(self.date()), self._minute_period())

    def close_time(self) -> "TradingDay":
        return TradingDay(_session_close(self.date()), self._minute_period())

    def week_start_day(self) -> "TradingDay":
        return self._at(self.instant - timedelta(days=self.instant.weekday()))

    def week_end_day(self) -> "TradingDay":
        return self._at(self.instant + timedelta(days=6 - self.instant.weekday()))

    def month_start_day(self) -> "TradingDay":
        return self._at(self.instant.replace(day=1))

    def month_end_day(self) -> "TradingDay":
        first = self.instant.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return self._at(next_month - _ONE_DAY)

    def _at(self, instant: datetime) -> "TradingDay":
        return TradingDay(instant, self.period)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def previous(self) -> "TradingDay":
        return self._at(to_trading_day(self.instant - _ONE_DAY, BACKWARD))

    def next(self) -> "TradingDay":
        return self._at(to_trading_day(self.instant + _ONE_DAY, FORWARD))

    def add(self, steps: Union[int, timedelta]) -> "TradingDay":
        """Move forward by `steps` periods (an int, or a duration converted to whole periods)."""
        if isinstance(steps, timedelta):
            steps = self._steps_in(steps)
        if steps < 0:
            return self.sub(-steps)
        if self.period.is_week:
            monday = self.week_start_day()
            return monday._at(monday.instant + timedelta(weeks=steps))
        if self.period.is_minute:
            return self._at(self._shift_minutes(steps * self.period.minutes))
        out = self
        for _ in range(steps):
            out = out.next()
        return out

    def sub(self, steps: Union[int, timedelta]) -> "TradingDay":
        """Move backward by `steps` periods."""
        if isinstance(steps, timedelta):
            steps = self._steps_in(steps)
        if steps < 0:
            return self.add(-steps)
        if self.period.is_week:
            monday = self.week_start_day()
            return monday._at(monday.instant - timedelta(weeks=steps))
        if self.period.is_minute:
            return self._at(self._shift_minutes(-steps * self.period.minutes))
        out = self
        for _ in range(steps):
            out = out.previous()
        return out

    subtract = sub

    def _steps_in(self, duration: timedelta) -> int:
        if self.period.is_week:
            unit = timedelta(weeks=1)
        elif self.period.is_minute:
            unit = timedelta(minutes=self.period.minutes)
        else:
            unit = _ONE_DAY
        steps = abs(duration) // unit
        return steps if duration >= timedelta(0) else -steps

    def _shift_minutes(self, minutes: int) -> datetime:
        # Walks session by session so a large shift costs one loop per session
        remaining = timedelta(minutes=abs(minutes))
        current = self.instant
        if minutes >= 0:
            while remaining > timedelta(0):
                open_, close = _session_open(current.date()), _session_close(current.date())
                if current < open_:
                    current = open_
                room = max(close - current, timedelta(0))
                if remaining <= room:
                    return current + remaining
                remaining -= room
                current = _session_open(to_trading_day(current.date() + _ONE_DAY, FORWARD))
        else:
            while remaining > timedelta(0):
                open_, close = _session_open(current.date()), _session_close(current.date())
                if current > close:
                    current = close
                room = max(current - open_, timedelta(0))
                if remaining < room:
                    return current - remaining
                remaining -= room
                current = _session_close(to_trading_day(current.date() - _ONE_DAY, BACKWARD))
        return current

    def between(self, other: "TradingDay") -> int:
        """Number of next() steps from the earlier cursor to the later one."""
        if self == other:
            return 0
        low, high = (self, other) if self < other else (other, self)
        count = 0
        while low < high:
            low = low.next()
            count += 1
        return count

    days = between

    def sessions_until(self, end: "TradingDay") -> List["TradingDay"]:
        """Day cursors for every session from this one through `end`, inclusive."""
        current = TradingDay(to_trading_day(_midnight(self.instant), FORWARD))
        last = _midnight(end.instant)
        out = []
        while current.instant <= last:
            out.append(current)
            current = current.next()
        return out

    # ------------------------------------------------------------------
    # Operators and display
    # ------------------------------------------------------------------

    def __add__(self, steps: Union[int, timedelta]) -> "TradingDay":
        if not isinstance(steps, (int, timedelta)):
            return NotImplemented
        return self.add(steps)

    def __sub__(self, steps: Union[int, timedelta]) -> "TradingDay":
        if not isinstance(steps, (int, timedelta)):
            return NotImplemented
        return self.sub(steps)

    def __eq__(self, other):
        if not isinstance(other, TradingDay):
            return NotImplemented
        return self._slot() == other._slot()

    def __lt__(self, other):
        if not isinstance(other, TradingDay):
            return NotImplemented
        return self._slot() < other._slot()

    def __hash__(self):
        return hash(self._slot())

    def _slot(self) -> datetime:
        if self.period.is_minute and self.instant.time() <= SESSION_OPEN:
            previous = to_trading_day(self.instant.date() - _ONE_DAY, BACKWARD)
            return _session_close(previous)
        return self.instant

    def __str__(self) -> str:
        if self.period.is_minute:
            return self.instant.strftime(MINUTE_FORMAT)
        return self.instant.strftime(DATE_FORMAT)

    def __repr__(self) -> str:
        return f"TradingDay({str(self)!r}, {self.period})"


def generate_session_windows(
    start: Union[str, date, datetime],
    end: Union[str, date, datetime],
) -> List[Tuple[datetime, datetime]]:
    """
    Generate trading session windows between start and end dates (inclusive).

    Weekends and exchange holidays are skipped. Each window is returned as
    (session_open, session_close) in naive local time.

    Example:
        >>> windows = generate_session_windows("2023-06-21", "2023-06-26")
        >>> [w[0].strftime("%m-%d") for w in windows]  # 22-24 is Dragon Boat
        ['06-21', '06-26']
    """
    if isinstance(start, str):
        start = parse_datetime(start)
    if isinstance(end, str):
        end = parse_datetime(end)

    windows = []
    start_date = _midnight(start).date()
    end_date = _midnight(end).date()
    current = start_date
    while current <= end_date:
        if is_trading_day(current):
            windows.append((_session_open(current), _session_close(current)))
        current += _ONE_DAY

    logger.debug(f"{len(windows)} sessions between {start_date} and {end_date}")
    return windows
