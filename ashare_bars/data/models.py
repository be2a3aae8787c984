"""
Data models for OHLCV bars, bar series and the loader interface.
"""

from bisect import bisect_left
from dataclasses import dataclass, replace
from functools import total_ordering
from typing import Iterable, Iterator, List, Optional, Protocol

import pandas as pd

from .periods import DAY, Period

BAR_COLUMNS = ["open", "high", "low", "close", "volume", "yesterday_close"]


def percent(value: float, base: float) -> float:
    """Percentage change of `value` relative to `base` (0 when base is 0)."""
    if base == 0:
        return 0.0
    return (value - base) / base * 100.0


@total_ordering
@dataclass(eq=False)
class Bar:
    """
    One OHLCV record for a single period instance.

    Bars compare and sort by `date` only. `yesterday_close` is the close of
    the preceding bar, filled in by whoever builds the series.
    """
    date: str  # "YYYY-MM-DD" or "YYYY-MM-DD HH:MM[:SS]"
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    volume: float = 0.0
    yesterday_close: float = 0.0

    def is_valid(self) -> bool:
        """A bar is usable only when every price is strictly positive"""
        return self.open > 0 and self.high > 0 and self.low > 0 and self.close > 0

    def is_up(self) -> bool:
        return self.close >= self.open

    def is_down(self) -> bool:
        return self.close < self.open

    def markup(self) -> float:
        """Percent change versus yesterday's close (versus today's open when unknown)."""
        if self.yesterday_close == 0:
            return percent(self.close, self.open)
        return percent(self.close, self.yesterday_close)

    def amplitude(self) -> float:
        """High-low range as a percentage of yesterday's close."""
        if self.yesterday_close == 0:
            return 0.0
        return (self.high - self.low) / self.yesterday_close * 100.0

    def merge(self, other: "Bar") -> "Bar":
        """
        Fold a later bar into this one in place and return self.

        Open, date and yesterday_close stay; high/low widen, close is taken
        from `other` and volumes add up.
        """
        self.high = max(self.high, other.high)
        self.low = min(self.low, other.low)
        self.close = other.close
        self.volume += other.volume
        return self

    def copy(self, **changes) -> "Bar":
        return replace(self, **changes)

    def __eq__(self, other):
        if not isinstance(other, Bar):
            return NotImplemented
        return self.date == other.date

    def __lt__(self, other):
        if not isinstance(other, Bar):
            return NotImplemented
        return self.date < other.date

    def __hash__(self):
        return hash(self.date)


class Chart:
    """
    Ordered bar series for one instrument at one period.

    Dates are strictly increasing and unique; lookups are binary searches on
    the date string.
    """

    def __init__(self, bars: Optional[Iterable[Bar]] = None, period: Period = DAY):
        self.period = period
        self._bars: List[Bar] = []
        for bar in bars or ():
            self.append(bar)

    # Sequence protocol

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(self._bars)

    def __getitem__(self, index):
        return self._bars[index]

    def __bool__(self) -> bool:
        return bool(self._bars)

    def __repr__(self) -> str:
        if not self._bars:
            return f"Chart(period={self.period}, empty)"
        return f"Chart(period={self.period}, {len(self)} bars, {self._bars[0].date}..{self._bars[-1].date})"

    @property
    def bars(self) -> List[Bar]:
        """The underlying list. Treat as read-only."""
        return self._bars

    def first(self) -> Optional[Bar]:
        return self._bars[0] if self._bars else None

    def last(self) -> Optional[Bar]:
        return self._bars[-1] if self._bars else None

    def dates(self) -> List[str]:
        return [bar.date for bar in self._bars]

    # Mutation

    def append(self, bar: Bar) -> None:
        """Append a bar; its date must be after the current last bar."""
        if self._bars and bar.date <= self._bars[-1].date:
            raise ValueError(
                f"Bar dated {bar.date} does not come after the last bar ({self._bars[-1].date})"
            )
        self._bars.append(bar)

    def replace_last(self, bar: Bar) -> None:
        """Swap the trailing bar (e.g. a live session being refreshed)."""
        if self._bars:
            self._bars.pop()
        self.append(bar)

    def _index(self, date: str) -> Optional[int]:
        index = bisect_left(self._bars, date, key=lambda b: b.date)
        if index < len(self._bars) and self._bars[index].date == date:
            return index
        return None

    def search(self, date: str) -> Optional[Bar]:
        index = self._index(date)
        return None if index is None else self._bars[index]

    def truncate_at(self, end_date: str) -> Optional[Bar]:
        """
        Drop the bar dated `end_date` and everything after it.

        Returns:
            The removed bar at `end_date`, or None (series unchanged) when no
            bar carries that date
        """
        index = self._index(end_date)
        if index is None:
            return None
        removed = self._bars[index]
        del self._bars[index:]
        return removed

    def skip_to(self, start_date: str) -> None:
        """Drop every bar before `start_date`; unchanged if the date is absent."""
        index = self._index(start_date)
        if index is not None:
            del self._bars[:index]

    def keep_last(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"keep_last needs a non-negative count, got {n}")
        if len(self._bars) > n:
            del self._bars[: len(self._bars) - n]

    # pandas interchange

    def to_frame(self) -> pd.DataFrame:
        """DataFrame indexed by `date` with the OHLCV and yesterday_close columns."""
        frame = pd.DataFrame(
            [[getattr(bar, column) for column in BAR_COLUMNS] for bar in self._bars],
            columns=BAR_COLUMNS,
            index=pd.Index(self.dates(), name="date"),
            dtype=float,
        )
        return frame

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, period: Period = DAY) -> "Chart":
        """
        Build a chart from a DataFrame with a `date` column or index.

        `yesterday_close` is optional and defaults to 0. Rows are taken in
        frame order.
        """
        if "date" in frame.columns:
            dates = frame["date"].astype(str).tolist()
        else:
            dates = [str(value) for value in frame.index]
        has_yesterday = "yesterday_close" in frame.columns
        bars = []
        for date, (_, row) in zip(dates, frame.iterrows()):
            bars.append(Bar(
                date=date,
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                volume=float(row["volume"]),
                yesterday_close=float(row["yesterday_close"]) if has_yesterday else 0.0,
            ))
        return cls(bars, period)


class BarLoader(Protocol):
    """
    Protocol for bar loaders.

    Loaders return validated bars (non-positive prices already dropped) in
    date order.
    """

    def day_bars(self, symbol: str) -> List[Bar]:
        """Every day bar stored for `symbol`."""
        ...

    def minute_bars(self, symbol: str, day: str) -> List[Bar]:
        """
        Minute bars of one session.

        Args:
            symbol: Stock code
            day: Session date (YYYY-MM-DD)

        Returns:
            The session's bars, or an empty list when no data exists for it
        """
        ...
