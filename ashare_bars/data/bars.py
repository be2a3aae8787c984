"""
Bar building utilities: downsampling a chart to a coarser period and
assembling multi-session minute charts.

Supports:
- day -> week (calendar weeks keyed by Monday)
- N-minute -> M-minute windows (M a multiple of N), and minute -> day/week
- Concatenation of per-session minute segments over a range of trading days
"""

import logging
from typing import Callable, Iterable, List, Optional

from .calendars import TradingDay, parse_datetime
from .errors import DataIntegrityError
from .models import Bar, Chart
from .periods import DAY, Period

logger = logging.getLogger(__name__)


def _check_conversion(source: Period, target: Period) -> None:
    if target.is_minute:
        if not source.is_minute or target.minutes % source.minutes != 0:
            raise ValueError(f"Cannot resample {source} bars to {target}")
    elif target.is_day:
        if not (source.is_day or source.is_minute):
            raise ValueError(f"Cannot resample {source} bars to {target}")


def bucket_key(date: str, target: Period) -> str:
    """
    Grouping key of a bar dated `date` when resampling to `target`.

    Week buckets are calendar weeks keyed by their Monday, whether or not the
    Monday itself is a trading day. Minute buckets are keyed by the end of the
    window, matching how minute bars are labelled.
    """
    if target.is_week:
        return str(TradingDay(parse_datetime(date), DAY).week_start_day())
    if target.is_day:
        return date[:10]
    return str(TradingDay.from_datetime(parse_datetime(date), target))


def resample(chart: Chart, target: Period, limit: Optional[int] = None) -> Chart:
    """
    Downsample `chart` to the coarser `target` period.

    Consecutive bars sharing a bucket key are merged (see Bar.merge); each
    output bar is dated with its key and keeps the first bar's open and
    yesterday_close. The input chart is not modified.

    Args:
        chart: Source chart
        target: Coarser period
        limit: Keep only the last `limit` output bars

    Raises:
        ValueError: If `target` is finer than, or not a multiple of, the source period
    """
    if target == chart.period:
        out = Chart((bar.copy() for bar in chart), target)
    else:
        _check_conversion(chart.period, target)
        out = Chart(period=target)
        current: Optional[Bar] = None
        for bar in chart:
            key = bucket_key(bar.date, target)
            if current is not None and current.date == key:
                current.merge(bar)
                continue
            current = bar.copy(date=key)
            out.append(current)

    if limit is not None:
        out.keep_last(limit)
    logger.debug(f"Resampled {len(chart)} {chart.period} bars into {len(out)} {target} bars")
    return out


def build_chart(
    bars: Iterable[Bar],
    period: Period,
    target: Optional[Period] = None,
    end: Optional[str] = None,
    limit: Optional[int] = None,
) -> Chart:
    """
    Build a chart from loader output.

    Args:
        bars: Validated bars in date order
        period: Period the bars represent
        target: Coarser period to resample to (None keeps `period`)
        end: Drop bars dated after this day (YYYY-MM-DD or full timestamp)
        limit: Keep only the last `limit` bars of the result

    Returns:
        Chart at `target` (or `period`)
    """
    if end is not None:
        bars = [bar for bar in bars if bar.date[: len(end)] <= end]
    chart = Chart(bars, period)
    return resample(chart, target or period, limit=limit)


def assemble_minute_chart(
    fetch: Callable[[str], List[Bar]],
    start: TradingDay,
    end: TradingDay,
    period: Period,
) -> Chart:
    """
    Concatenate per-session minute segments from `start` through `end`.

    Sessions without data before the first or after the last session that
    has data are skipped. A session without data in between is a hole in the
    window and fails the whole query.

    Args:
        fetch: Returns the bars of one session given its date (empty if none)
        start: First session
        end: Last session
        period: Minute period of the segments

    Raises:
        DataIntegrityError: If a session in the middle of the range has no data
    """
    if not period.is_minute:
        raise ValueError(f"Minute assembly needs a minute period, got {period}")

    sessions = start.sessions_until(end)
    segments = [(str(day), fetch(str(day))) for day in sessions]

    present = [i for i, (_, bars) in enumerate(segments) if bars]
    chart = Chart(period=period)
    if not present:
        logger.warning(f"No minute data between {start} and {end}")
        return chart

    first, last = present[0], present[-1]
    for day, bars in segments[first:last + 1]:
        if not bars:
            raise DataIntegrityError(f"Missing minute data for {day} inside {start}..{end}")
        for bar in bars:
            chart.append(bar)

    skipped = [day for day, _ in segments[:first] + segments[last + 1:]]
    if skipped:
        logger.warning(f"No minute data for edge sessions {', '.join(skipped)}; skipped")
    logger.debug(f"Assembled {len(chart)} {period} bars from {last - first + 1} sessions")
    return chart
