"""
Tests for the TradingDay session cursor.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ashare_bars.data.calendars import TradingDay, generate_session_windows
from ashare_bars.data.errors import ParseError
from ashare_bars.data.periods import DAY, WEEK, Period

FIVE_MIN = Period.minute(5)


def td(text, period=None):
    return TradingDay.parse(text, period)


def test_next_and_previous():
    """Stepping lands on neighbouring sessions"""
    day = td("2023-07-06")
    assert str(day.next()) == "2023-07-07"
    assert str(day.previous()) == "2023-07-05"


def test_stepping_skips_weekends_and_holidays():
    assert str(td("2023-07-07").next()) == "2023-07-10"
    assert str(td("2023-09-28").next()) == "2023-10-09"
    assert str(td("2023-10-09").previous()) == "2023-09-28"


def test_next_previous_round_trip():
    """next().previous() and previous().next() return to the start"""
    day = td("2023-09-01")
    for _ in range(40):
        assert day.next().previous() == day
        assert day.previous().next() == day
        assert day.next() > day
        assert day.previous() < day
        day = day.next()


def test_parse_snaps_back_to_a_session():
    assert str(td("2023-07-08")) == "2023-07-07"
    assert str(td("2023-10-03")) == "2023-09-28"


def test_parse_with_time_gives_minute_cursor():
    cursor = td("2023-07-06 14:30")
    assert cursor.period == Period.minute(1)
    assert str(cursor) == "2023-07-06 14:30:00"


@pytest.mark.parametrize("text", ["2023-13-01", "07/06/2023", "2023-07-06 25:00", "yesterday"])
def test_parse_rejects_malformed(text):
    with pytest.raises(ParseError):
        td(text)


def test_week_cursor():
    """Switching to WEEK snaps to Monday; +1 moves a calendar week"""
    week = td("2023-07-06").with_period(WEEK)
    assert str(week) == "2023-07-03"
    assert str(week + 1) == "2023-07-10"
    assert str(week - 1) == "2023-06-26"


def test_week_step_does_not_snap_to_session():
    """Week buckets start on Monday even when Monday is closed"""
    week = td("2023-04-26").with_period(WEEK)
    assert str(week + 1) == "2023-05-01"


def test_minute_cursor_steps_within_session():
    cursor = td("2023-07-06 14:30").with_period(FIVE_MIN)
    assert str(cursor + 1) == "2023-07-06 14:35:00"
    assert str(cursor + 6) == "2023-07-06 15:00:00"


def test_minute_cursor_rolls_past_close():
    """Past 15:00 the remaining minutes continue from the next session's 09:30"""
    cursor = td("2023-07-06 14:55").with_period(FIVE_MIN)
    assert str(cursor + 2) == "2023-07-07 09:35:00"

    friday = td("2023-07-07 14:55").with_period(FIVE_MIN)
    assert str(friday + 2) == "2023-07-10 09:35:00"


def test_minute_cursor_rolls_back_past_open():
    cursor = td("2023-07-10 09:35").with_period(FIVE_MIN)
    assert str(cursor - 1) == "2023-07-07 15:00:00"
    assert str(cursor - 2) == "2023-07-07 14:55:00"


@pytest.mark.parametrize(
    "cursor",
    [
        td("2023-09-26"),
        td("2023-09-26").with_period(WEEK),
        td("2023-07-06 14:30").with_period(FIVE_MIN),
        td("2023-07-07 15:00").with_period(Period.minute(15)),
    ],
    ids=["day", "week", "5min", "15min-at-close"],
)
def test_add_then_subtract_round_trip(cursor):
    for n in (0, 1, 2, 7, 30, 150):
        assert cursor.add(n).subtract(n) == cursor


def test_negative_steps():
    day = td("2023-07-06")
    assert day + (-1) == day - 1
    assert day - (-1) == day + 1


def test_add_duration():
    """Durations convert to whole periods; less than one period is a no-op"""
    day = td("2023-07-06")
    assert str(day + timedelta(days=2)) == "2023-07-10"
    assert day + timedelta(hours=5) == day

    cursor = td("2023-07-06 14:30").with_period(FIVE_MIN)
    assert str(cursor + timedelta(minutes=12)) == "2023-07-06 14:40:00"
    assert cursor - timedelta(minutes=4) == cursor

    week = day.with_period(WEEK)
    assert str(week + timedelta(days=14)) == "2023-07-17"


def test_between():
    assert td("2023-09-28").between(td("2023-10-09")) == 1
    assert td("2023-10-09").between(td("2023-09-28")) == 1
    assert td("2023-07-03").between(td("2023-07-10")) == 5
    assert td("2023-07-06").between(td("2023-07-06")) == 0
    assert td("2023-07-03").days(td("2023-07-10")) == 5


def test_week_and_month_boundaries():
    day = td("2023-07-06")
    assert str(day.week_start_day()) == "2023-07-03"
    assert str(day.week_end_day()) == "2023-07-09"
    assert str(day.month_start_day()) == "2023-07-01"
    assert str(day.month_end_day()) == "2023-07-31"
    assert str(td("2024-02-07").month_end_day()) == "2024-02-29"
    assert str(td("2023-12-12").month_end_day()) == "2023-12-31"


def test_open_and_close_time():
    day = td("2023-07-06")
    assert str(day.open_time()) == "2023-07-06 09:30:00"
    assert str(day.close_time()) == "2023-07-06 15:00:00"
    assert day.close_time().period.is_minute
    assert td("2023-07-06 10:00", FIVE_MIN).open_time().period == FIVE_MIN


def test_latest():
    """Before the open the latest session is the previous one"""
    assert str(TradingDay.latest(now=datetime(2023, 7, 6, 10, 0))) == "2023-07-06"
    assert str(TradingDay.latest(now=datetime(2023, 7, 6, 8, 0))) == "2023-07-05"
    assert str(TradingDay.latest(now=datetime(2023, 7, 8, 12, 0))) == "2023-07-07"
    assert str(TradingDay.latest(now=datetime(2023, 7, 10, 9, 0))) == "2023-07-07"


def test_latest_converts_aware_now_to_market_time():
    now = datetime(2023, 7, 6, 2, 0, tzinfo=timezone.utc)  # 10:00 in Shanghai
    assert str(TradingDay.latest(now=now)) == "2023-07-06"
    assert str(TradingDay.latest(now=now, tz="UTC")) == "2023-07-05"


def test_resolve():
    assert TradingDay.resolve("2023-07-06") == td("2023-07-06")


def test_is_now_closed():
    day = td("2023-07-06")
    assert day.is_now_closed(now=datetime(2023, 7, 6, 15, 1)) is True
    assert day.is_now_closed(now=datetime(2023, 7, 6, 14, 0)) is False


def test_from_datetime():
    """Raw date-times snap to the nearest boundary of the period"""
    def conv(*args, period=FIVE_MIN):
        return str(TradingDay.from_datetime(datetime(*args), period))

    assert conv(2023, 7, 6, 9, 31) == "2023-07-06 09:35:00"
    assert conv(2023, 7, 6, 9, 35) == "2023-07-06 09:35:00"
    assert conv(2023, 7, 6, 9, 30) == "2023-07-06 09:35:00"
    assert conv(2023, 7, 6, 14, 58) == "2023-07-06 15:00:00"
    assert conv(2023, 7, 6, 16, 0) == "2023-07-06 15:00:00"
    assert conv(2023, 7, 8, 10, 0) == "2023-07-07 15:00:00"
    assert conv(2023, 7, 8, 10, 0, period=DAY) == "2023-07-07"
    assert conv(2023, 7, 8, period=WEEK) == "2023-07-03"


def test_sessions_until():
    sessions = td("2023-09-27").sessions_until(td("2023-10-10"))
    assert [str(s) for s in sessions] == ["2023-09-27", "2023-09-28", "2023-10-09", "2023-10-10"]


def test_equality_and_hash_use_instant():
    a, b = td("2023-07-06"), td("2023-07-06")
    assert a == b
    assert len({a, b}) == 1
    assert td("2023-07-05") < a


def test_generate_session_windows():
    """Holidays and weekends have no session"""
    windows = generate_session_windows("2023-06-21", "2023-06-26")
    assert [(o.strftime("%Y-%m-%d %H:%M"), c.strftime("%H:%M")) for o, c in windows] == [
        ("2023-06-21 09:30", "15:00"),
        ("2023-06-26 09:30", "15:00"),
    ]


def test_session_open_is_the_previous_close_slot():
    """A minute cursor at 09:30 sits on the same slot as the previous 15:00"""
    opening = td("2023-07-10").open_time().with_period(FIVE_MIN)
    assert opening == td("2023-07-07 15:00", FIVE_MIN)
    assert hash(opening) == hash(td("2023-07-07 15:00", FIVE_MIN))
    assert opening < td("2023-07-10 09:35", FIVE_MIN)
    assert str(opening) == "2023-07-10 09:30:00"


@pytest.mark.parametrize("n", [0, 1, 2, 66, 100])
def test_round_trip_from_session_open(n):
    opening = td("2023-07-06").open_time().with_period(FIVE_MIN)
    assert opening.add(n).subtract(n) == opening
    assert opening.subtract(n).add(n) == opening

    parsed = td("2023-07-06 09:30", FIVE_MIN)
    assert parsed.subtract(n).add(n) == parsed


def test_week_cursor_next_moves_one_session():
    """next() on a week cursor leaves Monday; add() snaps back to it"""
    week = td("2023-07-06").with_period(WEEK)
    moved = week.next()
    assert str(moved) == "2023-07-04"
    assert moved.period == WEEK
    assert str(moved.add(1).subtract(1)) == "2023-07-03"
