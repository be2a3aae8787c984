"""
Tests for Period parsing and ordering.
"""

import pytest

from ashare_bars.data.errors import ParseError
from ashare_bars.data.periods import DAY, WEEK, Period, PeriodKind


@pytest.mark.parametrize(
    "text, expected",
    [
        ("day", DAY),
        ("1d", DAY),
        ("Week", WEEK),
        ("w", WEEK),
        ("5min", Period.minute(5)),
        ("15m", Period.minute(15)),
        (" 30 min ", Period.minute(30)),
    ],
)
def test_parse(text, expected):
    assert Period.parse(text) == expected


def test_parse_passes_periods_through():
    assert Period.parse(WEEK) is WEEK


@pytest.mark.parametrize("text", ["", "month", "0min", "min", "5h"])
def test_parse_rejects_unknown(text):
    with pytest.raises(ParseError):
        Period.parse(text)


def test_str():
    assert str(DAY) == "day"
    assert str(WEEK) == "week"
    assert str(Period.minute(5)) == "5min"


def test_minute_window_must_be_positive():
    with pytest.raises(ValueError):
        Period.minute(0)
    with pytest.raises(ValueError):
        Period(PeriodKind.DAY, 5)


def test_total_order():
    """Day < Week < minute periods, minute periods by window size"""
    ordered = [Period.minute(15), WEEK, Period.minute(1), DAY, Period.minute(5)]
    assert sorted(ordered) == [DAY, WEEK, Period.minute(1), Period.minute(5), Period.minute(15)]
    assert Period.minute(5) != Period.minute(15)
    assert Period.minute(5) == Period.minute(5)


def test_kind_flags():
    assert DAY.is_day and not DAY.is_minute
    assert WEEK.is_week
    assert Period.minute(5).is_minute
