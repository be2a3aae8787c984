"""
Data layer: holiday calendar, session cursor, bar series, resampling, loaders
"""

from .errors import ParseError, DataIntegrityError
from .holidays import (
    HolidayRange,
    is_holiday,
    is_weekend,
    is_trading_day,
    today_is_trading_day,
    to_trading_day,
)
from .periods import Period, PeriodKind, DAY, WEEK
from .calendars import TradingDay, generate_session_windows, SESSION_OPEN, SESSION_CLOSE
from .models import Bar, Chart, BarLoader
from .bars import bucket_key, resample, build_chart, assemble_minute_chart
from .providers_csv import CsvBarLoader
from .symbols import StockSymbol, StockList, parse_symbol, normalize_symbol

__all__ = [
    "ParseError",
    "DataIntegrityError",
    "HolidayRange",
    "is_holiday",
    "is_weekend",
    "is_trading_day",
    "today_is_trading_day",
    "to_trading_day",
    "Period",
    "PeriodKind",
    "DAY",
    "WEEK",
    "TradingDay",
    "generate_session_windows",
    "SESSION_OPEN",
    "SESSION_CLOSE",
    "Bar",
    "Chart",
    "BarLoader",
    "bucket_key",
    "resample",
    "build_chart",
    "assemble_minute_chart",
    "CsvBarLoader",
    "StockSymbol",
    "StockList",
    "parse_symbol",
    "normalize_symbol",
]
