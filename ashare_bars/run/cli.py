"""
CLI entrypoint for calendar queries and bar resampling.
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..config import AppConfig, load_config, apply_env_overrides, apply_cli_overrides
from ..data import (
    Period,
    TradingDay,
    generate_session_windows,
    is_holiday,
    is_trading_day,
    is_weekend,
)
from .runner import build_loader, run_resample, RunResult

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_summary(result: RunResult, tail: int = 10):
    """Print resample summary to console"""
    chart = result.chart
    print("\n" + "=" * 70)
    print("RESAMPLE SUMMARY")
    print("=" * 70)
    print(f"Symbol: {result.symbol}")
    print(f"Period: {chart.period}")
    print(f"End Session: {result.end}")
    print(f"Bars: {len(chart)}")
    if chart:
        print(f"Range: {chart.first().date} .. {chart.last().date}")
    print("-" * 70)
    if not result.frame.empty:
        print(result.frame.tail(tail).to_string())
    print("=" * 70 + "\n")


def cmd_day(day: str):
    """Show calendar facts for a date"""
    cursor = TradingDay.parse(day)
    print(f"date:          {day}")
    print(f"weekend:       {is_weekend(day)}")
    print(f"holiday:       {is_holiday(day)}")
    print(f"trading day:   {is_trading_day(day)}")
    print(f"session:       {cursor}")
    print(f"previous:      {cursor.previous()}")
    print(f"next:          {cursor.next()}")
    print(f"week:          {cursor.week_start_day()} .. {cursor.week_end_day()}")
    print(f"month:         {cursor.month_start_day()} .. {cursor.month_end_day()}")


def cmd_shift(day: str, steps: int, period: Optional[str]):
    """Print `day` moved by `steps` periods"""
    cursor = TradingDay.parse(day, Period.parse(period) if period else None)
    print(cursor + steps)


def cmd_sessions(start: str, end: str):
    """List session windows between two dates"""
    windows = generate_session_windows(start, end)
    for open_, close in windows:
        print(f"{open_:%Y-%m-%d}  {open_:%H:%M} - {close:%H:%M}")
    print(f"{len(windows)} session(s)")


def resolve_config(config_path: Optional[str], sets: List[str], symbol: Optional[str]) -> AppConfig:
    """Load config (or defaults), then apply env, --set and --symbol overrides"""
    config = load_config(config_path) if config_path else AppConfig()
    config = apply_env_overrides(config)
    if sets:
        config = apply_cli_overrides(config, sets)
    if symbol:
        config.resample.symbol = symbol
    return config


def cmd_stocks(config_path: Optional[str], sets: List[str], query: Optional[str]):
    """Print the stock list, optionally narrowed by code or name"""
    config = resolve_config(config_path, sets, None)
    stocks = build_loader(config).stock_list().filter(query).sorted()
    for stock in stocks:
        print(f"[{stock.code}] {stock.name}")
    print(f"{len(stocks)} stock(s)")


def cmd_resample(
    config_path: Optional[str],
    symbol: Optional[str],
    sets: List[str],
    output: Optional[str],
) -> RunResult:
    """Run resample and optionally write the chart to CSV"""
    config = resolve_config(config_path, sets, symbol)
    result = run_resample(config)
    if output:
        result.frame.to_csv(output)
        logger.info(f"Wrote {len(result.frame)} rows to {output}")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ashare-bars",
        description="A-share trading calendar and bar resampling - CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Calendar facts for a date
  ashare-bars day 2023-07-06

  # Latest session as of now
  ashare-bars latest

  # Sessions between two dates
  ashare-bars between 2023-09-28 2023-10-09

  # Cursor arithmetic (5-minute slots)
  ashare-bars shift "2023-07-06 14:55" 2 --period 5min

  # Search the stock list by code or name
  ashare-bars stocks 6004 --set data.data_dir=/srv/bars

  # Weekly bars for a stock from the configured data dir
  ashare-bars resample --config configs/weekly.yaml --symbol 600444 --set resample.limit=20
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--timezone",
        default=None,
        help="Market timezone for 'latest' (default: Asia/Shanghai)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_day = sub.add_parser("day", help="Show calendar facts for a date")
    p_day.add_argument("date", help="Date (YYYY-MM-DD)")

    sub.add_parser("latest", help="Print the latest session")

    p_between = sub.add_parser("between", help="Count sessions between two dates")
    p_between.add_argument("start")
    p_between.add_argument("end")

    p_shift = sub.add_parser("shift", help="Move a date/time by N periods")
    p_shift.add_argument("date", help="YYYY-MM-DD or 'YYYY-MM-DD HH:MM'")
    p_shift.add_argument("steps", type=int, help="Number of periods (negative moves back)")
    p_shift.add_argument("--period", default=None, help="day, week or <n>min")

    p_sessions = sub.add_parser("sessions", help="List session windows in a date range")
    p_sessions.add_argument("start")
    p_sessions.add_argument("end")

    p_stocks = sub.add_parser("stocks", help="List or search the stock list")
    p_stocks.add_argument("query", nargs="?", default=None, help="Code or name fragment")
    p_stocks.add_argument("--config", type=str, help="Path to config file (YAML or JSON)")
    p_stocks.add_argument("--set", action="append", dest="sets", metavar="KEY=VALUE", help="Override config value")

    p_resample = sub.add_parser("resample", help="Load and resample bars")
    p_resample.add_argument("--config", type=str, help="Path to config file (YAML or JSON)")
    p_resample.add_argument("--symbol", type=str, help="Override resample.symbol")
    p_resample.add_argument(
        "--set",
        action="append",
        dest="sets",
        metavar="KEY=VALUE",
        help="Override config value (can be used multiple times), e.g. resample.target=15min",
    )
    p_resample.add_argument("--output", type=str, help="Write the resulting bars to this CSV file")
    p_resample.add_argument("--tail", type=int, default=10, help="Rows to print (default: 10)")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entrypoint"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        if args.command == "day":
            cmd_day(args.date)
        elif args.command == "latest":
            print(TradingDay.latest(tz=args.timezone))
        elif args.command == "between":
            print(TradingDay.parse(args.start).between(TradingDay.parse(args.end)))
        elif args.command == "shift":
            cmd_shift(args.date, args.steps, args.period)
        elif args.command == "sessions":
            cmd_sessions(args.start, args.end)
        elif args.command == "stocks":
            cmd_stocks(args.config, args.sets or [], args.query)
        elif args.command == "resample":
            result = cmd_resample(args.config, args.symbol, args.sets or [], args.output)
            print_summary(result, tail=args.tail)
        return 0

    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        logger.exception(f"{args.command} failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
