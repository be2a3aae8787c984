"""
Resample runner: loads bars for a symbol and builds the requested chart.

This is the single entry point both the CLI and library callers use.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from ..config import AppConfig
from ..data import CsvBarLoader, TradingDay, assemble_minute_chart, build_chart
from ..data.models import BarLoader, Chart
from ..data.symbols import normalize_symbol

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of a resample run"""
    symbol: str
    end: str
    chart: Chart
    frame: pd.DataFrame = field(default_factory=pd.DataFrame)
    elapsed_s: float = 0.0


def build_loader(config: AppConfig) -> BarLoader:
    if config.data.provider == "csv":
        return CsvBarLoader(config.data.data_dir)
    raise ValueError(f"Unsupported data provider: {config.data.provider}")


def run_resample(config: AppConfig, loader: Optional[BarLoader] = None) -> RunResult:
    """
    Load and resample bars as described by `config.resample`.

    Day sources are cut at `end` (the latest session when not set). Minute
    sources are assembled from the `sessions` trading days ending at `end`;
    a time of day in `end` also drops the bars after it.

    Args:
        config: AppConfig instance
        loader: Bar loader to use (built from `config.data` when omitted)

    Returns:
        RunResult with the chart and its DataFrame view
    """
    opts = config.resample
    if not opts.symbol:
        raise ValueError("resample.symbol is required")

    started = time.perf_counter()
    symbol = normalize_symbol(opts.symbol)
    source, target = opts.source_period(), opts.target_period()
    end = TradingDay.resolve(opts.end, tz=config.calendar.timezone)
    loader = loader or build_loader(config)

    logger.info(f"Resampling {symbol}: {source} -> {target}, end {end}, limit {opts.limit}")

    if source.is_minute:
        # Count sessions on the day even when `end` carries a time of day
        end_day = TradingDay(end.instant)
        start = end_day.sub(opts.sessions - 1)
        raw = assemble_minute_chart(lambda day: loader.minute_bars(symbol, day), start, end_day, source)
        cutoff = str(end) if end.period.is_minute else None
        chart = build_chart(raw.bars, source, target=target, end=cutoff, limit=opts.limit)
    else:
        chart = build_chart(loader.day_bars(symbol), source, target=target, end=str(end), limit=opts.limit)

    elapsed = time.perf_counter() - started
    logger.info(f"Built {len(chart)} {target} bars for {symbol} in {elapsed:.3f}s")
    return RunResult(symbol=symbol, end=str(end), chart=chart, frame=chart.to_frame(), elapsed_s=elapsed)
