"""
CSV bar loader for a local data directory.

Layout:
    <data_dir>/stocks.csv                                   stock list (code<TAB>name)
    <data_dir>/stocks/<code[:2]>/<code[2:4]>/<code>.csv    day bars
    <data_dir>/minutes/<code>/<YYYY-MM-DD>.csv             one session of minute bars

Bar files are `date,open,high,low,close,volume` with a header line.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .models import Bar
from .symbols import StockList, StockSymbol, exchange_of, normalize_symbol

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
_PRICE_COLUMNS = ["open", "high", "low", "close"]
STOCK_LIST_FILE = "stocks.csv"


def read_bars(path: Path) -> List[Bar]:
    """
    Read one bar CSV file.

    Rows with a missing or non-positive price are dropped. `yesterday_close`
    is filled from the previous kept row (0 for the first one).
    """
    df = pd.read_csv(path, dtype={"date": str}, skip_blank_lines=True)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in CSV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: CSV missing required column(s) {', '.join(missing)}")

    df = df[CSV_COLUMNS].copy()
    df[CSV_COLUMNS[1:]] = df[CSV_COLUMNS[1:]].apply(pd.to_numeric, errors="coerce")
    df["volume"] = df["volume"].fillna(0.0)
    df = df.dropna(subset=_PRICE_COLUMNS)
    valid = (df[_PRICE_COLUMNS] > 0).all(axis=1)
    dropped = int((~valid).sum())
    if dropped:
        logger.debug(f"{path}: dropped {dropped} bar(s) with non-positive prices")
    df = df[valid].copy()
    df["date"] = df["date"].astype(str).str.strip()
    df["yesterday_close"] = df["close"].shift(1).fillna(0.0)

    return [
        Bar(
            date=row.date,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            yesterday_close=float(row.yesterday_close),
        )
        for row in df.itertuples(index=False)
    ]


def read_stock_list(path: Path) -> StockList:
    """
    Read the tab-separated stock list: a header line, then `code<TAB>name` rows.

    Rows without a name are skipped; extra columns are ignored.
    """
    df = pd.read_csv(path, sep="\t", header=0, dtype=str)
    if df.shape[1] < 2:
        raise ValueError(f"{path}: stock list needs code and name columns")
    df = df.iloc[:, :2].dropna()
    df.columns = ["code", "name"]
    stocks = []
    for row in df.itertuples(index=False):
        code = row.code.strip()
        stocks.append(StockSymbol(code=code, exchange=exchange_of(code), name=row.name.strip()))
    return StockList(stocks)


class CsvBarLoader:
    """
    Loads bars from CSV files under `data_dir`.

    Day files and the stock list are cached; minute segments are read on demand.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self._day_cache: Dict[str, List[Bar]] = {}
        self._stock_list: Optional[StockList] = None

    def stocks_path(self) -> Path:
        return self.data_dir / STOCK_LIST_FILE

    def day_path(self, symbol: str) -> Path:
        code = normalize_symbol(symbol)
        return self.data_dir / "stocks" / code[:2] / code[2:4] / f"{code}.csv"

    def minute_path(self, symbol: str, day: str) -> Path:
        code = normalize_symbol(symbol)
        return self.data_dir / "minutes" / code / f"{day[:10]}.csv"

    def day_bars(self, symbol: str) -> List[Bar]:
        code = normalize_symbol(symbol)
        cached = self._day_cache.get(code)
        if cached is not None:
            return list(cached)

        path = self.day_path(code)
        if not path.exists():
            raise FileNotFoundError(f"No day bars for {code}: {path} not found")
        bars = read_bars(path)
        logger.info(f"Loaded {len(bars)} day bars for {code} from {path}")
        self._day_cache[code] = bars
        return list(bars)

    def minute_bars(self, symbol: str, day: str) -> List[Bar]:
        path = self.minute_path(symbol, day)
        if not path.exists():
            return []
        return read_bars(path)

    def stock_list(self) -> StockList:
        """The listed stocks, read once from `stocks.csv`."""
        if self._stock_list is None:
            path = self.stocks_path()
            if not path.exists():
                raise FileNotFoundError(f"Stock list not found: {path}")
            self._stock_list = read_stock_list(path)
            logger.info(f"Loaded {len(self._stock_list)} stocks from {path}")
        return self._stock_list
