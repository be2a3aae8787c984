"""
Symbol parsing utilities for A-share stock codes.

Supports:
- Bare codes: "600444"
- Prefixed codes: "sh600444", "SZ000001"
- Suffixed codes: "600444.SH", "300750.sz"

StockList holds the listed stocks (code and name) for lookup and search.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Literal, Optional
import re

Exchange = Literal["SH", "SZ", "BJ"]

# Leading digits -> listing exchange
_EXCHANGE_PREFIXES = (
    ("60", "SH"),  # main board
    ("68", "SH"),  # STAR market
    ("90", "SH"),  # B shares
    ("00", "SZ"),  # main board
    ("30", "SZ"),  # ChiNext
    ("20", "SZ"),  # B shares
    ("43", "BJ"),
    ("83", "BJ"),
    ("87", "BJ"),
    ("92", "BJ"),
)

_PREFIXED = re.compile(r"^(sh|sz|bj)(\d{6})$", re.IGNORECASE)
_SUFFIXED = re.compile(r"^(\d{6})\.(sh|sz|bj)$", re.IGNORECASE)
_BARE = re.compile(r"^\d{6}$")


@dataclass(frozen=True)
class StockSymbol:
    """Parsed stock identifier"""
    code: str  # six digits, e.g. "600444"
    exchange: Optional[Exchange] = None
    name: str = ""

    def __str__(self) -> str:
        return self.code

    @property
    def qualified(self) -> str:
        """Code with exchange suffix, e.g. "600444.SH" (bare code if unknown)."""
        return f"{self.code}.{self.exchange}" if self.exchange else self.code


def exchange_of(code: str) -> Optional[Exchange]:
    for prefix, exchange in _EXCHANGE_PREFIXES:
        if code.startswith(prefix):
            return exchange
    return None


def parse_symbol(symbol: str) -> StockSymbol:
    """
    Parse a stock code in any of the supported spellings.

    Examples:
        >>> parse_symbol("sh600444")
        StockSymbol(code='600444', exchange='SH', name='')
        >>> parse_symbol("300750.SZ").qualified
        '300750.SZ'

    Raises:
        ValueError: If the symbol is not a six-digit code
    """
    value = symbol.strip()

    match = _PREFIXED.match(value)
    if match:
        return StockSymbol(code=match.group(2), exchange=match.group(1).upper())

    match = _SUFFIXED.match(value)
    if match:
        return StockSymbol(code=match.group(1), exchange=match.group(2).upper())

    if _BARE.match(value):
        return StockSymbol(code=value, exchange=exchange_of(value))

    raise ValueError(f"Unrecognized symbol format: {symbol}")


def normalize_symbol(symbol: str) -> str:
    """Bare six-digit code for any supported spelling."""
    return parse_symbol(symbol).code


class StockList:
    """
    Listed stocks with code/name search.

    Built by the loader from the stock index file; entries keep file order
    until `sorted()` is called.
    """

    def __init__(self, stocks: Iterable[StockSymbol] = ()):
        self._stocks: List[StockSymbol] = list(stocks)

    def __len__(self) -> int:
        return len(self._stocks)

    def __iter__(self) -> Iterator[StockSymbol]:
        return iter(self._stocks)

    def __getitem__(self, index):
        return self._stocks[index]

    def sorted(self) -> "StockList":
        return StockList(sorted(self._stocks, key=lambda s: s.code))

    def search(self, query: str) -> List[StockSymbol]:
        """Stocks whose code or name contains `query`"""
        return [s for s in self._stocks if query in s.code or query in s.name]

    def filter(self, query: Optional[str]) -> "StockList":
        """Narrowed list; None keeps every stock."""
        if query is None:
            return StockList(self._stocks)
        return StockList(self.search(query))

    def get(self, symbol: str) -> Optional[StockSymbol]:
        """Entry for any supported spelling of a code, or None."""
        code = normalize_symbol(symbol)
        for stock in self._stocks:
            if stock.code == code:
                return stock
        return None
