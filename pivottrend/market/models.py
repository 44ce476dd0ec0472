"""Market data models — typed representations of quote and search results."""

import re
from dataclasses import dataclass


VALID_PERIODS: tuple[str, ...] = (
    "1d", "5d", "1mo", "3mo", "6mo", "1y", "2y", "5y", "max",
)

VALID_INTERVALS: tuple[str, ...] = (
    "1m", "2m", "5m", "15m", "30m", "60m", "90m", "1h",
    "1d", "5d", "1wk", "1mo", "3mo",
)

DEFAULT_TICKERS: tuple[str, ...] = ("^NSEI", "AAPL", "BTC-USD")

_TICKER_RE = re.compile(r"^[A-Z0-9^.\-=]{1,20}$")


class MarketDataError(RuntimeError):
    """Raised when bars or quotes cannot be retrieved for a ticker."""


@dataclass(frozen=True)
class Quote:
    """Latest price snapshot for a ticker."""

    symbol: str
    price: float
    previous_close: float
    change: float
    change_percent: float
    currency: str
    exchange: str = ""
    short_name: str = ""
    long_name: str = ""


@dataclass(frozen=True)
class SymbolMatch:
    """A single symbol search hit."""

    symbol: str
    name: str
    exchange: str


def normalize_ticker(ticker: str) -> str:
    """Upper-case and validate a ticker symbol.

    Raises ``ValueError`` for empty, over-long, or malformed symbols.
    """
    symbol = ticker.strip().upper()
    if not _TICKER_RE.match(symbol):
        raise ValueError(f"Invalid ticker symbol: {ticker!r}")
    return symbol


def validate_range(period: str, interval: str) -> None:
    """Raise ``ValueError`` if *period* or *interval* is not supported."""
    if period not in VALID_PERIODS:
        raise ValueError(
            f"Unknown period '{period}'. Available: {', '.join(VALID_PERIODS)}"
        )
    if interval not in VALID_INTERVALS:
        raise ValueError(
            f"Unknown interval '{interval}'. Available: {', '.join(VALID_INTERVALS)}"
        )
