"""Watchlist evaluation — latest signal and quote for each watched ticker."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from pivottrend.market.models import MarketDataError
from pivottrend.strategy.models import HOLD, Signal
from pivottrend.strategy.pipeline import analyze

logger = logging.getLogger("pivottrend")


@dataclass(frozen=True)
class WatchlistRow:
    """One watchlist line: price, signal, and RSI for a ticker."""

    ticker: str
    current_price: float
    signal: Signal
    rsi: Optional[float]
    currency: str
    change: float
    change_percent: float


def _neutral_row(ticker: str) -> WatchlistRow:
    return WatchlistRow(
        ticker=ticker,
        current_price=0.0,
        signal=HOLD,
        rsi=None,
        currency="USD",
        change=0.0,
        change_percent=0.0,
    )


async def _evaluate(client, ticker: str, quote, period: str, interval: str) -> WatchlistRow:
    try:
        bars = await client.fetch_bars(ticker, period, interval)
    except (MarketDataError, ValueError) as exc:
        logger.warning("Watchlist: no bars for %s: %s", ticker, exc)
        return _neutral_row(ticker)

    result = analyze(bars)
    last = result.bars[-1]
    return WatchlistRow(
        ticker=ticker,
        current_price=quote.price if quote else last.close,
        signal=result.summary.current_signal,
        rsi=last.rsi,
        currency=quote.currency if quote else "USD",
        change=quote.change if quote else 0.0,
        change_percent=quote.change_percent if quote else 0.0,
    )


async def build_watchlist_rows(
    client,
    tickers: list[str],
    period: str = "5d",
    interval: str = "15m",
) -> list[WatchlistRow]:
    """Evaluate every ticker concurrently, preserving input order.

    Args:
        client: A ``YahooClient`` (or compatible duck-type / mock).
        tickers: Symbols to evaluate.
        period: Look-back range for the bar fetch.
        interval: Bar size for the bar fetch.

    Returns:
        One ``WatchlistRow`` per ticker.  A ticker whose bars cannot be
        fetched gets a neutral Hold row instead of failing the batch.
    """
    quotes = await client.get_quotes(tickers)
    return list(
        await asyncio.gather(
            *(
                _evaluate(client, t, quotes.get(t.upper()), period, interval)
                for t in tickers
            )
        )
    )
