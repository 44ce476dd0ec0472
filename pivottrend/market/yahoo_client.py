"""Yahoo Finance async client.

Handles all communication with the market-data provider: historical bar
fetching, quote snapshots, and symbol search.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from pivottrend.config import Config
from pivottrend.market.models import (
    MarketDataError,
    Quote,
    SymbolMatch,
    normalize_ticker,
    validate_range,
)
from pivottrend.strategy.models import Bar

logger = logging.getLogger("pivottrend")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

_SEARCH_LIMIT = 10


class YahooClient:
    """Async client wrapping the Yahoo Finance chart and search endpoints."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._base_url = config.market_data_base_url.rstrip("/")
        self._search_url = config.market_search_url.rstrip("/")
        self._timeout = config.request_timeout
        self._headers = {
            "User-Agent": "Mozilla/5.0 (compatible; pivottrend)",
            "Accept": "application/json",
        }

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> httpx.Response:
        """Execute an HTTP request with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Non-retryable errors are raised immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await getattr(client, method)(
                        url,
                        headers=self._headers,
                        timeout=self._timeout,
                        **kwargs,
                    )

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "Yahoo %s %s returned %d, retry %d/%d in %.1fs",
                        method.upper(), url, resp.status_code,
                        attempt + 1, _MAX_RETRIES, delay,
                    )
                    await asyncio.sleep(delay)
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "Yahoo %s %s transport error (%s), retry %d/%d in %.1fs",
                    method.upper(), url, exc,
                    attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        # All retries exhausted: raise the last error
        raise last_exc  # type: ignore[misc]

    async def _chart(self, symbol: str, params: dict) -> dict:
        """Fetch and unwrap one chart result, raising ``MarketDataError``."""
        url = f"{self._base_url}/v8/finance/chart/{symbol}"
        try:
            resp = await self._request_with_retry("get", url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Error fetching chart for %s: %s", symbol, exc)
            raise MarketDataError(f"Failed to fetch data for {symbol}: {exc}") from exc

        chart = resp.json().get("chart") or {}
        results = chart.get("result") or []
        if not results:
            error = chart.get("error") or {}
            detail = error.get("description", "no result")
            raise MarketDataError(f"No data found for ticker: {symbol} ({detail})")
        return results[0]

    # ── Bars ─────────────────────────────────────────────────────────────

    async def fetch_bars(
        self,
        ticker: str,
        period: str = "5d",
        interval: str = "15m",
    ) -> list[Bar]:
        """Fetch historical OHLCV bars.

        Args:
            ticker: e.g. ``"AAPL"``, ``"^NSEI"``, ``"BTC-USD"``
            period: look-back range, e.g. ``"5d"``, ``"1mo"``
            interval: bar size, e.g. ``"15m"``, ``"1d"``

        Returns:
            List of ``Bar`` objects ordered oldest-first.  Rows with a
            missing open/high/low/close are dropped; a missing volume is 0.

        Raises:
            ``MarketDataError`` if the provider returns no usable rows.
        """
        symbol = normalize_ticker(ticker)
        validate_range(period, interval)

        result = await self._chart(symbol, {"range": period, "interval": interval})

        timestamps = result.get("timestamp") or []
        quotes = (result.get("indicators", {}).get("quote") or [{}])[0]
        opens = quotes.get("open") or []
        highs = quotes.get("high") or []
        lows = quotes.get("low") or []
        closes = quotes.get("close") or []
        volumes = quotes.get("volume") or []

        bars: list[Bar] = []
        for i, ts in enumerate(timestamps):
            o = opens[i] if i < len(opens) else None
            h = highs[i] if i < len(highs) else None
            lo = lows[i] if i < len(lows) else None
            c = closes[i] if i < len(closes) else None
            if o is None or h is None or lo is None or c is None:
                continue
            v = volumes[i] if i < len(volumes) else None
            bars.append(
                Bar(
                    timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
                    open=float(o),
                    high=float(h),
                    low=float(lo),
                    close=float(c),
                    volume=float(v or 0),
                )
            )

        if not bars:
            raise MarketDataError(f"No data found for ticker: {symbol}")

        bars.sort(key=lambda b: b.timestamp)
        logger.debug("Fetched %d bars for %s (%s/%s)", len(bars), symbol, period, interval)
        return bars

    # ── Quotes ───────────────────────────────────────────────────────────

    async def get_quote(self, ticker: str) -> Quote:
        """Fetch a price snapshot from the chart metadata.

        Raises ``MarketDataError`` if the ticker is unknown.
        """
        symbol = normalize_ticker(ticker)
        result = await self._chart(symbol, {"range": "1d", "interval": "1d"})
        meta = result.get("meta") or {}

        price = float(meta.get("regularMarketPrice") or 0.0)
        prev = float(
            meta.get("chartPreviousClose") or meta.get("previousClose") or 0.0
        )
        change = price - prev if prev else 0.0
        change_pct = change / prev * 100.0 if prev else 0.0

        short_name = meta.get("shortName") or symbol
        return Quote(
            symbol=meta.get("symbol") or symbol,
            price=price,
            previous_close=prev,
            change=change,
            change_percent=change_pct,
            currency=meta.get("currency") or "USD",
            exchange=meta.get("exchangeName") or "",
            short_name=short_name,
            long_name=meta.get("longName") or short_name,
        )

    async def get_quotes(self, tickers: list[str]) -> dict[str, Quote]:
        """Fetch quotes for several tickers concurrently.

        Tickers that fail are left out of the result.
        """

        async def _one(ticker: str) -> Optional[Quote]:
            try:
                return await self.get_quote(ticker)
            except (MarketDataError, ValueError) as exc:
                logger.warning("Quote for %s unavailable: %s", ticker, exc)
                return None

        quotes = await asyncio.gather(*(_one(t) for t in tickers))
        return {
            normalize_ticker(t): q for t, q in zip(tickers, quotes) if q is not None
        }

    # ── Search ───────────────────────────────────────────────────────────

    async def search_symbols(self, query: str) -> list[SymbolMatch]:
        """Search for ticker symbols matching *query*.

        Returns an empty list on any provider error.
        """
        url = f"{self._search_url}/v1/finance/search"
        params = {"q": query, "quotesCount": _SEARCH_LIMIT, "newsCount": 0}
        try:
            resp = await self._request_with_retry("get", url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Error searching for %s: %s", query, exc)
            return []

        matches: list[SymbolMatch] = []
        for q in resp.json().get("quotes", []):
            symbol = q.get("symbol")
            if not isinstance(symbol, str) or not symbol:
                continue
            matches.append(
                SymbolMatch(
                    symbol=symbol,
                    name=q.get("shortname") or symbol,
                    exchange=q.get("exchange") or "",
                )
            )
        return matches
