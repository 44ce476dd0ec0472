"""Tests for watchlist evaluation and price alert checks."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from pivottrend.market.models import MarketDataError, Quote
from pivottrend.strategy.models import HOLD, Bar
from pivottrend.watchlist.alerts import alert_fires, evaluate_alerts
from pivottrend.watchlist.service import build_watchlist_rows


_T0 = datetime(2025, 1, 6, 14, 30, tzinfo=timezone.utc)


def _bars(n: int = 60) -> list[Bar]:
    bars = []
    for i in range(n):
        c = 100.0 + 5.0 * math.sin(i / 4.0)
        bars.append(
            Bar(timestamp=_T0 + timedelta(minutes=15 * i),
                open=c, high=c + 0.5, low=c - 0.5, close=c, volume=1000.0)
        )
    return bars


def _quote(symbol: str, price: float) -> Quote:
    return Quote(
        symbol=symbol, price=price, previous_close=price - 1.0, change=1.0,
        change_percent=1.0 / (price - 1.0) * 100, currency="EUR",
    )


class _FakeClient:
    """Duck-typed market client with canned bars and quotes."""

    def __init__(self, bars=None, quotes=None, failing=()):
        self._bars = bars if bars is not None else _bars()
        self._quotes = quotes or {}
        self._failing = set(failing)

    async def fetch_bars(self, ticker, period="5d", interval="15m"):
        if ticker in self._failing:
            raise MarketDataError(f"No data found for ticker: {ticker}")
        return self._bars

    async def get_quotes(self, tickers):
        return {t: q for t, q in self._quotes.items() if t in tickers}


# ── Watchlist rows ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_rows_combine_quote_and_signal():
    client = _FakeClient(quotes={"AAPL": _quote("AAPL", 190.0)})
    rows = await build_watchlist_rows(client, ["AAPL"])

    assert len(rows) == 1
    row = rows[0]
    assert row.ticker == "AAPL"
    assert row.current_price == 190.0
    assert row.currency == "EUR"
    assert row.change == 1.0
    assert row.rsi is not None
    assert row.signal in ("Buy", "Sell", "Hold")


@pytest.mark.asyncio
async def test_row_without_quote_uses_last_close():
    bars = _bars()
    rows = await build_watchlist_rows(_FakeClient(bars=bars), ["MSFT"])
    assert rows[0].current_price == bars[-1].close
    assert rows[0].currency == "USD"


@pytest.mark.asyncio
async def test_failed_ticker_gets_neutral_row_and_order_is_kept():
    client = _FakeClient(failing={"BAD"})
    rows = await build_watchlist_rows(client, ["AAPL", "BAD", "MSFT"])
    assert [r.ticker for r in rows] == ["AAPL", "BAD", "MSFT"]
    bad = rows[1]
    assert bad.signal == HOLD
    assert bad.current_price == 0.0
    assert bad.rsi is None


@pytest.mark.asyncio
async def test_short_history_is_hold():
    rows = await build_watchlist_rows(_FakeClient(bars=_bars(10)), ["AAPL"])
    assert rows[0].signal == HOLD
    assert rows[0].rsi is None


# ── Alerts ───────────────────────────────────────────────────────────────


class TestAlerts:
    def test_above_fires_at_or_over_level(self):
        alert = {"ticker": "AAPL", "price_level": 100.0, "direction": "above"}
        assert alert_fires(alert, 100.0)
        assert alert_fires(alert, 101.0)
        assert not alert_fires(alert, 99.99)

    def test_below_fires_at_or_under_level(self):
        alert = {"ticker": "AAPL", "price_level": 100.0, "direction": "below"}
        assert alert_fires(alert, 100.0)
        assert alert_fires(alert, 90.0)
        assert not alert_fires(alert, 100.01)

    def test_evaluate_skips_missing_prices_and_triggered(self):
        alerts = [
            {"id": 1, "ticker": "AAPL", "price_level": 150.0, "direction": "above", "triggered": False},
            {"id": 2, "ticker": "MSFT", "price_level": 300.0, "direction": "below", "triggered": False},
            {"id": 3, "ticker": "AAPL", "price_level": 100.0, "direction": "above", "triggered": True},
            {"id": 4, "ticker": "TSLA", "price_level": 200.0, "direction": "above", "triggered": False},
        ]
        fired = evaluate_alerts(alerts, {"AAPL": 155.0, "MSFT": 310.0})
        assert [a["id"] for a in fired] == [1]
