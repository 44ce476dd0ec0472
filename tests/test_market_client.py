"""Tests for pivottrend.market — Yahoo client with mocked HTTP responses."""

from datetime import datetime, timezone

import httpx
import pytest

from pivottrend.config import Config
from pivottrend.market import yahoo_client
from pivottrend.market.models import MarketDataError, Quote, normalize_ticker
from pivottrend.market.yahoo_client import YahooClient
from pivottrend.strategy.models import Bar


def _make_config() -> Config:
    return Config(
        market_data_base_url="https://query1.example.test",
        market_search_url="https://query2.example.test",
        default_ticker="AAPL",
        default_period="5d",
        default_interval="15m",
        request_timeout=5.0,
        db_path=":memory:",
        log_level="INFO",
        health_port=8080,
    )


# ── Mock Yahoo responses ─────────────────────────────────────────────────

MOCK_CHART_RESPONSE = {
    "chart": {
        "result": [
            {
                "meta": {
                    "currency": "USD",
                    "symbol": "AAPL",
                    "exchangeName": "NMS",
                    "regularMarketPrice": 190.5,
                    "chartPreviousClose": 188.0,
                    "shortName": "Apple Inc.",
                },
                "timestamp": [1736173800, 1736174700, 1736175600],
                "indicators": {
                    "quote": [
                        {
                            "open": [189.0, None, 190.1],
                            "high": [189.8, 190.4, 190.9],
                            "low": [188.7, 189.9, 189.8],
                            "close": [189.5, 190.2, 190.5],
                            "volume": [120000, 98000, None],
                        }
                    ]
                },
            }
        ],
        "error": None,
    }
}

MOCK_NOT_FOUND_RESPONSE = {
    "chart": {
        "result": None,
        "error": {"code": "Not Found", "description": "No data found, symbol may be delisted"},
    }
}

MOCK_SEARCH_RESPONSE = {
    "quotes": [
        {"symbol": "AAPL", "shortname": "Apple Inc.", "exchange": "NMS"},
        {"index": "urn:news", "name": "not a quote"},
        {"symbol": "APLE", "exchange": "NYQ"},
    ]
}


def _patch_get(monkeypatch, payload=None, status: int = 200, captured: dict | None = None):
    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        if captured is not None:
            captured["url"] = url
            captured["params"] = params
        return httpx.Response(status, json=payload, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)


# ── Tests ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_parse_bars(monkeypatch):
    """Rows with a missing OHLC value are dropped, missing volume becomes 0."""
    captured: dict = {}
    _patch_get(monkeypatch, MOCK_CHART_RESPONSE, captured=captured)
    client = YahooClient(_make_config())

    bars = await client.fetch_bars("aapl", "5d", "15m")

    assert captured["url"] == "https://query1.example.test/v8/finance/chart/AAPL"
    assert captured["params"] == {"range": "5d", "interval": "15m"}
    assert len(bars) == 2
    b = bars[0]
    assert isinstance(b, Bar)
    assert b.timestamp == datetime.fromtimestamp(1736173800, tz=timezone.utc)
    assert b.open == pytest.approx(189.0)
    assert b.high == pytest.approx(189.8)
    assert b.low == pytest.approx(188.7)
    assert b.close == pytest.approx(189.5)
    assert b.volume == 120000.0
    assert bars[1].volume == 0.0


@pytest.mark.asyncio
async def test_unknown_ticker_raises(monkeypatch):
    _patch_get(monkeypatch, MOCK_NOT_FOUND_RESPONSE, status=404)
    client = YahooClient(_make_config())
    with pytest.raises(MarketDataError, match="ZZZZ"):
        await client.fetch_bars("ZZZZ")


@pytest.mark.asyncio
async def test_empty_result_raises(monkeypatch):
    _patch_get(monkeypatch, MOCK_NOT_FOUND_RESPONSE)
    client = YahooClient(_make_config())
    with pytest.raises(MarketDataError, match="No data found"):
        await client.fetch_bars("ZZZZ")


@pytest.mark.asyncio
async def test_invalid_arguments_rejected():
    client = YahooClient(_make_config())
    with pytest.raises(ValueError):
        await client.fetch_bars("not a ticker!")
    with pytest.raises(ValueError, match="period"):
        await client.fetch_bars("AAPL", period="7d")


@pytest.mark.asyncio
async def test_retries_transient_errors(monkeypatch):
    """A 503 followed by a 200 succeeds without raising."""
    monkeypatch.setattr(yahoo_client, "_RETRY_BASE_DELAY", 0.0)
    calls = {"n": 0}

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        calls["n"] += 1
        status = 503 if calls["n"] == 1 else 200
        return httpx.Response(status, json=MOCK_CHART_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)
    client = YahooClient(_make_config())

    bars = await client.fetch_bars("AAPL")
    assert calls["n"] == 2
    assert len(bars) == 2


@pytest.mark.asyncio
async def test_retries_exhausted(monkeypatch):
    monkeypatch.setattr(yahoo_client, "_RETRY_BASE_DELAY", 0.0)

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)
    client = YahooClient(_make_config())

    with pytest.raises(MarketDataError, match="Failed to fetch"):
        await client.fetch_bars("AAPL")


@pytest.mark.asyncio
async def test_quote_from_chart_meta(monkeypatch):
    _patch_get(monkeypatch, MOCK_CHART_RESPONSE)
    client = YahooClient(_make_config())

    quote = await client.get_quote("AAPL")
    assert isinstance(quote, Quote)
    assert quote.price == pytest.approx(190.5)
    assert quote.previous_close == pytest.approx(188.0)
    assert quote.change == pytest.approx(2.5)
    assert quote.change_percent == pytest.approx(2.5 / 188.0 * 100)
    assert quote.currency == "USD"
    assert quote.exchange == "NMS"
    assert quote.short_name == "Apple Inc."
    assert quote.long_name == "Apple Inc."


@pytest.mark.asyncio
async def test_get_quotes_skips_failures(monkeypatch):
    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        if url.endswith("/AAPL"):
            return httpx.Response(200, json=MOCK_CHART_RESPONSE, request=httpx.Request("GET", url))
        return httpx.Response(404, json=MOCK_NOT_FOUND_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)
    client = YahooClient(_make_config())

    quotes = await client.get_quotes(["aapl", "ZZZZ"])
    assert list(quotes) == ["AAPL"]


@pytest.mark.asyncio
async def test_search_symbols(monkeypatch):
    captured: dict = {}
    _patch_get(monkeypatch, MOCK_SEARCH_RESPONSE, captured=captured)
    client = YahooClient(_make_config())

    matches = await client.search_symbols("apple")
    assert captured["url"] == "https://query2.example.test/v1/finance/search"
    assert captured["params"]["quotesCount"] == 10
    assert [m.symbol for m in matches] == ["AAPL", "APLE"]
    assert matches[0].name == "Apple Inc."
    assert matches[1].name == "APLE"


@pytest.mark.asyncio
async def test_search_error_returns_empty(monkeypatch):
    _patch_get(monkeypatch, {"error": "bad request"}, status=400)
    client = YahooClient(_make_config())
    assert await client.search_symbols("apple") == []


def test_normalize_ticker():
    assert normalize_ticker(" btc-usd ") == "BTC-USD"
    assert normalize_ticker("^nsei") == "^NSEI"
    with pytest.raises(ValueError):
        normalize_ticker("")
    with pytest.raises(ValueError):
        normalize_ticker("A" * 21)
