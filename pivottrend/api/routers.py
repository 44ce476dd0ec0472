"""Internal API routers — market data, watchlist, alerts, history, favourites.

No indicator logic, no SQL. Delegates to the market client, the pipeline,
and the repos.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Query

from pivottrend.market.models import MarketDataError, validate_range
from pivottrend.strategy.pipeline import analyze, enriched_to_dict, summary_to_dict
from pivottrend.watchlist.alerts import evaluate_alerts
from pivottrend.watchlist.service import build_watchlist_rows

logger = logging.getLogger("pivottrend")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_client = None          # Set via configure_routers()
_watchlist_repo = None  # Set via configure_routers()
_alert_repo = None      # Set via configure_routers()
_history_repo = None    # Set via configure_routers()
_favorites_repo = None  # Set via configure_routers()
_default_period = "5d"
_default_interval = "15m"


def configure_routers(
    client=None,
    watchlist_repo=None,
    alert_repo=None,
    history_repo=None,
    favorites_repo=None,
    default_period: str = "5d",
    default_interval: str = "15m",
) -> None:
    """Inject dependencies from the application startup.

    Args:
        client: A ``YahooClient`` instance (or duck-type for tests).
        watchlist_repo: A ``WatchlistRepo`` instance.
        alert_repo: An ``AlertRepo`` instance.
        history_repo: A ``SearchHistoryRepo`` instance.
        favorites_repo: A ``FavoritesRepo`` instance.
        default_period: Look-back range used when a request omits one.
        default_interval: Bar size used when a request omits one.
    """
    global _client, _watchlist_repo, _alert_repo  # noqa: PLW0603
    global _history_repo, _favorites_repo  # noqa: PLW0603
    global _default_period, _default_interval  # noqa: PLW0603
    _client = client
    _watchlist_repo = watchlist_repo
    _alert_repo = alert_repo
    _history_repo = history_repo
    _favorites_repo = favorites_repo
    _default_period = default_period
    _default_interval = default_interval


def _resolve_range(period: Optional[str], interval: Optional[str]) -> tuple[str, str]:
    period = period or _default_period
    interval = interval or _default_interval
    validate_range(period, interval)
    return period, interval


# ── Market data ──────────────────────────────────────────────────────────


@router.get("/bars/{ticker}")
async def get_bars(
    ticker: str,
    period: Optional[str] = Query(default=None),
    interval: Optional[str] = Query(default=None),
):
    """Return raw OHLCV bars for a ticker."""
    if _client is None:
        return {"error": "Market data client not configured"}
    try:
        period, interval = _resolve_range(period, interval)
        bars = await _client.fetch_bars(ticker, period, interval)
    except (MarketDataError, ValueError) as exc:
        return {"error": str(exc)}
    return {
        "ticker": ticker.upper(),
        "bars": [{**asdict(b), "timestamp": b.timestamp.isoformat()} for b in bars],
    }


@router.get("/analysis/{ticker}")
async def get_analysis(
    ticker: str,
    period: Optional[str] = Query(default=None),
    interval: Optional[str] = Query(default=None),
    user_id: int = Query(default=1),
):
    """Return enriched bars, the signal summary, and a quote when available."""
    if _client is None:
        return {"error": "Market data client not configured"}
    try:
        period, interval = _resolve_range(period, interval)
        bars = await _client.fetch_bars(ticker, period, interval)
    except (MarketDataError, ValueError) as exc:
        return {"error": str(exc)}

    result = analyze(bars)

    quote = None
    try:
        quote = asdict(await _client.get_quote(ticker))
    except (MarketDataError, ValueError) as exc:
        logger.info("Quote for %s unavailable: %s", ticker, exc)

    if _history_repo is not None:
        _history_repo.add(user_id, ticker)

    return {
        "ticker": ticker.upper(),
        "period": period,
        "interval": interval,
        "data": [enriched_to_dict(b) for b in result.bars],
        "signal": summary_to_dict(result.summary),
        "quote": quote,
    }


@router.get("/quotes")
async def get_quotes(tickers: str = Query(..., min_length=1)):
    """Return quotes for a comma-separated list of tickers."""
    if _client is None:
        return {"quotes": {}}
    symbols = [t.strip() for t in tickers.split(",") if t.strip()]
    quotes = await _client.get_quotes(symbols)
    return {"quotes": {k: asdict(v) for k, v in quotes.items()}}


@router.get("/search")
async def search(q: str = Query(..., min_length=1)):
    """Search ticker symbols."""
    if _client is None:
        return {"results": []}
    matches = await _client.search_symbols(q)
    return {"results": [asdict(m) for m in matches]}


# ── Watchlist ────────────────────────────────────────────────────────────


@router.get("/watchlist")
async def get_watchlist(user_id: int = Query(default=1)):
    """Return watchlist rows with the current signal for each ticker."""
    if _watchlist_repo is None or _client is None:
        return {"watchlist": []}
    tickers = _watchlist_repo.get_all(user_id)
    rows = await build_watchlist_rows(
        _client, tickers, _default_period, _default_interval,
    )
    return {"watchlist": [asdict(r) for r in rows]}


@router.post("/watchlist")
async def add_to_watchlist(body: dict, user_id: int = Query(default=1)):
    """Add a ticker to the user's watchlist."""
    if _watchlist_repo is None:
        return {"status": "error", "errors": ["Watchlist store not configured"]}
    try:
        symbol = _watchlist_repo.add(user_id, str(body.get("ticker", "")))
    except ValueError as exc:
        return {"status": "error", "errors": [str(exc)]}
    return {"status": "ok", "ticker": symbol}


@router.delete("/watchlist/{ticker}")
async def remove_from_watchlist(ticker: str, user_id: int = Query(default=1)):
    """Remove a ticker from the user's watchlist."""
    if _watchlist_repo is not None:
        _watchlist_repo.remove(user_id, ticker)
    return {"status": "ok"}


# ── Alerts ───────────────────────────────────────────────────────────────


@router.get("/alerts")
async def get_alerts(user_id: int = Query(default=1)):
    """Return the user's untriggered alerts."""
    if _alert_repo is None:
        return {"alerts": []}
    return {"alerts": _alert_repo.get_active(user_id)}


@router.post("/alerts")
async def create_alert(body: dict, user_id: int = Query(default=1)):
    """Create a price alert.

    Body: ``{"ticker": str, "price_level": float, "direction": "above"|"below"}``
    """
    if _alert_repo is None:
        return {"status": "error", "errors": ["Alert store not configured"]}
    try:
        alert = _alert_repo.create(
            user_id,
            str(body.get("ticker", "")),
            float(body.get("price_level", 0)),
            str(body.get("direction", "")),
        )
    except (TypeError, ValueError) as exc:
        return {"status": "error", "errors": [str(exc)]}
    return {"status": "ok", "alert": alert}


@router.post("/alerts/{alert_id}/dismiss")
async def dismiss_alert(alert_id: int, user_id: int = Query(default=1)):
    """Dismiss an alert (it no longer appears as active)."""
    if _alert_repo is not None:
        _alert_repo.dismiss(user_id, alert_id)
    return {"status": "ok"}


@router.delete("/alerts/{alert_id}")
async def delete_alert(alert_id: int, user_id: int = Query(default=1)):
    """Delete an alert."""
    if _alert_repo is not None:
        _alert_repo.delete(user_id, alert_id)
    return {"status": "ok"}


@router.post("/alerts/check")
async def check_alerts(user_id: int = Query(default=1)):
    """Check active alerts against live quotes and mark the ones that fired."""
    if _alert_repo is None or _client is None:
        return {"triggered": []}
    active = _alert_repo.get_active(user_id)
    if not active:
        return {"triggered": []}

    tickers = sorted({a["ticker"] for a in active})
    quotes = await _client.get_quotes(tickers)
    prices = {symbol: q.price for symbol, q in quotes.items()}

    fired = evaluate_alerts(active, prices)
    for alert in fired:
        _alert_repo.mark_triggered(alert["id"])
        logger.info(
            "Alert %d fired: %s %s %.4f (price %.4f)",
            alert["id"], alert["ticker"], alert["direction"],
            alert["price_level"], prices[alert["ticker"]],
        )
    return {"triggered": [{**a, "triggered": True} for a in fired]}


# ── Search history ───────────────────────────────────────────────────────


@router.get("/history")
async def get_history(user_id: int = Query(default=1)):
    """Return the user's recent searches, newest first."""
    if _history_repo is None:
        return {"history": []}
    return {"history": _history_repo.get_recent(user_id)}


@router.post("/history")
async def add_history(body: dict, user_id: int = Query(default=1)):
    """Record a ticker lookup."""
    if _history_repo is None:
        return {"status": "ok"}
    ticker = str(body.get("ticker", "")).strip()
    if not ticker:
        return {"status": "error", "errors": ["ticker is required"]}
    _history_repo.add(user_id, ticker)
    return {"status": "ok"}


@router.delete("/history")
async def clear_history(user_id: int = Query(default=1)):
    """Clear the user's search history."""
    if _history_repo is not None:
        _history_repo.clear(user_id)
    return {"status": "ok"}


# ── Favourites ───────────────────────────────────────────────────────────


@router.get("/favorites")
async def get_favorites(user_id: int = Query(default=1)):
    """Return the user's favourite tickers."""
    if _favorites_repo is None:
        return {"favorites": []}
    return {"favorites": _favorites_repo.get_all(user_id)}


@router.post("/favorites")
async def add_favorite(body: dict, user_id: int = Query(default=1)):
    """Star a ticker."""
    if _favorites_repo is None:
        return {"status": "error", "errors": ["Favorites store not configured"]}
    try:
        symbol = _favorites_repo.add(user_id, str(body.get("ticker", "")))
    except ValueError as exc:
        return {"status": "error", "errors": [str(exc)]}
    return {"status": "ok", "ticker": symbol}


@router.delete("/favorites/{ticker}")
async def remove_favorite(ticker: str, user_id: int = Query(default=1)):
    """Unstar a ticker."""
    if _favorites_repo is not None:
        _favorites_repo.remove(user_id, ticker)
    return {"status": "ok"}
