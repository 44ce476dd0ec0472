"""PivotTrend — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
one-shot ticker analysis.
"""

import logging

from fastapi import FastAPI

from pivottrend.api.routers import router

app = FastAPI(title="PivotTrend Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("pivottrend")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to analysis or server mode."""
    import argparse
    import asyncio
    import sys

    from pivottrend.config import load_config
    from pivottrend.market.models import VALID_INTERVALS, VALID_PERIODS
    from pivottrend.market.yahoo_client import YahooClient

    parser = argparse.ArgumentParser(description="PivotTrend pivot/trendline signals")
    parser.add_argument("--ticker", help="Ticker to analyse (default: DEFAULT_TICKER)")
    parser.add_argument("--period", choices=VALID_PERIODS, help="Look-back range")
    parser.add_argument("--interval", choices=VALID_INTERVALS, help="Bar size")
    parser.add_argument("--csv", help="Write the enriched bars to this CSV file")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the API server instead of a one-shot analysis",
    )
    args = parser.parse_args()

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    client = YahooClient(config)

    if args.serve:
        _run_server(config, client)
        return

    exit_code = asyncio.run(
        _run_analysis(
            client,
            args.ticker or config.default_ticker,
            args.period or config.default_period,
            args.interval or config.default_interval,
            args.csv,
        )
    )
    sys.exit(exit_code)


async def _run_analysis(client, ticker: str, period: str, interval: str, csv_path) -> int:
    """Fetch bars, run the pipeline, and print the result.

    Returns the process exit code: 0 on success, 1 when no bars could be
    fetched for *ticker*.
    """
    from pivottrend.cli.dashboard import print_analysis, write_csv
    from pivottrend.market.models import MarketDataError
    from pivottrend.strategy.pipeline import analyze

    try:
        bars = await client.fetch_bars(ticker, period, interval)
    except (MarketDataError, ValueError) as exc:
        logger.error("Analysis of %s failed: %s", ticker, exc)
        return 1

    result = analyze(bars)
    print_analysis(ticker.upper(), result.bars, result.summary)
    if csv_path:
        count = write_csv(csv_path, result.bars)
        logger.info("Wrote %d rows to %s", count, csv_path)
    return 0


def _run_server(config, client) -> None:
    """Wire the repos into the routers and start uvicorn."""
    import uvicorn

    from pivottrend.api.routers import configure_routers
    from pivottrend.repos.alert_repo import AlertRepo
    from pivottrend.repos.db import init_db
    from pivottrend.repos.favorites_repo import FavoritesRepo
    from pivottrend.repos.history_repo import SearchHistoryRepo
    from pivottrend.repos.watchlist_repo import WatchlistRepo

    init_db(config.db_path)
    configure_routers(
        client=client,
        watchlist_repo=WatchlistRepo(config.db_path),
        alert_repo=AlertRepo(config.db_path),
        history_repo=SearchHistoryRepo(config.db_path),
        favorites_repo=FavoritesRepo(config.db_path),
        default_period=config.default_period,
        default_interval=config.default_interval,
    )

    logger.info("API available at http://localhost:%d", config.health_port)
    uvicorn.run(app, host="0.0.0.0", port=config.health_port, log_level="info")


if __name__ == "__main__":
    _run_cli()
