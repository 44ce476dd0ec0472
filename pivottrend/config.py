"""PivotTrend — application configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pivottrend.market.models import VALID_INTERVALS, VALID_PERIODS


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    market_data_base_url: str
    market_search_url: str
    default_ticker: str
    default_period: str
    default_interval: str
    request_timeout: float
    db_path: str
    log_level: str
    health_port: int


def _number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` naming the offending variable when a period,
    interval, or numeric setting is invalid.
    """
    load_dotenv(dotenv_path=env_path)

    period = os.environ.get("DEFAULT_PERIOD", "5d")
    if period not in VALID_PERIODS:
        raise ValueError(
            f"Invalid DEFAULT_PERIOD {period!r}. "
            f"Available: {', '.join(VALID_PERIODS)}"
        )
    interval = os.environ.get("DEFAULT_INTERVAL", "15m")
    if interval not in VALID_INTERVALS:
        raise ValueError(
            f"Invalid DEFAULT_INTERVAL {interval!r}. "
            f"Available: {', '.join(VALID_INTERVALS)}"
        )

    return Config(
        market_data_base_url=os.environ.get(
            "MARKET_DATA_BASE_URL", "https://query1.finance.yahoo.com"
        ),
        market_search_url=os.environ.get(
            "MARKET_SEARCH_URL", "https://query2.finance.yahoo.com"
        ),
        default_ticker=os.environ.get("DEFAULT_TICKER", "AAPL"),
        default_period=period,
        default_interval=interval,
        request_timeout=_number("REQUEST_TIMEOUT", "30.0", float),
        db_path=os.environ.get("DB_PATH", "data/pivottrend.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        health_port=_number("HEALTH_PORT", "8080", int),
    )
