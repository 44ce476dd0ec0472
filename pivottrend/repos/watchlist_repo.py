"""Watchlist repository — SQLite CRUD for per-user ticker lists."""

from datetime import datetime, timezone

from pivottrend.market.models import DEFAULT_TICKERS, normalize_ticker
from pivottrend.repos.db import get_connection


class WatchlistRepo:
    """Data access layer for watchlist entries.

    A user owns a watchlist from their first ``add`` onwards; until then
    ``get_all`` returns ``DEFAULT_TICKERS``.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def add(self, user_id: int, ticker: str) -> str:
        """Add *ticker* to the user's watchlist and return the stored symbol.

        Adding a ticker that is already present is a no-op.
        """
        symbol = normalize_ticker(ticker)
        now = datetime.now(timezone.utc).isoformat()
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "INSERT OR IGNORE INTO watchlist_owners (user_id, created_at) VALUES (?, ?)",
                (user_id, now),
            )
            conn.execute(
                """
                INSERT OR IGNORE INTO watchlist (user_id, ticker, added_at)
                VALUES (?, ?, ?)
                """,
                (user_id, symbol, now),
            )
            conn.commit()
            return symbol
        finally:
            conn.close()

    def remove(self, user_id: int, ticker: str) -> None:
        """Remove *ticker* from the user's watchlist if present."""
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "DELETE FROM watchlist WHERE user_id = ? AND ticker = ?",
                (user_id, ticker.strip().upper()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_all(self, user_id: int) -> list[str]:
        """Return the user's tickers in insertion order.

        Users who have never added a ticker get ``DEFAULT_TICKERS``; a
        watchlist emptied by ``remove`` stays empty.
        """
        conn = get_connection(self._db_path)
        try:
            owner = conn.execute(
                "SELECT 1 FROM watchlist_owners WHERE user_id = ?", (user_id,),
            ).fetchone()
            if owner is None:
                return list(DEFAULT_TICKERS)
            rows = conn.execute(
                "SELECT ticker FROM watchlist WHERE user_id = ? ORDER BY id",
                (user_id,),
            ).fetchall()
            return [row["ticker"] for row in rows]
        finally:
            conn.close()
