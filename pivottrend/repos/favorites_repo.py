"""Favourites repository — tickers a user has starred."""

from datetime import datetime, timezone

from pivottrend.market.models import normalize_ticker
from pivottrend.repos.db import get_connection


class FavoritesRepo:
    """Data access layer for favourite tickers.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def add(self, user_id: int, ticker: str) -> str:
        """Star *ticker* for the user and return the stored symbol."""
        symbol = normalize_ticker(ticker)
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                """
                INSERT OR IGNORE INTO favorites (user_id, ticker, added_at)
                VALUES (?, ?, ?)
                """,
                (user_id, symbol, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
            return symbol
        finally:
            conn.close()

    def remove(self, user_id: int, ticker: str) -> None:
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "DELETE FROM favorites WHERE user_id = ? AND ticker = ?",
                (user_id, ticker.strip().upper()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_all(self, user_id: int) -> list[str]:
        """Return the user's favourites in the order they were added."""
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                "SELECT ticker FROM favorites WHERE user_id = ? ORDER BY id",
                (user_id,),
            ).fetchall()
            return [row["ticker"] for row in rows]
        finally:
            conn.close()
