"""Search history repository — most recent tickers looked up per user."""

from datetime import datetime, timezone

from pivottrend.repos.db import get_connection


MAX_HISTORY = 10


class SearchHistoryRepo:
    """Data access layer for search history.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def add(self, user_id: int, ticker: str) -> None:
        """Move *ticker* to the front of the user's history.

        Only the ``MAX_HISTORY`` most recent entries are kept.
        """
        symbol = ticker.strip().upper()
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "DELETE FROM search_history WHERE user_id = ? AND ticker = ?",
                (user_id, symbol),
            )
            conn.execute(
                """
                INSERT INTO search_history (user_id, ticker, searched_at)
                VALUES (?, ?, ?)
                """,
                (user_id, symbol, datetime.now(timezone.utc).isoformat()),
            )
            conn.execute(
                """
                DELETE FROM search_history
                WHERE user_id = ? AND id NOT IN (
                    SELECT id FROM search_history
                    WHERE user_id = ? ORDER BY id DESC LIMIT ?
                )
                """,
                (user_id, user_id, MAX_HISTORY),
            )
            conn.commit()
        finally:
            conn.close()

    def get_recent(self, user_id: int) -> list[dict]:
        """Return ``{"ticker", "searched_at"}`` entries, newest first."""
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                """
                SELECT ticker, searched_at FROM search_history
                WHERE user_id = ? ORDER BY id DESC
                """,
                (user_id,),
            ).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    def clear(self, user_id: int) -> None:
        """Delete the user's entire history."""
        conn = get_connection(self._db_path)
        try:
            conn.execute("DELETE FROM search_history WHERE user_id = ?", (user_id,))
            conn.commit()
        finally:
            conn.close()
