"""Alert repository — SQLite CRUD for price-level alerts."""

import math
from datetime import datetime, timezone
from typing import Optional

from pivottrend.market.models import normalize_ticker
from pivottrend.repos.db import get_connection


ALERT_DIRECTIONS = ("above", "below")


def _row_to_alert(row) -> dict:
    alert = dict(row)
    alert["triggered"] = bool(alert["triggered"])
    return alert


class AlertRepo:
    """Data access layer for price alerts.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    # ── Write ────────────────────────────────────────────────────────────

    def create(
        self,
        user_id: int,
        ticker: str,
        price_level: float,
        direction: str,
    ) -> dict:
        """Create an untriggered alert and return it.

        Raises ``ValueError`` for a malformed ticker, a price level that
        is not a positive finite number, or a direction other than
        ``"above"``/``"below"``.
        """
        symbol = normalize_ticker(ticker)
        if not (math.isfinite(price_level) and price_level > 0):
            raise ValueError(f"price_level must be positive, got {price_level}")
        if direction not in ALERT_DIRECTIONS:
            raise ValueError(
                f"direction must be one of {', '.join(ALERT_DIRECTIONS)}, got {direction!r}"
            )

        created_at = datetime.now(timezone.utc).isoformat()
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute(
                """
                INSERT INTO alerts (user_id, ticker, price_level, direction, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, symbol, price_level, direction, created_at),
            )
            conn.commit()
            alert_id = cur.lastrowid
        finally:
            conn.close()

        return {
            "id": alert_id,
            "user_id": user_id,
            "ticker": symbol,
            "price_level": price_level,
            "direction": direction,
            "triggered": False,
            "created_at": created_at,
            "triggered_at": None,
        }

    def mark_triggered(self, alert_id: int, when: Optional[str] = None) -> None:
        """Flag an alert as triggered at *when* (defaults to now, UTC)."""
        triggered_at = when or datetime.now(timezone.utc).isoformat()
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "UPDATE alerts SET triggered = 1, triggered_at = ? WHERE id = ?",
                (triggered_at, alert_id),
            )
            conn.commit()
        finally:
            conn.close()

    def dismiss(self, user_id: int, alert_id: int) -> None:
        """Mark one of the user's alerts as triggered so it stops showing."""
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                """
                UPDATE alerts SET triggered = 1, triggered_at = ?
                WHERE id = ? AND user_id = ?
                """,
                (datetime.now(timezone.utc).isoformat(), alert_id, user_id),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, user_id: int, alert_id: int) -> None:
        """Delete one of the user's alerts."""
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                "DELETE FROM alerts WHERE id = ? AND user_id = ?",
                (alert_id, user_id),
            )
            conn.commit()
        finally:
            conn.close()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_active(self, user_id: int) -> list[dict]:
        """Return the user's untriggered alerts, oldest first."""
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                """
                SELECT * FROM alerts
                WHERE user_id = ? AND triggered = 0
                ORDER BY id
                """,
                (user_id,),
            ).fetchall()
            return [_row_to_alert(row) for row in rows]
        finally:
            conn.close()
