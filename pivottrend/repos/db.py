"""Database initialization and connection management.

Runs migrations on first boot, provides connection factory.
"""

import pathlib
import sqlite3


_MIGRATION_DIR = pathlib.Path(__file__).resolve().parent / "migrations"


def init_db(db_path: str) -> None:
    """Initialize the database by running all migration scripts.

    Runs the initial schema if tables don't exist, then applies any
    incremental migrations that haven't been applied yet.  Creates the
    parent directory of *db_path* if needed.  Safe to call on an existing
    database.

    Args:
        db_path: Path to the SQLite database file.
    """
    parent = pathlib.Path(db_path).parent
    parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='watchlist'"
        )
        if cur.fetchone() is None:
            migration_file = _MIGRATION_DIR / "001_initial_schema.sql"
            sql = migration_file.read_text(encoding="utf-8")
            conn.executescript(sql)

        _apply_migration_002(conn)
    finally:
        conn.close()


def _apply_migration_002(conn: sqlite3.Connection) -> None:
    """Add the watchlist owner marker and favourites tables if missing."""
    cur = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='favorites'"
    )
    if cur.fetchone() is None:
        migration_file = _MIGRATION_DIR / "002_watchlist_owners_and_favorites.sql"
        sql = migration_file.read_text(encoding="utf-8")
        conn.executescript(sql)


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a new SQLite connection with row-factory enabled.

    Callers are responsible for closing the connection.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn
