"""
SQLite database helpers.
- Creates tables if missing.
- Remembers which posts/mentions were already answered.
- Tiny query helper `q` to execute SQL with parameters.
"""
import sqlite3
from pathlib import Path
from typing import Iterable, Any

from .config import BOT_DB_PATH

DB_PATH = BOT_DB_PATH


def connect(path: str | Path | None = None) -> sqlite3.Connection:
    """
    Create a SQLite connection with row_factory returning dict-like rows.
    """
    conn = sqlite3.connect(path or DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection | None = None) -> None:
    """
    Initialize database schema if not present.
    """
    own = conn is None
    conn = conn or connect()
    cur = conn.cursor()
    cur.executescript(
        """
        -- One row per event the bot already replied to
        CREATE TABLE IF NOT EXISTS processed (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            kind       TEXT,      -- 'post' | 'mention'
            item_id    INTEGER,   -- post id or person_mention id
            created_at TEXT,
            UNIQUE(kind, item_id)
        );
        """
    )
    conn.commit()
    if own:
        conn.close()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] | None = None) -> sqlite3.Cursor:
    """
    Execute a parameterized SQL query and return the cursor.
    """
    cur = conn.cursor()
    cur.execute(sql, tuple(params or []))
    return cur


def is_processed(conn: sqlite3.Connection, kind: str, item_id: int) -> bool:
    row = q(conn, "SELECT 1 FROM processed WHERE kind=? AND item_id=?", [kind, item_id]).fetchone()
    return row is not None


def mark_processed(conn: sqlite3.Connection, kind: str, item_id: int) -> None:
    q(conn,
      "INSERT OR IGNORE INTO processed(kind,item_id,created_at) VALUES(?,?,datetime('now'))",
      [kind, item_id])
    conn.commit()
