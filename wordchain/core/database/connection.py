"""
SQLite connection handling for the Word Chain League store
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from ...config import get_database_path

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        nickname TEXT NOT NULL,
        level INTEGER DEFAULT 1,
        experience INTEGER DEFAULT 0,
        total_games INTEGER DEFAULT 0,
        wins INTEGER DEFAULT 0,
        total_words INTEGER DEFAULT 0,
        current_streak INTEGER DEFAULT 0,
        longest_streak INTEGER DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_ledger (
        activity TEXT NOT NULL,
        day TEXT NOT NULL,
        player_id TEXT NOT NULL,
        flag INTEGER DEFAULT 0,
        count INTEGER DEFAULT 0,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (activity, day, player_id)
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_users_experience ON users(experience)",
    "CREATE INDEX IF NOT EXISTS idx_daily_ledger_player ON daily_ledger(player_id)",
]


def _convert_timestamp(value: bytes) -> datetime:
    """Parse both isoformat and SQLite CURRENT_TIMESTAMP values"""
    text = value.decode()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return datetime.strptime(text, "%Y-%m-%d %H:%M:%S")


# Explicit adapters replace the ones deprecated in Python 3.12
sqlite3.register_adapter(date, lambda value: value.isoformat())
sqlite3.register_adapter(datetime, lambda value: value.isoformat())
sqlite3.register_converter("timestamp", _convert_timestamp)


class DatabaseConnection:
    """Opens SQLite connections and owns the schema"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_database_path()
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            # WAL journal with a 30 s busy timeout
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=30000")

    @contextmanager
    def get_connection(self):
        """Yield a connection with dict-like rows; rolled back on error"""
        conn = sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except Exception as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            conn.close()

    def init_database(self) -> None:
        """Create tables and indexes if they do not exist"""
        with self.get_connection() as conn:
            for table_sql in SCHEMA:
                conn.execute(table_sql)
            for index_sql in INDEXES:
                try:
                    conn.execute(index_sql)
                except sqlite3.OperationalError as e:
                    logger.warning(f"Failed to create index: {index_sql}, error: {e}")
            conn.commit()
