"""
Daily ledger repository for once-per-day bonus flags and counters
"""

import logging
from datetime import datetime

from ...progression.ledger import LedgerKey
from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


class LedgerRepository:
    """SQLite-backed daily ledger"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def has_flag(self, key: LedgerKey) -> bool:
        row = self._get_row(key)
        return bool(row and row["flag"])

    def set_flag(self, key: LedgerKey) -> None:
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO daily_ledger (activity, day, player_id, flag, updated_at)
                    VALUES (?, ?, ?, 1, ?)
                    ON CONFLICT(activity, day, player_id)
                    DO UPDATE SET flag = 1, updated_at = excluded.updated_at
                    """,
                    (*self._params(key), datetime.now()),
                )
                conn.commit()
        except Exception as e:
            logger.error(f"Error setting ledger flag {key.as_string()}: {e}")

    def get_count(self, key: LedgerKey) -> int:
        row = self._get_row(key)
        return row["count"] if row else 0

    def increment_count(self, key: LedgerKey) -> int:
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO daily_ledger (activity, day, player_id, count, updated_at)
                    VALUES (?, ?, ?, 1, ?)
                    ON CONFLICT(activity, day, player_id)
                    DO UPDATE SET count = count + 1, updated_at = excluded.updated_at
                    """,
                    (*self._params(key), datetime.now()),
                )
                conn.commit()
        except Exception as e:
            logger.error(f"Error incrementing ledger counter {key.as_string()}: {e}")
        return self.get_count(key)

    def _get_row(self, key: LedgerKey):
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT flag, count FROM daily_ledger
                    WHERE activity = ? AND day = ? AND player_id = ?
                    """,
                    self._params(key),
                )
                return cursor.fetchone()
        except Exception as e:
            logger.error(f"Error reading ledger entry {key.as_string()}: {e}")
            return None

    @staticmethod
    def _params(key: LedgerKey) -> tuple[str, str, str]:
        return key.activity, key.day.isoformat(), str(key.player_id)
