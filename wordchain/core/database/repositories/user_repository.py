"""
User repository for database operations
"""

import logging
from datetime import datetime

from ..connection import DatabaseConnection
from ..models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user-related database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def create_user(self, user_id: str, nickname: str) -> User | None:
        """Create a new user"""
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, nickname, created_at, updated_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (str(user_id), nickname, datetime.now(), datetime.now()),
                )
                conn.commit()

            # Return the created user
            return self.get_user(user_id)
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            return None

    def get_user(self, user_id: str) -> User | None:
        """Get user by ID"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM users WHERE id = ?",
                    (str(user_id),)
                )
                row = cursor.fetchone()
                return dict(row) if row else None
        except Exception as e:
            logger.error(f"Error getting user {user_id}: {e}")
            return None

    def put_user(self, user: User) -> bool:
        """Write back progression and game statistics of a user"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    UPDATE users SET
                        nickname = ?, level = ?, experience = ?, total_games = ?,
                        wins = ?, total_words = ?, current_streak = ?,
                        longest_streak = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        user["nickname"],
                        user["level"],
                        user["experience"],
                        user["total_games"],
                        user["wins"],
                        user["total_words"],
                        user["current_streak"],
                        user["longest_streak"],
                        datetime.now(),
                        str(user["id"]),
                    ),
                )
                conn.commit()
                return cursor.rowcount > 0
        except Exception as e:
            logger.error(f"Error saving user: {e}")
            return False

    def get_leaderboard(self, limit: int = 10) -> list[User]:
        """Users ordered by experience"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM users ORDER BY experience DESC, id LIMIT ?",
                    (limit,)
                )
                return [dict(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error getting leaderboard: {e}")
            return []
