"""
Unified database manager that coordinates all repositories
"""

import logging

from ..progression.ledger import LedgerKey
from .connection import DatabaseConnection
from .models import User
from .repositories.ledger_repository import LedgerRepository
from .repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Unified database manager that coordinates all repositories"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.user_repo = UserRepository(self.db_connection)
        self.ledger_repo = LedgerRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()

    # User methods
    def create_user(self, user_id: str, nickname: str) -> User | None:
        """Create a new user"""
        return self.user_repo.create_user(user_id, nickname)

    def get_user(self, user_id: str) -> User | None:
        """Get user by ID"""
        return self.user_repo.get_user(user_id)

    def put_user(self, user: User) -> bool:
        """Save a user record"""
        return self.user_repo.put_user(user)

    def get_or_create_user(self, user_id: str, nickname: str) -> User | None:
        """Get a user, registering it on first contact"""
        user = self.user_repo.get_user(user_id)
        if user is None:
            user = self.user_repo.create_user(user_id, nickname)
        return user

    def get_leaderboard(self, limit: int = 10) -> list[User]:
        """Top users by experience"""
        return self.user_repo.get_leaderboard(limit)

    # Daily ledger methods
    def has_flag(self, key: LedgerKey) -> bool:
        return self.ledger_repo.has_flag(key)

    def set_flag(self, key: LedgerKey) -> None:
        self.ledger_repo.set_flag(key)

    def get_count(self, key: LedgerKey) -> int:
        return self.ledger_repo.get_count(key)

    def increment_count(self, key: LedgerKey) -> int:
        return self.ledger_repo.increment_count(key)

    def get_connection(self):
        """Get database connection for direct SQL access in tests"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager
