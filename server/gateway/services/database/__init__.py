"""
Database module for the Chat Gateway

Provides a modular database management system organized by domain.
Each domain has its own mixin class with specialized methods.
"""

from .base import BaseDatabaseManager
from .chat_histories import ChatHistoriesMixin, ChatHistoryData
from .threads import SortDirection, ThreadData, ThreadsMixin


class DatabaseManager(
    BaseDatabaseManager,
    ThreadsMixin,
    ChatHistoriesMixin,
):
    """
    Main database manager that combines all domain-specific functionality.

    This class inherits from all the mixin classes to provide a unified
    interface for all database operations.
    """

    pass


# Global instance
_database_manager = None


def get_database() -> DatabaseManager:
    """Get the global database manager instance."""
    global _database_manager
    if _database_manager is None:
        _database_manager = DatabaseManager()
    return _database_manager


__all__ = [
    "ChatHistoryData",
    "DatabaseManager",
    "SortDirection",
    "ThreadData",
    "get_database",
]
