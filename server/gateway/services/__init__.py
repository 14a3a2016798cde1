"""
Services module for the Chat Gateway

This module exports the database layer; provider clients and the chat
engines are imported from their own modules.
"""

from gateway.services.database import DatabaseManager, get_database

__all__ = [
    "DatabaseManager",
    "get_database",
]
