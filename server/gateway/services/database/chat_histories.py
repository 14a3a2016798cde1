"""
Chat history database operations.

Handles CRUD operations for the chat_histories table. Each row is one
immutable exchange (user message + assistant message) inside a thread.
"""

import logging
import uuid
from datetime import datetime
from typing import List, NamedTuple

import psycopg2.extras

from .base import ConnectionProvider

logger = logging.getLogger(__name__)

CHAT_HISTORY_COLUMNS = "id, thread_id, user_id, user_message, assistant_message, created_at"


class ChatHistoryData(NamedTuple):
    """Represents a single stored exchange."""

    id: uuid.UUID
    thread_id: uuid.UUID
    user_id: str
    user_message: str
    assistant_message: str
    created_at: datetime


class ChatHistoriesMixin(ConnectionProvider):
    """Database operations for chat histories."""

    def create_chat_history(
        self,
        thread_id: uuid.UUID,
        user_id: str,
        user_message: str,
        assistant_message: str,
        created_at: datetime,
    ) -> ChatHistoryData:
        """Insert a new exchange into a thread."""
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO chat_histories
                    (id, thread_id, user_id, user_message, assistant_message, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING {CHAT_HISTORY_COLUMNS}
                    """,
                    (
                        uuid.uuid4(),
                        thread_id,
                        user_id,
                        user_message,
                        assistant_message,
                        created_at,
                    ),
                )
                result = cursor.fetchone()
                if not result:
                    raise ValueError("Failed to create chat history: no row returned")
                conn.commit()
        return ChatHistoryData(**result)

    def list_chat_histories_by_thread(self, thread_id: uuid.UUID) -> List[ChatHistoryData]:
        """Get all exchanges of a thread, oldest first."""
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {CHAT_HISTORY_COLUMNS}
                    FROM chat_histories
                    WHERE thread_id = %s
                    ORDER BY created_at ASC
                    """,
                    (thread_id,),
                )
                rows = cursor.fetchall() or []
                return [ChatHistoryData(**row) for row in rows]

    def list_chat_histories_by_user(self, user_id: str) -> List[ChatHistoryData]:
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {CHAT_HISTORY_COLUMNS}
                    FROM chat_histories
                    WHERE user_id = %s
                    ORDER BY created_at ASC
                    """,
                    (user_id,),
                )
                rows = cursor.fetchall() or []
                return [ChatHistoryData(**row) for row in rows]

    def delete_chat_histories_by_thread(self, thread_id: uuid.UUID) -> int:
        """Delete every exchange of a thread. Returns the number of rows removed."""
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("DELETE FROM chat_histories WHERE thread_id = %s", (thread_id,))
                conn.commit()
                return max(cursor.rowcount, 0)

    def count_chat_histories_since(self, since: datetime) -> int:
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    "SELECT COUNT(*) FROM chat_histories WHERE created_at >= %s",
                    (since,),
                )
                result = cursor.fetchone()
                return int(result[0]) if result else 0

    def list_chat_histories_since(self, since: datetime) -> List[ChatHistoryData]:
        """Get exchanges created at or after `since`, newest first."""
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {CHAT_HISTORY_COLUMNS}
                    FROM chat_histories
                    WHERE created_at >= %s
                    ORDER BY created_at DESC
                    """,
                    (since,),
                )
                rows = cursor.fetchall() or []
                return [ChatHistoryData(**row) for row in rows]
