"""
Thread database operations.

Handles CRUD operations for the threads table. A thread groups the chat
exchanges of one continuous conversation and owns them (cascade delete).
"""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional

import psycopg2.extras

from .base import ConnectionProvider

logger = logging.getLogger(__name__)

THREAD_COLUMNS = "id, user_id, created_at, updated_at"


class SortDirection(str, Enum):
    """Ordering of thread listings by creation time."""

    ASC = "ASC"
    DESC = "DESC"


class ThreadData(NamedTuple):
    """Represents a single conversation thread."""

    id: uuid.UUID
    user_id: str
    created_at: datetime
    updated_at: datetime


class ThreadsMixin(ConnectionProvider):
    """Database operations for conversation threads."""

    def create_thread(self, user_id: str, now: datetime) -> ThreadData:
        """Create a new thread with created_at = updated_at = now."""
        thread_id = uuid.uuid4()
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO threads (id, user_id, created_at, updated_at)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {THREAD_COLUMNS}
                    """,
                    (thread_id, user_id, now, now),
                )
                result = cursor.fetchone()
                if not result:
                    raise ValueError("Failed to create thread: no row returned")
                conn.commit()
        logger.debug("Created thread %s for user %s", thread_id, user_id)
        return ThreadData(**result)

    def get_latest_thread_by_user(self, user_id: str) -> Optional[ThreadData]:
        """Get the user's most recently updated thread."""
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {THREAD_COLUMNS}
                    FROM threads
                    WHERE user_id = %s
                    ORDER BY updated_at DESC
                    LIMIT 1
                    """,
                    (user_id,),
                )
                row = cursor.fetchone()
                return ThreadData(**row) if row else None

    def list_threads_by_user(
        self, user_id: str, limit: int, offset: int, direction: SortDirection
    ) -> List[ThreadData]:
        """List one user's threads ordered by created_at."""
        order = "ASC" if direction == SortDirection.ASC else "DESC"
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {THREAD_COLUMNS}
                    FROM threads
                    WHERE user_id = %s
                    ORDER BY created_at {order}
                    LIMIT %s OFFSET %s
                    """,
                    (user_id, limit, offset),
                )
                rows = cursor.fetchall() or []
                return [ThreadData(**row) for row in rows]

    def list_threads(self, limit: int, offset: int, direction: SortDirection) -> List[ThreadData]:
        """List every user's threads ordered by created_at (admin scope)."""
        order = "ASC" if direction == SortDirection.ASC else "DESC"
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT {THREAD_COLUMNS}
                    FROM threads
                    ORDER BY created_at {order}
                    LIMIT %s OFFSET %s
                    """,
                    (limit, offset),
                )
                rows = cursor.fetchall() or []
                return [ThreadData(**row) for row in rows]

    def count_threads_by_user(self, user_id: str) -> int:
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("SELECT COUNT(*) FROM threads WHERE user_id = %s", (user_id,))
                result = cursor.fetchone()
                return int(result[0]) if result else 0

    def count_threads(self) -> int:
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("SELECT COUNT(*) FROM threads")
                result = cursor.fetchone()
                return int(result[0]) if result else 0

    def thread_exists_for_user(self, thread_id: uuid.UUID, user_id: str) -> bool:
        """Check that the thread exists and belongs to the user."""
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    "SELECT EXISTS (SELECT 1 FROM threads WHERE id = %s AND user_id = %s)",
                    (thread_id, user_id),
                )
                result = cursor.fetchone()
                return bool(result[0]) if result else False

    def touch_thread(self, thread_id: uuid.UUID, updated_at: datetime) -> bool:
        """Advance a thread's updated_at. Returns True if updated, False if not found."""
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    "UPDATE threads SET updated_at = GREATEST(updated_at, %s) WHERE id = %s",
                    (updated_at, thread_id),
                )
                conn.commit()
                return bool(cursor.rowcount > 0)

    def delete_thread(self, thread_id: uuid.UUID) -> bool:
        """Delete a thread and all of its chat histories in one transaction."""
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("DELETE FROM chat_histories WHERE thread_id = %s", (thread_id,))
                deleted_histories = cursor.rowcount
                cursor.execute("DELETE FROM threads WHERE id = %s", (thread_id,))
                deleted = bool(cursor.rowcount > 0)
                conn.commit()
        logger.info(
            "Deleted thread %s with %s chat histories", thread_id, max(deleted_histories, 0)
        )
        return deleted
