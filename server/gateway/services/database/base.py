"""
Base database functionality.

Provides the pooled PostgreSQL connection shared by every domain mixin.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator
from urllib.parse import urlparse

import psycopg2.extras
from psycopg2.extensions import connection
from psycopg2.pool import ThreadedConnectionPool

from gateway.config import settings

logger = logging.getLogger(__name__)

# Thread and chat history ids are UUID columns
psycopg2.extras.register_uuid()


class ConnectionProvider:
    @contextmanager
    def _get_connection(self) -> Iterator[connection]:
        raise NotImplementedError


class BaseDatabaseManager(ConnectionProvider):
    """Base database manager with pooled connection logic."""

    _pool: ThreadedConnectionPool | None = None

    def __init__(self) -> None:
        """Initialize database manager."""
        if settings.DATABASE_URL:
            parsed = urlparse(settings.DATABASE_URL)
            self.pg_config: Dict[str, Any] = {
                "host": parsed.hostname,
                "port": parsed.port or 5432,
                "database": parsed.path[1:] if parsed.path else settings.POSTGRES_DB,
                "user": parsed.username,
                "password": parsed.password,
            }
        else:
            self.pg_config = {
                "host": settings.POSTGRES_HOST,
                "port": settings.POSTGRES_PORT,
                "database": settings.POSTGRES_DB,
                "user": settings.POSTGRES_USER,
                "password": settings.POSTGRES_PASSWORD,
            }

        if settings.SKIP_DB_CONNECTION:
            logger.info("Skipping database connection (SKIP_DB_CONNECTION=true)")
            return

        if BaseDatabaseManager._pool is None:
            BaseDatabaseManager._pool = ThreadedConnectionPool(
                minconn=settings.DB_POOL_MIN_CONN,
                maxconn=settings.DB_POOL_MAX_CONN,
                **self.pg_config,
            )

    @contextmanager
    def _get_connection(self) -> Iterator[connection]:
        """Context manager that provides a pooled PostgreSQL connection."""
        assert BaseDatabaseManager._pool is not None, "Connection pool not initialized"
        conn = BaseDatabaseManager._pool.getconn()
        try:
            yield conn
        except Exception:
            conn.rollback()
            BaseDatabaseManager._pool.putconn(conn)
            raise
        else:
            conn.commit()
            BaseDatabaseManager._pool.putconn(conn)

    @classmethod
    def close_pool(cls) -> None:
        """Close every pooled connection (application shutdown)."""
        if cls._pool is not None:
            cls._pool.closeall()
            cls._pool = None
