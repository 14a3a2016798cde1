"""
Thread lifecycle.

Decides, for every incoming message, whether the owner's latest thread is
still inside its continuation window or a new thread has to be started.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from gateway.config import settings
from gateway.services.database import DatabaseManager, ThreadData

logger = logging.getLogger(__name__)


class ThreadLifecycle:
    """Applies the continuation window to an owner's threads."""

    def __init__(self, db: DatabaseManager, timeout: Optional[timedelta] = None) -> None:
        self._db = db
        self.timeout = timeout or timedelta(minutes=settings.THREAD_TIMEOUT_MINUTES)

    def is_expired(self, thread: ThreadData, now: datetime) -> bool:
        # Expired at exactly updated_at + timeout
        return now >= thread.updated_at + self.timeout

    async def resolve_active_thread(self, user_id: str, now: datetime) -> ThreadData:
        """
        Return the thread the next exchange of `user_id` belongs to.

        The latest thread is reused unchanged while `now` is inside its
        continuation window; otherwise a new thread with
        created_at = updated_at = now is persisted and returned. Concurrent
        first messages from one owner may each create a thread.
        """
        latest = await asyncio.to_thread(self._db.get_latest_thread_by_user, user_id)
        if latest is not None and not self.is_expired(latest, now):
            return latest

        if latest is not None:
            logger.info(
                "Thread %s for user %s expired (last update %s); starting a new thread",
                latest.id,
                user_id,
                latest.updated_at.isoformat(),
            )
        thread = await asyncio.to_thread(self._db.create_thread, user_id, now)
        logger.info("Created thread %s for user %s", thread.id, user_id)
        return thread
