"""
Chat history queries and thread deletion.

Lists threads with their exchanges for the caller (or for every user when
the caller is an admin) and deletes threads on behalf of their owner.
"""

import asyncio
import logging
import uuid
from typing import List

from gateway.errors import AuthorizationError, InputValidationError
from gateway.models.auth import AuthUser
from gateway.models.chat import (
    ChatHistoryItem,
    ChatHistoryListRequest,
    ChatHistoryListResponse,
    HistoryScope,
    ThreadWithChats,
)
from gateway.services.database import DatabaseManager, ThreadData

logger = logging.getLogger(__name__)


class ChatHistoryService:
    """Read and delete operations over threads and their exchanges."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def get_chat_history(
        self, caller: AuthUser, request: ChatHistoryListRequest
    ) -> ChatHistoryListResponse:
        if request.page < 0 or request.size < 1:
            raise InputValidationError("page must be >= 0 and size must be >= 1")
        offset = request.page * request.size

        if request.scope == HistoryScope.ALL:
            if not caller.is_admin:
                raise AuthorizationError("Admin privileges are required to view all chat history")
            threads = await asyncio.to_thread(
                self._db.list_threads, request.size, offset, request.sort_direction
            )
            total = await asyncio.to_thread(self._db.count_threads)
        else:
            threads = await asyncio.to_thread(
                self._db.list_threads_by_user,
                caller.id,
                request.size,
                offset,
                request.sort_direction,
            )
            total = await asyncio.to_thread(self._db.count_threads_by_user, caller.id)

        items: List[ThreadWithChats] = []
        for thread in threads:
            items.append(await self._thread_with_chats(thread))

        return ChatHistoryListResponse(
            threads=items,
            page=request.page,
            size=request.size,
            total_elements=total,
        )

    async def _thread_with_chats(self, thread: ThreadData) -> ThreadWithChats:
        histories = await asyncio.to_thread(self._db.list_chat_histories_by_thread, thread.id)
        return ThreadWithChats(
            thread_id=thread.id,
            user_id=thread.user_id,
            created_at=thread.created_at,
            updated_at=thread.updated_at,
            chats=[
                ChatHistoryItem(
                    id=history.id,
                    user_message=history.user_message,
                    assistant_message=history.assistant_message,
                    created_at=history.created_at,
                )
                for history in histories
            ],
        )

    async def delete_thread(self, user_id: str, thread_id: uuid.UUID) -> None:
        """
        Delete a thread and all of its exchanges.

        Raises:
            AuthorizationError: the thread does not exist or belongs to another user
        """
        exists = await asyncio.to_thread(self._db.thread_exists_for_user, thread_id, user_id)
        if not exists:
            raise AuthorizationError(
                f"Thread {thread_id} does not exist or is not owned by the caller"
            )
        await asyncio.to_thread(self._db.delete_thread, thread_id)
        logger.info("User %s deleted thread %s", user_id, thread_id)
