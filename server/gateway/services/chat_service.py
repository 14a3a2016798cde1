"""
Chat orchestration.

Resolves the caller's active thread, replays the thread's earlier user
messages as context, calls the selected provider and records the exchange.
Two response modes are supported:

- ``chat``: one blocking provider call (run on a bounded worker pool), the
  exchange and the thread update are written before the answer is returned.
- ``chat_stream``: fragments are forwarded as they arrive; the exchange and
  the thread update are written by detached background tasks once the
  stream completes. Setup and provider failures are delivered as a single
  terminal error event instead of failing the stream.
"""

import asyncio
import functools
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import aclosing
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Coroutine, List, Optional, Set

from gateway.api.llm_providers import ChatClientFactory
from gateway.config import settings
from gateway.errors import (
    ChatGatewayError,
    InputValidationError,
    PersistenceError,
    ProviderError,
)
from gateway.models.llm_providers import ChatProvider
from gateway.services.chat_models import (
    ChatResult,
    PromptTurn,
    StreamContentEvent,
    StreamErrorEvent,
    StreamEvent,
    build_prompt_turns,
)
from gateway.services.database import DatabaseManager, ThreadData
from gateway.services.thread_lifecycle import ThreadLifecycle

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatService:
    """Core chat engine used by the API layer."""

    def __init__(
        self,
        db: DatabaseManager,
        client_factory: ChatClientFactory,
        *,
        lifecycle: Optional[ThreadLifecycle] = None,
        clock: Callable[[], datetime] = utc_now,
        llm_executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self._db = db
        self._clients = client_factory
        self._lifecycle = lifecycle or ThreadLifecycle(db)
        self._clock = clock
        self._llm_executor = llm_executor or ThreadPoolExecutor(
            max_workers=settings.LLM_WORKER_POOL_SIZE, thread_name_prefix="llm-call"
        )
        self._background_writes: Set[asyncio.Task] = set()

    @staticmethod
    def _validate_input(user_id: str, message: str) -> None:
        if not user_id or not user_id.strip():
            raise InputValidationError("user_id is required")
        if not message or not message.strip():
            raise InputValidationError("Message must not be empty")

    async def _load_prompt_turns(self, thread_id: uuid.UUID, message: str) -> List[PromptTurn]:
        previous = await asyncio.to_thread(self._db.list_chat_histories_by_thread, thread_id)
        return build_prompt_turns([history.user_message for history in previous], message)

    async def chat(self, user_id: str, message: str, provider: "str | ChatProvider") -> ChatResult:
        """
        Send a message and return the complete assistant response.

        Raises:
            InputValidationError: blank message or missing user id
            ConfigError: unknown provider
            ProviderNotConfiguredError: the provider's credentials are missing
            ProviderError: the provider call failed
            PersistenceError: the answer was generated but could not be stored
        """
        self._validate_input(user_id, message)
        client = self._clients.get_client(provider)
        options = self._clients.get_options(provider)
        client.ensure_ready(options)

        thread = await self._lifecycle.resolve_active_thread(user_id, self._clock())
        prompt_turns = await self._load_prompt_turns(thread.id, message)

        loop = asyncio.get_running_loop()
        try:
            generated = await loop.run_in_executor(
                self._llm_executor,
                functools.partial(client.complete, prompt_turns, options),
            )
        except ChatGatewayError:
            raise
        except Exception as exc:
            logger.exception(
                "Provider %s call failed for thread %s", client.provider_name, thread.id
            )
            raise ProviderError(f"AI response generation failed: {exc}") from exc
        if generated is None:
            raise ProviderError("AI response generation failed: empty response")

        try:
            await asyncio.to_thread(
                self._db.create_chat_history,
                thread.id,
                user_id,
                message,
                generated,
                self._clock(),
            )
            await asyncio.to_thread(self._db.touch_thread, thread.id, self._clock())
        except Exception as exc:
            # The provider answer is discarded; the request fails as a whole.
            logger.exception("Failed to persist exchange for thread %s", thread.id)
            raise PersistenceError(f"Failed to save chat history: {exc}") from exc

        return ChatResult(message=generated, thread_id=thread.id)

    def chat_stream(
        self, user_id: str, message: str, provider: "str | ChatProvider"
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Send a message and stream the assistant response.

        Input is validated eagerly (raises InputValidationError); everything
        after that is reported in-stream as a StreamErrorEvent.
        """
        self._validate_input(user_id, message)
        return self._stream_events(user_id, message, provider)

    async def _stream_events(
        self, user_id: str, message: str, provider: "str | ChatProvider"
    ) -> AsyncGenerator[StreamEvent, None]:
        fragments: List[str] = []
        thread: Optional[ThreadData] = None
        try:
            client = self._clients.get_client(provider)
            options = self._clients.get_options(provider)
            client.ensure_ready(options)

            thread = await self._lifecycle.resolve_active_thread(user_id, self._clock())
            prompt_turns = await self._load_prompt_turns(thread.id, message)

            async with aclosing(client.stream(prompt_turns, options)) as provider_stream:
                async for fragment in provider_stream:
                    if not fragment or not fragment.strip():
                        continue
                    fragments.append(fragment)
                    yield StreamContentEvent("content", fragment, thread.id)
        except (GeneratorExit, asyncio.CancelledError):
            if thread is not None and fragments:
                logger.info(
                    "Stream for thread %s closed by consumer after %d fragment(s); "
                    "saving partial response",
                    thread.id,
                    len(fragments),
                )
                self._schedule_exchange_writes(thread.id, user_id, message, "".join(fragments))
            raise
        except Exception as exc:
            logger.exception("Chat stream failed for user %s", user_id)
            yield StreamErrorEvent("error", self._stream_error_message(exc))
            return

        logger.info("Stream completed for thread %s (%d fragment(s))", thread.id, len(fragments))
        self._schedule_exchange_writes(thread.id, user_id, message, "".join(fragments))

    @staticmethod
    def _stream_error_message(exc: Exception) -> str:
        if isinstance(exc, ChatGatewayError):
            detail = exc.message
        else:
            detail = str(exc)
        return f"Error: {detail or UNKNOWN_ERROR_MESSAGE}"

    def _schedule_exchange_writes(
        self, thread_id: uuid.UUID, user_id: str, message: str, assistant_message: str
    ) -> None:
        """Dispatch the exchange insert and thread update without waiting for them."""
        now = self._clock()
        self._run_in_background(
            asyncio.to_thread(
                self._db.create_chat_history,
                thread_id,
                user_id,
                message,
                assistant_message,
                now,
            ),
            f"save chat history for thread {thread_id}",
        )
        self._run_in_background(
            asyncio.to_thread(self._db.touch_thread, thread_id, now),
            f"update thread {thread_id}",
        )

    def _run_in_background(self, coro: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self._log_failure(coro, description))
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop; dropped background write: %s", description)
            return
        self._background_writes.add(task)
        task.add_done_callback(self._background_writes.discard)

    @staticmethod
    async def _log_failure(coro: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            await coro
        except Exception:
            logger.exception("Background write failed: %s", description)

    async def wait_for_background_writes(self) -> None:
        """Wait until every scheduled background write has finished."""
        while self._background_writes:
            await asyncio.gather(*list(self._background_writes), return_exceptions=True)

    def shutdown(self) -> None:
        self._llm_executor.shutdown(wait=False)


