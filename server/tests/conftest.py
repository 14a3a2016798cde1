"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json
import os
import sys
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure gateway imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Minimal env required for app initialization in tests
os.environ.setdefault("SKIP_DB_CONNECTION", "true")
os.environ.setdefault("OPENAI_API_KEY", "test")
os.environ.setdefault("PERPLEXITY_API_KEY", "test")
os.environ.setdefault("ANTHROPIC_API_KEY", "test")

from gateway.api.llm_providers import ChatClientFactory  # noqa: E402
from gateway.main import app  # noqa: E402
from gateway.models.llm_providers import ChatOptions  # noqa: E402
from gateway.services.base_llm_service import BaseChatClient  # noqa: E402
from gateway.services.chat_models import PromptTurn  # noqa: E402
from gateway.services.chat_service import ChatService  # noqa: E402
from gateway.services.database import ChatHistoryData, SortDirection, ThreadData  # noqa: E402
from gateway.services.thread_lifecycle import ThreadLifecycle  # noqa: E402

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryDatabase:
    """Store double exposing the DatabaseManager methods the services use."""

    def __init__(self) -> None:
        self.threads: Dict[uuid.UUID, ThreadData] = {}
        self.histories: List[ChatHistoryData] = []
        self.calls: List[str] = []
        self.fail_on: Dict[str, Exception] = {}
        self._lock = threading.Lock()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    def create_thread(self, user_id: str, now: datetime) -> ThreadData:
        with self._lock:
            self._record("create_thread")
            thread = ThreadData(id=uuid.uuid4(), user_id=user_id, created_at=now, updated_at=now)
            self.threads[thread.id] = thread
            return thread

    def get_latest_thread_by_user(self, user_id: str) -> Optional[ThreadData]:
        with self._lock:
            self._record("get_latest_thread_by_user")
            owned = [t for t in self.threads.values() if t.user_id == user_id]
            return max(owned, key=lambda t: t.updated_at) if owned else None

    def _page(
        self, threads: List[ThreadData], limit: int, offset: int, direction: SortDirection
    ) -> List[ThreadData]:
        ordered = sorted(
            threads, key=lambda t: t.created_at, reverse=direction == SortDirection.DESC
        )
        return ordered[offset : offset + limit]

    def list_threads_by_user(
        self, user_id: str, limit: int, offset: int, direction: SortDirection
    ) -> List[ThreadData]:
        with self._lock:
            self._record("list_threads_by_user")
            owned = [t for t in self.threads.values() if t.user_id == user_id]
            return self._page(owned, limit, offset, direction)

    def list_threads(self, limit: int, offset: int, direction: SortDirection) -> List[ThreadData]:
        with self._lock:
            self._record("list_threads")
            return self._page(list(self.threads.values()), limit, offset, direction)

    def count_threads_by_user(self, user_id: str) -> int:
        with self._lock:
            self._record("count_threads_by_user")
            return sum(1 for t in self.threads.values() if t.user_id == user_id)

    def count_threads(self) -> int:
        with self._lock:
            self._record("count_threads")
            return len(self.threads)

    def thread_exists_for_user(self, thread_id: uuid.UUID, user_id: str) -> bool:
        with self._lock:
            self._record("thread_exists_for_user")
            thread = self.threads.get(thread_id)
            return thread is not None and thread.user_id == user_id

    def touch_thread(self, thread_id: uuid.UUID, updated_at: datetime) -> bool:
        with self._lock:
            self._record("touch_thread")
            thread = self.threads.get(thread_id)
            if thread is None:
                return False
            self.threads[thread_id] = thread._replace(
                updated_at=max(thread.updated_at, updated_at)
            )
            return True

    def delete_thread(self, thread_id: uuid.UUID) -> bool:
        with self._lock:
            self._record("delete_thread")
            self.histories = [h for h in self.histories if h.thread_id != thread_id]
            return self.threads.pop(thread_id, None) is not None

    def create_chat_history(
        self,
        thread_id: uuid.UUID,
        user_id: str,
        user_message: str,
        assistant_message: str,
        created_at: datetime,
    ) -> ChatHistoryData:
        with self._lock:
            self._record("create_chat_history")
            history = ChatHistoryData(
                id=uuid.uuid4(),
                thread_id=thread_id,
                user_id=user_id,
                user_message=user_message,
                assistant_message=assistant_message,
                created_at=created_at,
            )
            self.histories.append(history)
            return history

    def list_chat_histories_by_thread(self, thread_id: uuid.UUID) -> List[ChatHistoryData]:
        with self._lock:
            self._record("list_chat_histories_by_thread")
            return sorted(
                (h for h in self.histories if h.thread_id == thread_id),
                key=lambda h: h.created_at,
            )

    def histories_for(self, thread_id: uuid.UUID) -> List[ChatHistoryData]:
        return [h for h in self.histories if h.thread_id == thread_id]

    @property
    def writes(self) -> List[str]:
        return [
            c
            for c in self.calls
            if c in ("create_thread", "touch_thread", "delete_thread", "create_chat_history")
        ]


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeChatClient(BaseChatClient):
    """Scripted provider client recording every prompt it receives."""

    def __init__(self) -> None:
        self.provider_name = "fake"
        self.response = "Hello from the model"
        self.fragments: List[str] = ["Hi", "there"]
        self.error: Optional[Exception] = None
        self.fail_after: Optional[int] = None
        self.calls: List[Tuple[List[PromptTurn], ChatOptions]] = []
        self.stream_closed = False
        self.not_ready: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    def ensure_ready(self, options: ChatOptions) -> None:
        if self.not_ready is not None:
            raise self.not_ready

    def complete(self, prompt_turns: Sequence[PromptTurn], options: ChatOptions) -> str:
        self.calls.append((list(prompt_turns), options))
        if self.error is not None:
            raise self.error
        return self.response

    async def stream(
        self, prompt_turns: Sequence[PromptTurn], options: ChatOptions
    ) -> AsyncIterator[str]:
        self.calls.append((list(prompt_turns), options))
        try:
            for index, fragment in enumerate(self.fragments):
                if self.error is not None and self.fail_after == index:
                    raise self.error
                yield fragment
                if self.gate is not None and index == 0:
                    await self.gate.wait()
            if self.error is not None and self.fail_after is None:
                raise self.error
        finally:
            self.stream_closed = True


@pytest.fixture
def fake_db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def client_factory(fake_client: FakeChatClient) -> ChatClientFactory:
    return ChatClientFactory(
        clients={"openai": fake_client, "perplexity": fake_client, "anthropic": fake_client}
    )


@pytest.fixture
def chat_service(
    fake_db: InMemoryDatabase, client_factory: ChatClientFactory, clock: FakeClock
) -> Iterator[ChatService]:
    executor = ThreadPoolExecutor(max_workers=2)
    service = ChatService(
        fake_db,  # type: ignore[arg-type]
        client_factory,
        lifecycle=ThreadLifecycle(fake_db, timeout=timedelta(minutes=30)),  # type: ignore[arg-type]
        clock=clock,
        llm_executor=executor,
    )
    yield service
    service.shutdown()


@pytest.fixture
def app_client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def authed_client(app_client: TestClient) -> TestClient:
    app_client.headers.update({"X-User-Id": "user-x"})
    return app_client


@pytest.fixture
def admin_client(app_client: TestClient) -> TestClient:
    app_client.headers.update({"X-User-Id": "admin-1", "X-User-Role": "ADMIN"})
    return app_client


@pytest.fixture
def parse_sse_lines() -> Callable[[httpx.Response], list[dict[str, object]]]:
    def _parse(resp: httpx.Response) -> list[dict[str, object]]:
        return [json.loads(line) for line in resp.iter_lines() if line]

    return _parse
