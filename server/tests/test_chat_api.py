"""
Unit tests for the chat HTTP endpoints.

Exercises request validation, caller identity, status code mapping and the
streamed line format against services backed by the in-memory store.
"""

import json
import uuid
from typing import AsyncIterator, Callable, Iterator
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from gateway.errors import ProviderNotConfiguredError
from gateway.main import app
from gateway.services.chat_history_service import ChatHistoryService
from gateway.services.chat_service import ChatService
from tests.conftest import T0, FakeChatClient, InMemoryDatabase

CHAT_URL = "/api/v1/chat"
HISTORY_URL = "/api/v1/chat/history"
THREAD_URL = "/api/v1/chat/thread"


@pytest.fixture(autouse=True)
def patch_chat_services(
    chat_service: ChatService, fake_db: InMemoryDatabase
) -> Iterator[None]:
    with (
        patch("gateway.api.chat.get_chat_service", return_value=chat_service),
        patch(
            "gateway.api.chat.get_chat_history_service",
            return_value=ChatHistoryService(fake_db),  # type: ignore[arg-type]
        ),
    ):
        yield None


@pytest_asyncio.fixture
async def async_client() -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test", headers={"X-User-Id": "user-x"}
    ) as client:
        yield client


def test_health_does_not_require_identity(app_client: TestClient) -> None:
    resp = app_client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_missing_identity_is_rejected(app_client: TestClient) -> None:
    resp = app_client.post(CHAT_URL, json={"message": "hello", "is_streaming": False})

    assert resp.status_code == 401


def test_forwarded_identity_is_taken_from_headers(
    app_client: TestClient, fake_db: InMemoryDatabase
) -> None:
    """The proxy-supplied id becomes the thread owner as-is."""
    resp = app_client.post(
        CHAT_URL,
        json={"message": "hello", "is_streaming": False},
        headers={"X-User-Id": "user-q"},
    )

    assert resp.status_code == 200
    thread_id = uuid.UUID(resp.json()["thread_id"])
    assert fake_db.threads[thread_id].user_id == "user-q"


def test_chat_sync_returns_message_and_thread(
    authed_client: TestClient, fake_db: InMemoryDatabase, fake_client: FakeChatClient
) -> None:
    fake_client.response = "Hello there!"

    resp = authed_client.post(
        CHAT_URL, json={"message": "hello", "is_streaming": False, "provider": "OPENAI_GPT4O"}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Hello there!"
    thread_id = uuid.UUID(body["thread_id"])
    assert fake_db.threads[thread_id].user_id == "user-x"
    assert len(fake_db.histories_for(thread_id)) == 1


@pytest.mark.parametrize("message", ["", "   "])
def test_chat_blank_message_is_bad_request(
    authed_client: TestClient, fake_db: InMemoryDatabase, message: str
) -> None:
    resp = authed_client.post(CHAT_URL, json={"message": message, "is_streaming": False})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"
    assert fake_db.calls == []


def test_chat_sync_unknown_provider_is_bad_request(
    authed_client: TestClient, fake_db: InMemoryDatabase
) -> None:
    resp = authed_client.post(
        CHAT_URL, json={"message": "hello", "is_streaming": False, "provider": "GPT_99"}
    )

    assert resp.status_code == 400
    assert "GPT_99" in resp.json()["detail"]
    assert fake_db.calls == []


def test_chat_sync_missing_api_key_is_server_error(
    authed_client: TestClient, fake_db: InMemoryDatabase, fake_client: FakeChatClient
) -> None:
    fake_client.not_ready = ProviderNotConfiguredError(
        "OPENAI_API_KEY environment variable is required"
    )

    resp = authed_client.post(CHAT_URL, json={"message": "hello", "is_streaming": False})

    assert resp.status_code == 500
    assert resp.json()["error"] == "AI provider is not configured"
    assert "OPENAI_API_KEY" in resp.json()["detail"]
    assert fake_db.calls == []


def test_chat_sync_provider_failure_is_server_error(
    authed_client: TestClient, fake_client: FakeChatClient
) -> None:
    fake_client.error = RuntimeError("rate limited")

    resp = authed_client.post(CHAT_URL, json={"message": "hello", "is_streaming": False})

    assert resp.status_code == 500
    assert resp.json()["error"] == "AI response generation failed"


def test_chat_sync_store_failure_is_server_error(
    authed_client: TestClient, fake_db: InMemoryDatabase
) -> None:
    fake_db.fail_on["touch_thread"] = RuntimeError("deadlock detected")

    resp = authed_client.post(CHAT_URL, json={"message": "hello", "is_streaming": False})

    assert resp.status_code == 500
    assert "deadlock detected" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_chat_stream_emits_json_lines_and_persists(
    async_client: httpx.AsyncClient,
    chat_service: ChatService,
    fake_db: InMemoryDatabase,
    fake_client: FakeChatClient,
) -> None:
    """Streaming is the default mode; each fragment is one JSON line."""
    fake_client.fragments = ["Hi", " ", "there"]

    resp = await async_client.post(CHAT_URL, json={"message": "greet me"})
    await chat_service.wait_for_background_writes()

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"
    lines = [line for line in resp.text.split("\n") if line]
    thread_id = str(next(iter(fake_db.threads)))
    assert [json.loads(line) for line in lines] == [
        {"message": "Hi", "thread_id": thread_id},
        {"message": "there", "thread_id": thread_id},
    ]
    assert fake_db.histories[0].assistant_message == "Hithere"


def test_chat_stream_unknown_provider_is_error_line(
    authed_client: TestClient,
    fake_db: InMemoryDatabase,
    parse_sse_lines: Callable[[httpx.Response], list[dict[str, object]]],
) -> None:
    resp = authed_client.post(CHAT_URL, json={"message": "hello", "provider": "GPT_99"})

    assert resp.status_code == 200
    lines = parse_sse_lines(resp)
    assert len(lines) == 1
    assert lines[0]["thread_id"] is None
    assert str(lines[0]["message"]).startswith("Error: Unsupported chat provider")
    assert fake_db.calls == []


def test_chat_stream_midstream_error_is_final_line(
    authed_client: TestClient,
    fake_client: FakeChatClient,
    parse_sse_lines: Callable[[httpx.Response], list[dict[str, object]]],
) -> None:
    fake_client.fragments = ["Hello", "again"]
    fake_client.error = RuntimeError("network fail")
    fake_client.fail_after = 1

    resp = authed_client.post(CHAT_URL, json={"message": "hello"})

    assert resp.status_code == 200
    lines = parse_sse_lines(resp)
    assert [line["message"] for line in lines] == ["Hello", "Error: network fail"]
    assert lines[-1]["thread_id"] is None


def test_history_lists_callers_threads(
    authed_client: TestClient, fake_db: InMemoryDatabase
) -> None:
    mine = fake_db.create_thread("user-x", T0)
    fake_db.create_chat_history(mine.id, "user-x", "hello", "hi", T0)
    fake_db.create_thread("user-z", T0)

    resp = authed_client.post(HISTORY_URL, json={})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_elements"] == 1
    assert body["page"] == 0
    assert body["size"] == 20
    assert body["threads"][0]["thread_id"] == str(mine.id)
    assert body["threads"][0]["chats"][0]["user_message"] == "hello"
    assert body["threads"][0]["chats"][0]["assistant_message"] == "hi"


def test_history_all_scope_forbidden_for_regular_user(authed_client: TestClient) -> None:
    resp = authed_client.post(HISTORY_URL, json={"scope": "all"})

    assert resp.status_code == 403


def test_history_all_scope_for_admin(admin_client: TestClient, fake_db: InMemoryDatabase) -> None:
    fake_db.create_thread("user-x", T0)
    fake_db.create_thread("user-z", T0)

    resp = admin_client.post(HISTORY_URL, json={"scope": "all", "sort_direction": "ASC"})

    assert resp.status_code == 200
    assert resp.json()["total_elements"] == 2


@pytest.mark.parametrize(
    "payload", [{"page": -1}, {"size": 0}, {"sort_direction": "SIDEWAYS"}, {"scope": "team"}]
)
def test_history_invalid_request_is_bad_request(
    authed_client: TestClient, payload: dict[str, object]
) -> None:
    resp = authed_client.post(HISTORY_URL, json=payload)

    assert resp.status_code == 400


def test_delete_own_thread(authed_client: TestClient, fake_db: InMemoryDatabase) -> None:
    thread = fake_db.create_thread("user-x", T0)
    fake_db.create_chat_history(thread.id, "user-x", "hello", "hi", T0)

    resp = authed_client.request("DELETE", THREAD_URL, json={"thread_id": str(thread.id)})

    assert resp.status_code == 204
    assert fake_db.threads == {}
    assert fake_db.histories == []


def test_delete_foreign_thread_is_forbidden(
    authed_client: TestClient, fake_db: InMemoryDatabase
) -> None:
    thread = fake_db.create_thread("user-z", T0)
    fake_db.create_chat_history(thread.id, "user-z", "hello", "hi", T0)

    resp = authed_client.request("DELETE", THREAD_URL, json={"thread_id": str(thread.id)})

    assert resp.status_code == 403
    assert thread.id in fake_db.threads
    assert len(fake_db.histories_for(thread.id)) == 1


def test_delete_unknown_thread_is_forbidden(authed_client: TestClient) -> None:
    resp = authed_client.request("DELETE", THREAD_URL, json={"thread_id": str(uuid.uuid4())})

    assert resp.status_code == 403


def test_delete_malformed_thread_id_is_bad_request(authed_client: TestClient) -> None:
    resp = authed_client.request("DELETE", THREAD_URL, json={"thread_id": "not-a-uuid"})

    assert resp.status_code == 400


def test_providers_listing(authed_client: TestClient) -> None:
    resp = authed_client.get(f"{CHAT_URL}/providers")

    assert resp.status_code == 200
    body = resp.json()
    assert body["default"] == "OPENAI_GPT4O"
    assert "ANTHROPIC_CLAUDE_SONNET_4" in [p["id"] for p in body["providers"]]
