"""
Chat API endpoints.

This module contains FastAPI routes for chatting with a provider (complete
JSON or streamed response), listing chat history grouped by thread and
deleting threads.
"""

import logging
from contextlib import aclosing
from typing import AsyncGenerator, Optional, Union

from fastapi import APIRouter, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from gateway.api.llm_providers import ChatClientFactory, list_llm_providers
from gateway.errors import (
    AuthorizationError,
    ConfigError,
    InputValidationError,
    PersistenceError,
    ProviderError,
    ProviderNotConfiguredError,
)
from gateway.middleware.auth import get_current_user
from gateway.models import (
    ChatHistoryListRequest,
    ChatHistoryListResponse,
    ChatRequest,
    ChatResponse,
    LLMProvidersResponse,
    ThreadDeleteRequest,
)
from gateway.services import get_database
from gateway.services.chat_history_service import ChatHistoryService
from gateway.services.chat_models import StreamEvent
from gateway.services.chat_service import ChatService

router = APIRouter(prefix="/v1/chat", tags=["chat"])

logger = logging.getLogger(__name__)

_chat_service: Optional[ChatService] = None
_chat_history_service: Optional[ChatHistoryService] = None


def get_chat_service() -> ChatService:
    """Get the process-wide chat service."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService(get_database(), ChatClientFactory())
    return _chat_service


def get_chat_history_service() -> ChatHistoryService:
    """Get the process-wide chat history service."""
    global _chat_history_service
    if _chat_history_service is None:
        _chat_history_service = ChatHistoryService(get_database())
    return _chat_history_service


async def shutdown_chat_services() -> None:
    """Let pending background writes land, then release the provider worker pool."""
    if _chat_service is not None:
        await _chat_service.wait_for_background_writes()
        _chat_service.shutdown()


# API Response Models
class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


async def _encode_stream(events: AsyncGenerator[StreamEvent, None]) -> AsyncGenerator[str, None]:
    """Flatten content and error events into one JSON line each."""
    async with aclosing(events) as stream:
        async for event in stream:
            chunk = ChatResponse(message=event.data, thread_id=event.thread_id)
            yield chunk.model_dump_json() + "\n"


@router.post("", response_model=None)
async def chat(
    request_data: ChatRequest, request: Request, response: Response
) -> Union[ChatResponse, StreamingResponse, ErrorResponse]:
    """
    Send a message to the selected provider.

    Returns the whole answer as JSON when is_streaming is false, otherwise
    streams one JSON line per fragment. Stream setup and provider failures
    arrive as a final line whose message starts with "Error:".
    """
    user = get_current_user(request)
    service = get_chat_service()

    if request_data.is_streaming:
        try:
            events = service.chat_stream(user.id, request_data.message, request_data.provider)
        except InputValidationError as e:
            response.status_code = 400
            return ErrorResponse(error="Invalid chat request", detail=e.message)

        return StreamingResponse(
            _encode_stream(events),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )

    try:
        result = await service.chat(user.id, request_data.message, request_data.provider)
    except ProviderNotConfiguredError as e:
        logger.error(f"Chat provider not configured: {e.message}")
        response.status_code = 500
        return ErrorResponse(error="AI provider is not configured", detail=e.message)
    except (InputValidationError, ConfigError) as e:
        response.status_code = 400
        return ErrorResponse(error="Invalid chat request", detail=e.message)
    except ProviderError as e:
        response.status_code = 500
        return ErrorResponse(error="AI response generation failed", detail=e.message)
    except PersistenceError as e:
        response.status_code = 500
        return ErrorResponse(error="Chat history could not be saved", detail=e.message)
    except Exception as e:
        logger.exception(f"Error in chat: {e}")
        response.status_code = 500
        return ErrorResponse(error="Chat failed", detail=f"Failed to chat: {str(e)}")

    return ChatResponse(message=result.message, thread_id=result.thread_id)


@router.post("/history", response_model=None)
async def get_chat_history(
    request_data: ChatHistoryListRequest, request: Request, response: Response
) -> Union[ChatHistoryListResponse, ErrorResponse]:
    """
    List chat history grouped by thread.

    Regular users see their own threads; scope "all" is reserved for admins.
    """
    user = get_current_user(request)

    try:
        return await get_chat_history_service().get_chat_history(user, request_data)
    except InputValidationError as e:
        response.status_code = 400
        return ErrorResponse(error="Invalid history request", detail=e.message)
    except AuthorizationError as e:
        response.status_code = 403
        return ErrorResponse(error="Forbidden", detail=e.message)
    except Exception as e:
        logger.exception(f"Error getting chat history: {e}")
        response.status_code = 500
        return ErrorResponse(
            error="Chat history failed", detail=f"Failed to get chat history: {str(e)}"
        )


@router.delete("/thread", status_code=204, response_model=None)
async def delete_thread(
    request_data: ThreadDeleteRequest, request: Request
) -> Union[Response, ErrorResponse]:
    """
    Delete one of the caller's threads together with all of its exchanges.
    """
    user = get_current_user(request)

    try:
        await get_chat_history_service().delete_thread(user.id, request_data.thread_id)
    except AuthorizationError as e:
        return Response(
            status_code=403,
            content=ErrorResponse(error="Forbidden", detail=e.message).model_dump_json(),
            media_type="application/json",
        )
    except Exception as e:
        logger.exception(f"Error deleting thread: {e}")
        return Response(
            status_code=500,
            content=ErrorResponse(
                error="Thread deletion failed", detail=f"Failed to delete thread: {str(e)}"
            ).model_dump_json(),
            media_type="application/json",
        )

    return Response(status_code=204)


@router.get("/providers", response_model=LLMProvidersResponse)
async def get_providers() -> LLMProvidersResponse:
    """List the selectable provider variants."""
    return list_llm_providers()
