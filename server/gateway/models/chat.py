"""
Chat-related Pydantic models.

This module contains the request and response contracts of the chat,
chat history and thread deletion endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from gateway.models.llm_providers import ChatProvider
from gateway.services.database.threads import SortDirection


class ChatRequest(BaseModel):
    """Request model for sending a chat message."""

    message: str = Field(..., description="User message content", min_length=1)
    is_streaming: bool = Field(
        True, description="Stream the response as it is generated instead of returning it whole"
    )
    provider: str = Field(
        ChatProvider.default().value,
        description="Provider and model to use, e.g. OPENAI_GPT4O or PERPLEXITY_SONAR",
        min_length=1,
    )

    @field_validator("message")
    @classmethod
    def _reject_blank_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message must not be empty")
        return value


class ChatResponse(BaseModel):
    """Response model for chat calls (and one streamed chunk on the wire)."""

    message: str = Field(..., description="Assistant response text or streamed fragment")
    thread_id: Optional[UUID] = Field(None, description="Thread the exchange belongs to")


class HistoryScope(str, Enum):
    """Whose threads a history query returns."""

    SELF = "self"
    ALL = "all"


class ChatHistoryListRequest(BaseModel):
    """Request model for listing chat history grouped by thread."""

    scope: HistoryScope = Field(
        HistoryScope.SELF, description="'self' for the caller's threads, 'all' for admins"
    )
    sort_direction: SortDirection = Field(
        SortDirection.DESC, description="Thread ordering by creation time"
    )
    page: int = Field(0, ge=0, description="Zero-based page number")
    size: int = Field(20, ge=1, description="Threads per page")


class ChatHistoryItem(BaseModel):
    """A single stored exchange."""

    id: UUID
    user_message: str
    assistant_message: str
    created_at: datetime


class ThreadWithChats(BaseModel):
    """A thread with its exchanges, oldest first."""

    thread_id: UUID
    user_id: str
    created_at: datetime
    updated_at: datetime
    chats: List[ChatHistoryItem] = Field(default_factory=list)


class ChatHistoryListResponse(BaseModel):
    """Paginated chat history response."""

    threads: List[ThreadWithChats] = Field(..., description="Threads on this page")
    page: int = Field(..., description="Requested page")
    size: int = Field(..., description="Requested page size")
    total_elements: int = Field(..., description="Total number of threads in scope")


class ThreadDeleteRequest(BaseModel):
    """Request model for deleting a thread."""

    thread_id: UUID = Field(..., description="Thread to delete")
