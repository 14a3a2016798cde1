"""
Models module for the Chat Gateway

This module exports all Pydantic models for data validation and API contracts.
"""

# Auth models
from gateway.models.auth import AuthUser

# Chat models
from gateway.models.chat import (
    ChatHistoryItem,
    ChatHistoryListRequest,
    ChatHistoryListResponse,
    ChatRequest,
    ChatResponse,
    HistoryScope,
    ThreadDeleteRequest,
    ThreadWithChats,
)

# LLM provider models
from gateway.models.llm_providers import (
    CHAT_PROVIDER_SPECS,
    ChatOptions,
    ChatProvider,
    LLMProviderModel,
    LLMProvidersResponse,
    ProviderSpec,
)

__all__ = [
    "AuthUser",
    "CHAT_PROVIDER_SPECS",
    "ChatHistoryItem",
    "ChatHistoryListRequest",
    "ChatHistoryListResponse",
    "ChatOptions",
    "ChatProvider",
    "ChatRequest",
    "ChatResponse",
    "HistoryScope",
    "LLMProviderModel",
    "LLMProvidersResponse",
    "ProviderSpec",
    "ThreadDeleteRequest",
    "ThreadWithChats",
]
