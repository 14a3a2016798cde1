"""
Abstract base class for LLM chat clients.

This module defines the common interface that all provider clients (OpenAI,
Perplexity, Anthropic) implement so the chat orchestrator can treat them
uniformly.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Sequence

from gateway.models.llm_providers import ChatOptions
from gateway.services.chat_models import PromptTurn


class BaseChatClient(ABC):
    """
    Abstract base class for provider chat clients.

    Implementations are created once per process and shared by every
    request, so they must not keep per-request state.
    """

    provider_name: str

    def ensure_ready(self, options: ChatOptions) -> None:
        """
        Check that a call with these options can be made.

        Called before any request side effect.

        Raises:
            ProviderNotConfiguredError: If the provider's credentials are missing
        """
        return None

    @abstractmethod
    def complete(self, prompt_turns: Sequence[PromptTurn], options: ChatOptions) -> str:
        """
        Submit the prompt and block until the full completion is available.

        Args:
            prompt_turns: User turns to submit, oldest first
            options: Per-call options (model name)

        Returns:
            str: The assistant's full response text

        Raises:
            Exception: If the provider call fails
        """
        pass

    @abstractmethod
    def stream(self, prompt_turns: Sequence[PromptTurn], options: ChatOptions) -> AsyncIterator[str]:
        """
        Submit the prompt and yield text fragments as the provider emits them.

        Args:
            prompt_turns: User turns to submit, oldest first
            options: Per-call options (model name)

        Yields:
            str: Raw text fragments (may be empty or whitespace)

        Raises:
            Exception: If the provider call fails
        """
        pass
