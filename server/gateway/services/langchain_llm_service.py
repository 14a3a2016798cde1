"""LangChain-powered base client that removes per-provider duplication."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage

from gateway.models.llm_providers import ChatOptions
from gateway.services.base_llm_service import BaseChatClient
from gateway.services.chat_models import PromptTurn

logger = logging.getLogger(__name__)


class LangChainChatClient(BaseChatClient, ABC):
    """Shared LangChain implementation that works across providers."""

    def __init__(self, *, provider_name: str) -> None:
        self.provider_name = provider_name
        self._model_cache: Dict[str, BaseChatModel] = {}
        self._model_cache_lock = threading.Lock()

    def get_or_create_model(self, model_name: str) -> BaseChatModel:
        with self._model_cache_lock:
            if model_name not in self._model_cache:
                self._model_cache[model_name] = self._build_chat_model(model_id=model_name)
            return self._model_cache[model_name]

    def ensure_ready(self, options: ChatOptions) -> None:
        # Building (and caching) the model surfaces missing credentials
        self.get_or_create_model(options.model_name)

    @abstractmethod
    def _build_chat_model(self, *, model_id: str) -> BaseChatModel:
        """Return a LangChain chat model for the given provider/model id."""

    @staticmethod
    def build_messages(prompt_turns: Sequence[PromptTurn]) -> List[BaseMessage]:
        return [HumanMessage(content=turn.content) for turn in prompt_turns]

    @staticmethod
    def _content_to_text(content: Any) -> str:
        """Flatten string or content-block message content into plain text."""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: List[str] = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict) and item.get("type") == "text":
                    text_value = item.get("text", "")
                    if isinstance(text_value, str):
                        parts.append(text_value)
            return "".join(parts)
        return str(content)

    def complete(self, prompt_turns: Sequence[PromptTurn], options: ChatOptions) -> str:
        model = self.get_or_create_model(model_name=options.model_name)
        logger.debug(
            "Requesting %s completion (%s) for %d turn(s)",
            self.provider_name,
            options.model_name,
            len(prompt_turns),
        )
        response = model.invoke(self.build_messages(prompt_turns))
        return self._content_to_text(response.content)

    async def stream(
        self, prompt_turns: Sequence[PromptTurn], options: ChatOptions
    ) -> AsyncIterator[str]:
        model = self.get_or_create_model(model_name=options.model_name)
        logger.debug(
            "Streaming %s completion (%s) for %d turn(s)",
            self.provider_name,
            options.model_name,
            len(prompt_turns),
        )
        async for chunk in model.astream(self.build_messages(prompt_turns)):
            yield self._content_to_text(chunk.content)
