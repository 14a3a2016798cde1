"""Anthropic (Claude) client implemented on the LangChain base."""

import logging
from typing import Any, cast

from langchain_anthropic import ChatAnthropic
from pydantic import SecretStr

from gateway.config import settings
from gateway.errors import ProviderNotConfiguredError
from gateway.services.langchain_llm_service import LangChainChatClient

logger = logging.getLogger(__name__)


class AnthropicService(LangChainChatClient):
    """LangChain client for Anthropic Claude models."""

    def __init__(self) -> None:
        super().__init__(provider_name="anthropic")

    def _build_chat_model(self, *, model_id: str) -> ChatAnthropic:
        api_key = settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ProviderNotConfiguredError(
                "ANTHROPIC_API_KEY environment variable is required"
            )
        logger.info("Initializing Anthropic model '%s'", model_id)
        chat_model_cls: Any = ChatAnthropic
        return cast(
            ChatAnthropic,
            chat_model_cls(
                model_name=model_id,
                api_key=SecretStr(api_key),
                temperature=settings.LLM_TEMPERATURE,
                streaming=True,
            ),
        )
