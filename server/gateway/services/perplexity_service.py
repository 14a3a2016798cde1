"""Perplexity client implemented via the OpenAI-compatible LangChain path."""

import logging

from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from gateway.config import settings
from gateway.errors import ProviderNotConfiguredError
from gateway.services.langchain_llm_service import LangChainChatClient

logger = logging.getLogger(__name__)


class PerplexityService(LangChainChatClient):
    """Client for Perplexity's Sonar models using the OpenAI-compatible API."""

    def __init__(self) -> None:
        super().__init__(provider_name="perplexity")

    def _build_chat_model(self, *, model_id: str) -> ChatOpenAI:
        api_key = settings.PERPLEXITY_API_KEY
        if not api_key:
            raise ProviderNotConfiguredError(
                "PERPLEXITY_API_KEY environment variable is required"
            )
        logger.info("Initializing Perplexity model '%s'", model_id)
        return ChatOpenAI(
            model=model_id,
            api_key=SecretStr(api_key),
            base_url=settings.PERPLEXITY_BASE_URL,
            temperature=settings.LLM_TEMPERATURE,
            streaming=True,
        )
