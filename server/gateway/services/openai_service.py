"""OpenAI chat client implemented on top of the LangChain abstraction."""

import logging

from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from gateway.config import settings
from gateway.errors import ProviderNotConfiguredError
from gateway.services.langchain_llm_service import LangChainChatClient

logger = logging.getLogger(__name__)


class OpenAIService(LangChainChatClient):
    """LangChain client for OpenAI chat models."""

    def __init__(self) -> None:
        super().__init__(provider_name="openai")

    def _build_chat_model(self, *, model_id: str) -> ChatOpenAI:
        api_key = settings.OPENAI_API_KEY
        if not api_key:
            raise ProviderNotConfiguredError(
                "OPENAI_API_KEY environment variable is required"
            )
        logger.info("Initializing OpenAI model '%s'", model_id)
        return ChatOpenAI(
            model=model_id,
            api_key=SecretStr(api_key),
            temperature=settings.LLM_TEMPERATURE,
            streaming=True,
        )
