from typing import Dict, Mapping, Optional

from gateway.errors import ConfigError
from gateway.models.llm_providers import (
    CHAT_PROVIDER_SPECS,
    ChatOptions,
    ChatProvider,
    LLMProviderModel,
    LLMProvidersResponse,
)
from gateway.services.anthropic_service import AnthropicService
from gateway.services.base_llm_service import BaseChatClient
from gateway.services.openai_service import OpenAIService
from gateway.services.perplexity_service import PerplexityService

openai_service = OpenAIService()
perplexity_service = PerplexityService()
anthropic_service = AnthropicService()

LLM_CLIENT_REGISTRY: Dict[str, BaseChatClient] = {
    "openai": openai_service,
    "perplexity": perplexity_service,
    "anthropic": anthropic_service,
}


class ChatClientFactory:
    """Maps a ChatProvider variant to its shared client and per-call options."""

    def __init__(self, clients: Optional[Mapping[str, BaseChatClient]] = None) -> None:
        self._clients: Mapping[str, BaseChatClient] = (
            clients if clients is not None else LLM_CLIENT_REGISTRY
        )

    def get_client(self, provider: "str | ChatProvider") -> BaseChatClient:
        spec = CHAT_PROVIDER_SPECS.get(ChatProvider.parse(provider))
        if spec is None:
            raise ConfigError(f"Unsupported chat provider: {provider}")
        client = self._clients.get(spec.client_name)
        if client is None:
            raise ConfigError(f"No chat client registered for '{spec.client_name}'")
        return client

    def get_options(self, provider: "str | ChatProvider") -> ChatOptions:
        spec = CHAT_PROVIDER_SPECS.get(ChatProvider.parse(provider))
        if spec is None:
            raise ConfigError(f"Unsupported chat provider: {provider}")
        return ChatOptions(model_name=spec.model_name)

    def registered_client_names(self) -> set[str]:
        return set(self._clients)


def list_llm_providers() -> LLMProvidersResponse:
    return LLMProvidersResponse(
        providers=[
            LLMProviderModel(
                id=provider.value,
                provider_name=spec.provider_name,
                model_name=spec.model_name,
            )
            for provider, spec in CHAT_PROVIDER_SPECS.items()
        ],
        default=ChatProvider.default().value,
    )
