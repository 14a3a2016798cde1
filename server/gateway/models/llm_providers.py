"""
LLM provider models.

Closed enumeration of the (provider family x model) pairs the gateway can
route a chat to, and the static table describing each of them.
"""

from enum import Enum
from typing import Dict, List, NamedTuple

from pydantic import BaseModel, Field

from gateway.errors import ConfigError


class ChatProvider(str, Enum):
    """Provider family and model selectable by a chat request."""

    OPENAI_GPT4O = "OPENAI_GPT4O"
    OPENAI_GPT4O_MINI = "OPENAI_GPT4O_MINI"
    OPENAI_GPT4_TURBO = "OPENAI_GPT4_TURBO"
    PERPLEXITY_SONAR = "PERPLEXITY_SONAR"
    PERPLEXITY_SONAR_PRO = "PERPLEXITY_SONAR_PRO"
    ANTHROPIC_CLAUDE_SONNET_4 = "ANTHROPIC_CLAUDE_SONNET_4"
    ANTHROPIC_CLAUDE_3_5_HAIKU = "ANTHROPIC_CLAUDE_3_5_HAIKU"

    @classmethod
    def default(cls) -> "ChatProvider":
        return cls.OPENAI_GPT4O

    @classmethod
    def parse(cls, value: "str | ChatProvider") -> "ChatProvider":
        """Resolve a request value to a provider, raising ConfigError if unknown."""
        if isinstance(value, ChatProvider):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise ConfigError(f"Unsupported chat provider: {value}") from exc


class ProviderSpec(NamedTuple):
    """Static description of one provider variant."""

    provider_name: str
    model_name: str
    client_name: str


CHAT_PROVIDER_SPECS: Dict[ChatProvider, ProviderSpec] = {
    ChatProvider.OPENAI_GPT4O: ProviderSpec("OpenAI", "gpt-4o", "openai"),
    ChatProvider.OPENAI_GPT4O_MINI: ProviderSpec("OpenAI", "gpt-4o-mini", "openai"),
    ChatProvider.OPENAI_GPT4_TURBO: ProviderSpec("OpenAI", "gpt-4-turbo", "openai"),
    ChatProvider.PERPLEXITY_SONAR: ProviderSpec("Perplexity", "sonar", "perplexity"),
    ChatProvider.PERPLEXITY_SONAR_PRO: ProviderSpec("Perplexity", "sonar-pro", "perplexity"),
    ChatProvider.ANTHROPIC_CLAUDE_SONNET_4: ProviderSpec(
        "Anthropic", "claude-sonnet-4-20250514", "anthropic"
    ),
    ChatProvider.ANTHROPIC_CLAUDE_3_5_HAIKU: ProviderSpec(
        "Anthropic", "claude-3-5-haiku-20241022", "anthropic"
    ),
}


class ChatOptions(NamedTuple):
    """Per-call options handed to a provider client."""

    model_name: str


class LLMProviderModel(BaseModel):
    """Model representing one selectable provider variant."""

    id: str = Field(..., description="Provider value to send in chat requests")
    provider_name: str = Field(..., description="Provider family display name")
    model_name: str = Field(..., description="Backend model name")


class LLMProvidersResponse(BaseModel):
    """Response model for the provider listing."""

    providers: List[LLMProviderModel] = Field(..., description="Selectable providers")
    default: str = Field(..., description="Provider used when a request omits one")
