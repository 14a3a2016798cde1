from gateway.api.llm_providers import ChatClientFactory
from gateway.config import settings
from gateway.models.llm_providers import CHAT_PROVIDER_SPECS, ChatProvider


def _validate_provider_table(factory: ChatClientFactory) -> None:
    """Validate that every provider variant maps to a registered client."""
    registered = factory.registered_client_names()

    for provider in ChatProvider:
        spec = CHAT_PROVIDER_SPECS.get(provider)
        if spec is None:
            raise ValueError(f"Provider '{provider.value}' has no entry in the provider table.")
        if spec.client_name not in registered:
            raise ValueError(
                f"Provider '{provider.value}' maps to unregistered client '{spec.client_name}'."
            )


def _validate_thread_timeout() -> None:
    if settings.THREAD_TIMEOUT_MINUTES <= 0:
        raise ValueError("THREAD_TIMEOUT_MINUTES must be positive.")


def validate_configuration(factory: ChatClientFactory) -> None:
    """Run all configuration validation checks."""
    _validate_provider_table(factory)
    _validate_thread_timeout()
