"""
Gateway errors module.

Holds the exceptions shared by the chat services and mapped to HTTP
responses by the API layer.
"""


class ChatGatewayError(Exception):
    """Base class for errors raised by the chat services."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(ChatGatewayError):
    """Raised when request input is rejected before any side effect."""


class ConfigError(ChatGatewayError):
    """Raised when a provider/model mapping is unknown or not configured."""


class ProviderNotConfiguredError(ConfigError):
    """Raised when a provider family is selectable but its credentials are missing."""


class AuthorizationError(ChatGatewayError):
    """Raised when a thread is missing or not owned by the caller, or admin scope is missing."""


class ProviderError(ChatGatewayError):
    """Raised when the LLM backend call fails."""


class PersistenceError(ChatGatewayError):
    """Raised when a store write fails."""
