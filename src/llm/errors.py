# src/llm/errors.py — v1
"""Error taxonomy for the routing layer.

Classification and capability errors are raised before any provider is
contacted. Provider failures are logged by the adapter and re-raised as
ProviderCallError with the SDK exception chained as __cause__.
"""

from __future__ import annotations

from chatrouter.config.settings import ConfigurationError

__all__ = [
    "ChatRouterError",
    "ConfigurationError",
    "EmptyConversationError",
    "InvalidImageError",
    "ProviderCallError",
    "UnknownProviderError",
    "UnsupportedCapabilityError",
]


class ChatRouterError(Exception):
    """Base class for routing and generation errors."""


class UnknownProviderError(ChatRouterError, ValueError):
    """Model identifier matches no provider prefix rule."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Unknown AI model: {model_id!r}")


class UnsupportedCapabilityError(ChatRouterError):
    """Provider behind a model does not support the requested operation."""

    def __init__(self, model_id: str, capability: str):
        self.model_id = model_id
        self.capability = capability
        super().__init__(f"Model {model_id} does not support {capability}")


class ProviderCallError(ChatRouterError):
    """A provider call failed (network, auth, quota, malformed response)."""

    def __init__(self, message: str, provider: str = "unknown"):
        self.provider = provider
        super().__init__(message)


class EmptyConversationError(ChatRouterError, ValueError):
    """Request carries no messages; there is no turn to answer."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__("At least one message is required")


class InvalidImageError(ChatRouterError, ValueError):
    """Attached image is not valid base64 or does not match its MIME type."""
