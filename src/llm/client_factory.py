# src/llm/client_factory.py — v3
"""Factory: build provider adapters and the router from Settings.

Adapters are created explicitly and injected into the router; nothing
reads process-wide configuration after construction.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from chatrouter.config.settings import Settings
from chatrouter.llm.base_client import BaseLLMClient
from chatrouter.llm.errors import UnknownProviderError
from chatrouter.llm.models import ProviderTag
from chatrouter.tracking.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    ProviderTag.OPENAI.value: "chatrouter.llm.adapters.openai_adapter.OpenAIAdapter",
    ProviderTag.CLAUDE.value: "chatrouter.llm.adapters.claude_adapter.ClaudeAdapter",
    ProviderTag.GOOGLE.value: "chatrouter.llm.adapters.google_adapter.GoogleAdapter",
}


def create_llm_client(
    provider: str | ProviderTag,
    settings: Settings | None = None,
    **kwargs: Any,
) -> BaseLLMClient:
    """Instantiate the adapter registered for *provider*.

    Args:
        provider: Provider tag (openai, claude, google).
        settings: Application settings (API keys, Gemini defaults).
        **kwargs: Constructor overrides (e.g. an injected SDK client).

    Returns:
        Configured adapter.

    Raises:
        UnknownProviderError: If provider is not registered.
        ConfigurationError: If the Google API key is missing.
    """
    name = provider.value if isinstance(provider, ProviderTag) else provider
    if name not in _PROVIDER_REGISTRY:
        raise UnknownProviderError(name)

    adapter_cls = _import_class(_PROVIDER_REGISTRY[name])
    init_kwargs = dict(kwargs)

    if settings is not None:
        if name == ProviderTag.OPENAI.value:
            init_kwargs.setdefault("api_key", settings.openai_api_key)
        elif name == ProviderTag.CLAUDE.value:
            init_kwargs.setdefault("api_key", settings.claude_api_key)
        elif name == ProviderTag.GOOGLE.value:
            if "api_key" not in init_kwargs:
                init_kwargs["api_key"] = settings.require_google_key()
            init_kwargs.setdefault("default_model", settings.google_default_model)
            init_kwargs.setdefault("generation_config", settings.google_generation_config)
            init_kwargs.setdefault("fetch_timeout_s", settings.image_fetch_timeout_s)

    logger.debug("Creating LLM client: provider=%s", name)
    return adapter_cls(**init_kwargs)


def create_router(
    settings: Settings,
    usage_tracker: UsageTracker | None = None,
    **adapter_overrides: BaseLLMClient,
):
    """Build all three adapters and the AIRouter.

    Args:
        settings: Application settings.
        usage_tracker: Optional tracker receiving one record per call.
        **adapter_overrides: Pre-built adapters keyed by provider name.

    Raises:
        ConfigurationError: If GOOGLE_AI_API_KEY is not configured; the
            router refuses to start without it.
    """
    from chatrouter.llm.router import AIRouter  # local import avoids circular deps

    adapters = {
        name: adapter_overrides.get(name) or create_llm_client(name, settings)
        for name in (ProviderTag.GOOGLE.value, ProviderTag.OPENAI.value, ProviderTag.CLAUDE.value)
    }
    if not settings.claude_api_key and ProviderTag.CLAUDE.value not in adapter_overrides:
        logger.warning("CLAUDE_API_KEY is not configured; Claude models return a placeholder")

    return AIRouter(
        openai=adapters[ProviderTag.OPENAI.value],
        claude=adapters[ProviderTag.CLAUDE.value],
        google=adapters[ProviderTag.GOOGLE.value],
        settings=settings,
        usage_tracker=usage_tracker,
    )


def register_provider(name: str, class_path: str) -> None:
    """Register a custom adapter class for a provider name."""
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
