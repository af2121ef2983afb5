# src/llm/base_client.py — v2
"""Abstract provider adapter interface.

Each adapter wraps one external generative-AI API. Generation methods
differ per provider (the router knows each shape); the capability
surface below is common to all of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from chatrouter.llm.models import ProviderTag


class BaseLLMClient(ABC):
    """Common interface for all provider adapters."""

    @abstractmethod
    def get_available_models(self) -> list:
        """Models this adapter can serve (static, no network call)."""

    @property
    @abstractmethod
    def provider(self) -> ProviderTag:
        """Provider this adapter talks to."""

    @property
    def provider_name(self) -> str:
        """Provider identifier (openai, claude, google)."""
        return self.provider.value

    @property
    def supports_streaming(self) -> bool:
        """Whether incremental text streaming is available."""
        return False
