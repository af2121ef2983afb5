# src/llm/adapters/claude_adapter.py — v3
"""Anthropic Claude adapter.

Calls the Messages API through the official anthropic SDK when a key is
configured. Without a key the adapter answers with a fixed placeholder
and tokens=0, logging a warning on every call so the gap stays visible.
Temperature is not part of this adapter's signature.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from chatrouter.llm.base_client import BaseLLMClient
from chatrouter.llm.errors import ProviderCallError
from chatrouter.llm.models import GenerationResult, Message, ProviderTag

logger = logging.getLogger(__name__)

PLACEHOLDER_CONTENT = "Claude AI response (not implemented yet)"

_AVAILABLE_MODELS = (
    "claude-3-opus-20240229",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
)


class ClaudeAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(self, api_key: str = "", client: Any = None) -> None:
        self._api_key = api_key
        self.__client = client  # Lazy initialization unless injected

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self.__client

    @property
    def is_configured(self) -> bool:
        """Whether real Messages API calls are made."""
        return bool(self._api_key) or self.__client is not None

    async def generate_response(
        self,
        messages: Sequence[Message],
        model: str = "claude-3-sonnet-20240229",
        max_tokens: int = 1000,
    ) -> GenerationResult:
        """Text completion via the Anthropic Messages API."""
        if not self.is_configured:
            logger.warning(
                "Claude adapter has no API key; returning placeholder for model=%s", model,
            )
            return GenerationResult(content=PLACEHOLDER_CONTENT, tokens=0)

        params = self._build_params(messages, model, max_tokens)
        try:
            response = await self._client.messages.create(**params)
        except Exception as exc:
            logger.error("Claude API error: model=%s", model, exc_info=True)
            raise ProviderCallError(
                "Failed to generate Claude response", provider="claude",
            ) from exc

        usage = getattr(response, "usage", None)
        tokens = 0
        if usage is not None:
            tokens = (usage.input_tokens or 0) + (usage.output_tokens or 0)
        return GenerationResult(content=self._extract_content(response), tokens=tokens)

    def get_available_models(self) -> list[str]:
        return list(_AVAILABLE_MODELS)

    @property
    def provider(self) -> ProviderTag:
        return ProviderTag.CLAUDE

    # --- Internal helpers ---

    @staticmethod
    def _build_params(
        messages: Sequence[Message],
        model: str,
        max_tokens: int,
    ) -> dict[str, Any]:
        system_parts = [m.content for m in messages if m.role == "system"]
        params: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages
                if m.role != "system"
            ],
        }
        if system_parts:
            params["system"] = "\n".join(system_parts)
        return params

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Concatenate text blocks from the response content."""
        texts = [
            block.text
            for block in getattr(response, "content", None) or []
            if getattr(block, "type", None) == "text"
        ]
        return "".join(texts)
