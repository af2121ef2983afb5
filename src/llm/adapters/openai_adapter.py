# src/llm/adapters/openai_adapter.py — v2
"""OpenAI chat-completions adapter.

Uses the official openai SDK (AsyncOpenAI). The only provider with
incremental streaming.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Sequence

from chatrouter.llm.base_client import BaseLLMClient
from chatrouter.llm.errors import ProviderCallError
from chatrouter.llm.models import GenerationResult, Message, ProviderTag

logger = logging.getLogger(__name__)

_AVAILABLE_MODELS = (
    "gpt-4",
    "gpt-4-turbo",
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-16k",
)


class OpenAIAdapter(BaseLLMClient):
    """OpenAI GPT adapter."""

    def __init__(self, api_key: str = "", client: Any = None) -> None:
        self._api_key = api_key
        self.__client = client  # Lazy initialization unless injected

    @property
    def _client(self):
        """Lazy-init AsyncOpenAI client (only on first API call)."""
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError("openai package required: pip install openai") from e
            self.__client = openai.AsyncOpenAI(api_key=self._api_key)
        return self.__client

    async def generate_response(
        self,
        messages: Sequence[Message],
        model: str = "gpt-4",
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> GenerationResult:
        """Single request/response chat completion."""
        try:
            resp = await self._client.chat.completions.create(
                model=model,
                messages=_to_api_messages(messages),
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as exc:
            logger.error("OpenAI API error: model=%s", model, exc_info=True)
            raise ProviderCallError(
                "Failed to generate AI response", provider="openai",
            ) from exc

        content = ""
        if resp.choices:
            content = resp.choices[0].message.content or ""
        usage = getattr(resp, "usage", None)
        tokens = (usage.total_tokens or 0) if usage else 0

        logger.info("OpenAI response generated: %d tokens used", tokens)
        return GenerationResult(content=content, tokens=tokens)

    async def generate_stream_response(
        self,
        messages: Sequence[Message],
        model: str = "gpt-4",
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """Open a streaming completion and return its text deltas.

        Opening failures raise here; failures after the first chunk are
        raised from the returned iterator.
        """
        try:
            stream = await self._client.chat.completions.create(
                model=model,
                messages=_to_api_messages(messages),
                max_tokens=max_tokens,
                temperature=temperature,
                stream=True,
            )
        except Exception as exc:
            logger.error("OpenAI streaming error: model=%s", model, exc_info=True)
            raise ProviderCallError(
                "Failed to generate streaming AI response", provider="openai",
            ) from exc
        return _iter_deltas(stream, model)

    def get_available_models(self) -> list[str]:
        return list(_AVAILABLE_MODELS)

    @property
    def provider(self) -> ProviderTag:
        return ProviderTag.OPENAI

    @property
    def supports_streaming(self) -> bool:
        return True


def _to_api_messages(messages: Sequence[Message]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in messages]


async def _iter_deltas(stream: Any, model: str) -> AsyncIterator[str]:
    """Yield non-empty content deltas; chunks without one are skipped."""
    try:
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = getattr(chunk.choices[0], "delta", None)
            text = getattr(delta, "content", None) if delta is not None else None
            if text:
                yield text
    except Exception as exc:
        logger.error("OpenAI stream interrupted: model=%s", model, exc_info=True)
        raise ProviderCallError(
            "Streaming AI response interrupted", provider="openai",
        ) from exc
