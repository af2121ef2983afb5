# src/llm/router.py — v2
"""AI Router: classify a model id, shape the request, call the adapter.

Usage::

    router = create_router(load_settings())
    result = await router.generate_response(
        [{"role": "user", "content": "Hello!"}], "gpt-4",
    )
    result.content, result.tokens

Provider quirks kept on purpose:
  - Claude calls do not receive the temperature.
  - Gemini calls ignore per-request temperature / max tokens; the
    adapter's generation defaults apply.
  - Multimodal requests on non-Gemini models drop their images and are
    answered as plain text.
  - Only adapters that advertise streaming (OpenAI) stream.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

from chatrouter.config.settings import Settings
from chatrouter.llm.adapters.claude_adapter import ClaudeAdapter
from chatrouter.llm.adapters.google_adapter import DEFAULT_IMAGE_MIME, GoogleAdapter
from chatrouter.llm.adapters.openai_adapter import OpenAIAdapter
from chatrouter.llm.base_client import BaseLLMClient
from chatrouter.llm.catalog import build_catalog
from chatrouter.llm.errors import (
    EmptyConversationError,
    InvalidImageError,
    ProviderCallError,
    UnknownProviderError,
    UnsupportedCapabilityError,
)
from chatrouter.llm.models import (
    GenerationResult,
    ImageInput,
    Message,
    ModelDescriptor,
    MultimodalMessage,
    ProviderTag,
)
from chatrouter.llm.routing import classify_provider, to_google_contents, to_google_role
from chatrouter.llm.stream import TextStream
from chatrouter.logging.context import request_scope
from chatrouter.media.images import (
    data_url_mime,
    decode_base64,
    detect_file_type_from_signature,
    optimize_cloudinary_url,
    validate_file_signature,
)
from chatrouter.tracking.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

TextHandler = Callable[[list[Message], str, int, float], Awaitable[GenerationResult]]
StreamHandler = Callable[[list[Message], str, int, float], Awaitable[Any]]


class AIRouter:
    """Central entry point for all AI generation calls."""

    def __init__(
        self,
        openai: OpenAIAdapter,
        claude: ClaudeAdapter,
        google: GoogleAdapter,
        settings: Settings | None = None,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        self._openai = openai
        self._claude = claude
        self._google = google
        self._settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
        self._usage = usage_tracker

        self._adapters: dict[ProviderTag, BaseLLMClient] = {
            ProviderTag.OPENAI: openai,
            ProviderTag.CLAUDE: claude,
            ProviderTag.GOOGLE: google,
        }
        self._text_handlers: dict[ProviderTag, TextHandler] = {
            ProviderTag.OPENAI: self._openai_text,
            ProviderTag.CLAUDE: self._claude_text,
            ProviderTag.GOOGLE: self._google_text,
        }
        self._stream_handlers: dict[ProviderTag, StreamHandler] = {
            ProviderTag.OPENAI: self._openai_stream,
        }

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    @staticmethod
    def classify_provider(model_id: str) -> ProviderTag:
        """Provider for *model_id*; raises UnknownProviderError if none."""
        return classify_provider(model_id)

    async def generate_response(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        model_id: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> GenerationResult:
        """Generate a reply to the last message of *messages*.

        Raises:
            UnknownProviderError: *model_id* matches no provider; no adapter
                is called.
            EmptyConversationError: *messages* is empty.
            ProviderCallError: The provider call failed or timed out.
        """
        provider = classify_provider(model_id)
        msgs = _coerce_messages(messages)
        _require_messages(msgs, model_id)
        with request_scope(model_id, provider.value):
            return await self._generate_text(provider, model_id, msgs, max_tokens, temperature)

    async def generate_multimodal_response(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        model_id: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> GenerationResult:
        """Generate a reply to messages that may carry images.

        Plain messages are accepted as messages without images. Gemini
        receives text and image parts (text first). Other providers
        silently lose the images and get a text-only request.

        Raises:
            UnknownProviderError: *model_id* matches no provider.
            EmptyConversationError: *messages* is empty.
            InvalidImageError: An inline image is not valid base64 or its
                bytes do not match its MIME type.
            ProviderCallError: The provider call or an image download failed.
        """
        provider = classify_provider(model_id)
        msgs = [_to_multimodal(m) for m in messages]
        _require_messages(msgs, model_id)

        with request_scope(model_id, provider.value):
            if provider is not ProviderTag.GOOGLE:
                dropped = sum(len(m.images) for m in msgs)
                if dropped:
                    logger.info(
                        "Model %s does not accept images; dropping %d attachment(s)",
                        model_id, dropped,
                    )
                return await self._generate_text(
                    provider, model_id, [m.as_text() for m in msgs], max_tokens, temperature,
                )

            return await self._tracked(
                provider, model_id, "multimodal", self._google_multimodal(msgs, model_id),
            )

    async def generate_stream_response(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        model_id: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> TextStream:
        """Open a single-pass stream of text fragments.

        The usage record for a stream is written when the stream ends, so
        a failure after the first chunk is recorded as failed.

        Raises:
            UnknownProviderError: *model_id* matches no provider.
            UnsupportedCapabilityError: The provider cannot stream; no
                network call is made.
            EmptyConversationError: *messages* is empty.
            ProviderCallError: Opening the stream failed.
        """
        provider = classify_provider(model_id)
        handler = self._stream_handlers.get(provider)
        if handler is None or not self._adapters[provider].supports_streaming:
            raise UnsupportedCapabilityError(model_id, "streaming")
        msgs = _coerce_messages(messages)
        _require_messages(msgs, model_id)

        with request_scope(model_id, provider.value):
            start = time.monotonic()
            try:
                source = await self._with_timeout(
                    handler(msgs, model_id, self._max_tokens(max_tokens), self._temperature(temperature)),
                    provider,
                )
            except Exception as exc:
                self._record(provider, model_id, "stream", start, error=exc)
                raise

        on_finish = functools.partial(self._record_stream_end, provider, model_id, start)
        return TextStream(source, model=model_id, on_finish=on_finish)

    def get_available_models(self) -> list[ModelDescriptor]:
        """OpenAI models, then Claude models, then the two Gemini models."""
        return build_catalog(
            self._openai.get_available_models(),
            self._claude.get_available_models(),
        )

    # ---------------------------------------------------------------------------
    # Provider handlers
    # ---------------------------------------------------------------------------

    async def _generate_text(
        self,
        provider: ProviderTag,
        model_id: str,
        messages: list[Message],
        max_tokens: int | None,
        temperature: float | None,
    ) -> GenerationResult:
        handler = self._text_handlers.get(provider)
        if handler is None:
            raise UnknownProviderError(model_id)
        return await self._tracked(
            provider,
            model_id,
            "text",
            handler(messages, model_id, self._max_tokens(max_tokens), self._temperature(temperature)),
        )

    async def _openai_text(
        self, messages: list[Message], model: str, max_tokens: int, temperature: float,
    ) -> GenerationResult:
        return await self._openai.generate_response(messages, model, max_tokens, temperature)

    async def _claude_text(
        self, messages: list[Message], model: str, max_tokens: int, temperature: float,
    ) -> GenerationResult:
        return await self._claude.generate_response(messages, model, max_tokens)

    async def _google_text(
        self, messages: list[Message], model: str, max_tokens: int, temperature: float,
    ) -> GenerationResult:
        return await self._google.generate_text_response(to_google_contents(messages), model=model)

    async def _google_multimodal(
        self, messages: list[MultimodalMessage], model: str,
    ) -> GenerationResult:
        contents = [
            {"role": to_google_role(m.role), "parts": await self._google_parts(m)}
            for m in messages
        ]
        return await self._google.generate_multimodal_response(contents, model=model)

    async def _openai_stream(
        self, messages: list[Message], model: str, max_tokens: int, temperature: float,
    ) -> Any:
        return await self._openai.generate_stream_response(messages, model, max_tokens, temperature)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _google_parts(self, message: MultimodalMessage) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = []
        if message.content:
            parts.append(self._google.create_text_part(message.content))
        for image in message.images:
            parts.append(await self._image_part(image))
        return parts

    async def _image_part(self, image: ImageInput) -> dict[str, Any]:
        if image.base64:
            try:
                raw = decode_base64(image.base64)
            except ValueError as exc:
                raise InvalidImageError("Image data is not valid base64") from exc
            mime_type = (
                image.mime_type
                or data_url_mime(image.base64)
                or detect_file_type_from_signature(raw)
                or DEFAULT_IMAGE_MIME
            )
            if self._settings.verify_image_signatures and not validate_file_signature(raw, mime_type):
                raise InvalidImageError(f"Image content does not match declared type {mime_type}")
            return self._google.convert_image_to_part(image.base64, mime_type)

        url = image.url or ""
        if self._settings.optimize_cloudinary_urls:
            url = optimize_cloudinary_url(url)
        return await self._google.fetch_image_url_to_part(url, image.mime_type)

    async def _tracked(
        self,
        provider: ProviderTag,
        model_id: str,
        operation: str,
        call: Awaitable[T],
    ) -> T:
        start = time.monotonic()
        try:
            result = await self._with_timeout(call, provider)
        except Exception as exc:
            self._record(provider, model_id, operation, start, error=exc)
            raise
        tokens = result.tokens if isinstance(result, GenerationResult) else 0
        self._record(provider, model_id, operation, start, tokens=tokens)
        return result

    async def _with_timeout(self, call: Awaitable[T], provider: ProviderTag) -> T:
        timeout = self._settings.request_timeout_s
        if timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error("AI request timed out after %.1fs: provider=%s", timeout, provider.value)
            raise ProviderCallError(
                "AI request timed out, please try again", provider=provider.value,
            ) from exc

    def _record_stream_end(
        self,
        provider: ProviderTag,
        model_id: str,
        start: float,
        error: BaseException | None,
    ) -> None:
        self._record(provider, model_id, "stream", start, error=error)

    def _record(
        self,
        provider: ProviderTag,
        model_id: str,
        operation: str,
        start: float,
        tokens: int = 0,
        error: BaseException | None = None,
    ) -> None:
        if self._usage is None:
            return
        self._usage.record(
            provider=provider.value,
            model=model_id,
            operation=operation,  # type: ignore[arg-type]
            tokens=tokens,
            latency_ms=int((time.monotonic() - start) * 1000),
            error=error,
        )

    def _max_tokens(self, value: int | None) -> int:
        return self._settings.default_max_tokens if value is None else value

    def _temperature(self, value: float | None) -> float:
        return self._settings.default_temperature if value is None else value


def _coerce_messages(messages: Sequence[Message | Mapping[str, Any]]) -> list[Message]:
    """Accept Message models or plain role/content dicts, order preserved."""
    return [
        m if isinstance(m, Message) else Message(role=m["role"], content=m["content"])
        for m in messages
    ]


def _to_multimodal(message: Message | Mapping[str, Any]) -> MultimodalMessage:
    if isinstance(message, MultimodalMessage):
        return message
    if isinstance(message, Message):
        return MultimodalMessage(role=message.role, content=message.content)
    return MultimodalMessage.model_validate(message)


def _require_messages(messages: Sequence[Message], model_id: str) -> None:
    if not messages:
        raise EmptyConversationError(model_id)
