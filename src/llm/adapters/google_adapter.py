# src/llm/adapters/google_adapter.py — v3
"""Google Gemini adapter.

Uses the google-generativeai SDK. Conversations are sent through a chat
session: every message but the last seeds the history, the last one is
the turn being answered. Generation parameters are adapter-level
defaults; per-request temperature and max tokens are not applied.

Text and multimodal calls share one generation config and one model
handle per catalog model. Any other gemini-* id, or a call with a system
prompt, gets a handle of its own that is not kept, because the SDK binds
system instructions to the model object.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Sequence

import httpx

from chatrouter.config.settings import ConfigurationError
from chatrouter.llm.base_client import BaseLLMClient
from chatrouter.llm.catalog import GOOGLE_MODELS
from chatrouter.llm.errors import EmptyConversationError, InvalidImageError, ProviderCallError
from chatrouter.llm.models import GenerationResult, GoogleModelInfo, ImageInput, ProviderTag
from chatrouter.media.images import strip_data_url

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_GENERATION_CONFIG: dict[str, float | int] = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 8192,
}
DEFAULT_IMAGE_MIME = "image/jpeg"

# (model_name, generation_config, system_instruction) -> model handle
ModelFactory = Callable[[str, dict, str | None], Any]


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self,
        api_key: str,
        default_model: str = DEFAULT_MODEL,
        generation_config: dict[str, float | int] | None = None,
        fetch_timeout_s: float = 30.0,
        model_factory: ModelFactory | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("GOOGLE_AI_API_KEY is not configured")
        self._api_key = api_key
        self._default_model = default_model
        self._generation_config = dict(generation_config or DEFAULT_GENERATION_CONFIG)
        self._fetch_timeout_s = fetch_timeout_s
        self._model_factory = model_factory or self._sdk_model_factory
        self._transport = transport
        self._handles: dict[str, Any] = {}
        self._cacheable = {m.id for m in GOOGLE_MODELS} | {default_model}
        self._sdk_configured = False

    # --- Generation ---

    async def generate_text_response(
        self,
        messages: Sequence[dict[str, Any]],
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> GenerationResult:
        """Answer the last message given the preceding history."""
        return await self._send(messages, system_prompt, model, kind="text")

    async def generate_multimodal_response(
        self,
        messages: Sequence[dict[str, Any]],
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> GenerationResult:
        """Same protocol as the text path; parts may carry inline images."""
        return await self._send(messages, system_prompt, model, kind="multimodal")

    async def _send(
        self,
        messages: Sequence[dict[str, Any]],
        system_prompt: str | None,
        model: str | None,
        kind: str,
    ) -> GenerationResult:
        model_name = model or self._default_model
        if not messages:
            raise EmptyConversationError(model_name)

        try:
            handle = self._model_handle(model_name, system_prompt)
            chat = handle.start_chat(
                history=[{"role": m["role"], "parts": m["parts"]} for m in messages[:-1]],
            )
            response = await chat.send_message_async(messages[-1]["parts"])
            text = response.text
        except Exception as exc:
            logger.error(
                "Error generating %s response: model=%s, history=%d",
                kind, model_name, len(messages) - 1, exc_info=True,
            )
            raise ProviderCallError(
                f"Google AI {kind} generation failed: {exc}", provider="google",
            ) from exc

        usage = getattr(response, "usage_metadata", None)
        tokens = (getattr(usage, "total_token_count", 0) or 0) if usage else 0
        logger.info("Google AI %s response generated: model=%s, tokens=%d", kind, model_name, tokens)
        return GenerationResult(content=text or "", tokens=tokens)

    # --- Parts and messages ---

    @staticmethod
    def convert_image_to_part(base64_image: str, mime_type: str) -> dict[str, Any]:
        """Inline-data part from raw base64 or a ``data:<mime>;base64,`` URL."""
        data = strip_data_url(base64_image)
        return {"inline_data": {"mime_type": mime_type, "data": data}}

    @staticmethod
    def create_text_part(text: str) -> dict[str, Any]:
        return {"text": text}

    def create_message(
        self,
        role: str,
        content: str,
        images: Sequence[ImageInput] | None = None,
    ) -> dict[str, Any]:
        """Build a Gemini message: text part first, then images in order."""
        parts: list[dict[str, Any]] = []
        if content:
            parts.append(self.create_text_part(content))
        for image in images or ():
            if not image.base64:
                raise InvalidImageError("create_message only accepts inline base64 images")
            parts.append(
                self.convert_image_to_part(image.base64, image.mime_type or DEFAULT_IMAGE_MIME)
            )
        return {"role": role, "parts": parts}

    async def fetch_image_url_to_part(
        self,
        url: str,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """Download an http(s) image and embed it as an inline-data part.

        MIME type precedence: explicit argument, response Content-Type,
        then image/jpeg.
        """
        if not url.lower().startswith(("http://", "https://")):
            raise InvalidImageError(f"Image URL must be http(s): {url!r}")

        try:
            async with httpx.AsyncClient(
                timeout=self._fetch_timeout_s,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Image download failed: url=%s", url, exc_info=True)
            raise ProviderCallError(
                f"Failed to fetch image from URL: {exc}", provider="google",
            ) from exc

        if not response.is_success:
            raise ProviderCallError(
                f"Failed to fetch image from URL: {response.status_code} {response.reason_phrase}",
                provider="google",
            )

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        resolved_mime = mime_type or content_type or DEFAULT_IMAGE_MIME
        data = base64.b64encode(response.content).decode("ascii")
        logger.debug("Fetched image: url=%s, bytes=%d, mime=%s", url, len(response.content), resolved_mime)
        return {"inline_data": {"mime_type": resolved_mime, "data": data}}

    # --- Capabilities ---

    def get_available_models(self) -> list[GoogleModelInfo]:
        """Gemini models with capability flags; pricing lives in the router catalog."""
        return [
            GoogleModelInfo.model_validate(m.model_dump(exclude={"cost_per_token"}))
            for m in GOOGLE_MODELS
        ]

    @property
    def provider(self) -> ProviderTag:
        return ProviderTag.GOOGLE

    @property
    def generation_config(self) -> dict[str, float | int]:
        return dict(self._generation_config)

    # --- Internal helpers ---

    def _model_handle(self, model_name: str, system_prompt: str | None) -> Any:
        # Only catalog models and the default are cached; other ids get a fresh handle.
        if system_prompt or model_name not in self._cacheable:
            return self._model_factory(model_name, self.generation_config, system_prompt)
        handle = self._handles.get(model_name)
        if handle is None:
            handle = self._model_factory(model_name, self.generation_config, None)
            self._handles[model_name] = handle
        return handle

    def _sdk_model_factory(
        self,
        model_name: str,
        generation_config: dict,
        system_instruction: str | None,
    ) -> Any:
        try:
            import google.generativeai as genai
        except ImportError as e:
            raise ImportError(
                "google-generativeai package required: pip install google-generativeai"
            ) from e

        if not self._sdk_configured:
            genai.configure(api_key=self._api_key)
            self._sdk_configured = True
        return genai.GenerativeModel(
            model_name,
            generation_config=generation_config,
            system_instruction=system_instruction,
        )
