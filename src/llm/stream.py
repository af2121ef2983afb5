# src/llm/stream.py — v2
"""Single-pass async stream of incremental text fragments.

Usage:
    stream = await router.generate_stream_response(messages, "gpt-4")
    async for chunk in stream:
        ...

The stream ends when the provider closes it. Iterating a second time
raises RuntimeError; a provider failure mid-stream ends the iteration
with the error, after any chunks already delivered.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable

logger = logging.getLogger(__name__)

# Called once with the terminating exception (None on normal end or close).
FinishCallback = Callable[[BaseException | None], None]


class TextStream:
    """Forward-only wrapper exposing completion and error state."""

    def __init__(
        self,
        source: AsyncIterator[str],
        model: str = "",
        on_finish: FinishCallback | None = None,
    ) -> None:
        self._source = source
        self._model = model
        self._on_finish = on_finish
        self._started = False
        self._done = False
        self._error: BaseException | None = None
        self._chunks = 0

    def __aiter__(self) -> TextStream:
        if self._started:
            raise RuntimeError("TextStream can only be consumed once")
        self._started = True
        return self

    async def __anext__(self) -> str:
        if self._done:
            raise StopAsyncIteration
        try:
            chunk = await self._source.__anext__()
        except StopAsyncIteration:
            logger.debug("Stream finished: model=%s, chunks=%d", self._model, self._chunks)
            self._finish(None)
            raise
        except BaseException as exc:
            self._error = exc
            self._finish(exc)
            raise
        self._chunks += 1
        return chunk

    async def aclose(self) -> None:
        """Abandon the stream and release the provider connection."""
        if self._done:
            return
        self._started = True
        self._finish(None)
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    def _finish(self, error: BaseException | None) -> None:
        self._done = True
        if self._on_finish is not None:
            callback, self._on_finish = self._on_finish, None
            callback(error)

    @property
    def done(self) -> bool:
        """True once the stream completed, failed, or was closed."""
        return self._done

    @property
    def error(self) -> BaseException | None:
        """Exception that terminated the stream, if any."""
        return self._error

    @property
    def chunks_received(self) -> int:
        return self._chunks
