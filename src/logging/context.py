# src/logging/context.py — v3
"""Per-request logging context: request id, provider and model.

Backed by contextvars so concurrent requests on one event loop each see
their own values. Every routed call runs inside ``request_scope``; the
previous values are restored when it exits.
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)
_model: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "model", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    request_id: str | None = None
    provider: str | None = None
    model: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        request_id=_request_id.get(),
        provider=_provider.get(),
        model=_model.get(),
    )


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def set_request_context(
    model: str,
    provider: str | None = None,
    request_id: str | None = None,
) -> str:
    """Bind model/provider to the current request; returns the request id.

    A fresh id is generated unless *request_id* is given.
    """
    rid = request_id or new_request_id()
    _request_id.set(rid)
    _model.set(model)
    _provider.set(provider)
    return rid


@contextmanager
def request_scope(
    model: str,
    provider: str | None = None,
    request_id: str | None = None,
) -> Iterator[str]:
    """Bind request context for the duration of one call, then restore it."""
    rid = request_id or new_request_id()
    tokens = (
        (_request_id, _request_id.set(rid)),
        (_model, _model.set(model)),
        (_provider, _provider.set(provider)),
    )
    try:
        yield rid
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_context() -> None:
    _request_id.set(None)
    _provider.set(None)
    _model.set(None)
