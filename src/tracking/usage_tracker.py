# src/tracking/usage_tracker.py — v1
"""In-memory usage log for routed generation calls.

The router records every call when a tracker is injected; the chat
layer reads totals and per-model stats from it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Literal

from chatrouter.tracking.cost_calculator import PriceLookup, compute_call_cost, compute_model_stats
from chatrouter.tracking.models import ModelUsageStats, UsageRecord

logger = logging.getLogger(__name__)


class UsageTracker:
    """Accumulates UsageRecord entries."""

    def __init__(self, pricing: PriceLookup | None = None) -> None:
        self._records: list[UsageRecord] = []
        self._pricing = pricing

    def record(
        self,
        provider: str,
        model: str,
        operation: Literal["text", "multimodal", "stream"],
        tokens: int = 0,
        latency_ms: int = 0,
        error: BaseException | None = None,
    ) -> UsageRecord:
        """Record one call.

        Args:
            provider: Provider tag value (openai, claude, google).
            model: Requested model id.
            operation: Which router path served the call.
            tokens: Reported token usage (0 when unknown or failed).
            latency_ms: Wall time of the provider call.
            error: Exception that ended the call, if it failed.

        Returns:
            The stored UsageRecord.
        """
        record = UsageRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            provider=provider,
            model=model,
            operation=operation,
            tokens=tokens,
            latency_ms=latency_ms,
            status="failed" if error is not None else "success",
            error_type=type(error).__name__ if error is not None else None,
            estimated_cost_usd=compute_call_cost(model, tokens, self._pricing),
        )
        self._records.append(record)
        logger.debug(
            "Usage recorded: model=%s, op=%s, tokens=%d, status=%s",
            model, operation, tokens, record.status,
        )
        return record

    def clear(self) -> None:
        self._records.clear()

    def stats(self) -> dict[str, ModelUsageStats]:
        """Per-model aggregate of everything recorded so far."""
        return compute_model_stats(self._records)

    @property
    def records(self) -> list[UsageRecord]:
        """All recorded calls."""
        return list(self._records)

    @property
    def total_tokens(self) -> int:
        return sum(r.tokens for r in self._records)

    @property
    def total_calls(self) -> int:
        return len(self._records)

    @property
    def failed_calls(self) -> int:
        return sum(1 for r in self._records if r.status == "failed")

    @property
    def total_cost_usd(self) -> float:
        return sum(r.estimated_cost_usd for r in self._records)
