# src/tracking/models.py — v2
"""Usage tracking models: UsageRecord and ModelUsageStats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class UsageRecord(BaseModel):
    """One routed generation call."""

    call_id: str
    timestamp: datetime
    provider: str
    model: str
    operation: Literal["text", "multimodal", "stream"]
    tokens: int
    latency_ms: int
    status: Literal["success", "failed"]
    error_type: str | None = None
    estimated_cost_usd: float = 0.0


class ModelUsageStats(BaseModel):
    """Aggregated usage for a single model."""

    model: str
    provider: str
    total_calls: int
    failed_calls: int = 0
    total_tokens: int
    avg_latency_ms: float
    max_latency_ms: int
    estimated_cost_usd: float = 0.0
