# src/tracking/cost_calculator.py — v2
"""Cost and per-model statistics from usage records.

Prices come from the model catalog (flat cost per token); models outside
the catalog cost nothing.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Sequence

from chatrouter.llm.catalog import cost_per_token
from chatrouter.tracking.models import ModelUsageStats, UsageRecord

PriceLookup = Callable[[str], float]


def compute_call_cost(model: str, tokens: int, pricing: PriceLookup | None = None) -> float:
    """Estimated USD cost for *tokens* on *model*."""
    price = (pricing or cost_per_token)(model)
    return tokens * price


def compute_model_stats(records: Sequence[UsageRecord]) -> dict[str, ModelUsageStats]:
    """Aggregate records per model id."""
    by_model: dict[str, list[UsageRecord]] = defaultdict(list)
    for r in records:
        by_model[r.model].append(r)

    result: dict[str, ModelUsageStats] = {}
    for model, model_records in by_model.items():
        latencies = [r.latency_ms for r in model_records]
        result[model] = ModelUsageStats(
            model=model,
            provider=model_records[0].provider,
            total_calls=len(model_records),
            failed_calls=sum(1 for r in model_records if r.status == "failed"),
            total_tokens=sum(r.tokens for r in model_records),
            avg_latency_ms=sum(latencies) / len(latencies) if latencies else 0.0,
            max_latency_ms=max(latencies) if latencies else 0,
            estimated_cost_usd=sum(r.estimated_cost_usd for r in model_records),
        )
    return result


def compute_total_cost(records: Sequence[UsageRecord]) -> float:
    """Total estimated cost across all records."""
    return sum(r.estimated_cost_usd for r in records)
