"""Coverage and confidence statistics across a batch of requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .matching.semantic import CandidateMatch


@dataclass
class RequestOutcome:
    """Result of reconciling one request."""

    id: str
    num_placeholders: int = 0
    num_preferences: int = 0
    matches: list[CandidateMatch] = field(default_factory=list)
    latency_seconds: float = 0.0
    error: str | None = None

    @property
    def matched_placeholders(self) -> int:
        return len({m.original for m in self.matches})

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "id": self.id,
            "num_placeholders": self.num_placeholders,
            "num_preferences": self.num_preferences,
            "matches": [m.to_dict() for m in self.matches],
            "latency_seconds": self.latency_seconds,
        }
        if self.error:
            d["error"] = self.error
        return d


@dataclass
class AggregatedMetrics:
    """Summary statistics across all requests in a batch run."""

    total_requests: int = 0
    failed_requests: int = 0
    total_placeholders: int = 0
    matched_placeholders: int = 0
    total_matches: int = 0
    coverage: float | None = None

    confidence_mean: float | None = None
    confidence_p50: float | None = None
    confidence_p95: float | None = None

    latency_mean: float | None = None
    latency_p95: float | None = None
    wall_time_seconds: float = 0.0

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items() if v is not None}


def aggregate_outcomes(
    outcomes: list[RequestOutcome],
    wall_time: float = 0.0,
) -> AggregatedMetrics:
    """Compute summary statistics from a list of request outcomes."""
    agg = AggregatedMetrics()
    agg.total_requests = len(outcomes)
    agg.wall_time_seconds = wall_time

    successful = [o for o in outcomes if o.error is None]
    agg.failed_requests = agg.total_requests - len(successful)

    if not successful:
        return agg

    agg.total_placeholders = sum(o.num_placeholders for o in successful)
    agg.matched_placeholders = sum(o.matched_placeholders for o in successful)
    agg.total_matches = sum(len(o.matches) for o in successful)
    if agg.total_placeholders:
        agg.coverage = agg.matched_placeholders / agg.total_placeholders

    confidences = [m.confidence for o in successful for m in o.matches]
    if confidences:
        arr = np.array(confidences)
        agg.confidence_mean = float(np.mean(arr))
        agg.confidence_p50 = float(np.percentile(arr, 50))
        agg.confidence_p95 = float(np.percentile(arr, 95))

    latencies = np.array([o.latency_seconds for o in successful])
    agg.latency_mean = float(np.mean(latencies))
    agg.latency_p95 = float(np.percentile(latencies, 95))

    return agg
