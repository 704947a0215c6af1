"""Batch reconciliation of many match requests."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from .boundary import InvalidRequestError, parse_request
from .concepts import DEFAULT_CONCEPTS, CanonicalConcept
from .config import DEFAULT_CONFIG, MatchingConfig, RunConfig
from .matching.aggregator import reconcile
from .metrics import AggregatedMetrics, RequestOutcome, aggregate_outcomes

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Aggregated result of a full batch run."""

    label: str
    num_requests: int
    outcomes: list[RequestOutcome] = field(default_factory=list)
    aggregated_metrics: AggregatedMetrics | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "label": self.label,
            "num_requests": self.num_requests,
        }
        if self.aggregated_metrics:
            d["aggregated_metrics"] = self.aggregated_metrics.to_dict()
        d["outcomes"] = [o.to_dict() for o in self.outcomes]
        return d


def load_requests(path: Path) -> list[Any]:
    """Load requests from a JSON list or a JSONL file."""
    text = Path(path).read_text()
    if Path(path).suffix == ".jsonl":
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of requests")
    return data


class BatchRunner:
    """Runs the reconciliation engine over a batch of raw requests."""

    def __init__(
        self,
        config: MatchingConfig = DEFAULT_CONFIG,
        run_config: RunConfig | None = None,
        concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
    ) -> None:
        self._config = config
        self._run_config = run_config or RunConfig()
        self._concepts = concepts

    def run(self, requests: Sequence[Any]) -> BatchResult:
        """Reconcile every request, recording malformed ones as failures."""
        if self._run_config.max_requests is not None:
            requests = requests[: self._run_config.max_requests]

        label = self._run_config.label
        console.print(f"\n[bold blue]Reconciling batch:[/] {label} ({len(requests)} requests)")
        wall_start = time.perf_counter()

        outcomes: list[RequestOutcome] = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(label, total=len(requests))
            for i, payload in enumerate(requests):
                outcomes.append(self._run_one(i, payload))
                progress.advance(task)

        wall_time = time.perf_counter() - wall_start
        agg = aggregate_outcomes(outcomes, wall_time)

        result = BatchResult(
            label=label,
            num_requests=len(outcomes),
            outcomes=outcomes,
            aggregated_metrics=agg,
        )

        coverage = f"{agg.coverage:.4f}" if agg.coverage is not None else "N/A"
        console.print(f"  [green]Done:[/] coverage={coverage} "
                      f"({agg.matched_placeholders}/{agg.total_placeholders}), "
                      f"failed={agg.failed_requests}, wall_time={wall_time:.2f}s")
        return result

    def _run_one(self, index: int, payload: Any) -> RequestOutcome:
        request_id = str(payload.get("id", index)) if isinstance(payload, dict) else str(index)
        start = time.perf_counter()
        try:
            request = parse_request(payload)
        except InvalidRequestError as e:
            logger.debug("Request %s failed validation: %s", request_id, e)
            return RequestOutcome(id=request_id, error=str(e))

        preferences = request.public_preferences(self._config.reserved_prefix)
        matches = reconcile(request.extracted_variables, preferences, self._concepts, self._config)
        return RequestOutcome(
            id=request_id,
            num_placeholders=len(request.extracted_variables),
            num_preferences=len(preferences),
            matches=matches,
            latency_seconds=time.perf_counter() - start,
        )
