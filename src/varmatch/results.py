"""JSON report persistence, comparison and match tables."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import MatchingConfig, RunConfig
from .matching.semantic import CandidateMatch
from .runner import BatchResult

console = Console()


def save_result(result: BatchResult, config: MatchingConfig, run_config: RunConfig) -> Path:
    """Save a batch result to a timestamped JSON file."""
    output_dir = Path(run_config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    filename = f"{result.label}_{timestamp}.json"
    # Sanitize label for filesystem
    filename = filename.replace("/", "_").replace("\\", "_")
    filepath = output_dir / filename

    data = {
        "label": result.label,
        "timestamp": timestamp,
        "config": config.model_dump(),
        **result.to_dict(),
    }

    filepath.write_text(json.dumps(data, indent=2, default=str))
    console.print(f"  Report saved to [cyan]{filepath}[/]")
    return filepath


def load_result(filepath: Path) -> dict:
    """Load a report JSON file."""
    return json.loads(filepath.read_text())


def print_matches(matches: Sequence[CandidateMatch], preferences: dict[str, str]) -> None:
    """Display suggestions as a table."""
    if not matches:
        console.print("[yellow]No confident matches.[/]")
        return

    table = Table(title="Suggested Preferences")
    table.add_column("Placeholder", style="bold cyan")
    table.add_column("Preference")
    table.add_column("Value")
    table.add_column("Confidence", justify="right")

    for m in matches:
        table.add_row(m.original, m.suggested, preferences.get(m.suggested, ""), f"{m.confidence:.4f}")

    console.print(table)


def compare_results(filepaths: list[Path]) -> None:
    """Display a side-by-side comparison table of multiple reports."""
    results = []
    for fp in filepaths:
        try:
            results.append(load_result(fp))
        except (OSError, json.JSONDecodeError) as e:
            console.print(f"[red]Error loading {fp}:[/] {e}")

    if not results:
        console.print("[red]No valid report files to compare.[/]")
        return

    table = Table(title="Batch Comparison", show_lines=True)
    table.add_column("Metric", style="bold")

    for r in results:
        label = f"{r.get('label', '?')}\n{r.get('timestamp', '?')}"
        table.add_column(label, justify="right")

    table.add_row("Requests", *[str(r.get("num_requests", 0)) for r in results])
    table.add_row(
        "Scope",
        *[str(r.get("config", {}).get("dedup_scope", "?")) for r in results],
    )

    metric_keys = [
        ("failed_requests", "Failed Requests"),
        ("total_placeholders", "Placeholders"),
        ("matched_placeholders", "Matched"),
        ("coverage", "Coverage"),
        ("confidence_mean", "Confidence Mean"),
        ("confidence_p50", "Confidence P50"),
        ("latency_mean", "Latency Mean (s)"),
        ("latency_p95", "Latency P95 (s)"),
    ]

    for key, label in metric_keys:
        values = []
        for r in results:
            agg = r.get("aggregated_metrics", {})
            v = agg.get(key)
            if v is None:
                values.append("N/A")
            elif isinstance(v, float):
                values.append(f"{v:.4f}")
            else:
                values.append(str(v))
        table.add_row(label, *values)

    console.print(table)
