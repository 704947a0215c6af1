"""Click CLI entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .boundary import InvalidRequestError, parse_request
from .concepts import DEFAULT_CONCEPTS, load_concepts
from .config import MIN_CONFIDENCE, MatchingConfig, RunConfig

console = Console()
err_console = Console(stderr=True)


def _load_preferences(prefs_file: str | None, pairs: tuple[str, ...]) -> dict:
    preferences: dict = {}
    if prefs_file:
        try:
            data = json.loads(Path(prefs_file).read_text())
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"{prefs_file} must contain a JSON object: {e}", param_hint="--prefs")
        if not isinstance(data, dict):
            raise click.BadParameter(f"{prefs_file} must contain a JSON object", param_hint="--prefs")
        preferences.update(data)
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--pref")
        preferences[key] = value
    return preferences


@click.group()
@click.option("--min-confidence", default=MIN_CONFIDENCE, type=click.FloatRange(0.0, 1.0),
              help="Drop suggestions at or below this confidence.")
@click.option("--dedup-scope", default="placeholder", type=click.Choice(["placeholder", "global"]),
              help="Keep the best suggestion per placeholder, or per preference across the call.")
@click.option("--concepts", "concepts_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON file replacing the built-in concept table.")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    min_confidence: float,
    dedup_scope: str,
    concepts_file: str | None,
    verbose: bool,
) -> None:
    """varmatch: suggest saved preferences for prompt template variables."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    ctx.ensure_object(dict)
    ctx.obj["config"] = MatchingConfig(min_confidence=min_confidence, dedup_scope=dedup_scope)
    if concepts_file:
        try:
            ctx.obj["concepts"] = load_concepts(Path(concepts_file))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--concepts")
    else:
        ctx.obj["concepts"] = DEFAULT_CONCEPTS


@cli.command()
@click.argument("variables", nargs=-1, required=True)
@click.option("--prefs", "prefs_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON file with saved preferences.")
@click.option("--pref", "pairs", multiple=True, help="Preference as KEY=VALUE (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Print suggestions as JSON.")
@click.pass_context
def match(
    ctx: click.Context,
    variables: tuple[str, ...],
    prefs_file: str | None,
    pairs: tuple[str, ...],
    as_json: bool,
) -> None:
    """Suggest saved preferences for the given placeholder names."""
    from .matching.aggregator import reconcile
    from .results import print_matches

    config: MatchingConfig = ctx.obj["config"]
    payload = {
        "extractedVariables": list(variables),
        "userPreferences": _load_preferences(prefs_file, pairs),
    }
    try:
        request = parse_request(payload)
    except InvalidRequestError as e:
        raise click.UsageError(str(e))

    preferences = request.public_preferences(config.reserved_prefix)
    matches = reconcile(request.extracted_variables, preferences, ctx.obj["concepts"], config)

    if as_json:
        click.echo(json.dumps([m.to_dict() for m in matches], indent=2))
    else:
        print_matches(matches, preferences)


@cli.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False))
def extract(template: str) -> None:
    """List the {{variables}} used in a template file."""
    from .templates import extract_variables

    for name in extract_variables(Path(template).read_text()):
        click.echo(name)


@cli.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False))
@click.option("--prefs", "prefs_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON file with saved preferences.")
@click.option("--pref", "pairs", multiple=True, help="Preference as KEY=VALUE (repeatable).")
@click.option("--save-prefs", default=None, type=click.Path(dir_okay=False),
              help="Write the filled variables back as a preferences JSON file.")
@click.pass_context
def fill(
    ctx: click.Context,
    template: str,
    prefs_file: str | None,
    pairs: tuple[str, ...],
    save_prefs: str | None,
) -> None:
    """Fill a template from saved preferences and print the prompt."""
    from .templates import prepare_variables, preferences_from_variables, render_prompt

    text = Path(template).read_text()
    preferences = _load_preferences(prefs_file, pairs)
    try:
        parse_request({"extractedVariables": [], "userPreferences": preferences})
    except InvalidRequestError as e:
        raise click.UsageError(str(e))

    variables = prepare_variables(text, preferences, ctx.obj["config"], ctx.obj["concepts"])
    for var in variables:
        if var.matched:
            err_console.print(f"[green]Auto-filled[/] {var.name}")
        elif not var.value:
            err_console.print(f"[yellow]No value for[/] {var.name}")

    click.echo(render_prompt(text, variables))

    if save_prefs:
        merged = {**preferences, **preferences_from_variables(variables)}
        Path(save_prefs).write_text(json.dumps(merged, indent=2))


@cli.command("concepts")
@click.pass_context
def list_concepts_cmd(ctx: click.Context) -> None:
    """Show the canonical concept table."""
    table = Table(title="Canonical Concepts")
    table.add_column("Concept", style="bold cyan")
    table.add_column("Synonyms")

    for c in ctx.obj["concepts"]:
        table.add_row(c.concept, ", ".join(c.synonyms))

    console.print(table)


@cli.command()
@click.argument("requests_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--max-requests", default=None, type=click.IntRange(min=1), help="Limit the number of requests.")
@click.option("--output-dir", default="results", help="Directory for report files.")
@click.option("--label", default=None, help="Report label (default: file name).")
@click.pass_context
def batch(
    ctx: click.Context,
    requests_file: str,
    max_requests: int | None,
    output_dir: str,
    label: str | None,
) -> None:
    """Reconcile every request in a JSON or JSONL file and save a report."""
    from .results import save_result
    from .runner import BatchRunner, load_requests

    path = Path(requests_file)
    run_config = RunConfig(
        max_requests=max_requests,
        output_dir=Path(output_dir),
        label=label or path.stem,
    )
    try:
        requests = load_requests(path)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REQUESTS_FILE")

    runner = BatchRunner(ctx.obj["config"], run_config, ctx.obj["concepts"])
    result = runner.run(requests)
    save_result(result, ctx.obj["config"], run_config)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
def compare(files: tuple[str, ...]) -> None:
    """Compare reports from multiple batch runs."""
    from .results import compare_results

    compare_results([Path(f) for f in files])
