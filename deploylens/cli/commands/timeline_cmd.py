"""``deploylens timeline FILE`` — reconstruct the stage timeline of a log file."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from deploylens.cli.commands._source import read_entries
from deploylens.monitor.projection import TimelineProjection
from deploylens.monitor.renderer import TimelineRenderer

console = Console()


def timeline_cmd(
    log_file: Path = typer.Argument(
        ...,
        help="Deployment log file (.txt, .json or .jsonl).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Print stages as JSON instead of a table.",
    ),
    show_lines: bool = typer.Option(
        False,
        "--lines",
        help="Include the lines collected under each stage in JSON output.",
    ),
) -> None:
    """Classify a deployment log into Prepare -> Health Check stages."""
    if not log_file.exists():
        console.print(f"[bold red]Log file not found:[/bold red] {log_file}")
        raise typer.Exit(code=1)

    entries = read_entries(log_file)
    snapshot = TimelineProjection().snapshot(log_file.stem, entries)

    if as_json:
        exclude = None if show_lines else {"collected_lines"}
        stages = [stage.model_dump(mode="json", exclude=exclude) for stage in snapshot.stages]
        typer.echo(json.dumps(stages, indent=2))
        return

    TimelineRenderer(console=console).print_timeline(snapshot)
    if snapshot.is_failed:
        raise typer.Exit(code=2)
