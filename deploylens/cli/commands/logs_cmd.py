"""``deploylens logs FILE`` — filtered view over a bounded log buffer."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from deploylens.cli.commands._source import read_entries
from deploylens.config import config
from deploylens.core.log_buffer import LogBuffer
from deploylens.models.logs import ALL_LEVELS
from deploylens.monitor.renderer import TimelineRenderer

console = Console()

_LEVEL_CHOICES = ("all", "info", "warn", "error", "debug")


def logs_cmd(
    log_file: Path = typer.Argument(
        ...,
        help="Deployment log file (.txt, .json or .jsonl).",
    ),
    level: str = typer.Option(
        ALL_LEVELS,
        "--level",
        "-l",
        help="Only show lines of this level (all, info, warn, error, debug).",
    ),
    search: str = typer.Option(
        "",
        "--search",
        "-s",
        help="Case-insensitive substring filter.",
    ),
    capacity: int = typer.Option(
        None,
        "--capacity",
        "-c",
        help="Buffer capacity; older lines are evicted.",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print '[timestamp] LEVEL: line' text instead of a panel.",
    ),
) -> None:
    """Show the most recent lines of a log file, optionally filtered."""
    if level not in _LEVEL_CHOICES:
        console.print(
            f"[bold red]Unknown level:[/bold red] {level} "
            f"(choose from {', '.join(_LEVEL_CHOICES)})"
        )
        raise typer.Exit(code=1)
    if not log_file.exists():
        console.print(f"[bold red]Log file not found:[/bold red] {log_file}")
        raise typer.Exit(code=1)

    buffer = LogBuffer(capacity or config.buffer_capacity)
    buffer.append(read_entries(log_file))
    visible = buffer.filter(level, search)

    if plain:
        typer.echo(buffer.export_text(visible))
        return

    TimelineRenderer(console=console).print_logs(visible)
    console.print(f"[dim]{len(visible)} of {len(buffer)} buffered lines shown[/dim]")
