"""``deploylens follow FILE`` — live timeline and log tail of a growing file.

Each refresh reads the lines appended since the last cycle, feeds them to
a ``LogSession`` and redraws.  The follow preference for the stream key is
read from the preference store; ``--toggle`` flips and persists it first.
"""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live

from deploylens.cli.commands._source import FileTail
from deploylens.config import config
from deploylens.core.preferences import JsonPreferenceStore
from deploylens.core.session import LogSession, SessionCommand
from deploylens.monitor.renderer import TimelineRenderer

console = Console()


def follow_cmd(
    log_file: Path = typer.Argument(
        ...,
        help="Plain-text log file to tail.",
    ),
    key: str = typer.Option(
        None,
        "--key",
        "-k",
        help="Stream key for the persisted follow preference (default: file stem).",
    ),
    refresh_hz: float = typer.Option(
        None,
        "--refresh",
        "-r",
        help="Refresh rate in Hz.",
    ),
    toggle: bool = typer.Option(
        False,
        "--toggle",
        help="Flip and persist the follow preference before starting.",
    ),
    once: bool = typer.Option(
        False,
        "--once",
        help="Render a single frame and exit.",
    ),
) -> None:
    """Follow a deployment log as it is written (Ctrl+C to exit)."""
    if not log_file.exists():
        console.print(f"[bold red]Log file not found:[/bold red] {log_file}")
        raise typer.Exit(code=1)

    store = JsonPreferenceStore(config.preferences_path)
    session = LogSession(
        key or log_file.stem,
        capacity=config.buffer_capacity,
        store=store,
        threshold=config.autoscroll_threshold,
    )
    if toggle:
        session.command(SessionCommand.TOGGLE)

    renderer = TimelineRenderer(console=console)
    tail = FileTail(log_file)
    session.feed_lines(tail.read_new())

    if once:
        console.print(renderer.render_session(session, height=config.viewport_lines))
        return

    hz = refresh_hz or config.refresh_hz
    interval = 1.0 / max(hz, 0.1)
    console.print(f"[dim]Following {log_file} at {hz} Hz. Press Ctrl+C to exit.[/dim]")

    with Live(console=console, refresh_per_second=hz, transient=False) as live:
        try:
            while True:
                session.feed_lines(tail.read_new())
                live.update(renderer.render_session(session, height=config.viewport_lines))
                time.sleep(interval)
        except KeyboardInterrupt:
            live.update(renderer.render_session(session, height=config.viewport_lines))
        finally:
            session.close()
