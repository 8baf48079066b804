"""Main Typer application — imports and registers all CLI commands.

Entry point: ``deploylens`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from deploylens.cli.commands.follow_cmd import follow_cmd
from deploylens.cli.commands.logs_cmd import logs_cmd
from deploylens.cli.commands.timeline_cmd import timeline_cmd
from deploylens.config import config

app = typer.Typer(
    name="deploylens",
    help="deploylens: deployment log timelines and live log viewing.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


# Register subcommands
app.command(name="timeline", help="Reconstruct the stage timeline of a log file.")(timeline_cmd)
app.command(name="logs", help="Show a filtered view of a log file.")(logs_cmd)
app.command(name="follow", help="Live timeline and tail of a growing log file.")(follow_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
