"""deploylens CLI — Typer-based command-line interface.

Provides the ``deploylens`` command with subcommands for reconstructing
stage timelines, viewing filtered logs and following a growing log file.

All output uses Rich for formatted terminal display.
"""
