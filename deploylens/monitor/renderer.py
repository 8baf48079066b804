"""Rich terminal renderer for deployment timelines and live log views.

Color scheme
------------
- green   : COMPLETED
- red     : FAILED / error lines
- yellow  : RUNNING / warn lines
- dim     : PENDING, SKIPPED / debug lines
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deploylens.core.log_buffer import resolve_level
from deploylens.models.logs import LogEntry, LogLevel
from deploylens.models.stages import StageStatus
from deploylens.monitor.projection import TimelineSnapshot

if TYPE_CHECKING:
    from deploylens.core.session import LogSession


_STATUS_STYLES: dict[StageStatus, str] = {
    StageStatus.COMPLETED: "bold green",
    StageStatus.FAILED: "bold red",
    StageStatus.RUNNING: "bold yellow",
    StageStatus.PENDING: "dim",
    StageStatus.SKIPPED: "dim",
}

_STATUS_LABELS: dict[StageStatus, str] = {
    StageStatus.COMPLETED: "[green]COMPLETED[/green]",
    StageStatus.FAILED: "[bold red]FAILED[/bold red]",
    StageStatus.RUNNING: "[yellow]RUNNING[/yellow]",
    StageStatus.PENDING: "[dim]PENDING[/dim]",
    StageStatus.SKIPPED: "[dim]SKIPPED[/dim]",
}

_LEVEL_STYLES: dict[LogLevel, str] = {
    LogLevel.ERROR: "red",
    LogLevel.WARN: "yellow",
    LogLevel.DEBUG: "bright_black",
    LogLevel.INFO: "",
}


class TimelineRenderer:
    """Renders timelines and log viewports as Rich renderables.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def render_timeline(self, snapshot: TimelineSnapshot) -> Panel:
        table = self._build_stage_table(snapshot)
        summary = "  |  ".join(
            [
                f"[bold]Stream:[/bold] {snapshot.stream_key}",
                f"[bold]Progress:[/bold] {snapshot.completed_count}/{snapshot.total_stages}",
                f"[bold]Lines:[/bold] {snapshot.line_count}",
            ]
        )
        if snapshot.is_failed:
            headline_style = "bold red"
        elif snapshot.is_complete:
            headline_style = "bold green"
        else:
            headline_style = "yellow"
        return Panel(
            Group(
                table,
                Text(""),
                Text.from_markup(summary),
                Text(snapshot.headline, style=headline_style),
            ),
            title="[bold]Deployment Timeline[/bold]",
            border_style="blue",
            padding=(1, 2),
        )

    def _build_stage_table(self, snapshot: TimelineSnapshot) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Stage", min_width=14)
        table.add_column("Status", min_width=11, justify="center")
        table.add_column("Started", min_width=8)
        table.add_column("Duration", justify="right", width=9)
        table.add_column("Lines", justify="right", width=6)
        table.add_column("Details")

        for i, stage in enumerate(snapshot.stages):
            style = _STATUS_STYLES.get(stage.status, "")
            started = (
                f"[dim]{stage.started_at.strftime('%H:%M:%S')}[/dim]"
                if stage.started_at
                else "[dim]-[/dim]"
            )
            duration = (
                f"{stage.duration_seconds}s"
                if stage.duration_seconds is not None
                else "[dim]-[/dim]"
            )
            details = (
                Text(stage.error_message, style="red")
                if stage.error_message
                else Text("-", style="dim")
            )
            table.add_row(
                str(i),
                f"[{style}]{stage.name}[/{style}]",
                _STATUS_LABELS.get(stage.status, stage.status.value),
                started,
                duration,
                str(len(stage.collected_lines)),
                details,
            )
        return table

    # ------------------------------------------------------------------
    # Log viewport
    # ------------------------------------------------------------------

    def render_logs(
        self,
        entries: Sequence[LogEntry],
        *,
        height: int = 30,
        following: bool = True,
        pending: int = 0,
        title: str = "Logs",
    ) -> Panel:
        """Render the tail of ``entries`` as a log panel.

        While detached the window stops at the last line the viewer has
        seen, i.e. ``pending`` lines short of the end.
        """
        end = len(entries) if following else max(len(entries) - pending, 0)
        start = max(end - height, 0)

        body = Text()
        for entry in entries[start:end]:
            line = Text()
            if entry.timestamp is not None:
                line.append(entry.timestamp.strftime("%H:%M:%S "), style="dim")
            line.append(entry.content, style=_LEVEL_STYLES[resolve_level(entry)])
            body.append_text(line)
            body.append("\n")
        if not entries:
            body.append("Waiting for logs...", style="dim")

        if following:
            subtitle = "[green]following[/green]"
        elif pending:
            subtitle = f"[yellow]{pending} new lines[/yellow]"
        else:
            subtitle = "[dim]paused[/dim]"

        return Panel(
            body,
            title=f"[bold]{title}[/bold]",
            subtitle=subtitle,
            border_style="cyan" if following else "yellow",
        )

    def render_session(self, session: LogSession, *, height: int = 30) -> Group:
        """Timeline plus live log panel for one session."""
        entries = session.entries()
        snapshot = TimelineSnapshot(
            stream_key=session.stream_key,
            rule_set=session.classifier.rule_set.name,
            stages=session.timeline(),
            line_count=len(entries),
        )
        return Group(
            self.render_timeline(snapshot),
            self.render_logs(
                entries,
                height=height,
                following=session.autoscroll.is_following(),
                pending=session.autoscroll.pending_count(),
                title=session.stream_key,
            ),
        )

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_timeline(self, snapshot: TimelineSnapshot) -> None:
        self.console.print(self.render_timeline(snapshot))

    def print_logs(self, entries: Sequence[LogEntry]) -> None:
        self.console.print(self.render_logs(entries, height=max(len(entries), 1)))
