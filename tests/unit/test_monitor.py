"""Tests for the timeline projection and Rich renderer."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel

from deploylens.core.classifier import current_stage, failed_stage
from deploylens.core.session import LogSession
from deploylens.models.stages import StageStatus
from deploylens.monitor.projection import TimelineProjection, TimelineSnapshot
from deploylens.monitor.renderer import _STATUS_LABELS, _STATUS_STYLES, TimelineRenderer


def _render(renderable) -> str:
    console = Console(record=True, width=160, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestTimelineSnapshot:
    def test_empty_snapshot(self):
        snap = TimelineProjection().snapshot("d-1", [])
        assert snap.total_stages == 6
        assert snap.completed_count == 0
        assert snap.line_count == 0
        assert snap.current_stage is None
        assert snap.headline == "Waiting for deployment output"

    def test_failed_headline(self, failed_build_entries):
        snap = TimelineProjection().snapshot("d-1", failed_build_entries)
        assert snap.is_failed
        assert not snap.is_complete
        assert snap.completed_count == 2
        assert snap.headline == "Deployment failed at Build stage"

    def test_stage_lookups_match_classifier_helpers(self, failed_build_entries, make_entries):
        failed = TimelineProjection().snapshot("d-1", failed_build_entries)
        assert failed.failed_stage == failed_stage(failed.stages)
        assert failed.current_stage is None

        running = TimelineProjection().snapshot("d-1", make_entries("Cloning repository"))
        assert running.current_stage == current_stage(running.stages)
        assert running.current_stage.name == "Clone"

    def test_running_headline(self, make_entries):
        snap = TimelineProjection().snapshot("d-1", make_entries("Starting deployment"))
        assert snap.headline == "Currently: Prepare"

    def test_complete_headline(self, successful_entries):
        snap = TimelineProjection().snapshot("d-1", successful_entries)
        assert snap.is_complete
        assert snap.headline == "Deployment completed successfully"
        assert snap.line_count == len(successful_entries)

    def test_snapshot_is_recomputed(self, make_entries):
        projection = TimelineProjection()
        entries = make_entries("Starting deployment", "Cloning")
        first = projection.snapshot("d", entries[:1])
        second = projection.snapshot("d", entries)
        assert first.current_stage.name == "Prepare"
        assert second.current_stage.name == "Clone"


class TestRenderer:
    def test_every_status_has_style_and_label(self):
        for status in StageStatus:
            assert status in _STATUS_STYLES
            assert status in _STATUS_LABELS

    def test_render_timeline(self, failed_build_entries):
        snap = TimelineProjection().snapshot("d-1", failed_build_entries)
        panel = TimelineRenderer().render_timeline(snap)
        assert isinstance(panel, Panel)
        text = _render(panel)
        assert "Health Check" in text
        assert "FAILED" in text
        assert "Build failed: out of memory" in text
        assert "Progress: 2/6" in text

    def test_render_logs_following_shows_tail(self, make_entries):
        entries = make_entries(*[f"line {i}" for i in range(10)])
        text = _render(TimelineRenderer().render_logs(entries, height=3))
        assert "line 9" in text
        assert "line 6" not in text
        assert "following" in text

    def test_render_logs_detached_stops_at_seen_line(self, make_entries):
        entries = make_entries(*[f"line {i}" for i in range(10)])
        text = _render(
            TimelineRenderer().render_logs(entries, height=3, following=False, pending=4)
        )
        assert "line 5" in text
        assert "line 9" not in text
        assert "4 new lines" in text

    def test_render_logs_empty(self):
        assert "Waiting for logs" in _render(TimelineRenderer().render_logs([]))

    def test_render_session(self, store):
        session = LogSession("deployment-9", store=store)
        session.feed_lines(["Starting deployment", "Cloning repository"])
        text = _render(TimelineRenderer().render_session(session, height=5))
        assert "Deployment Timeline" in text
        assert "deployment-9" in text
        assert "Cloning repository" in text

    def test_print_timeline(self):
        console = Console(record=True, width=120, color_system=None)
        renderer = TimelineRenderer(console=console)
        renderer.print_timeline(TimelineSnapshot(stream_key="x"))
        assert "Deployment Timeline" in console.export_text()
