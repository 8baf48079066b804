"""Tests for LogSession — serialized event processing for one stream."""

from __future__ import annotations

import pytest

from deploylens.core.autoscroll import DEFAULT_THRESHOLD, ScrollCommand, preference_key
from deploylens.core.session import LogSession, SessionCommand
from deploylens.models.stages import StageId, StageStatus


@pytest.fixture
def requests() -> list[ScrollCommand]:
    return []


@pytest.fixture
def session(store, requests) -> LogSession:
    return LogSession("deployment-7", capacity=50, store=store, on_scroll_request=requests.append)


class TestFeeding:
    def test_feed_records_reaches_buffer_and_timeline(self, session):
        session.feed(
            [
                {"output": "Starting deployment", "timestamp": "2026-03-01T12:00:00Z"},
                {"output": "Cloning repository", "timestamp": "2026-03-01T12:00:01Z"},
                {"output": "Clone complete", "timestamp": "2026-03-01T12:00:03Z"},
            ]
        )
        assert len(session.entries()) == 3
        stages = {s.id: s for s in session.timeline()}
        assert stages[StageId.CLONE].status == StageStatus.COMPLETED
        assert stages[StageId.CLONE].duration_seconds == 2

    def test_feed_lines_and_entries(self, session, make_entries):
        session.feed_lines(["2024-01-26T17:30:00.1Z docker build"])
        session.feed_entries(make_entries("Successfully built abc"))
        assert [e.content for e in session.entries()] == ["docker build", "Successfully built abc"]

    def test_entry_ids_increase(self, session):
        session.feed_lines(["a", "b"])
        session.feed([{"output": "c"}])
        ids = [e.id for e in session.entries()]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_visible_filters(self, session):
        session.feed_lines(["ok", "ERROR: boom", "warning: slow"])
        assert [e.content for e in session.visible("error")] == ["ERROR: boom"]
        assert [e.content for e in session.visible(query="SLOW")] == ["warning: slow"]

    def test_timeline_respects_capacity(self, store):
        session = LogSession("s", capacity=2, store=store)
        session.feed_lines(["Starting deployment", "Cloning", "docker build"])
        stages = {s.id: s for s in session.timeline()}
        # "Starting deployment" was evicted, so prepare never started
        assert stages[StageId.PREPARE].status == StageStatus.PENDING
        assert stages[StageId.BUILD].status == StageStatus.RUNNING


class TestAutoscrollWiring:
    def test_default_threshold_matches_controller(self, store):
        assert LogSession("s", store=store).autoscroll.threshold == DEFAULT_THRESHOLD

    def test_content_scrolls_when_following(self, session, requests):
        session.feed_lines(["a", "b"])
        assert requests == [ScrollCommand.BOTTOM]
        assert session.autoscroll.pending_count() == 0

    def test_detached_session_counts_new_lines(self, session, requests):
        session.scroll(400)
        session.feed_lines(["a", "b", "c", "d", "e"])
        assert requests == []
        assert session.autoscroll.pending_count() == 5

    def test_scroll_back_to_bottom(self, session):
        session.scroll(400)
        session.feed_lines(["a"])
        session.scroll(0)
        assert session.autoscroll.is_following()
        assert session.autoscroll.pending_count() == 0

    def test_commands(self, session, store, requests):
        session.command(SessionCommand.TOGGLE)
        assert not session.autoscroll.is_following()
        assert store.get(preference_key("deployment-7")) is False

        session.command("bottom")
        assert session.autoscroll.is_following()
        session.command(SessionCommand.TOP)
        assert requests[-2:] == [ScrollCommand.BOTTOM, ScrollCommand.TOP]

    def test_clear_command_empties_buffer(self, session):
        session.feed_lines(["a"])
        session.command(SessionCommand.CLEAR)
        assert session.entries() == ()

    def test_clear_resets_pending_count(self, session):
        session.scroll(400)
        session.feed_lines(["a", "b", "c"])
        assert session.autoscroll.pending_count() == 3
        session.command(SessionCommand.CLEAR)
        assert session.autoscroll.pending_count() == 0
        assert not session.autoscroll.is_following()

    def test_null_output_record_is_accepted(self, session):
        session.feed([{"output": None, "timestamp": "2024-01-01T00:00:00Z"}])
        assert [e.content for e in session.entries()] == [""]

    def test_visible_with_uppercase_level(self, session):
        session.feed_lines(["ok", "Error: boom"])
        assert [e.content for e in session.visible("ERROR")] == ["Error: boom"]


class TestOrdering:
    def test_reentrant_events_are_queued_in_order(self, store):
        order: list[str] = []
        holder: dict[str, LogSession] = {}

        def on_request(command: ScrollCommand) -> None:
            order.append(f"request:{command.value}")
            # scrolling away from inside a callback must not nest
            holder["session"].scroll(999)
            order.append("callback-returned")

        session = LogSession("s", store=store, on_scroll_request=on_request)
        holder["session"] = session
        session.feed_lines(["a"])

        assert order == ["request:bottom", "callback-returned"]
        assert not session.autoscroll.is_following()

    def test_close_drops_later_events(self, session):
        session.feed_lines(["a"])
        session.close()
        session.feed_lines(["b"])
        session.scroll(500)
        assert session.closed
        assert session.entries() == ()
        assert session.autoscroll.is_following()
