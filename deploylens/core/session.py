"""LogSession — one viewed log stream and its serialized event queue.

All inputs for a stream (content arrival, viewport measurements, explicit
commands) are queued and processed one at a time, in order, so buffer,
autoscroll and timeline state are never mutated concurrently.  Events
raised from inside a callback while the queue is draining are appended
and handled after the current one.

Wiring::

    feed(records) -> LogBuffer.append -> AutoscrollController.on_content_added
    timeline()    -> classify(rule_set, LogBuffer.entries())
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from deploylens.core.autoscroll import DEFAULT_THRESHOLD, AutoscrollController, ScrollCommand
from deploylens.core.classifier import StageClassifier
from deploylens.core.ingest import EntryFactory, TransportRecord
from deploylens.core.log_buffer import DEFAULT_CAPACITY, LogBuffer
from deploylens.core.preferences import PreferenceStore
from deploylens.models.logs import ALL_LEVELS, LevelFilter, LogEntry
from deploylens.models.rules import StageRuleSet
from deploylens.models.stages import Stage

logger = logging.getLogger(__name__)


class SessionCommand(str, Enum):
    TOGGLE = "toggle"
    BOTTOM = "bottom"
    TOP = "top"
    CLEAR = "clear"


class LogSession:
    """Buffer + autoscroll + classifier for a single stream.

    Parameters
    ----------
    stream_key:
        Identifier used for the persisted follow preference.
    capacity:
        ``LogBuffer`` capacity.
    rule_set:
        Stage rules for timeline reconstruction.
    store:
        Preference store for the autoscroll controller.
    threshold:
        Autoscroll "at bottom" threshold.
    on_scroll_request:
        Receives scroll commands from the autoscroll controller.
    """

    def __init__(
        self,
        stream_key: str,
        *,
        capacity: int = DEFAULT_CAPACITY,
        rule_set: StageRuleSet | None = None,
        store: PreferenceStore | None = None,
        threshold: float = DEFAULT_THRESHOLD,
        on_scroll_request: Callable[[ScrollCommand], None] | None = None,
    ) -> None:
        self.stream_key = stream_key
        self.buffer = LogBuffer(capacity)
        self.autoscroll = AutoscrollController(
            stream_key,
            store,
            threshold=threshold,
            on_scroll_request=on_scroll_request,
        )
        self.classifier = StageClassifier(rule_set)
        self._factory = EntryFactory(source=stream_key)
        self._queue: deque[tuple[str, Any]] = deque()
        self._draining = False
        self._closed = False

        self.buffer.subscribe(self.autoscroll.on_content_added)

    # ------------------------------------------------------------------
    # Event inputs
    # ------------------------------------------------------------------

    def feed(self, records: Iterable[TransportRecord | dict[str, Any]]) -> None:
        """Queue transport records for appending."""
        self._enqueue("records", list(records))

    def feed_lines(self, lines: Iterable[str]) -> None:
        """Queue raw text lines (docker timestamps are split off)."""
        self._enqueue("lines", list(lines))

    def feed_entries(self, entries: Iterable[LogEntry]) -> None:
        """Queue already-built entries."""
        self._enqueue("entries", list(entries))

    def scroll(self, distance_from_bottom: float | None) -> None:
        self._enqueue("scroll", distance_from_bottom)

    def command(self, command: SessionCommand | str) -> None:
        self._enqueue("command", SessionCommand(command))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def entries(self) -> tuple[LogEntry, ...]:
        return self.buffer.entries()

    def visible(self, level: LevelFilter | str = ALL_LEVELS, query: str = "") -> tuple[LogEntry, ...]:
        return self.buffer.filter(level, query)

    def timeline(self) -> list[Stage]:
        """Recompute the stage timeline from the retained history."""
        return self.classifier.classify(self.buffer.entries())

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting events and drop buffered state."""
        self._closed = True
        self._queue.clear()
        self.buffer.unsubscribe(self.autoscroll.on_content_added)
        self.buffer.clear()
        logger.debug("LogSession %s closed", self.stream_key)

    # ------------------------------------------------------------------
    # Queue processing
    # ------------------------------------------------------------------

    def _enqueue(self, kind: str, payload: Any) -> None:
        if self._closed:
            logger.debug("LogSession %s closed; dropping %s event", self.stream_key, kind)
            return
        self._queue.append((kind, payload))
        self.drain()

    def drain(self) -> None:
        """Process queued events in order.  Re-entrant calls return at once."""
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                kind, payload = self._queue.popleft()
                self._handle(kind, payload)
        finally:
            self._draining = False

    def _handle(self, kind: str, payload: Any) -> None:
        if kind == "records":
            self.buffer.append(self._factory.from_records(payload))
        elif kind == "lines":
            self.buffer.append(self._factory.from_lines(payload))
        elif kind == "entries":
            self.buffer.append(payload)
        elif kind == "scroll":
            self.autoscroll.on_scroll(payload)
        elif kind == "command":
            self._run_command(payload)

    def _run_command(self, command: SessionCommand) -> None:
        if command == SessionCommand.TOGGLE:
            self.autoscroll.toggle()
        elif command == SessionCommand.BOTTOM:
            self.autoscroll.scroll_to_bottom()
        elif command == SessionCommand.TOP:
            self.autoscroll.scroll_to_top()
        elif command == SessionCommand.CLEAR:
            self.buffer.clear()
            self.autoscroll.reset_pending()
