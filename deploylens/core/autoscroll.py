"""AutoscrollController — viewport-following state machine for a log view.

Two layers of state:

``persisted_preference``
    The stored boolean for this stream key.  Read once at construction to
    seed ``state``; written back only by ``toggle()``.
``state``
    The live ``FOLLOWING`` / ``DETACHED`` state.  After construction it is
    driven only by scroll input, content arrival and explicit commands.

Scroll effects are requested through an optional callback rather than
performed here; the caller owns the actual viewport.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from enum import Enum

from deploylens.core.preferences import MemoryPreferenceStore, PreferenceStore

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 100.0


class ScrollState(str, Enum):
    FOLLOWING = "following"
    DETACHED = "detached"


class ScrollCommand(str, Enum):
    """Side effect requested from the viewport owner."""

    BOTTOM = "bottom"
    TOP = "top"


def preference_key(stream_key: str) -> str:
    """Storage key under which a stream's follow preference is kept."""
    return f"logs-{stream_key}"


class AutoscrollController:
    """Follow/detach state machine for one viewed stream.

    Parameters
    ----------
    stream_key:
        Caller-chosen identifier of the stream (e.g. ``"deployment-42"``).
    store:
        Preference store.  Defaults to a process-local in-memory store.
    threshold:
        Distance from the bottom at or below which the view counts as
        "at the bottom".
    default_following:
        Initial state when nothing is stored for ``stream_key``.
    on_scroll_request:
        Called with a ``ScrollCommand`` whenever a scroll is requested.
    """

    def __init__(
        self,
        stream_key: str,
        store: PreferenceStore | None = None,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        default_following: bool = True,
        on_scroll_request: Callable[[ScrollCommand], None] | None = None,
    ) -> None:
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self._key = preference_key(stream_key)
        self._store = store if store is not None else MemoryPreferenceStore()
        self._threshold = threshold
        self._on_scroll_request = on_scroll_request
        self._pending = 0

        self._persisted = self._read_preference()
        seed = default_following if self._persisted is None else self._persisted
        self._state = ScrollState.FOLLOWING if seed else ScrollState.DETACHED

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> ScrollState:
        return self._state

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def persisted_preference(self) -> bool | None:
        """The stored preference as last read or written, ``None`` if never set."""
        return self._persisted

    def is_following(self) -> bool:
        return self._state == ScrollState.FOLLOWING

    def pending_count(self) -> int:
        """Lines that arrived while detached and have not been seen yet."""
        return self._pending

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def on_scroll(self, distance_from_bottom: float | None) -> None:
        """Update state from a viewport position measurement.

        ``None`` or NaN means the position could not be measured; the
        controller then falls back to following.
        """
        if distance_from_bottom is None or math.isnan(distance_from_bottom):
            logger.debug("Viewport position unavailable for %s; following", self._key)
            self._follow()
            return

        if self._state == ScrollState.FOLLOWING and distance_from_bottom > self._threshold:
            self._state = ScrollState.DETACHED
        elif self._state == ScrollState.DETACHED and distance_from_bottom <= self._threshold:
            self._follow()

    def on_content_added(self, count: int) -> bool:
        """React to ``count`` new lines.  Returns True if a scroll was requested."""
        if count <= 0:
            return False
        if self._state == ScrollState.FOLLOWING:
            self._pending = 0
            self._request(ScrollCommand.BOTTOM)
            return True
        self._pending += count
        return False

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle(self) -> bool:
        """Flip following on/off, persist it, and return the new value."""
        if self._state == ScrollState.FOLLOWING:
            self._state = ScrollState.DETACHED
        else:
            self._follow()
            self._request(ScrollCommand.BOTTOM)

        following = self.is_following()
        self._write_preference(following)
        return following

    def scroll_to_bottom(self) -> None:
        self._follow()
        self._request(ScrollCommand.BOTTOM)

    def reset_pending(self) -> None:
        """Forget unseen lines, e.g. after the underlying buffer was cleared."""
        self._pending = 0

    def scroll_to_top(self) -> None:
        self._request(ScrollCommand.TOP)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _follow(self) -> None:
        self._state = ScrollState.FOLLOWING
        self._pending = 0

    def _request(self, command: ScrollCommand) -> None:
        if self._on_scroll_request is not None:
            self._on_scroll_request(command)

    def _read_preference(self) -> bool | None:
        try:
            return self._store.get(self._key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not read preference %s: %s", self._key, exc)
            return None

    def _write_preference(self, value: bool) -> None:
        try:
            self._store.set(self._key, value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not persist preference %s: %s", self._key, exc)
            return
        self._persisted = value
