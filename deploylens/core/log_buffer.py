"""LogBuffer — bounded, append-only store of received log lines.

Once ``capacity`` is exceeded the oldest lines are evicted first; the
retained suffix keeps its arrival order.  Eviction is the backpressure
mechanism for high-volume streams: the producer is never blocked.

Every ``append`` notifies subscribers with the number of lines just added,
so consumers that only need "how many new" never diff the whole buffer.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable

from deploylens.models.logs import ALL_LEVELS, LevelFilter, LogEntry, LogLevel

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 500

# Inference tokens, checked in this priority order.
_LEVEL_TOKENS: list[tuple[LogLevel, tuple[str, ...]]] = [
    (LogLevel.ERROR, ("error", "failed", "fatal", "exception")),
    (LogLevel.WARN, ("warn", "warning", "deprecated")),
    (LogLevel.DEBUG, ("debug",)),
]

# Accepted spellings for the level filter, matched after lower-casing.
_FILTER_NAMES: dict[str, LogLevel] = {
    **{level.value: level for level in LogLevel},
    "warning": LogLevel.WARN,
}


def infer_level(content: str) -> LogLevel:
    """Infer a level from free text by case-insensitive token search."""
    lower = content.lower()
    for level, tokens in _LEVEL_TOKENS:
        if any(token in lower for token in tokens):
            return level
    return LogLevel.INFO


def resolve_level(entry: LogEntry) -> LogLevel:
    """Explicit level wins; otherwise infer from content."""
    if entry.level is not None:
        return entry.level
    return infer_level(entry.content)


class LogBuffer:
    """Fixed-capacity FIFO buffer of ``LogEntry`` objects.

    Parameters
    ----------
    capacity:
        Maximum number of retained entries.  Must be at least 1.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._subscribers: list[Callable[[int], None]] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, batch: Iterable[LogEntry]) -> int:
        """Append a batch in order and notify subscribers.

        Returns the number of entries added (the delta).  Entries evicted
        to make room are dropped silently.
        """
        added = list(batch)
        if not added:
            return 0

        overflow = len(self._entries) + len(added) - self._capacity
        self._entries.extend(added)
        if overflow > 0:
            logger.debug("LogBuffer evicted %d oldest entries", overflow)

        for callback in list(self._subscribers):
            callback(len(added))
        return len(added)

    def clear(self) -> None:
        self._entries.clear()

    def subscribe(self, callback: Callable[[int], None]) -> None:
        """Register a callback receiving the delta count of each append."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[int], None]) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def entries(self) -> tuple[LogEntry, ...]:
        """Return a read-only snapshot of retained entries."""
        return tuple(self._entries)

    def filter(
        self,
        level: LevelFilter | str = ALL_LEVELS,
        query: str = "",
    ) -> tuple[LogEntry, ...]:
        """Return entries matching ``level`` and containing ``query``.

        ``"all"`` and an empty query disable the respective filter.  Level
        names are case-insensitive; an unknown level matches nothing.  The
        buffer itself is never modified.
        """
        if isinstance(level, LogLevel):
            wanted: LogLevel | None = level
        else:
            name = str(level).strip().lower()
            if not name or name == ALL_LEVELS:
                wanted = None
            else:
                wanted = _FILTER_NAMES.get(name)
                if wanted is None:
                    logger.debug("Unknown level filter %r, nothing matches", level)
                    return ()
        needle = (query or "").lower()

        return tuple(
            entry
            for entry in self._entries
            if (wanted is None or resolve_level(entry) == wanted)
            and (not needle or needle in entry.content.lower())
        )

    def export_text(self, entries: Iterable[LogEntry] | None = None) -> str:
        """Render entries as ``[timestamp] LEVEL: content`` lines."""
        lines: list[str] = []
        for entry in self._entries if entries is None else entries:
            level = resolve_level(entry).value.upper()
            if entry.timestamp is not None:
                lines.append(f"[{entry.timestamp.isoformat()}] {level}: {entry.content}")
            else:
                lines.append(f"{level}: {entry.content}")
        return "\n".join(lines)
