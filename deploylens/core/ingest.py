"""Ingest — turn transport records into ordered ``LogEntry`` objects.

Transport (socket push, HTTP polling) is out of scope; this module only
normalizes what arrives:

- deployment log records ``{"output": ..., "timestamp": ..., "type": ...}``
- raw ``docker logs --timestamps`` lines
  (``2024-01-26T17:30:00.123456789Z message``)

Entry ids come from an ``EntryFactory`` counter so ordering is arrival
order regardless of producer timestamps.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from deploylens.models.logs import LogEntry, LogLevel

_DOCKER_LINE = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z)\s+(.*)$")
_FRACTION = re.compile(r"\.(\d+)")

# Level spellings seen from producers.
_LEVEL_ALIASES: dict[str, LogLevel] = {
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "error": LogLevel.ERROR,
    "debug": LogLevel.DEBUG,
    "stderr": LogLevel.ERROR,
}


class TransportRecord(BaseModel):
    """One record as delivered by the transport.

    Producers are not trusted to send well-typed fields: a missing or null
    ``output`` becomes ``""`` and a non-string ``timestamp`` is dropped.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    output: str = Field(default="", alias="message")
    timestamp: str | None = None
    type: str | None = None
    level: str | None = None
    hidden: bool = False

    @field_validator("output", mode="before")
    @classmethod
    def coerce_output(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("timestamp", "type", "level", mode="before")
    @classmethod
    def drop_non_strings(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("hidden", mode="before")
    @classmethod
    def coerce_hidden(cls, value: Any) -> bool:
        return value is True or value in ("true", "True", 1)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp; ``None`` when missing or malformed.

    Fractions beyond microseconds (docker emits nanoseconds) are truncated.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_docker_line(line: str) -> tuple[datetime | None, str]:
    """Split a leading docker timestamp off a log line."""
    match = _DOCKER_LINE.match(line)
    if match is None:
        return None, line
    return parse_timestamp(match.group(1)), match.group(2)


def level_from_record(record: TransportRecord) -> LogLevel | None:
    for raw in (record.level, record.type):
        if raw:
            level = _LEVEL_ALIASES.get(raw.lower())
            if level is not None:
                return level
    return None


class EntryFactory:
    """Assigns monotonic sequence ids to incoming lines.

    Parameters
    ----------
    source:
        Default ``source`` tag for created entries.
    start:
        First id handed out.
    """

    def __init__(self, source: str | None = None, start: int = 1) -> None:
        self._source = source
        self._ids: Iterator[int] = itertools.count(start)

    def from_record(self, record: TransportRecord | dict[str, Any]) -> LogEntry | None:
        """Build an entry from a transport record.  Hidden records yield ``None``."""
        if not isinstance(record, TransportRecord):
            record = TransportRecord.model_validate(record)
        if record.hidden:
            return None
        return LogEntry(
            id=next(self._ids),
            content=record.output,
            timestamp=parse_timestamp(record.timestamp),
            level=level_from_record(record),
            source=self._source,
        )

    def from_records(
        self, records: Iterable[TransportRecord | dict[str, Any]]
    ) -> list[LogEntry]:
        entries: list[LogEntry] = []
        for record in records:
            entry = self.from_record(record)
            if entry is not None:
                entries.append(entry)
        return entries

    def from_line(self, line: str, source: str | None = None) -> LogEntry:
        """Build an entry from a raw text line, splitting a docker timestamp."""
        timestamp, content = parse_docker_line(line.rstrip("\r\n"))
        return LogEntry(
            id=next(self._ids),
            content=content,
            timestamp=timestamp,
            source=source or self._source,
        )

    def from_lines(self, lines: Iterable[str], source: str | None = None) -> list[LogEntry]:
        return [self.from_line(line, source) for line in lines if line.strip()]
