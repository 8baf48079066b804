"""Log line models — one immutable ``LogEntry`` per received line.

Ordering is arrival order.  ``id`` is a monotonic sequence number assigned
on ingest; ``timestamp`` is whatever the producer sent and may be missing
or out of order.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class LogLevel(str, Enum):
    """Severity tag of a log line."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DEBUG = "debug"


# "all" disables level filtering.
ALL_LEVELS = "all"
LevelFilter = Union[LogLevel, Literal["all"]]


class LogEntry(BaseModel):
    """A single received log line.  Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    id: int
    content: str
    timestamp: datetime | None = None
    level: LogLevel | None = None
    source: str | None = None
