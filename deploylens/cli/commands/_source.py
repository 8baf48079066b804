"""Log file readers shared by the CLI commands.

Supported inputs:

- ``*.json``  — a list of transport records (or ``{"logs": [...]}``)
- ``*.jsonl`` — one transport record per line
- anything else — plain text, one log line per line, optional docker
  timestamp prefix
"""

from __future__ import annotations

import codecs
import json
from pathlib import Path

from deploylens.core.ingest import EntryFactory
from deploylens.models.logs import LogEntry


def read_entries(path: Path, factory: EntryFactory | None = None) -> list[LogEntry]:
    factory = factory or EntryFactory(source=path.stem)
    text = path.read_text(encoding="utf-8", errors="replace")

    if path.suffix == ".json":
        data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("logs", [])
        return factory.from_records(r for r in data if isinstance(r, dict))

    if path.suffix == ".jsonl":
        records = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except ValueError:
                continue
            if isinstance(record, dict):
                records.append(record)
        return factory.from_records(records)

    return factory.from_lines(text.splitlines())


class FileTail:
    """Reads lines appended to a UTF-8 text file since the last call.

    Bytes are decoded incrementally, so a character split across two
    reads is joined rather than replaced.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._offset = 0
        self._partial = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def read_new(self) -> list[str]:
        if not self._path.exists():
            return []
        size = self._path.stat().st_size
        if size < self._offset:
            # truncated or rotated
            self._offset = 0
            self._partial = ""
            self._decoder.reset()
        with self._path.open("rb") as fh:
            fh.seek(self._offset)
            chunk = fh.read()
            self._offset = fh.tell()
        if not chunk:
            return []
        data = self._partial + self._decoder.decode(chunk)
        lines = data.split("\n")
        self._partial = lines.pop()
        return [line for line in lines if line.strip()]
