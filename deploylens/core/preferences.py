"""Preference stores — durable key -> boolean settings per viewed stream.

Used by ``AutoscrollController`` to remember whether a stream's viewer
should follow new output.  The JSON store keeps every key in a single
object file::

    {"logs-deployment-42": false, "logs-app-7": true}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class PreferenceStore(Protocol):
    """Protocol for key -> boolean preference persistence."""

    def get(self, key: str) -> bool | None:
        """Return the stored value, or ``None`` when absent."""
        ...

    def set(self, key: str, value: bool) -> None:
        ...


class MemoryPreferenceStore:
    """Process-local store.  Lost when the process exits."""

    def __init__(self, initial: dict[str, bool] | None = None) -> None:
        self._values: dict[str, bool] = dict(initial or {})

    def get(self, key: str) -> bool | None:
        return self._values.get(key)

    def set(self, key: str, value: bool) -> None:
        self._values[key] = bool(value)


class JsonPreferenceStore:
    """Preferences persisted as one JSON object on disk.

    Parameters
    ----------
    path:
        JSON file location.  Parent directories are created on first write.
        A missing or corrupt file reads as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> bool | None:
        value = self._load().get(key)
        return value if isinstance(value, bool) else None

    def set(self, key: str, value: bool) -> None:
        data = self._load()
        data[key] = bool(value)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        logger.debug("Saved preference %s=%s to %s", key, value, self._path)

    def _load(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}
