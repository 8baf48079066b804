"""Shared test fixtures for deploylens."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from deploylens.core.log_buffer import LogBuffer
from deploylens.core.preferences import MemoryPreferenceStore
from deploylens.models.logs import LogEntry

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after T0."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Factory fixture: build LogEntry objects with increasing ids."""
    counter = {"next": 1}

    def _factory(content: str, timestamp: datetime | None = None, **overrides: Any) -> LogEntry:
        defaults: dict[str, Any] = {
            "id": counter["next"],
            "content": content,
            "timestamp": timestamp,
        }
        defaults.update(overrides)
        counter["next"] += 1
        return LogEntry(**defaults)

    return _factory


@pytest.fixture
def make_entries(make_entry: Callable[..., LogEntry]) -> Callable[..., list[LogEntry]]:
    """Factory fixture: one entry per line, one second apart from T0."""

    def _factory(*lines: str, timed: bool = True) -> list[LogEntry]:
        return [
            make_entry(line, at(i) if timed else None)
            for i, line in enumerate(lines)
        ]

    return _factory


@pytest.fixture
def failed_build_entries(make_entries: Callable[..., list[LogEntry]]) -> list[LogEntry]:
    """Deployment that clones fine and then fails in the build stage."""
    return make_entries(
        "Starting deployment",
        "Cloning repository",
        "Clone complete, commit sha abc123",
        "docker build started",
        "Build failed: out of memory",
    )


@pytest.fixture
def successful_entries(make_entries: Callable[..., list[LogEntry]]) -> list[LogEntry]:
    """Deployment that walks through every stage."""
    return make_entries(
        "Starting deployment",
        "helper image ready",
        "Cloning repository",
        "Clone complete, commit sha abc123",
        "Building docker image started",
        "Step 1/4 : FROM python:3.12",
        "Successfully built 1a2b3c",
        "Pushing image registry.local/app:latest",
        "Successfully pushed registry.local/app:latest",
        "Rolling update started",
        "New container started",
        "Waiting for healthcheck",
        "New container is healthy",
    )


@pytest.fixture
def store() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()


@pytest.fixture
def buffer() -> LogBuffer:
    return LogBuffer(capacity=5)
