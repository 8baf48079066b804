"""Deployment pipeline stage models.

The pipeline has a fixed, ordered set of six stages.  Stage progression is
reconstructed from free-text log lines by ``deploylens.core.classifier``;
these models are its output.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from deploylens.models.logs import LogEntry


class StageId(str, Enum):
    """Identifier of a deployment pipeline stage."""

    PREPARE = "prepare"
    CLONE = "clone"
    BUILD = "build"
    PUSH = "push"
    DEPLOY = "deploy"
    HEALTHCHECK = "healthcheck"


class StageStatus(str, Enum):
    """Status of a single stage within one classification run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


# Stage progression order.  Index in this list is the progression index.
STAGE_ORDER: list[StageId] = [
    StageId.PREPARE,
    StageId.CLONE,
    StageId.BUILD,
    StageId.PUSH,
    StageId.DEPLOY,
    StageId.HEALTHCHECK,
]

STAGE_NAMES: dict[StageId, str] = {
    StageId.PREPARE: "Prepare",
    StageId.CLONE: "Clone",
    StageId.BUILD: "Build",
    StageId.PUSH: "Push",
    StageId.DEPLOY: "Deploy",
    StageId.HEALTHCHECK: "Health Check",
}

# Once a stage reaches one of these, only a fail-pattern match changes it.
TERMINAL_STATUSES: frozenset[StageStatus] = frozenset(
    {StageStatus.COMPLETED, StageStatus.FAILED}
)


class Stage(BaseModel):
    """Point-in-time view of one pipeline stage.

    Produced fresh by every ``classify()`` call — never stored or mutated
    by downstream renderers.
    """

    model_config = ConfigDict(frozen=True)

    id: StageId
    name: str
    status: StageStatus = StageStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_seconds: int | None = None
    collected_lines: list[LogEntry] = []
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
