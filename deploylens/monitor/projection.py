"""TimelineProjection — read-only summary over classifier output.

The projection never stores stage state.  Every ``snapshot()`` call
re-runs the classifier over the entries it is given.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from deploylens.core.classifier import classify
from deploylens.core.classifier import current_stage as running_stage_of
from deploylens.core.classifier import failed_stage as failed_stage_of
from deploylens.models.logs import LogEntry
from deploylens.models.rules import DEFAULT_RULE_SET, StageRuleSet
from deploylens.models.stages import Stage, StageStatus


class TimelineSnapshot(BaseModel):
    """A frozen, point-in-time view of a deployment's stage timeline."""

    model_config = ConfigDict(frozen=True)

    stream_key: str
    rule_set: str = "default"
    stages: list[Stage] = []
    line_count: int = 0
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.stages if s.status == StageStatus.COMPLETED)

    @property
    def total_stages(self) -> int:
        return len(self.stages)

    @property
    def current_stage(self) -> Stage | None:
        return running_stage_of(self.stages)

    @property
    def failed_stage(self) -> Stage | None:
        return failed_stage_of(self.stages)

    @property
    def is_failed(self) -> bool:
        return self.failed_stage is not None

    @property
    def is_complete(self) -> bool:
        """Every stage completed (skipped stages count as done)."""
        return bool(self.stages) and all(
            s.status in (StageStatus.COMPLETED, StageStatus.SKIPPED)
            for s in self.stages
        )

    @property
    def headline(self) -> str:
        if self.is_complete:
            return "Deployment completed successfully"
        failed = self.failed_stage
        if failed is not None:
            return f"Deployment failed at {failed.name} stage"
        current = self.current_stage
        if current is not None:
            return f"Currently: {current.name}"
        return "Waiting for deployment output"


class TimelineProjection:
    """Builds ``TimelineSnapshot`` objects from log entries.

    Parameters
    ----------
    rule_set:
        Stage rules.  Defaults to ``DEFAULT_RULE_SET``.
    """

    def __init__(self, rule_set: StageRuleSet | None = None) -> None:
        self._rule_set = rule_set or DEFAULT_RULE_SET

    def snapshot(self, stream_key: str, entries: Iterable[LogEntry]) -> TimelineSnapshot:
        entries = list(entries)
        return TimelineSnapshot(
            stream_key=stream_key,
            rule_set=self._rule_set.name,
            stages=classify(self._rule_set, entries),
            line_count=len(entries),
        )
