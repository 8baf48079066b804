"""Stage classifier — reconstructs the pipeline timeline from raw log lines.

The producer emits free text with no structured stage markers, so stage
progress is inferred by matching each line against a ``StageRuleSet``.

Rules of the state machine:
- Progression is forward-only: a start match at or behind the current
  stage index is ignored.
- Starting a later stage completes whichever earlier stage is running.
- An end match completes the current stage if it is running.
- A fail match fails its stage regardless of position, and wins over a
  same-line start/end transition.  The latest fail line is kept as the
  error message.
- Every line after the first stage start is collected under the active
  stage.

``classify`` is pure: it keeps no state between calls and never raises on
malformed input.  Callers recompute from the full (bounded) history on
every batch.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from deploylens.models.logs import LogEntry
from deploylens.models.rules import DEFAULT_RULE_SET, StageRuleSet
from deploylens.models.stages import (
    STAGE_NAMES,
    STAGE_ORDER,
    Stage,
    StageStatus,
)

logger = logging.getLogger(__name__)

ERROR_MESSAGE_LIMIT = 200


def classify(rule_set: StageRuleSet, entries: Iterable[LogEntry]) -> list[Stage]:
    """Classify an ordered sequence of log entries into pipeline stages.

    Parameters
    ----------
    rule_set:
        Start/end/fail patterns per stage.
    entries:
        Log entries in arrival order.

    Returns
    -------
    list[Stage]
        All six stages in pipeline order.  Stages never reached stay
        ``pending``.
    """
    states = _initial_states()
    rules = [rule_set.rule_for(stage_id) for stage_id in STAGE_ORDER]
    current = -1

    for entry in entries:
        content = entry.content or ""
        ts = entry.timestamp

        # Start: first forward match in pipeline order wins
        for i in range(current + 1, len(STAGE_ORDER)):
            rule = rules[i]
            if rule is None or not rule.start.match(content):
                continue
            for j in range(max(current, 0), i):
                if states[j]["status"] == StageStatus.RUNNING:
                    _complete(states[j], ts)
            if states[i]["status"] == StageStatus.PENDING:
                states[i]["status"] = StageStatus.RUNNING
                states[i]["started_at"] = ts
                logger.debug("Stage %s started (entry %s)", STAGE_ORDER[i].value, entry.id)
            current = i
            break

        # End: only the current stage, only while running
        if current >= 0:
            rule = rules[current]
            state = states[current]
            if (
                rule is not None
                and rule.end is not None
                and state["status"] == StageStatus.RUNNING
                and rule.end.match(content)
            ):
                _complete(state, ts)

        # Fail: any stage
        for i, rule in enumerate(rules):
            if rule is None or rule.fail is None:
                continue
            if not rule.fail.match(content):
                continue
            state = states[i]
            if state["status"] != StageStatus.FAILED:
                state["status"] = StageStatus.FAILED
                logger.debug("Stage %s failed (entry %s)", STAGE_ORDER[i].value, entry.id)
            # latest failure line wins
            state["error_message"] = content[:ERROR_MESSAGE_LIMIT]

        if current >= 0:
            states[current]["collected_lines"].append(entry)

    return [
        Stage(
            id=stage_id,
            name=STAGE_NAMES[stage_id],
            status=state["status"],
            started_at=state["started_at"],
            completed_at=state["completed_at"],
            duration_seconds=_duration(state["started_at"], state["completed_at"]),
            collected_lines=state["collected_lines"],
            error_message=state["error_message"],
        )
        for stage_id, state in zip(STAGE_ORDER, states)
    ]


def current_stage(stages: Sequence[Stage]) -> Stage | None:
    """Return the running stage, if any."""
    for stage in stages:
        if stage.status == StageStatus.RUNNING:
            return stage
    return None


def failed_stage(stages: Sequence[Stage]) -> Stage | None:
    """Return the first failed stage, if any."""
    for stage in stages:
        if stage.status == StageStatus.FAILED:
            return stage
    return None


class StageClassifier:
    """Binds a rule set to ``classify`` so it is injected once at construction."""

    def __init__(self, rule_set: StageRuleSet | None = None) -> None:
        self._rule_set = rule_set or DEFAULT_RULE_SET

    @property
    def rule_set(self) -> StageRuleSet:
        return self._rule_set

    def classify(self, entries: Iterable[LogEntry]) -> list[Stage]:
        return classify(self._rule_set, entries)


# ----------------------------------------------------------------------
# Internals
# ----------------------------------------------------------------------


def _initial_states() -> list[dict[str, Any]]:
    return [
        {
            "status": StageStatus.PENDING,
            "started_at": None,
            "completed_at": None,
            "error_message": None,
            "collected_lines": [],
        }
        for _ in STAGE_ORDER
    ]


def _complete(state: dict[str, Any], ts: datetime | None) -> None:
    state["status"] = StageStatus.COMPLETED
    state["completed_at"] = ts


def _duration(start: datetime | None, end: datetime | None) -> int | None:
    """Whole seconds between start and end, rounded half up.

    Unset when either side is missing, when the clock ran backwards, or
    when the two timestamps cannot be compared (naive vs aware).
    """
    if start is None or end is None:
        return None
    try:
        seconds = (end - start).total_seconds()
    except TypeError:
        return None
    if seconds < 0:
        return None
    return int(math.floor(seconds + 0.5))
