"""Stage rule tables — heuristic text patterns per pipeline stage.

A ``StageRuleSet`` is immutable configuration handed to the classifier.
Different pipeline types (dockerfile, nixpacks, compose, ...) can supply
their own rule sets without touching the classifier state machine.

Every pattern sits behind the ``PatternMatcher`` protocol so a future
structured-log input can plug in a non-regex matcher.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, PrivateAttr

from deploylens.models.stages import StageId


@runtime_checkable
class PatternMatcher(Protocol):
    """Anything that can say whether a log line matches."""

    def match(self, line: str) -> bool:
        ...


class RegexMatcher(BaseModel):
    """Case-insensitive regex search over a log line."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    _compiled: re.Pattern[str] = PrivateAttr()

    def model_post_init(self, __context: object) -> None:
        self._compiled = re.compile(self.pattern, re.IGNORECASE)

    def match(self, line: str) -> bool:
        return self._compiled.search(line) is not None


class StageRule(BaseModel):
    """Start / end / fail patterns for a single stage."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    start: PatternMatcher
    end: PatternMatcher | None = None
    fail: PatternMatcher | None = None


class StageRuleSet(BaseModel):
    """Per-stage rule table.  Stages without a rule never transition."""

    model_config = ConfigDict(frozen=True)

    name: str = "default"
    rules: dict[StageId, StageRule] = {}

    def rule_for(self, stage_id: StageId) -> StageRule | None:
        return self.rules.get(stage_id)

    @classmethod
    def from_patterns(
        cls,
        name: str,
        patterns: dict[str, dict[str, str]],
    ) -> StageRuleSet:
        """Build a rule set from plain pattern strings.

        ``patterns`` maps a stage id to a dict with a required ``start``
        key and optional ``end`` / ``fail`` keys::

            StageRuleSet.from_patterns("nixpacks", {
                "build": {"start": "nixpacks build", "fail": "Build failed"},
            })
        """
        rules: dict[StageId, StageRule] = {}
        for stage_key, stage_patterns in patterns.items():
            rules[StageId(stage_key)] = StageRule(
                start=RegexMatcher(pattern=stage_patterns["start"]),
                end=RegexMatcher(pattern=stage_patterns["end"]) if stage_patterns.get("end") else None,
                fail=RegexMatcher(pattern=stage_patterns["fail"]) if stage_patterns.get("fail") else None,
            )
        return cls(name=name, rules=rules)


DEFAULT_RULE_SET: StageRuleSet = StageRuleSet.from_patterns(
    "default",
    {
        "prepare": {
            "start": r"Preparing container|Starting deployment|Deployment started",
            "end": r"helper image.*ready|preparation complete",
        },
        "clone": {
            "start": r"Importing|Cloning|Checking out|git clone",
            "end": r"Creating build-time|Clone complete|commit sha",
            "fail": r"Failed to clone|git.*error",
        },
        "build": {
            "start": r"Building docker image started|docker build|nixpacks build",
            "end": r"Building docker image completed|Successfully built|build complete",
            "fail": r"Build failed|error during build",
        },
        "push": {
            "start": r"Pushing image|docker push",
            "end": r"Successfully pushed|push complete",
            "fail": r"Failed to push|push error",
        },
        "deploy": {
            "start": r"Rolling update started|Starting container|docker-compose up|up --build",
            "end": r"New container started|Container created",
            "fail": r"Failed to start|Container.*exit",
        },
        "healthcheck": {
            "start": r"Waiting for healthcheck|Health check started",
            "end": r"New container is healthy|Rolling update completed|Container is stable",
            "fail": r"unhealthy|healthcheck.*fail",
        },
    },
)
