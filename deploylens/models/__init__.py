"""deploylens data models — all Pydantic v2, frozen where immutable."""

from deploylens.models.logs import ALL_LEVELS, LevelFilter, LogEntry, LogLevel
from deploylens.models.rules import (
    DEFAULT_RULE_SET,
    PatternMatcher,
    RegexMatcher,
    StageRule,
    StageRuleSet,
)
from deploylens.models.stages import (
    STAGE_NAMES,
    STAGE_ORDER,
    TERMINAL_STATUSES,
    Stage,
    StageId,
    StageStatus,
)

__all__ = [
    # logs
    "ALL_LEVELS",
    "LevelFilter",
    "LogEntry",
    "LogLevel",
    # rules
    "DEFAULT_RULE_SET",
    "PatternMatcher",
    "RegexMatcher",
    "StageRule",
    "StageRuleSet",
    # stages
    "STAGE_NAMES",
    "STAGE_ORDER",
    "TERMINAL_STATUSES",
    "Stage",
    "StageId",
    "StageStatus",
]
