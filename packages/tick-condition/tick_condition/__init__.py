"""tick-condition - Win/lose condition evaluation for turn-based campaigns."""
from __future__ import annotations

from tick_condition.base import CheckResult, Condition
from tick_condition.buildings import (
    BuildingActiveCondition,
    BuildingCountCondition,
    ConsecutiveTurnsCondition,
)
from tick_condition.condition_set import (
    AggregateResult,
    ConditionOutcome,
    ConditionSet,
    SignalSink,
)
from tick_condition.errors import ConditionError, ConfigurationError, ReentrantCheckError
from tick_condition.guards import (
    ActivityGuards,
    RequirementGuards,
    default_activities,
    default_requirements,
)
from tick_condition.registry import BUILTIN_CONDITIONS, ConditionRegistry, default_registry
from tick_condition.snapshot import BuildingView, TurnSnapshot
from tick_condition.survival import (
    FuelDepletionCondition,
    ResourceDepletionCondition,
    StorageExceededCondition,
    SurvivalCondition,
    TurnLimitCondition,
)

__all__ = [
    "TurnSnapshot",
    "BuildingView",
    "Condition",
    "CheckResult",
    "BuildingCountCondition",
    "BuildingActiveCondition",
    "ConsecutiveTurnsCondition",
    "SurvivalCondition",
    "FuelDepletionCondition",
    "TurnLimitCondition",
    "StorageExceededCondition",
    "ResourceDepletionCondition",
    "ConditionRegistry",
    "default_registry",
    "BUILTIN_CONDITIONS",
    "RequirementGuards",
    "ActivityGuards",
    "default_requirements",
    "default_activities",
    "ConditionSet",
    "ConditionOutcome",
    "AggregateResult",
    "SignalSink",
    "ConditionError",
    "ConfigurationError",
    "ReentrantCheckError",
]
