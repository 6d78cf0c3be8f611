"""ConditionRegistry: config type tags to Condition classes."""
from __future__ import annotations

from typing import Any, Mapping

from tick_condition.base import Condition
from tick_condition.buildings import (
    BuildingActiveCondition,
    BuildingCountCondition,
    ConsecutiveTurnsCondition,
)
from tick_condition.errors import ConfigurationError
from tick_condition.guards import (
    ActivityGuards,
    RequirementGuards,
    default_activities,
    default_requirements,
)
from tick_condition.survival import (
    FuelDepletionCondition,
    ResourceDepletionCondition,
    StorageExceededCondition,
    SurvivalCondition,
    TurnLimitCondition,
)

BUILTIN_CONDITIONS: tuple[type[Condition], ...] = (
    BuildingCountCondition,
    BuildingActiveCondition,
    ConsecutiveTurnsCondition,
    SurvivalCondition,
    FuelDepletionCondition,
    TurnLimitCondition,
    StorageExceededCondition,
    ResourceDepletionCondition,
)


class ConditionRegistry:
    """Builds conditions from config dicts keyed by their ``type`` tag.

    The set of tags is open: register a Condition subclass under its
    ``kind`` and level configs can use it immediately. Guards are shared by
    every condition the registry creates.
    """

    def __init__(
        self,
        requirements: RequirementGuards | None = None,
        activities: ActivityGuards | None = None,
    ) -> None:
        self._classes: dict[str, type[Condition]] = {}
        self.requirements = requirements if requirements is not None else default_requirements()
        self.activities = activities if activities is not None else default_activities()

    def register(self, cls: type[Condition], tag: str | None = None) -> None:
        """Register a condition class. Overwrites an existing tag."""
        self._classes[tag or cls.kind] = cls

    def has(self, tag: str) -> bool:
        return tag in self._classes

    def get(self, tag: str) -> type[Condition]:
        """Look up a class by tag. Raises KeyError if not registered."""
        return self._classes[tag]

    def tags(self) -> list[str]:
        return list(self._classes)

    def create(self, config: Mapping[str, Any]) -> Condition:
        """Instantiate a condition. Raises ConfigurationError on bad config."""
        if not isinstance(config, Mapping):
            raise ConfigurationError("condition", f"expected a mapping, got {type(config).__name__}")
        tag = config.get("type")
        if not tag:
            raise ConfigurationError("condition", "config is missing 'type'")
        if not isinstance(tag, str):
            raise ConfigurationError("condition", f"'type' must be a string, got {tag!r}")
        cls = self._classes.get(tag)
        if cls is None:
            raise ConfigurationError(str(tag), "unknown condition type")
        return cls(config, self.requirements, self.activities)


def default_registry(
    requirements: RequirementGuards | None = None,
    activities: ActivityGuards | None = None,
) -> ConditionRegistry:
    """Registry with every built-in condition type registered."""
    registry = ConditionRegistry(requirements, activities)
    for cls in BUILTIN_CONDITIONS:
        registry.register(cls)
    return registry
