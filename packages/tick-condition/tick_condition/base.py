"""Condition base class: shared check wrapper and historical state."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, ClassVar, Mapping

from tick_condition.errors import ConfigurationError
from tick_condition.guards import (
    ActivityGuards,
    RequirementGuards,
    default_activities,
    default_requirements,
)
from tick_condition.snapshot import TurnSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of the most recent check of one condition."""

    turn: int
    result: bool
    data: dict[str, Any] = field(default_factory=dict)


class Condition:
    """A single testable criterion over simulation state.

    Subclasses set ``kind`` and implement :meth:`evaluate`. Everything else
    (activation, check counting, first-met tracking, transition hooks) lives
    here so variants stay small.

    ``is_met`` is only ever written by :meth:`check`.
    """

    kind: ClassVar[str] = "condition"

    def __init__(
        self,
        config: Mapping[str, Any],
        requirements: RequirementGuards | None = None,
        activities: ActivityGuards | None = None,
    ) -> None:
        if not isinstance(config, Mapping):
            raise ConfigurationError(self.kind, "configuration must be a mapping")
        self.config: Mapping[str, Any] = MappingProxyType(copy.deepcopy(dict(config)))
        self.requirements = requirements if requirements is not None else default_requirements()
        self.activities = activities if activities is not None else default_activities()

        self.is_met = False
        self.is_active = True
        self.check_count = 0
        self.first_met_turn: int | None = None
        self.last_check_result: CheckResult | None = None
        self._snapshot: TurnSnapshot | None = None

        self.validate()
        logger.debug("Created %s condition: %s", self.kind, self.description)

    @property
    def description(self) -> str:
        return self.config.get("description") or f"{self.kind} condition"

    # --- Variant hooks ---

    def validate(self) -> None:
        """Raise ConfigurationError if the config is unusable. Override to extend."""

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        raise NotImplementedError(f"{type(self).__name__} must implement evaluate()")

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        """Variant-specific detail stored alongside each check result."""
        return {}

    def get_progress(self) -> float:
        """Closeness to being met in [0, 1]. Display only."""
        return 1.0 if self.is_met else 0.0

    def _reset_state(self) -> None:
        """Clear variant-specific state. Called by reset()."""

    # --- Checking ---

    def check(self, snapshot: TurnSnapshot, turn: int | None = None) -> bool:
        if not self.is_active:
            return self.is_met

        if turn is None:
            turn = snapshot.turn
        elif turn != snapshot.turn:
            # Variants read the turn from the snapshot; keep them on the caller's turn
            snapshot = replace(snapshot, turn=turn)
        self.check_count += 1
        was_met = self.is_met

        self.is_met = bool(self.evaluate(snapshot))
        self._snapshot = snapshot

        if self.is_met and not was_met:
            if self.first_met_turn is None:
                self.first_met_turn = turn
            self.on_first_met(turn)
        elif was_met and not self.is_met:
            self.on_lost(turn)

        self.last_check_result = CheckResult(
            turn=turn, result=self.is_met, data=self.check_data(snapshot)
        )
        return self.is_met

    def on_first_met(self, turn: int) -> None:
        logger.info("[%s] condition met on turn %d: %s", self.kind, turn, self.description)

    def on_lost(self, turn: int) -> None:
        logger.info("[%s] condition lost on turn %d: %s", self.kind, turn, self.description)

    # --- Lifecycle ---

    def reset(self) -> None:
        """Zero all state. Configuration is kept and not re-validated."""
        self.is_met = False
        self.is_active = True
        self.check_count = 0
        self.first_met_turn = None
        self.last_check_result = None
        self._snapshot = None
        self._reset_state()
        logger.debug("[%s] condition reset: %s", self.kind, self.description)

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True

    # --- Reporting ---

    def get_status(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "description": self.description,
            "is_met": self.is_met,
            "is_active": self.is_active,
            "progress": self.get_progress(),
            "check_count": self.check_count,
            "first_met_turn": self.first_met_turn,
            "last_check": self.last_check_result,
        }

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {
            "type": self.kind,
            "config": dict(self.config),
            "state": {
                "is_met": self.is_met,
                "is_active": self.is_active,
                "check_count": self.check_count,
                "first_met_turn": self.first_met_turn,
            },
        }
        if self._snapshot is not None:
            info["snapshot"] = {
                "turn": self._snapshot.turn,
                "buildings": len(self._snapshot.buildings),
                "fuel": self._snapshot.fuel,
            }
        return info

    # --- Config helpers ---

    def _name(self, key: str, required: bool = True) -> str | None:
        """Read a field that names something (a building type, resource, or guard)."""
        value = self.config.get(key)
        if value is None:
            if required:
                raise ConfigurationError(self.kind, f"'{key}' is required")
            return None
        if not isinstance(value, str) or not value:
            raise ConfigurationError(self.kind, f"'{key}' must be a non-empty string, got {value!r}")
        return value

    def _number(self, key: str, minimum: float, required: bool = True) -> float | None:
        """Read a numeric field, enforcing ``value >= minimum``."""
        value = self.config.get(key)
        if value is None:
            if required:
                raise ConfigurationError(self.kind, f"'{key}' is required")
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(self.kind, f"'{key}' must be a number, got {value!r}")
        if value < minimum:
            raise ConfigurationError(self.kind, f"'{key}' must be >= {minimum}, got {value}")
        return value

    def _requirement_keys(self, required: bool) -> list[str]:
        keys = self.config.get("requirements")
        if keys is None:
            keys = []
        if isinstance(keys, str) or not isinstance(keys, (list, tuple)):
            raise ConfigurationError(self.kind, "'requirements' must be a list")
        if required and not keys:
            raise ConfigurationError(self.kind, "'requirements' must not be empty")
        bad = [k for k in keys if not isinstance(k, str)]
        if bad:
            raise ConfigurationError(self.kind, f"requirement keys must be strings, got {bad!r}")
        unknown = [k for k in keys if not self.requirements.has(k)]
        if unknown:
            raise ConfigurationError(self.kind, f"unknown requirements {unknown}")
        return list(keys)

    def _requirement_report(self, snapshot: TurnSnapshot) -> list[dict[str, Any]]:
        return [
            {"requirement": key, "met": self.requirements.check(key, snapshot)}
            for key in self.config.get("requirements") or []
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r} met={self.is_met}>"
