"""Building-related conditions: counts, activity, and streaks."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from tick_condition.base import Condition
from tick_condition.errors import ConfigurationError
from tick_condition.guards import ActivityGuards, RequirementGuards
from tick_condition.snapshot import BuildingView, TurnSnapshot

logger = logging.getLogger(__name__)


def _ratio(current: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(current / target, 1.0)


def _describe(buildings: list[BuildingView]) -> list[dict[str, Any]]:
    return [
        {
            "type": b.type,
            "level": b.level,
            "production_mode": b.production_mode,
            "position": b.position,
        }
        for b in buildings
    ]


class BuildingCountCondition(Condition):
    """Count buildings of a type (and optional production mode).

    Comparators: ``min``, ``max`` and ``exact`` for a single type, or
    ``total`` for an exact count across every building type.
    """

    kind = "building_count"

    def __init__(
        self,
        config: Mapping[str, Any],
        requirements: RequirementGuards | None = None,
        activities: ActivityGuards | None = None,
    ) -> None:
        self._count = 0
        super().__init__(config, requirements, activities)

    def validate(self) -> None:
        if self.config.get("total") is not None:
            self._number("total", 0)
            return
        self._name("building")
        self._name("productionMode", required=False)
        bounds = [self._number(k, 0, required=False) for k in ("min", "max", "exact")]
        if all(b is None for b in bounds):
            raise ConfigurationError(self.kind, "requires 'min', 'max', 'exact' or 'total'")

    def _matching(self, snapshot: TurnSnapshot) -> list[BuildingView]:
        if self.config.get("total") is not None:
            return list(snapshot.buildings)
        mode = self.config.get("productionMode")
        found = snapshot.buildings_of(self.config["building"])
        if mode:
            found = [b for b in found if b.mode == mode]
        return found

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        count = len(self._matching(snapshot))
        self._count = count
        cfg = self.config
        if cfg.get("total") is not None:
            return count == cfg["total"]
        if cfg.get("exact") is not None:
            return count == cfg["exact"]
        if cfg.get("min") is not None and count < cfg["min"]:
            return False
        if cfg.get("max") is not None and count > cfg["max"]:
            return False
        return True

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        matching = self._matching(snapshot)
        return {
            "current_count": len(matching),
            "required_min": self.config.get("min"),
            "required_max": self.config.get("max"),
            "required_exact": self.config.get("exact"),
            "required_total": self.config.get("total"),
            "buildings": _describe(matching),
        }

    def get_progress(self) -> float:
        if self.is_met:
            return 1.0
        for key in ("exact", "total", "min"):
            target = self.config.get(key)
            if target is not None:
                return _ratio(self._count, target)
        return 0.0

    def _reset_state(self) -> None:
        self._count = 0


class BuildingActiveCondition(Condition):
    """Buildings of a type that satisfy an activity predicate.

    ``active`` names an ActivityGuards predicate (default ``"operational"``).
    With no ``min``/``exact`` the condition holds when any building is active.
    """

    kind = "building_active"

    def __init__(
        self,
        config: Mapping[str, Any],
        requirements: RequirementGuards | None = None,
        activities: ActivityGuards | None = None,
    ) -> None:
        self._active_count = 0
        super().__init__(config, requirements, activities)

    @property
    def predicate(self) -> str:
        return self.config.get("active") or "operational"

    def validate(self) -> None:
        self._name("building")
        self._name("active", required=False)
        self._number("min", 0, required=False)
        self._number("exact", 0, required=False)
        if not self.activities.has(self.predicate):
            raise ConfigurationError(self.kind, f"unknown activity predicate {self.predicate!r}")

    def _active(self, snapshot: TurnSnapshot) -> list[BuildingView]:
        return [
            b for b in snapshot.buildings_of(self.config["building"])
            if self.activities.check(self.predicate, b)
        ]

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        count = len(self._active(snapshot))
        self._active_count = count
        if self.config.get("exact") is not None:
            return count == self.config["exact"]
        if self.config.get("min") is not None:
            return count >= self.config["min"]
        return count > 0

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        everything = snapshot.buildings_of(self.config["building"])
        return {
            "total_count": len(everything),
            "active_count": self._active_count,
            "predicate": self.predicate,
            "buildings": [
                dict(info, is_active=self.activities.check(self.predicate, b))
                for b, info in zip(everything, _describe(everything))
            ],
        }

    def get_progress(self) -> float:
        if self.is_met:
            return 1.0
        for key in ("exact", "min"):
            target = self.config.get(key)
            if target is not None:
                return _ratio(self._active_count, target)
        return 1.0 if self._active_count > 0 else 0.0

    def _reset_state(self) -> None:
        self._active_count = 0


class ConsecutiveTurnsCondition(Condition):
    """Requirements held for ``turns`` uninterrupted turns.

    The streak is recomputed on every check, so a met condition reverts to
    unmet the turn its requirements stop holding.
    """

    kind = "consecutive_turns"

    def __init__(
        self,
        config: Mapping[str, Any],
        requirements: RequirementGuards | None = None,
        activities: ActivityGuards | None = None,
    ) -> None:
        self.consecutive_count = 0
        self.last_met_turn: int | None = None
        super().__init__(config, requirements, activities)

    @property
    def target(self) -> int:
        return self.config["turns"]

    def validate(self) -> None:
        self._number("turns", 1)
        self._requirement_keys(required=True)

    def requirements_hold(self, snapshot: TurnSnapshot) -> bool:
        return all(
            self.requirements.check(key, snapshot) for key in self.config["requirements"]
        )

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        turn = snapshot.turn
        if self.requirements_hold(snapshot):
            if self.last_met_turn is None or self.last_met_turn < turn - 1:
                self.consecutive_count = 1
            elif self.last_met_turn == turn - 1:
                self.consecutive_count += 1
            # last_met_turn == turn: already counted this turn
            self.last_met_turn = turn
        else:
            if self.consecutive_count > 0:
                logger.debug(
                    "[%s] streak broken on turn %d at %d/%d",
                    self.kind, turn, self.consecutive_count, self.target,
                )
            self.consecutive_count = 0
            self.last_met_turn = None

        logger.debug(
            "[%s] turn %d: %d/%d consecutive turns",
            self.kind, turn, self.consecutive_count, self.target,
        )
        return self.consecutive_count >= self.target

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        return {
            "consecutive_count": self.consecutive_count,
            "required_count": self.target,
            "last_met_turn": self.last_met_turn,
            "current_requirements": self._requirement_report(snapshot),
            "progress": self.get_progress(),
        }

    def get_progress(self) -> float:
        return _ratio(self.consecutive_count, self.target)

    def _reset_state(self) -> None:
        self.consecutive_count = 0
        self.last_met_turn = None
