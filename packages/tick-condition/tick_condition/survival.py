"""Survival, depletion, turn-limit, and storage conditions."""
from __future__ import annotations

import logging
import math
from typing import Any

from tick_condition.base import Condition
from tick_condition.errors import ConfigurationError
from tick_condition.snapshot import TurnSnapshot

logger = logging.getLogger(__name__)

# Turns of fuel left at which depletion progress starts to climb.
FUEL_WARNING_TURNS = 3


class SurvivalCondition(Condition):
    """Fuel above zero and every configured requirement holding."""

    kind = "survival_turns"

    def validate(self) -> None:
        self._number("turns", 1, required=False)
        self._requirement_keys(required=False)

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        if snapshot.fuel <= 0:
            return False
        return all(
            self.requirements.check(key, snapshot)
            for key in self.config.get("requirements") or []
        )

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        return {
            "fuel": snapshot.amount("fuel"),
            "materials": snapshot.amount("materials"),
            "waste": snapshot.amount("waste"),
            "buildings": len(snapshot.buildings),
            "target_turns": self.config.get("turns"),
            "requirements": self._requirement_report(snapshot),
        }


class ResourceDepletionCondition(Condition):
    """Lose condition: a named resource has run out."""

    kind = "resource_depletion"

    def validate(self) -> None:
        self._name("resource")

    @property
    def resource(self) -> str:
        return self.config["resource"]

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        return snapshot.amount(self.resource) <= 0

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        amount = snapshot.amount(self.resource)
        return {
            "resource": self.resource,
            "current_amount": amount,
            "is_depleted": amount <= 0,
        }

    def on_first_met(self, turn: int) -> None:
        super().on_first_met(turn)
        logger.warning("Resource depleted: %s reached zero on turn %d", self.resource, turn)


class FuelDepletionCondition(ResourceDepletionCondition):
    """Lose condition: fuel has run out.

    Progress stays at 0 while fuel is comfortable and jumps to at least 0.7
    once the estimated turns remaining drop to FUEL_WARNING_TURNS.
    """

    kind = "fuel_depletion"

    def validate(self) -> None:
        pass

    @property
    def resource(self) -> str:
        return "fuel"

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        fuel = snapshot.fuel
        remaining = snapshot.turns_remaining()
        return {
            "current_fuel": fuel,
            "fuel_consumption": snapshot.fuel_consumption(),
            "turns_remaining": None if math.isinf(remaining) else remaining,
            "is_depleted": fuel <= 0,
        }

    def get_progress(self) -> float:
        snapshot = self._snapshot
        if snapshot is None:
            return 0.0
        if snapshot.fuel <= 0:
            return 1.0
        remaining = snapshot.turns_remaining()
        if remaining <= FUEL_WARNING_TURNS:
            return max(0.7, (FUEL_WARNING_TURNS - remaining) / FUEL_WARNING_TURNS)
        return 0.0

    def on_first_met(self, turn: int) -> None:
        logger.warning("Civilization collapse: fuel depleted on turn %d", turn)


class TurnLimitCondition(Condition):
    """Lose condition: the turn number has gone past ``maxTurns``.

    Turn ``maxTurns`` itself is still within bounds.
    """

    kind = "turn_limit"

    def validate(self) -> None:
        self._number("maxTurns", 1)

    @property
    def max_turns(self) -> int:
        return self.config["maxTurns"]

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        return snapshot.turn > self.max_turns

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        return {
            "current_turn": snapshot.turn,
            "max_turns": self.max_turns,
            "turns_remaining": max(0, self.max_turns - snapshot.turn),
            "is_exceeded": snapshot.turn > self.max_turns,
        }

    def get_progress(self) -> float:
        if self._snapshot is None:
            return 0.0
        current = self._snapshot.turn
        if current > self.max_turns:
            return 1.0
        return max(0.0, min(current / self.max_turns, 1.0))

    def on_first_met(self, turn: int) -> None:
        super().on_first_met(turn)
        logger.warning("Time limit exceeded: turn %d > %d", turn, self.max_turns)


class StorageExceededCondition(Condition):
    """Lose condition: a named resource is stored above ``limit``."""

    kind = "storage_exceeded"

    def validate(self) -> None:
        self._name("resource")
        if self._number("limit", 0) == 0:
            raise ConfigurationError(self.kind, "'limit' must be positive")

    @property
    def resource(self) -> str:
        return self.config["resource"]

    @property
    def limit(self) -> float:
        return self.config["limit"]

    def evaluate(self, snapshot: TurnSnapshot) -> bool:
        return snapshot.amount(self.resource) > self.limit

    def check_data(self, snapshot: TurnSnapshot) -> dict[str, Any]:
        amount = snapshot.amount(self.resource)
        return {
            "resource": self.resource,
            "current_amount": amount,
            "limit": self.limit,
            "excess": max(0, amount - self.limit),
            "is_exceeded": amount > self.limit,
        }

    def get_progress(self) -> float:
        if self._snapshot is None:
            return 0.0
        amount = self._snapshot.amount(self.resource)
        if amount > self.limit:
            return 1.0
        return max(0.0, min(amount / self.limit, 1.0))

    def on_first_met(self, turn: int) -> None:
        super().on_first_met(turn)
        logger.warning("Storage limit exceeded: %s > %s", self.resource, self.limit)
