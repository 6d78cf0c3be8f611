"""Named predicate registries used by condition configs."""
from __future__ import annotations

from typing import Callable

from tick_condition.snapshot import BuildingView, TurnSnapshot


class RequirementGuards:
    """Maps requirement keys to predicates over a whole snapshot."""

    def __init__(self) -> None:
        self._guards: dict[str, Callable[[TurnSnapshot], bool]] = {}

    def register(self, name: str, fn: Callable[[TurnSnapshot], bool]) -> None:
        """Register a named requirement. Overwrites if already registered."""
        self._guards[name] = fn

    def check(self, name: str, snapshot: TurnSnapshot) -> bool:
        """Evaluate a requirement. Raises KeyError if not registered."""
        return self._guards[name](snapshot)

    def has(self, name: str) -> bool:
        return name in self._guards

    def names(self) -> list[str]:
        return list(self._guards)


class ActivityGuards:
    """Maps activity keys to predicates over a single building."""

    def __init__(self) -> None:
        self._guards: dict[str, Callable[[BuildingView], bool]] = {}

    def register(self, name: str, fn: Callable[[BuildingView], bool]) -> None:
        """Register a named activity predicate. Overwrites if already registered."""
        self._guards[name] = fn

    def check(self, name: str, building: BuildingView) -> bool:
        """Evaluate a predicate. Raises KeyError if not registered."""
        return self._guards[name](building)

    def has(self, name: str) -> bool:
        return name in self._guards

    def names(self) -> list[str]:
        return list(self._guards)


# --- Built-in predicates ---

def both_refineries_operational(snapshot: TurnSnapshot) -> bool:
    # Only the configured mode counts, not whether waste is available to refine.
    refineries = snapshot.buildings_of("refinery")
    fuel = sum(1 for r in refineries if r.production_mode == "fuel")
    materials = sum(1 for r in refineries if r.production_mode == "materials")
    return fuel >= 1 and materials >= 1


def is_operational(building: BuildingView) -> bool:
    """Refineries need a mode and the ability to produce; others just need to stand."""
    if building.type == "refinery":
        return building.mode != "none" and building.can_produce
    return not building.destroyed and building.level > 0


def default_requirements() -> RequirementGuards:
    guards = RequirementGuards()
    guards.register("both_refineries_operational", both_refineries_operational)
    guards.register("fuel_positive", lambda s: s.amount("fuel") > 0)
    guards.register("materials_positive", lambda s: s.amount("materials") > 0)
    guards.register("buildings_exist", lambda s: len(s.buildings) > 0)
    return guards


def default_activities() -> ActivityGuards:
    guards = ActivityGuards()
    guards.register("operational", is_operational)
    guards.register("standing", lambda b: not b.destroyed and b.level > 0)
    guards.register("producing", lambda b: b.mode != "none" and b.can_produce)
    return guards
