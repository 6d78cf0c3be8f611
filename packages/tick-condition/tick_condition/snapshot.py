"""Read-only view of simulation state for one turn."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class BuildingView:
    """One building as seen by the condition engine.

    Attributes:
        type: Building type tag (e.g. ``"refinery"``).
        production_mode: Current production mode, ``None`` when the building
            has no mode or it is switched off.
        level: Upgrade level; 0 means not yet built.
        destroyed: True once the building has been destroyed.
        can_produce: Whether the building could produce this turn.
        position: Grid coordinates, informational only.
    """

    type: str
    production_mode: str | None = None
    level: int = 1
    destroyed: bool = False
    can_produce: bool = True
    position: tuple[int, int] | None = None

    @property
    def mode(self) -> str:
        return self.production_mode or "none"


@dataclass(frozen=True)
class TurnSnapshot:
    """Immutable state of the simulation at the start of a turn."""

    turn: int
    buildings: tuple[BuildingView, ...] = ()
    resources: Mapping[str, float] = field(default_factory=dict)
    fuel_consumption_base: float = 0.0
    fuel_consumption_per_building: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "buildings", tuple(self.buildings))
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))

    # --- Queries ---

    def amount(self, resource: str) -> float:
        """Stored amount of a resource, 0 if never stored."""
        return self.resources.get(resource, 0)

    @property
    def fuel(self) -> float:
        return self.amount("fuel")

    def buildings_of(self, building_type: str) -> list[BuildingView]:
        return [b for b in self.buildings if b.type == building_type]

    def fuel_consumption(self) -> float:
        """Fuel burned per turn at the current building count."""
        return (
            self.fuel_consumption_base
            + len(self.buildings) * self.fuel_consumption_per_building
        )

    def turns_remaining(self) -> float:
        """Whole turns of fuel left. ``math.inf`` when nothing is consumed."""
        consumption = self.fuel_consumption()
        if consumption <= 0:
            return math.inf
        return math.floor(self.fuel / consumption)

    # --- Construction ---

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TurnSnapshot:
        """Build a snapshot from plain data (e.g. a serialized game state)."""
        buildings = []
        for raw in data.get("buildings", []):
            position = raw.get("position")
            buildings.append(
                BuildingView(
                    type=raw["type"],
                    production_mode=raw.get("productionMode", raw.get("production_mode")),
                    level=raw.get("level", 1),
                    destroyed=raw.get("destroyed", False),
                    can_produce=raw.get("canProduce", raw.get("can_produce", True)),
                    position=tuple(position) if position is not None else None,
                )
            )
        return cls(
            turn=data["turn"],
            buildings=tuple(buildings),
            resources=dict(data.get("resources", {})),
            fuel_consumption_base=data.get("fuelConsumptionBase", 0.0),
            fuel_consumption_per_building=data.get("fuelConsumptionPerBuilding", 0.0),
        )
