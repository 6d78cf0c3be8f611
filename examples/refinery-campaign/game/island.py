"""Toy refinery island that produces a TurnSnapshot each turn."""
from __future__ import annotations

from dataclasses import dataclass, field

from tick_condition import BuildingView, TurnSnapshot

MAX_SLOTS = 6
START_FUEL = 10.0
START_WASTE = 12.0
FUEL_BASE = 1.0
FUEL_PER_BUILDING = 0.5
WASTE_PER_TURN = 1.0


@dataclass
class Island:
    """Refineries in fixed slots, converting waste into fuel or materials."""

    turn: int = 1
    fuel: float = START_FUEL
    materials: float = 0.0
    waste: float = START_WASTE
    slots: list[str | None] = field(default_factory=list)

    def reset(self) -> None:
        self.turn = 1
        self.fuel = START_FUEL
        self.materials = 0.0
        self.waste = START_WASTE
        self.slots = []

    def build(self, mode: str | None) -> bool:
        if len(self.slots) >= MAX_SLOTS:
            return False
        self.slots.append(mode)
        return True

    def demolish(self) -> bool:
        if not self.slots:
            return False
        self.slots.pop()
        return True

    def cycle_mode(self, index: int) -> None:
        order = [None, "fuel", "materials"]
        if 0 <= index < len(self.slots):
            current = order.index(self.slots[index])
            self.slots[index] = order[(current + 1) % len(order)]

    def end_turn(self) -> None:
        """Convert waste, burn fuel, and move to the next turn."""
        for mode in self.slots:
            if mode is None or self.waste < 1:
                continue
            self.waste -= 1
            if mode == "fuel":
                self.fuel += 1.5
            else:
                self.materials += 1
        self.fuel = max(0.0, self.fuel - (FUEL_BASE + FUEL_PER_BUILDING * len(self.slots)))
        self.waste += WASTE_PER_TURN
        self.turn += 1

    def snapshot(self) -> TurnSnapshot:
        can_produce = self.waste >= 1
        return TurnSnapshot(
            turn=self.turn,
            buildings=tuple(
                BuildingView(
                    "refinery",
                    production_mode=mode,
                    can_produce=can_produce,
                    position=(i, 0),
                )
                for i, mode in enumerate(self.slots)
            ),
            resources={"fuel": self.fuel, "materials": self.materials, "waste": self.waste},
            fuel_consumption_base=FUEL_BASE,
            fuel_consumption_per_building=FUEL_PER_BUILDING,
        )
