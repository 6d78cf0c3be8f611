"""Tests for TurnSnapshot and BuildingView."""
from __future__ import annotations

import dataclasses
import math

import pytest

from tick_condition import BuildingView, TurnSnapshot


class TestBuildingView:
    def test_mode_defaults_to_none_string(self) -> None:
        assert BuildingView("refinery").mode == "none"
        assert BuildingView("refinery", production_mode="fuel").mode == "fuel"

    def test_frozen(self) -> None:
        b = BuildingView("refinery")
        with pytest.raises(dataclasses.FrozenInstanceError):
            b.type = "habitat"  # type: ignore[misc]


class TestTurnSnapshot:
    def test_resources_are_copied_and_read_only(self) -> None:
        resources = {"fuel": 10}
        snap = TurnSnapshot(turn=1, resources=resources)
        resources["fuel"] = 0
        assert snap.fuel == 10
        with pytest.raises(TypeError):
            snap.resources["fuel"] = 5  # type: ignore[index]

    def test_buildings_become_tuple(self) -> None:
        snap = TurnSnapshot(turn=1, buildings=[BuildingView("refinery")])  # type: ignore[arg-type]
        assert isinstance(snap.buildings, tuple)

    def test_missing_resource_is_zero(self) -> None:
        assert TurnSnapshot(turn=1).amount("waste") == 0

    def test_buildings_of(self) -> None:
        snap = TurnSnapshot(
            turn=1,
            buildings=(BuildingView("refinery"), BuildingView("habitat"), BuildingView("refinery")),
        )
        assert len(snap.buildings_of("refinery")) == 2
        assert snap.buildings_of("park") == []


class TestFuelEstimate:
    def test_consumption_scales_with_buildings(self) -> None:
        snap = TurnSnapshot(
            turn=1,
            buildings=(BuildingView("refinery"), BuildingView("refinery")),
            resources={"fuel": 10},
            fuel_consumption_base=1,
            fuel_consumption_per_building=0.5,
        )
        assert snap.fuel_consumption() == 2.0
        assert snap.turns_remaining() == 5

    def test_turns_remaining_floors(self) -> None:
        snap = TurnSnapshot(turn=1, resources={"fuel": 7}, fuel_consumption_base=2)
        assert snap.turns_remaining() == 3

    def test_no_consumption_is_infinite(self) -> None:
        snap = TurnSnapshot(turn=1, resources={"fuel": 7})
        assert math.isinf(snap.turns_remaining())


class TestFromDict:
    def test_builds_snapshot(self) -> None:
        snap = TurnSnapshot.from_dict({
            "turn": 4,
            "buildings": [
                {"type": "refinery", "productionMode": "fuel", "position": [1, 2]},
                {"type": "habitat", "level": 0, "destroyed": True},
            ],
            "resources": {"fuel": 12, "materials": 3},
            "fuelConsumptionBase": 1,
            "fuelConsumptionPerBuilding": 0.5,
        })
        assert snap.turn == 4
        assert snap.buildings[0] == BuildingView(
            "refinery", production_mode="fuel", position=(1, 2)
        )
        assert snap.buildings[1].destroyed is True
        assert snap.buildings[1].level == 0
        assert snap.amount("materials") == 3
        assert snap.fuel_consumption() == 2.0

    def test_minimal(self) -> None:
        snap = TurnSnapshot.from_dict({"turn": 1})
        assert snap.buildings == ()
        assert snap.fuel == 0
