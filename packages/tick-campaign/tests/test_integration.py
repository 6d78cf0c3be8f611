"""End-to-end runs of the bundled campaign through the progression system."""
from __future__ import annotations

from tick_condition import BuildingView, TurnSnapshot

from tick_campaign import (
    ProgressionController,
    SignalBus,
    default_campaign,
    make_progression_system,
)

BOTH_REFINERIES = (
    BuildingView("refinery", production_mode="fuel"),
    BuildingView("refinery", production_mode="materials"),
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _setup():
    bus = SignalBus()
    clock = FakeClock()
    controller = ProgressionController(default_campaign(), bus=bus, clock=clock)
    received: list[tuple[str, dict]] = []

    def record(signal_name: str, data: dict) -> None:
        received.append((signal_name, data))

    for name in (
        "progression:levelCompleted",
        "progression:levelFailed",
        "progression:campaignCompleted",
        "conditions:victory",
        "conditions:defeat",
    ):
        bus.subscribe(name, record)
    system = make_progression_system(controller, bus)
    return controller, system, received, clock


class TestFirstSpark:
    def test_refinery_streak_wins_on_turn_five(self) -> None:
        """Refineries placed during turn 2 appear in the turn 3 snapshot onward."""
        controller, system, received, _ = _setup()
        assert controller.start_level(1) is True

        victory_turns = []
        for turn in range(1, 6):
            buildings = BOTH_REFINERIES if turn >= 3 else ()
            result = system(TurnSnapshot(turn=turn, buildings=buildings, resources={"fuel": 20}))
            if result.victory:
                victory_turns.append(turn)

        assert victory_turns == [5]
        streak = controller.conditions.win_conditions[2]
        assert streak.kind == "consecutive_turns"
        assert streak.first_met_turn == 5
        completed = [data for name, data in received if name == "progression:levelCompleted"]
        assert len(completed) == 1
        assert completed[0]["completion_turn"] == 5
        # Level 1 is the only enabled level in the bundled campaign.
        assert completed[0]["is_campaign_complete"] is True
        assert [name for name, _ in received].count("progression:campaignCompleted") == 1

    def test_fuel_runs_out_on_turn_nine(self) -> None:
        controller, system, received, _ = _setup()
        controller.start_level(1)

        for turn in range(1, 12):
            fuel = max(0, 9 - turn)
            system(TurnSnapshot(turn=turn, resources={"fuel": fuel}))

        depletion = controller.conditions.lose_conditions[0]
        assert depletion.kind == "fuel_depletion"
        assert depletion.is_met is True
        assert depletion.first_met_turn == 9
        failed = [data for name, data in received if name == "progression:levelFailed"]
        assert len(failed) == 1
        assert failed[0]["fail_turn"] == 9
        assert controller.stats.defeats == 1

    def test_turn_limit_defeat(self) -> None:
        controller, system, received, _ = _setup()
        controller.start_level(1)
        for turn in range(1, 27):
            system(TurnSnapshot(turn=turn, resources={"fuel": 50}))
        failed = [data for name, data in received if name == "progression:levelFailed"]
        assert [d["fail_turn"] for d in failed] == [26]
        assert [o.condition.kind for o in failed[0]["triggered_conditions"]] == ["turn_limit"]

    def test_broken_streak_delays_victory(self) -> None:
        controller, system, _, _ = _setup()
        controller.start_level(1)
        fuel_only = (BuildingView("refinery", production_mode="fuel"),)
        layout = [BOTH_REFINERIES, BOTH_REFINERIES, fuel_only, BOTH_REFINERIES,
                  BOTH_REFINERIES, BOTH_REFINERIES]
        wins = [
            system(TurnSnapshot(turn=t, buildings=b, resources={"fuel": 20})).victory
            for t, b in enumerate(layout, start=1)
        ]
        assert wins == [False, False, False, False, False, True]


class TestCampaignFlow:
    def test_unlocked_level_auto_advances(self) -> None:
        controller, system, received, clock = _setup()
        controller.levels.enable_feature("population")
        assert controller.levels.enable_feature("storage_limits") == [5]
        controller.start_level(1)
        for turn in range(1, 4):
            system(TurnSnapshot(turn=turn, buildings=BOTH_REFINERIES, resources={"fuel": 20}))
        assert 1 in controller.completed_levels
        assert controller.pending_advance is not None

        clock.now = controller.config.celebration_delay
        system(TurnSnapshot(turn=1, resources={"fuel": 10}))
        assert controller.current_level_id == 5
        # population_count is not a registered condition type.
        assert len(controller.conditions.win_conditions) == 1
        assert len(controller.conditions.load_errors) == 1

    def test_storage_limit_fails_lean_times(self) -> None:
        controller, system, received, _ = _setup()
        controller.levels.enable_feature("population")
        controller.levels.enable_feature("storage_limits")
        controller.start_level(5)
        system(TurnSnapshot(turn=1, resources={"fuel": 10}))
        system(TurnSnapshot(turn=2, resources={"fuel": 16}))
        failed = [data for name, data in received if name == "progression:levelFailed"]
        assert len(failed) == 1
        assert failed[0]["triggered_conditions"][0].condition.kind == "storage_exceeded"


class TestSystems:
    def test_system_flushes_turn_signals(self) -> None:
        """Namespace subscribers see every progression signal of the turn."""
        controller, system, _, _ = _setup()
        seen = []
        controller.bus.subscribe("progression:*", lambda name, data: seen.append(name))
        controller.start_level(1)
        system(TurnSnapshot(turn=1, resources={"fuel": 20}))
        assert seen == ["progression:levelStarted", "progression:conditionsChecked"]
        assert controller.bus.pending() == []

    def test_on_result_callback(self) -> None:
        controller, _, _, _ = _setup()
        calls = []
        system = make_progression_system(
            controller, on_result=lambda snapshot, result: calls.append(result.turn)
        )
        system(TurnSnapshot(turn=1, resources={"fuel": 5}))
        controller.start_level(1)
        system(TurnSnapshot(turn=2, resources={"fuel": 5}))
        assert calls == [2]
