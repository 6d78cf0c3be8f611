"""Tests for LevelDef, LevelRegistry, and YAML level loading."""
from __future__ import annotations

import pytest

from tick_campaign import LevelDataError, LevelDef, LevelRegistry, UnknownLevelError, default_campaign


def _registry() -> LevelRegistry:
    return LevelRegistry(
        [
            LevelDef(1, "One"),
            LevelDef(2, "Two", enabled=False, required_features=("storms",)),
            LevelDef(3, "Three"),
            LevelDef(4, "Four", required_features=("storms",)),
        ],
        features={"storms": False, "trade": False},
    )


class TestLevelRegistry:
    def test_order_preserved(self) -> None:
        assert _registry().ids() == [1, 2, 3, 4]

    def test_get_and_has(self) -> None:
        reg = _registry()
        assert reg.get(3).name == "Three"
        assert reg.get(99) is None
        assert reg.has(2) is True
        assert reg.has(99) is False

    def test_enabled_levels(self) -> None:
        assert [lv.id for lv in _registry().enabled_levels()] == [1, 3, 4]

    def test_unlocked_needs_features(self) -> None:
        reg = _registry()
        assert reg.is_unlocked(1) is True
        assert reg.is_unlocked(2) is False
        assert reg.is_unlocked(4) is False
        assert reg.is_unlocked(99) is False

    def test_require_unknown(self) -> None:
        with pytest.raises(UnknownLevelError) as excinfo:
            _registry().require(99)
        assert excinfo.value.level_id == 99
        assert "99" in str(excinfo.value)

    def test_require_locked(self) -> None:
        with pytest.raises(UnknownLevelError):
            _registry().require(2)

    def test_unknown_level_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            _registry().require(99)

    def test_next_level_skips_locked(self) -> None:
        reg = _registry()
        assert reg.next_level(1).id == 3
        assert reg.next_level(3) is None
        assert reg.next_level(99) is None

    def test_redefine_keeps_slot(self) -> None:
        reg = _registry()
        reg.define(LevelDef(1, "One again"))
        assert reg.ids() == [1, 2, 3, 4]
        assert reg.get(1).name == "One again"


class TestFeatures:
    def test_enable_feature_unlocks_levels(self) -> None:
        reg = _registry()
        assert reg.enable_feature("storms") == [2]
        assert reg.get(2).enabled is True
        assert reg.is_unlocked(2) is True
        assert reg.is_unlocked(4) is True
        assert reg.next_level(1).id == 2

    def test_enable_unknown_feature(self) -> None:
        reg = _registry()
        assert reg.enable_feature("teleporters") == []
        assert "teleporters" not in reg.features()

    def test_enable_unrelated_feature(self) -> None:
        reg = _registry()
        assert reg.enable_feature("trade") == []
        assert reg.features()["trade"] is True

    def test_features_copy(self) -> None:
        reg = _registry()
        reg.features()["storms"] = True
        assert reg.is_unlocked(4) is False


class TestReporting:
    def test_level_progress(self) -> None:
        progress = _registry().level_progress(4)
        assert progress["unlocked"] is False
        assert progress["missing_features"] == ["storms"]
        assert _registry().level_progress(99) is None

    def test_campaign_stats(self) -> None:
        stats = _registry().campaign_stats()
        assert stats["total_levels"] == 4
        assert stats["enabled_levels"] == 3
        assert stats["implemented_features"] == 0
        assert stats["total_features"] == 2
        assert stats["completion_percentage"] == 75


LEVELS_YAML = """\
features:
  storms: false
levels:
  - id: 1
    name: Calm Waters
    shortDescription: Warm up
    winConditions:
      - type: building_count
        building: refinery
        min: 1
    loseConditions:
      - type: turn_limit
        maxTurns: 10
    newMechanics: [Building]
  - id: 2
    name: Storm Front
    enabled: false
    requiredFeatures: [storms]
"""


class TestYamlLoading:
    def test_from_yaml(self, tmp_path) -> None:
        path = tmp_path / "levels.yaml"
        path.write_text(LEVELS_YAML, encoding="utf-8")
        reg = LevelRegistry.from_yaml(path)
        level = reg.get(1)
        assert level.name == "Calm Waters"
        assert level.short_description == "Warm up"
        assert level.enabled is True
        assert level.win_conditions == (
            {"type": "building_count", "building": "refinery", "min": 1},
        )
        assert level.new_mechanics == ("Building",)
        assert reg.get(2).required_features == ("storms",)
        assert reg.features() == {"storms": False}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            LevelRegistry.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("levels: [unclosed", encoding="utf-8")
        with pytest.raises(LevelDataError):
            LevelRegistry.from_yaml(path)

    @pytest.mark.parametrize("data", [
        [],
        {"levels": []},
        {"levels": "one"},
        {"levels": [{"id": 1, "name": "A"}, {"id": 1, "name": "B"}]},
        {"levels": [{"id": "1", "name": "A"}]},
        {"levels": [{"id": True, "name": "A"}]},
        {"levels": [{"id": 1}]},
        {"levels": [{"id": 1, "name": "A", "winConditions": {"type": "turn_limit"}}]},
        {"levels": [{"id": 1, "name": "A"}], "features": ["storms"]},
    ])
    def test_bad_shapes(self, data) -> None:
        with pytest.raises(LevelDataError):
            LevelRegistry.from_dicts(data)

    def test_bad_conditions_kept_raw(self) -> None:
        reg = LevelRegistry.from_dicts(
            {"levels": [{"id": 1, "name": "A", "winConditions": [{"type": "mystery"}]}]}
        )
        assert reg.get(1).win_conditions == ({"type": "mystery"},)


class TestDefaultCampaign:
    def test_five_levels(self) -> None:
        reg = default_campaign()
        assert reg.ids() == [1, 2, 3, 4, 5]
        assert [lv.id for lv in reg.enabled_levels()] == [1]

    def test_first_level(self) -> None:
        level = default_campaign().get(1)
        assert level.name == "First Spark"
        assert [c["type"] for c in level.win_conditions] == [
            "building_count",
            "building_count",
            "consecutive_turns",
        ]
        assert [c["type"] for c in level.lose_conditions] == ["fuel_depletion", "turn_limit"]

    def test_features_unlock_lean_times(self) -> None:
        reg = default_campaign()
        assert reg.enable_feature("population") == []
        assert reg.enable_feature("storage_limits") == [5]
        assert reg.next_level(1).id == 5
