"""Tests for CampaignStats."""
from __future__ import annotations

from tick_campaign import CampaignStats, FastestCompletion


class TestRecording:
    def test_victory_updates_totals(self) -> None:
        stats = CampaignStats(attempts=2)
        stats.record_victory(1, 30.0, 5)
        stats.record_victory(2, 10.0, 8)
        assert stats.victories == 2
        assert stats.total_levels_completed == 2
        assert stats.total_completion_time == 40.0
        assert stats.total_play_time == 40.0
        assert stats.average_completion_time == 20.0

    def test_defeat_counts_play_time_only(self) -> None:
        stats = CampaignStats()
        stats.record_defeat(12.5)
        assert stats.defeats == 1
        assert stats.total_play_time == 12.5
        assert stats.total_completion_time == 0.0
        assert stats.average_completion_time == 0.0

    def test_fastest_completion_strictly_faster(self) -> None:
        stats = CampaignStats()
        stats.record_victory(1, 20.0, 5)
        stats.record_victory(2, 20.0, 4)
        assert stats.fastest_completion == FastestCompletion(level_id=1, time=20.0, turn=5)
        stats.record_victory(3, 19.0, 9)
        assert stats.fastest_completion.level_id == 3


class TestCopyAndSnapshot:
    def test_copy_is_independent(self) -> None:
        stats = CampaignStats()
        stats.record_victory(1, 5.0, 3)
        copied = stats.copy()
        stats.record_victory(2, 1.0, 2)
        assert copied.victories == 1
        assert copied.fastest_completion.level_id == 1

    def test_snapshot_restores(self) -> None:
        stats = CampaignStats(attempts=3)
        stats.record_victory(1, 8.0, 4)
        stats.record_defeat(2.0)
        restored = CampaignStats.from_snapshot(stats.snapshot())
        assert restored == stats

    def test_snapshot_is_plain_data(self) -> None:
        stats = CampaignStats()
        stats.record_victory(1, 8.0, 4)
        data = stats.snapshot()
        assert data["fastest_completion"] == {"level_id": 1, "time": 8.0, "turn": 4}

    def test_from_snapshot_ignores_unknown_keys(self) -> None:
        restored = CampaignStats.from_snapshot({"victories": 2, "legacy_field": "x"})
        assert restored.victories == 2
        assert restored.fastest_completion is None
