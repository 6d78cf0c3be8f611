"""Cross-level campaign statistics."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any


@dataclass
class FastestCompletion:
    level_id: int
    time: float
    turn: int


@dataclass
class CampaignStats:
    """Running totals across every level attempt.

    ``attempts`` grows once per started level; ``victories + defeats``
    never exceeds it. Times are seconds on the controller's clock.
    """

    attempts: int = 0
    victories: int = 0
    defeats: int = 0
    total_levels_completed: int = 0
    total_play_time: float = 0.0
    total_completion_time: float = 0.0
    average_completion_time: float = 0.0
    fastest_completion: FastestCompletion | None = None

    def record_victory(self, level_id: int, elapsed: float, turn: int) -> None:
        self.victories += 1
        self.total_levels_completed += 1
        self.total_play_time += elapsed
        self.total_completion_time += elapsed
        self.average_completion_time = self.total_completion_time / self.total_levels_completed
        if self.fastest_completion is None or elapsed < self.fastest_completion.time:
            self.fastest_completion = FastestCompletion(level_id=level_id, time=elapsed, turn=turn)

    def record_defeat(self, elapsed: float) -> None:
        self.defeats += 1
        self.total_play_time += elapsed

    def copy(self) -> CampaignStats:
        return dataclasses.replace(
            self,
            fastest_completion=(
                dataclasses.replace(self.fastest_completion)
                if self.fastest_completion is not None
                else None
            ),
        )

    def snapshot(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> CampaignStats:
        """Rebuild from snapshot() output. Unknown keys are ignored."""
        known = {f.name for f in dataclasses.fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        fastest = values.pop("fastest_completion", None)
        stats = cls(**values)
        if fastest is not None:
            stats.fastest_completion = FastestCompletion(**fastest)
        return stats
