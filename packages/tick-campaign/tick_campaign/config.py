"""Campaign configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CampaignConfig:
    """Immutable tuning values for the progression controller.

    Attributes:
        history_size: Aggregate check results kept per level.
        celebration_delay: Seconds between a level win and the auto-advance.
        auto_advance: Start the next level when the delay elapses. When False
            only ``progression:showNextLevel`` is published.
        save_version: Version tag written to and required from save data.
    """

    history_size: int = 10
    celebration_delay: float = 2.0
    auto_advance: bool = True
    save_version: str = "1.0"

    def __post_init__(self) -> None:
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")
        if self.celebration_delay < 0:
            raise ValueError(f"celebration_delay must be >= 0, got {self.celebration_delay}")
        if not self.save_version:
            raise ValueError("save_version must be non-empty")
