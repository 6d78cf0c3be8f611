"""ProgressionController: level lifecycle and campaign state machine."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping

from tick_condition import AggregateResult, ConditionRegistry, ConditionSet, TurnSnapshot

from tick_campaign.config import CampaignConfig
from tick_campaign.errors import IncompatibleSaveError, UnknownLevelError
from tick_campaign.levels import LevelDef, LevelRegistry
from tick_campaign.stats import CampaignStats

if TYPE_CHECKING:
    from tick_campaign.signals import SignalBus
    from tick_condition import SignalSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingAdvance:
    """An auto-advance waiting out the post-victory celebration."""

    level_id: int
    due: float
    payload: dict[str, Any]


class ProgressionController:
    """Owns the active level and drives Idle -> Active -> Victory/Defeat -> Active.

    Call :meth:`tick` once per simulated turn with a fresh snapshot. Win and
    lose decisions arrive synchronously from the ConditionSet; when both fire
    on the same turn the victory is honored and the defeat ignored.
    """

    def __init__(
        self,
        levels: LevelRegistry,
        bus: SignalSink | None = None,
        registry: ConditionRegistry | None = None,
        config: CampaignConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.levels = levels
        self.bus = bus
        self.config = config if config is not None else CampaignConfig()
        self._clock = clock
        self.conditions = ConditionSet(
            registry,
            sink=bus,
            on_victory=self._handle_victory,
            on_defeat=self._handle_defeat,
            history_size=self.config.history_size,
            clock=clock,
        )

        self.current_level_id: int | None = None
        self.current_level: LevelDef | None = None
        self.is_level_active = False
        self.is_paused = False
        self.completed_levels: set[int] = set()
        self.stats = CampaignStats()
        self.turns_played = 0
        self.campaign_start_time = clock()
        self.level_start_time = self.campaign_start_time
        self.pending_advance: PendingAdvance | None = None
        self._completed_at: dict[int, float] = {}
        self._bindings: list[tuple[Any, str, Callable[[str, dict[str, Any]], None]]] = []

    # --- Lifecycle ---

    def start_level(self, level_id: int) -> bool:
        """Load a level and make it active. False (no change) if unknown or locked."""
        try:
            level = self.levels.require(level_id)
        except UnknownLevelError as e:
            logger.error("Cannot start level: %s", e)
            return False

        self.conditions.load_level(level)
        self.current_level_id = level_id
        self.current_level = level
        self._reset_episode()
        self.stats.attempts += 1
        self.is_level_active = True
        self.level_start_time = self._clock()

        self._publish(
            "progression:levelStarted",
            level_id=level_id,
            level=level,
            attempt=self.stats.attempts,
            load_errors=list(self.conditions.load_errors),
        )
        logger.info("Started level %d: %s", level_id, level.name)
        return True

    def _reset_episode(self) -> None:
        # Turn and pause bookkeeping only; the simulated world is not ours to reset.
        self.turns_played = 0
        self.is_paused = False
        self.pending_advance = None

    def restart_current_level(self) -> bool:
        if self.current_level_id is None:
            return False
        logger.info("Restarting level %d", self.current_level_id)
        return self.start_level(self.current_level_id)

    def advance_to_next_level(self) -> bool:
        """Start the next unlocked level, or report the campaign complete."""
        self.pending_advance = None
        if self.current_level_id is None:
            candidates = [lv for lv in self.levels.all() if self.levels.is_unlocked(lv.id)]
            next_level = candidates[0] if candidates else None
        else:
            next_level = self.levels.next_level(self.current_level_id)

        if next_level is not None:
            logger.info("Advancing to level %d: %s", next_level.id, next_level.name)
            return self.start_level(next_level.id)

        logger.info("No next level available")
        self._publish(
            "progression:campaignCompleted",
            completed_levels=sorted(self.completed_levels),
            stats=self.stats.copy(),
            is_campaign_complete=self.is_campaign_complete(),
        )
        return False

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    # --- Per-turn entry point ---

    def tick(self, snapshot: TurnSnapshot) -> AggregateResult | None:
        """Evaluate the active level. Returns None when nothing was checked."""
        self.update()
        if not self.is_level_active or self.current_level is None or self.is_paused:
            return None

        generation = self.conditions.generation
        result = self.conditions.check_all(snapshot)
        if self.conditions.generation != generation:
            # A listener restarted or switched levels; this turn belonged to the old attempt
            return result
        self.turns_played += 1
        self._publish(
            "progression:conditionsChecked",
            level_id=self.current_level_id,
            results=result,
            progress=result.win_progress,
        )
        return result

    def update(self) -> None:
        """Fire a scheduled auto-advance once its delay has elapsed."""
        pending = self.pending_advance
        if pending is None or self._clock() < pending.due:
            return
        self.pending_advance = None
        self._publish("progression:showNextLevel", **pending.payload)
        if self.config.auto_advance:
            self.advance_to_next_level()

    # --- Outcome handlers ---

    def _handle_victory(self, result: AggregateResult) -> None:
        if not self.is_level_active or self.current_level_id is None:
            return
        now = self._clock()
        elapsed = now - self.level_start_time
        level_id = self.current_level_id

        self.stats.record_victory(level_id, elapsed, result.turn)
        if level_id not in self.completed_levels:
            self.completed_levels.add(level_id)
            self._completed_at[level_id] = now
        self.is_level_active = False

        campaign_complete = self.is_campaign_complete()
        payload = {
            "level_id": level_id,
            "level": self.current_level,
            "completion_time": elapsed,
            "completion_turn": result.turn,
            "conditions": result.win_results,
            "stats": self.stats.copy(),
            "next_level": self.levels.next_level(level_id),
            "is_campaign_complete": campaign_complete,
        }
        logger.info("Level %d completed in %.1fs (turn %d)", level_id, elapsed, result.turn)
        self._publish("progression:levelCompleted", **payload)

        if campaign_complete:
            self._publish("progression:campaignCompleted", **payload)
        else:
            self.pending_advance = PendingAdvance(
                level_id=level_id, due=now + self.config.celebration_delay, payload=payload
            )

    def _handle_defeat(self, result: AggregateResult) -> None:
        if not self.is_level_active or self.current_level_id is None:
            return
        elapsed = self._clock() - self.level_start_time
        self.stats.record_defeat(elapsed)
        self.is_level_active = False

        triggered = result.triggered
        logger.info(
            "Level %d failed on turn %d: %s",
            self.current_level_id, result.turn,
            [o.condition.description for o in triggered],
        )
        self._publish(
            "progression:levelFailed",
            level_id=self.current_level_id,
            level=self.current_level,
            fail_time=elapsed,
            fail_turn=result.turn,
            triggered_conditions=triggered,
            stats=self.stats.copy(),
            can_retry=True,
        )

    # --- Queries ---

    def is_campaign_complete(self) -> bool:
        """Every enabled level has been won at least once."""
        enabled = {level.id for level in self.levels.enabled_levels()}
        return enabled <= self.completed_levels

    def get_status(self) -> dict[str, Any]:
        enabled = {level.id for level in self.levels.enabled_levels()}
        done = len(enabled & self.completed_levels)
        return {
            "current_level_id": self.current_level_id,
            "current_level": self.current_level,
            "is_level_active": self.is_level_active,
            "is_paused": self.is_paused,
            "turns_played": self.turns_played,
            "completed_levels": sorted(self.completed_levels),
            "stats": self.stats.copy(),
            "conditions": self.conditions.get_status(),
            "campaign_progress": {
                "completed": done,
                "total": len(enabled),
                "percentage": round(done / len(enabled) * 100) if enabled else 0,
            },
        }

    def get_history(self) -> dict[str, Any]:
        order = sorted(self.completed_levels, key=lambda i: self._completed_at.get(i, 0.0))
        return {
            "completed_levels": [
                {
                    "id": level_id,
                    "level": self.levels.get(level_id),
                    "completed_at": self._completed_at.get(level_id),
                }
                for level_id in order
            ],
            "stats": self.stats.copy(),
            "campaign_start_time": self.campaign_start_time,
            "total_play_time": self.stats.total_play_time,
        }

    # --- Persistence ---

    def get_save_data(self) -> dict[str, Any]:
        return {
            "version": self.config.save_version,
            "current_level_id": self.current_level_id,
            "completed_levels": sorted(self.completed_levels),
            "completed_at": {str(k): v for k, v in self._completed_at.items()},
            "stats": self.stats.snapshot(),
            "campaign_start_time": self.campaign_start_time,
        }

    def load_save_data(self, data: Mapping[str, Any]) -> None:
        """Restore campaign progress. Raises IncompatibleSaveError, leaving state untouched."""
        if not isinstance(data, Mapping):
            raise IncompatibleSaveError("Save data must be a mapping")
        version = data.get("version")
        if version != self.config.save_version:
            logger.warning("Rejected save data with version %r", version)
            raise IncompatibleSaveError(
                f"Unsupported save version {version!r}, expected {self.config.save_version!r}"
            )
        try:
            current = data.get("current_level_id")
            if current is not None:
                current = int(current)
            completed = {int(i) for i in data.get("completed_levels", [])}
            completed_at = {int(k): float(v) for k, v in (data.get("completed_at") or {}).items()}
            stats = CampaignStats.from_snapshot(dict(data.get("stats") or {}))
            start_time = float(data.get("campaign_start_time", self._clock()))
        except (TypeError, ValueError) as e:
            raise IncompatibleSaveError(f"Malformed save data: {e}") from e

        self.current_level_id = current
        self.current_level = self.levels.get(current) if current is not None else None
        self.completed_levels = completed
        self._completed_at = {k: v for k, v in completed_at.items() if k in completed}
        self.stats = stats
        self.campaign_start_time = start_time
        logger.info(
            "Loaded progression: level %s, %d completed", current, len(completed)
        )

    # --- Signal wiring ---

    def bind(self, bus: SignalBus | None = None) -> None:
        """Subscribe to the game:newLevel / game:restartLevel / game:nextLevel commands."""
        target = bus if bus is not None else self.bus
        if target is None:
            raise ValueError("bind() needs a bus")
        handlers: dict[str, Callable[[str, dict[str, Any]], None]] = {
            "game:newLevel": lambda _name, data: self.start_level(data["level_id"]),
            "game:restartLevel": lambda _name, data: self.restart_current_level(),
            "game:nextLevel": lambda _name, data: self.advance_to_next_level(),
        }
        for signal_name, handler in handlers.items():
            target.subscribe(signal_name, handler)
            self._bindings.append((target, signal_name, handler))

    def destroy(self) -> None:
        for target, signal_name, handler in self._bindings:
            target.unsubscribe(signal_name, handler)
        self._bindings.clear()
        self.conditions.clear()
        self.is_level_active = False
        self.pending_advance = None

    def _publish(self, signal_name: str, **data: Any) -> None:
        if self.bus is not None:
            self.bus.publish(signal_name, **data)
