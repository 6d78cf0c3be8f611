"""ConditionSet: per-level win/lose aggregation with edge-triggered signals."""
from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol

from tick_condition.base import Condition
from tick_condition.errors import ConfigurationError, ReentrantCheckError
from tick_condition.registry import ConditionRegistry, default_registry
from tick_condition.snapshot import TurnSnapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 10


class SignalSink(Protocol):
    """Anything that accepts named signals with keyword payloads."""

    def publish(self, signal_name: str, **data: Any) -> None: ...


@dataclass(frozen=True)
class ConditionOutcome:
    condition: Condition
    result: bool
    status: dict[str, Any]


@dataclass(frozen=True)
class AggregateResult:
    """Everything one check_all call decided."""

    turn: int
    victory: bool
    defeat: bool
    win_results: tuple[ConditionOutcome, ...]
    lose_results: tuple[ConditionOutcome, ...]
    win_progress: float
    state_changed: bool
    timestamp: float

    @property
    def triggered(self) -> list[ConditionOutcome]:
        """Lose conditions that held on this check."""
        return [o for o in self.lose_results if o.result]


_Callback = Callable[[AggregateResult], None]


def _level_configs(level: Any, attr: str, key: str) -> list[Mapping[str, Any]]:
    if isinstance(level, Mapping):
        configs = level.get(key)
    else:
        configs = getattr(level, attr, None)
    return list(configs or [])


class ConditionSet:
    """Holds one level's win conditions (ALL) and lose conditions (ANY).

    Victory and defeat callbacks fire once per false-to-true transition of
    their aggregate flag. Signals are published on ``sink`` when given, each
    after its callback has returned.
    """

    def __init__(
        self,
        registry: ConditionRegistry | None = None,
        sink: SignalSink | None = None,
        on_victory: _Callback | None = None,
        on_defeat: _Callback | None = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {history_size}")
        self.registry = registry if registry is not None else default_registry()
        self.sink = sink
        self.on_victory = on_victory
        self.on_defeat = on_defeat
        self._clock = clock

        self.win_conditions: list[Condition] = []
        self.lose_conditions: list[Condition] = []
        self.last_win_check = False
        self.last_lose_check = False
        self.check_history: deque[AggregateResult] = deque(maxlen=history_size)
        self.load_errors: list[str] = []
        self._checking = False
        self._generation = 0

    # --- Loading ---

    def load_level(self, level: Any) -> None:
        """Build conditions from a level definition or a raw level dict.

        A condition whose config is rejected is logged and skipped; the rest
        of the level still loads.
        """
        self.load(
            _level_configs(level, "win_conditions", "winConditions"),
            _level_configs(level, "lose_conditions", "loseConditions"),
        )

    def load(
        self,
        win_configs: Iterable[Mapping[str, Any]],
        lose_configs: Iterable[Mapping[str, Any]],
    ) -> None:
        self.clear()
        self.win_conditions = self._build(win_configs, "win")
        self.lose_conditions = self._build(lose_configs, "lose")
        logger.info(
            "Loaded %d win conditions and %d lose conditions",
            len(self.win_conditions), len(self.lose_conditions),
        )

    def _build(self, configs: Iterable[Mapping[str, Any]], group: str) -> list[Condition]:
        built: list[Condition] = []
        for index, config in enumerate(configs, start=1):
            try:
                condition = self.registry.create(config)
            except ConfigurationError as e:
                message = f"{group} condition {index}: {e}"
                self.load_errors.append(message)
                logger.warning("Skipping %s", message)
                continue
            built.append(condition)
        return built

    # --- Checking ---

    def check_all(self, snapshot: TurnSnapshot) -> AggregateResult:
        if self._checking:
            raise ReentrantCheckError("check_all called while a check is in progress")
        self._checking = True
        try:
            return self._check_all(snapshot)
        finally:
            self._checking = False

    def _check_all(self, snapshot: TurnSnapshot) -> AggregateResult:
        win_results = tuple(self._outcome(c, snapshot) for c in self.win_conditions)
        victory = len(win_results) > 0 and all(o.result for o in win_results)

        lose_results = tuple(self._outcome(c, snapshot) for c in self.lose_conditions)
        defeat = any(o.result for o in lose_results)

        victory_edge = victory and not self.last_win_check
        defeat_edge = defeat and not self.last_lose_check
        changed = victory != self.last_win_check or defeat != self.last_lose_check

        result = AggregateResult(
            turn=snapshot.turn,
            victory=victory,
            defeat=defeat,
            win_results=win_results,
            lose_results=lose_results,
            win_progress=self.win_progress(),
            state_changed=changed,
            timestamp=self._clock(),
        )

        # Callbacks and sinks may reload or reset this set while we report
        generation = self._generation
        if changed:
            if victory_edge:
                self._victory(result)
            if defeat_edge and self._generation == generation:
                self._defeat(result)
            if self._generation == generation:
                self._publish("conditions:stateChanged", result=result)

        if self._generation != generation:
            logger.debug("Conditions reloaded during the turn %d check; result not kept", result.turn)
            return result

        self.check_history.append(result)
        self.last_win_check = victory
        self.last_lose_check = defeat
        return result

    @staticmethod
    def _outcome(condition: Condition, snapshot: TurnSnapshot) -> ConditionOutcome:
        result = condition.check(snapshot)
        return ConditionOutcome(condition=condition, result=result, status=condition.get_status())

    def win_progress(self) -> float:
        """Mean progress of the win conditions, 1.0 when there are none."""
        if not self.win_conditions:
            return 1.0
        return sum(c.get_progress() for c in self.win_conditions) / len(self.win_conditions)

    def _victory(self, result: AggregateResult) -> None:
        logger.info("Victory achieved on turn %d", result.turn)
        if self.on_victory is not None:
            self.on_victory(result)
        self._publish(
            "conditions:victory",
            turn=result.turn,
            conditions=result.win_results,
            progress=result.win_progress,
        )

    def _defeat(self, result: AggregateResult) -> None:
        triggered = result.triggered
        logger.info(
            "Defeat triggered on turn %d by %s",
            result.turn, [o.condition.description for o in triggered],
        )
        if self.on_defeat is not None:
            self.on_defeat(result)
        self._publish(
            "conditions:defeat",
            turn=result.turn,
            triggered_conditions=triggered,
            all_conditions=result.lose_results,
        )

    def _publish(self, signal_name: str, **data: Any) -> None:
        if self.sink is not None:
            self.sink.publish(signal_name, **data)

    # --- Queries ---

    @property
    def generation(self) -> int:
        """Bumped by every load, reset and clear."""
        return self._generation

    @property
    def last_result(self) -> AggregateResult | None:
        return self.check_history[-1] if self.check_history else None

    def get_status(self) -> dict[str, Any]:
        return {
            "win_conditions": [c.get_status() for c in self.win_conditions],
            "lose_conditions": [c.get_status() for c in self.lose_conditions],
            "win_progress": 1.0 if self.last_win_check else self.win_progress(),
            "last_check": self.last_result,
        }

    def debug_info(self) -> dict[str, Any]:
        return {
            "conditions_loaded": {
                "win": len(self.win_conditions),
                "lose": len(self.lose_conditions),
            },
            "last_results": {"win": self.last_win_check, "lose": self.last_lose_check},
            "history": len(self.check_history),
            "load_errors": list(self.load_errors),
            "conditions": {
                "win": [c.debug_info() for c in self.win_conditions],
                "lose": [c.debug_info() for c in self.lose_conditions],
            },
        }

    # --- Lifecycle ---

    def reset_all(self) -> None:
        """Reset every condition and the aggregate flags, keeping the conditions."""
        for condition in self.win_conditions + self.lose_conditions:
            condition.reset()
        self.last_win_check = False
        self.last_lose_check = False
        self.check_history.clear()
        self._generation += 1

    def clear(self) -> None:
        self.win_conditions = []
        self.lose_conditions = []
        self.last_win_check = False
        self.last_lose_check = False
        self.check_history.clear()
        self.load_errors = []
        self._generation += 1
