"""System factories: the per-turn entry point for a host loop."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from tick_condition import AggregateResult, TurnSnapshot

    from tick_campaign.controller import ProgressionController
    from tick_campaign.signals import SignalBus


def make_progression_system(
    controller: ProgressionController,
    bus: SignalBus | None = None,
    on_result: Callable[[TurnSnapshot, AggregateResult], None] | None = None,
) -> Callable[[TurnSnapshot], AggregateResult | None]:
    """Return a system to call once per simulated turn.

    Turn order:
    1. Controller processes any due auto-advance, then checks the active level
    2. on_result callback (if a check ran)
    3. Bus flush, so subscribers see this turn's signals after evaluation ends
    """

    def progression_system(snapshot: TurnSnapshot) -> AggregateResult | None:
        result = controller.tick(snapshot)
        if result is not None and on_result is not None:
            on_result(snapshot, result)
        if bus is not None:
            bus.flush()
        return result

    return progression_system
