"""Injected pub/sub bus for progression signals, flushed once per turn."""
from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

_Handler = Callable[[str, dict[str, Any]], None]

WILDCARD = "*"


def _patterns(signal_name: str) -> list[str]:
    """Subscription keys that receive ``signal_name``, most specific first.

    ``"progression:levelStarted"`` reaches subscribers of itself, of
    ``"progression:*"``, and of ``"*"``.
    """
    patterns = [signal_name]
    namespace, sep, _ = signal_name.partition(":")
    if sep:
        patterns.append(f"{namespace}:{WILDCARD}")
    if signal_name != WILDCARD:
        patterns.append(WILDCARD)
    return patterns


class SignalBus:
    """Queues published signals until :meth:`flush`.

    Subscribe to an exact name, to a whole namespace (``"conditions:*"``),
    or to everything (``"*"``). For each signal, exact subscribers run
    first, then namespace, then catch-all, each group in subscription
    order. Signals published by a handler during a flush are queued for
    the next flush.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[_Handler]] = {}
        self._queue: list[tuple[str, dict[str, Any]]] = []

    def subscribe(self, pattern: str, handler: _Handler) -> None:
        if not pattern:
            raise ValueError("signal pattern must be non-empty")
        self._subscribers.setdefault(pattern, []).append(handler)

    def unsubscribe(self, pattern: str, handler: _Handler) -> None:
        handlers = self._subscribers.get(pattern)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, signal_name: str, **data: Any) -> None:
        if WILDCARD in signal_name:
            raise ValueError(f"cannot publish a wildcard signal: {signal_name!r}")
        self._queue.append((signal_name, data))

    def pending(self) -> list[tuple[str, dict[str, Any]]]:
        """Signals waiting for the next flush, oldest first."""
        return list(self._queue)

    def handlers_for(self, signal_name: str) -> list[_Handler]:
        """Every handler a signal would reach, in dispatch order."""
        found: list[_Handler] = []
        for pattern in _patterns(signal_name):
            found.extend(self._subscribers.get(pattern, []))
        return found

    def flush(self) -> int:
        """Dispatch queued signals. Returns how many were dispatched."""
        batch = self._queue
        self._queue = []
        for signal_name, data in batch:
            handlers = self.handlers_for(signal_name)
            if not handlers:
                logger.debug("No subscribers for %s", signal_name)
            for handler in handlers:
                handler(signal_name, data)
        return len(batch)

    def clear(self) -> None:
        if self._queue:
            logger.debug("Dropping %d pending signals", len(self._queue))
        self._queue.clear()
