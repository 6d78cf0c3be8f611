"""Exceptions raised by the condition engine."""
from __future__ import annotations


class ConditionError(Exception):
    """Base class for condition engine failures."""


class ConfigurationError(ConditionError, ValueError):
    """Raised when a condition config is missing fields or out of range."""

    def __init__(self, kind: str, message: str) -> None:
        self.kind = kind
        super().__init__(f"{kind}: {message}")


class ReentrantCheckError(ConditionError, RuntimeError):
    """Raised when check_all is re-entered while a check is running."""
