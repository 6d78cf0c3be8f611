"""Exceptions raised by campaign progression."""
from __future__ import annotations


class CampaignError(Exception):
    """Base class for campaign progression failures."""


class UnknownLevelError(CampaignError, KeyError):
    """Raised when a level id is absent from the registry or still locked."""

    def __init__(self, level_id: object, message: str) -> None:
        self.level_id = level_id
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class IncompatibleSaveError(CampaignError):
    """Raised when save data has the wrong version or shape."""


class LevelDataError(CampaignError, ValueError):
    """Raised when level data cannot be parsed into level definitions."""
