"""tick-campaign - Level registry and campaign progression for the condition engine."""
from __future__ import annotations

from tick_campaign.config import CampaignConfig
from tick_campaign.controller import PendingAdvance, ProgressionController
from tick_campaign.errors import (
    CampaignError,
    IncompatibleSaveError,
    LevelDataError,
    UnknownLevelError,
)
from tick_campaign.levels import LevelDef, LevelRegistry, default_campaign
from tick_campaign.signals import SignalBus
from tick_campaign.stats import CampaignStats, FastestCompletion
from tick_campaign.systems import make_progression_system

__all__ = [
    "CampaignConfig",
    "ProgressionController",
    "PendingAdvance",
    "LevelDef",
    "LevelRegistry",
    "default_campaign",
    "SignalBus",
    "CampaignStats",
    "FastestCompletion",
    "make_progression_system",
    "CampaignError",
    "UnknownLevelError",
    "IncompatibleSaveError",
    "LevelDataError",
]
