"""Level definitions and the ordered level registry."""
from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from tick_campaign.errors import LevelDataError, UnknownLevelError

logger = logging.getLogger(__name__)

DEFAULT_CAMPAIGN = Path(__file__).resolve().parent / "data" / "campaign.yaml"


@dataclass(frozen=True)
class LevelDef:
    """One campaign stage. Condition configs stay raw until a level loads."""

    id: int
    name: str
    enabled: bool = True
    description: str = ""
    short_description: str = ""
    win_conditions: tuple[dict[str, Any], ...] = ()
    lose_conditions: tuple[dict[str, Any], ...] = ()
    required_features: tuple[str, ...] = ()
    new_mechanics: tuple[str, ...] = ()
    story_intro: str = ""
    rewards: dict[str, Any] = field(default_factory=dict)


class LevelRegistry:
    """Ordered level definitions plus the feature flags that unlock them."""

    def __init__(
        self,
        levels: Iterable[LevelDef] = (),
        features: Mapping[str, bool] | None = None,
    ) -> None:
        self._levels: dict[int, LevelDef] = {}
        self._features: dict[str, bool] = dict(features or {})
        for level in levels:
            self.define(level)

    # --- Registration ---

    def define(self, level: LevelDef) -> None:
        """Register a level. Insertion order preserved; redefining keeps the slot."""
        self._levels[level.id] = level

    # --- Queries ---

    def get(self, level_id: int) -> LevelDef | None:
        return self._levels.get(level_id)

    def require(self, level_id: int) -> LevelDef:
        """Return a playable level. Raises UnknownLevelError if absent or locked."""
        level = self._levels.get(level_id)
        if level is None:
            raise UnknownLevelError(level_id, f"Invalid level id: {level_id!r}")
        if not self.is_unlocked(level_id):
            raise UnknownLevelError(level_id, f"Level {level_id} is not unlocked")
        return level

    def has(self, level_id: int) -> bool:
        return level_id in self._levels

    def ids(self) -> list[int]:
        return list(self._levels)

    def all(self) -> list[LevelDef]:
        return list(self._levels.values())

    def enabled_levels(self) -> list[LevelDef]:
        return [level for level in self._levels.values() if level.enabled]

    def is_unlocked(self, level_id: int) -> bool:
        """Enabled, and every feature the level needs is switched on."""
        level = self._levels.get(level_id)
        if level is None:
            return False
        return level.enabled and all(self._features.get(f, False) for f in level.required_features)

    def next_level(self, level_id: int) -> LevelDef | None:
        """First unlocked level after ``level_id`` in registry order."""
        ids = self.ids()
        if level_id not in self._levels:
            return None
        for candidate in ids[ids.index(level_id) + 1:]:
            if self.is_unlocked(candidate):
                return self._levels[candidate]
        return None

    # --- Features ---

    def features(self) -> dict[str, bool]:
        return dict(self._features)

    def enable_feature(self, name: str) -> list[int]:
        """Switch a feature on and enable levels that no longer miss anything.

        Returns the ids of levels enabled by this call.
        """
        if name not in self._features:
            logger.warning("Unknown feature: %s", name)
            return []
        self._features[name] = True
        enabled: list[int] = []
        for level in list(self._levels.values()):
            if level.enabled:
                continue
            if all(self._features.get(f, False) for f in level.required_features):
                self._levels[level.id] = dataclasses.replace(level, enabled=True)
                enabled.append(level.id)
                logger.info("Auto-enabled level %d: %s", level.id, level.name)
        logger.info("Enabled feature: %s", name)
        return enabled

    # --- Reporting ---

    def level_progress(self, level_id: int) -> dict[str, Any] | None:
        level = self._levels.get(level_id)
        if level is None:
            return None
        return {
            "id": level.id,
            "name": level.name,
            "description": level.short_description,
            "unlocked": self.is_unlocked(level_id),
            "win_conditions": len(level.win_conditions),
            "lose_conditions": len(level.lose_conditions),
            "new_mechanics": list(level.new_mechanics),
            "required_features": list(level.required_features),
            "missing_features": [
                f for f in level.required_features if not self._features.get(f, False)
            ],
        }

    def campaign_stats(self) -> dict[str, Any]:
        total = len(self._levels)
        enabled = len(self.enabled_levels())
        return {
            "total_levels": total,
            "enabled_levels": enabled,
            "implemented_features": sum(1 for on in self._features.values() if on),
            "total_features": len(self._features),
            "completion_percentage": round(enabled / total * 100) if total else 0,
        }

    # --- Loading ---

    @classmethod
    def from_dicts(cls, data: Mapping[str, Any], source: str = "<data>") -> LevelRegistry:
        """Build a registry from ``{"features": {...}, "levels": [...]}``."""
        if not isinstance(data, Mapping):
            raise LevelDataError(f"{source}: expected a mapping with 'levels'")
        raw_levels = data.get("levels")
        if not isinstance(raw_levels, list) or not raw_levels:
            raise LevelDataError(f"{source}: 'levels' must be a non-empty list")
        features = data.get("features") or {}
        if not isinstance(features, Mapping):
            raise LevelDataError(f"{source}: 'features' must be a mapping")
        levels = [_parse_level(raw, source) for raw in raw_levels]
        seen: set[int] = set()
        for level in levels:
            if level.id in seen:
                raise LevelDataError(f"{source}: duplicate level id {level.id}")
            seen.add(level.id)
        return cls(levels, {str(k): bool(v) for k, v in features.items()})

    @classmethod
    def from_yaml(cls, path: str | Path) -> LevelRegistry:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Level file not found: {path}")
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise LevelDataError(f"{path.name}: invalid YAML: {e}") from e
        return cls.from_dicts(raw, source=path.name)


def default_campaign() -> LevelRegistry:
    """The bundled five-level refinery campaign."""
    return LevelRegistry.from_yaml(DEFAULT_CAMPAIGN)


def _parse_level(raw: Any, source: str) -> LevelDef:
    if not isinstance(raw, Mapping):
        raise LevelDataError(f"{source}: each level must be a mapping")
    level_id = raw.get("id")
    if isinstance(level_id, bool) or not isinstance(level_id, int):
        raise LevelDataError(f"{source}: level id must be an integer, got {level_id!r}")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise LevelDataError(f"{source}: level {level_id} is missing 'name'")

    def _conditions(key: str) -> tuple[dict[str, Any], ...]:
        items = raw.get(key) or []
        if not isinstance(items, list):
            raise LevelDataError(f"{source}: level {level_id} '{key}' must be a list")
        # Entries are validated per condition when the level loads.
        return tuple(copy.deepcopy(item) for item in items)

    def _strings(key: str) -> tuple[str, ...]:
        items = raw.get(key) or []
        if not isinstance(items, list):
            raise LevelDataError(f"{source}: level {level_id} '{key}' must be a list")
        return tuple(str(item) for item in items)

    return LevelDef(
        id=level_id,
        name=name.strip(),
        enabled=bool(raw.get("enabled", True)),
        description=str(raw.get("description", "")),
        short_description=str(raw.get("shortDescription", "")),
        win_conditions=_conditions("winConditions"),
        lose_conditions=_conditions("loseConditions"),
        required_features=_strings("requiredFeatures"),
        new_mechanics=_strings("newMechanics"),
        story_intro=str(raw.get("storyIntro", "")).strip(),
        rewards=dict(raw.get("rewards") or {}),
    )
