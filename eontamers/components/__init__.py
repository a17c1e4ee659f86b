"""
Runtime state components (data-only pydantic models).
"""

from eontamers.components.stats import Stats, STAT_FIELDS
from eontamers.components.creature import CreatureInstance, MAX_LEVEL, MAX_ENHANCEMENT, new_uid
from eontamers.components.tamer import Tamer, InventoryItem, ActiveExpedition
from eontamers.components.state import (
    GameState,
    WorldPosition,
    ObjectiveProgress,
    IncubatorSlot,
    DailyLoginRecord,
    StoryProgress,
    STATE_VERSION,
)

__all__ = [
    "Stats",
    "STAT_FIELDS",
    "CreatureInstance",
    "MAX_LEVEL",
    "MAX_ENHANCEMENT",
    "new_uid",
    "Tamer",
    "InventoryItem",
    "ActiveExpedition",
    "GameState",
    "WorldPosition",
    "ObjectiveProgress",
    "IncubatorSlot",
    "DailyLoginRecord",
    "StoryProgress",
    "STATE_VERSION",
]
