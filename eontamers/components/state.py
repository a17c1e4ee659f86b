"""
Root game state.

GameState is the single document the manager owns and the save
subsystems persist (model_dump(mode="json") / model_validate).
"""

from __future__ import annotations

from pydantic import Field

from eonengine.core.component import Component
from eontamers.components.tamer import Tamer


STATE_VERSION = 1

FlagValue = bool | int | float | str


class WorldPosition(Component):
    x: float = 400.0
    y: float = 300.0


class ObjectiveProgress(Component):
    """Per-save copy of one quest objective."""
    type: str
    target: str
    count: int = 1
    current: int = 0

    @property
    def is_complete(self) -> bool:
        return self.current >= self.count


class IncubatorSlot(Component):
    """Egg incubator; empty when egg_id is None."""
    egg_id: str | None = None
    started_at: float = 0.0


class DailyLoginRecord(Component):
    last_claim_date: str | None = None
    streak: int = 0
    total_claims: int = 0


class StoryProgress(Component):
    current_act: int = 1
    main_quests_completed: list[str] = Field(default_factory=list)


def _default_incubators() -> list[IncubatorSlot]:
    return [IncubatorSlot(), IncubatorSlot()]


class GameState(Component):
    """
    Everything that is saved.

    flags holds both boolean story flags and numeric quest counters
    ("quest_progress_<quest id>").
    """
    version: int = STATE_VERSION
    tamer: Tamer = Field(default_factory=Tamer)
    world_position: WorldPosition = Field(default_factory=WorldPosition)
    current_scene: str = "BootScene"
    current_region: str | None = None
    flags: dict[str, FlagValue] = Field(default_factory=dict)
    game_time: float = 1200.0
    play_time: float = 0.0
    active_quests: list[str] = Field(default_factory=list)
    pending_rewards: list[str] = Field(default_factory=list)
    completed_quests: list[str] = Field(default_factory=list)
    active_quest_objectives: dict[str, list[ObjectiveProgress]] = Field(default_factory=dict)
    reputation: dict[str, int] = Field(default_factory=dict)
    incubators: list[IncubatorSlot] = Field(default_factory=_default_incubators)
    daily_login: DailyLoginRecord = Field(default_factory=DailyLoginRecord)
    story_progress: StoryProgress = Field(default_factory=StoryProgress)
    language: str = "en"
    last_quest_refresh: float = 0.0
    last_weekly_refresh: float | None = None
    shop_stock: list[str] = Field(default_factory=list)
    shop_next_refresh: float | None = None

    def counter(self, key: str) -> int:
        """Numeric flag value (0 when unset or non-numeric)."""
        value = self.flags.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return int(value)

    def bump(self, key: str, amount: int = 1) -> int:
        """Increment a numeric flag in place and return the new value."""
        value = self.counter(key) + amount
        self.flags[key] = value
        return value
