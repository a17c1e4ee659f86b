"""
Owned creature instances.
"""

from __future__ import annotations

import uuid

from pydantic import Field

from eonengine.core.component import Component
from eontamers.components.stats import Stats


MAX_LEVEL = 80
MAX_ENHANCEMENT = 15


def new_uid() -> str:
    """Short unique id for a creature."""
    return uuid.uuid4().hex[:9]


class CreatureInstance(Component):
    """
    A creature owned by the tamer.

    current_stats is derived: progression functions recompute it from the
    species template whenever level, nodes, enhancement or held item change.
    """
    uid: str = Field(default_factory=new_uid)
    species_id: str
    level: int = Field(default=1, ge=1, le=MAX_LEVEL)
    exp: int = Field(default=0, ge=0)
    current_hp: int = Field(default=0, ge=0)
    current_stats: Stats = Field(default_factory=Stats)
    enhancement_level: int = Field(default=0, ge=0, le=MAX_ENHANCEMENT)
    evolution_history: list[str] = Field(default_factory=list)
    unlocked_nodes: list[str] = Field(default_factory=list)
    skill_points: int = Field(default=0, ge=0)
    held_item_id: str | None = None
    nickname: str | None = None

    @property
    def is_fainted(self) -> bool:
        return self.current_hp <= 0
