"""
Stat block shared by species templates and creature instances.
"""

from __future__ import annotations

from eonengine.core.component import Component


STAT_FIELDS = (
    "hp",
    "max_hp",
    "attack",
    "defense",
    "special_attack",
    "skill_resistance",
    "speed",
)


class Stats(Component):
    """
    Creature statistics.

    Attributes:
        hp: Stat-sheet hp (mirrors max_hp; the live value is current_hp)
        max_hp: Maximum HP
        attack: Physical power
        defense: Physical resistance
        special_attack: Skill power
        skill_resistance: Skill damage reduction
        speed: Turn order
    """
    hp: int = 0
    max_hp: int = 0
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    skill_resistance: int = 0
    speed: int = 0

    def plus(self, delta: Stats | dict[str, int]) -> Stats:
        """Return a copy with flat deltas added field by field."""
        if isinstance(delta, Stats):
            delta = delta.model_dump()
        values = self.model_dump()
        for key, value in delta.items():
            if value:
                values[key] += value
        return Stats(**values)
