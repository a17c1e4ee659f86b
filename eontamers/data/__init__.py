"""
Static game data: typed definitions and the registry that loads them.
"""

from eontamers.data.definitions import (
    Achievement,
    Character,
    DailyReward,
    Element,
    EvolutionRule,
    Expedition,
    Faction,
    Gear,
    Item,
    ItemCategory,
    ItemStack,
    LootEntry,
    Milestone,
    QuestCategory,
    QuestDefinition,
    Rarity,
    Reward,
    Skill,
    SkillNode,
    SkillTree,
    Species,
    StatBonus,
    SupportSkill,
)
from eontamers.data.registry import GameDatabase, BUNDLED_DATA_DIR

__all__ = [
    "GameDatabase",
    "BUNDLED_DATA_DIR",
    "Achievement",
    "Character",
    "DailyReward",
    "Element",
    "EvolutionRule",
    "Expedition",
    "Faction",
    "Gear",
    "Item",
    "ItemCategory",
    "ItemStack",
    "LootEntry",
    "Milestone",
    "QuestCategory",
    "QuestDefinition",
    "Rarity",
    "Reward",
    "Skill",
    "SkillNode",
    "SkillTree",
    "Species",
    "StatBonus",
    "SupportSkill",
]
