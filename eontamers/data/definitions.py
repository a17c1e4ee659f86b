"""
Static reference definitions.

Immutable templates loaded once at startup from the JSON tables under
eontamers/data/json/. Runtime state refers to them only by id.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from eonengine.core.component import Definition
from eontamers.components.stats import Stats


class Element(str, Enum):
    FIRE = "FIRE"
    WATER = "WATER"
    GRASS = "GRASS"
    ELECTRIC = "ELECTRIC"
    NEUTRAL = "NEUTRAL"
    DARK = "DARK"
    LIGHT = "LIGHT"


class Faction(str, Enum):
    EMBER_CLAN = "EMBER_CLAN"
    TIDE_WATCHERS = "TIDE_WATCHERS"
    STORM_HERDERS = "STORM_HERDERS"
    GLOOM_STALKERS = "GLOOM_STALKERS"
    GLADE_KEEPERS = "GLADE_KEEPERS"


class Rarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    LEGENDARY = "Legendary"


class ItemCategory(str, Enum):
    HEALING = "Healing"
    CAPTURE = "Capture"
    EVOLUTION = "Evolution"
    ENHANCEMENT = "Enhancement"
    EQUIPMENT = "Equipment"
    EGG = "Egg"
    MATERIAL = "Material"
    LICENSE = "License"
    MISC = "Misc"


class StatBonus(Definition):
    """Flat stat deltas; omitted fields are zero."""
    hp: int = 0
    max_hp: int = 0
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    skill_resistance: int = 0
    speed: int = 0

    def as_dict(self) -> dict[str, int]:
        return self.model_dump()


class ItemStack(Definition):
    item_id: str
    quantity: int = Field(default=1, ge=1)


# =============================================================================
# Species
# =============================================================================

class LootEntry(Definition):
    item_id: str
    chance: float = Field(ge=0.0, le=1.0)
    min_quantity: int = 1
    max_quantity: int = 1


class EvolutionRule(Definition):
    """
    One evolution path. Every specified requirement must hold;
    requirements left as None are treated as met.
    """
    target_species_id: str
    level_threshold: int = 1
    required_node_id: str | None = None
    required_item_id: str | None = None
    required_flag: str | None = None
    description: str = ""
    preview_skills: list[str] = Field(default_factory=list)


class SpawnCondition(Definition):
    type: Literal["LEVEL_MIN", "QUEST_FLAG", "TIME_OF_DAY"]
    value: int | str


class LearnableSkill(Definition):
    level: int = 1
    skill_id: str


class SpeciesSkills(Definition):
    basic: str
    special: str
    ultimate: str | None = None


class Species(Definition):
    """Immutable creature template."""
    id: str
    name: str
    element: Element
    faction: Faction
    rarity: Rarity = Rarity.COMMON
    base_stats: Stats
    evolution_stage: int = 1
    is_special: bool = False
    skills: SpeciesSkills | None = None
    learnable_skills: list[LearnableSkill] = Field(default_factory=list)
    loot_table: list[LootEntry] = Field(default_factory=list)
    evolutions: list[EvolutionRule] = Field(default_factory=list)
    spawn_conditions: list[SpawnCondition] = Field(default_factory=list)


# =============================================================================
# Skills and skill trees
# =============================================================================

class Skill(Definition):
    id: str
    name: str
    element: Element = Element.NEUTRAL
    category: Literal["BASIC", "SPECIAL", "ULTIMATE"] = "BASIC"
    power: int = 0
    cooldown: int = 0
    description: str = ""


class NodeEffect(Definition):
    type: Literal["stat", "skill"]
    stats: StatBonus | None = None
    skill_id: str | None = None


class SkillNode(Definition):
    id: str
    name: str
    description: str = ""
    cost: int = 1
    prerequisites: list[str] = Field(default_factory=list)
    effect: NodeEffect


class SkillTree(Definition):
    """Skill tree of one species (id is the species id)."""
    id: str
    nodes: list[SkillNode] = Field(default_factory=list)

    def node(self, node_id: str) -> SkillNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


# =============================================================================
# Items
# =============================================================================

class Item(Definition):
    """
    Inventory item.

    Category-specific fields:
        tier: Enhancement clone grade (D..S)
        stats: Held-item bonus for Equipment
        hatch_time / hatch_pool: Eggs (milliseconds / species ids)
    """
    id: str
    name: str
    description: str = ""
    category: ItemCategory = ItemCategory.MISC
    tier: Literal["D", "C", "B", "A", "S"] | None = None
    power: float = 0
    price: int = 0
    stats: StatBonus | None = None
    required_materials: list[ItemStack] = Field(default_factory=list)
    faction_lock: Faction | None = None
    hatch_time: int | None = None
    hatch_pool: list[str] = Field(default_factory=list)


GearSlot = Literal["weapon", "armor", "accessory1", "accessory2"]


class Gear(Definition):
    """Tamer equipment."""
    id: str
    name: str
    description: str = ""
    slot: GearSlot
    rarity: Rarity = Rarity.COMMON
    required_level: int = 1
    stats: StatBonus = Field(default_factory=StatBonus)
    price: int = 0


# =============================================================================
# Quests and achievements
# =============================================================================

class QuestCategory(str, Enum):
    MAIN = "main"
    SIDE = "side"
    DAILY = "daily"
    WEEKLY = "weekly"
    STORY = "story"


class Reward(Definition):
    gold: int = 0
    exp: int = 0
    items: list[ItemStack] = Field(default_factory=list)


class ObjectiveTemplate(Definition):
    type: Literal["defeat", "collect", "explore", "capture"]
    target: str
    count: int = Field(default=1, ge=1)


class QuestDefinition(Definition):
    id: str
    title: str
    description: str = ""
    category: QuestCategory = QuestCategory.SIDE
    requires_level: int | None = None
    required_flag: str | None = None
    prerequisites: list[str] = Field(default_factory=list)
    progress_max: int | None = None
    objectives: list[ObjectiveTemplate] = Field(default_factory=list)
    rewards: Reward = Field(default_factory=Reward)


class Achievement(Definition):
    id: str
    name: str
    description: str = ""
    category: str = "misc"
    target: int = 1
    reward: Reward = Field(default_factory=Reward)


# =============================================================================
# Tamer progression
# =============================================================================

class Milestone(Definition):
    """
    Tamer level unlock. unlock_skill is either one skill for everyone
    or a character id -> skill id map.
    """
    id: str
    level: int
    party_slots: int | None = None
    unlock_skill: str | dict[str, str] | None = None


class SupportSkill(Definition):
    id: str
    name: str
    description: str = ""
    cooldown: int = 0
    duration: int | None = None
    effect: Literal["HEAL", "BUFF_ATK", "BUFF_DEF", "BUFF_SPD", "CLEANSE"]
    power: int = 0


class Character(Definition):
    id: str
    name: str
    role: str = ""
    description: str = ""
    starting_bonus: StatBonus | None = None


class DailyReward(Definition):
    id: str
    day: int = Field(ge=1, le=7)
    gold: int = 0
    items: list[ItemStack] = Field(default_factory=list)
    description: str = ""


class ExpeditionDrop(Definition):
    item_id: str
    chance: float = Field(ge=0.0, le=1.0)


class ExpeditionRequirements(Definition):
    party_size: int = 1
    min_level: int = 1
    element: Element | None = None


class ExpeditionRewards(Definition):
    gold: int = 0
    exp: int = 0
    items: list[ExpeditionDrop] = Field(default_factory=list)


class Expedition(Definition):
    id: str
    name: str
    description: str = ""
    duration: int
    requirements: ExpeditionRequirements = Field(default_factory=ExpeditionRequirements)
    rewards: ExpeditionRewards = Field(default_factory=ExpeditionRewards)
