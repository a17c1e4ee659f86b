"""
Game data registry.

Loads every static table through the engine Database (JSON files +
jsonschema), then parses entries into typed definitions. The registry
is built once by the composition root and passed to every service.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, TypeVar

from pydantic import ValidationError

from eonengine.core.component import Definition
from eonengine.errors import UnknownSpeciesError
from eonengine.resources.database import Database
from eontamers.data.definitions import (
    Achievement,
    Character,
    DailyReward,
    Expedition,
    Gear,
    Item,
    Milestone,
    QuestDefinition,
    Skill,
    SkillNode,
    SkillTree,
    Species,
    SupportSkill,
)


logger = logging.getLogger(__name__)

D = TypeVar('D', bound=Definition)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent / "json"

# table folder -> (schema file, definition type)
TABLES: dict[str, tuple[str, type[Definition]]] = {
    "species": ("species.schema.json", Species),
    "skills": ("skill.schema.json", Skill),
    "skill_trees": ("skill_tree.schema.json", SkillTree),
    "items": ("item.schema.json", Item),
    "gear": ("gear.schema.json", Gear),
    "quests": ("quest.schema.json", QuestDefinition),
    "achievements": ("achievement.schema.json", Achievement),
    "milestones": ("milestone.schema.json", Milestone),
    "support_skills": ("support_skill.schema.json", SupportSkill),
    "characters": ("character.schema.json", Character),
    "daily_rewards": ("daily_reward.schema.json", DailyReward),
    "expeditions": ("expedition.schema.json", Expedition),
}


def _parse(raw: dict, model: type[D]) -> dict[str, D]:
    parsed: dict[str, D] = {}
    for entry_id, entry in raw.items():
        try:
            parsed[entry_id] = model.model_validate(entry)
        except ValidationError as e:
            logger.error(f"Skipping invalid {model.__name__} '{entry_id}': {e}")
    return parsed


class GameDatabase:
    """
    Typed lookup tables for all static game data.

    Tables are plain dicts keyed by id, so tests and tools can add or
    replace definitions directly:

        db = GameDatabase.load()
        db.quests["my_quest"] = QuestDefinition(id="my_quest", title="...")
    """

    def __init__(self):
        self.species: dict[str, Species] = {}
        self.skills: dict[str, Skill] = {}
        self.skill_trees: dict[str, SkillTree] = {}
        self.items: dict[str, Item] = {}
        self.gear: dict[str, Gear] = {}
        self.quests: dict[str, QuestDefinition] = {}
        self.achievements: dict[str, Achievement] = {}
        self.milestones: dict[str, Milestone] = {}
        self.support_skills: dict[str, SupportSkill] = {}
        self.characters: dict[str, Character] = {}
        self.daily_rewards: dict[str, DailyReward] = {}
        self.expeditions: dict[str, Expedition] = {}

    @classmethod
    def load(
        cls,
        data_dir: Path | str = BUNDLED_DATA_DIR,
        extra_dirs: Iterable[Path | str] = (),
    ) -> GameDatabase:
        """
        Load all tables.

        Args:
            data_dir: Base data directory (bundled data by default)
            extra_dirs: Additional directories merged in order; their
                entries override earlier ones with the same id

        Raises:
            DataLoadError: if data_dir does not exist
        """
        raw = Database(data_dir, extra_dirs)
        raw.load_all({folder: schema for folder, (schema, _) in TABLES.items()})

        db = cls()
        for folder, (_, model) in TABLES.items():
            setattr(db, folder, _parse(raw.table(folder), model))
        return db

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def require_species(self, species_id: str) -> Species:
        """
        Get a species that must exist.

        Raises:
            UnknownSpeciesError: if the id is not registered
        """
        species = self.species.get(species_id)
        if species is None:
            raise UnknownSpeciesError(species_id)
        return species

    def node(self, species_id: str, node_id: str) -> SkillNode | None:
        tree = self.skill_trees.get(species_id)
        return tree.node(node_id) if tree else None

    def item_or_gear(self, item_id: str) -> Item | Gear | None:
        return self.items.get(item_id) or self.gear.get(item_id)

    def ordered_milestones(self) -> list[Milestone]:
        """Milestones sorted by level."""
        return sorted(self.milestones.values(), key=lambda m: m.level)

    def daily_reward(self, day: int) -> DailyReward | None:
        """Reward for a login streak day; days cycle through 1..7."""
        normalized = ((day - 1) % 7) + 1
        rewards = {r.day: r for r in self.daily_rewards.values()}
        return rewards.get(normalized) or rewards.get(1)
