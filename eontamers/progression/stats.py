"""
Stat calculation pipeline.

A creature's effective stats are always rebuilt from scratch, in order:

    1. base stats scaled by level, plus unlocked stat-node deltas
    2. enhancement scaling
    3. held-item flat bonuses

Call recalculate_stats() after any change to level, nodes, enhancement
or held item; never patch current_stats incrementally.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from eontamers.components.creature import CreatureInstance
from eontamers.components.stats import STAT_FIELDS, Stats

if TYPE_CHECKING:
    from eontamers.components.tamer import Tamer
    from eontamers.data.registry import GameDatabase


LEVEL_GROWTH = 0.15
ENHANCEMENT_GROWTH = 1.03


def growth_factor(level: int) -> float:
    return 1 + (level - 1) * LEVEL_GROWTH


def calculate_stats(
    base: Stats,
    level: int,
    node_ids: list[str],
    species_id: str,
    db: GameDatabase,
) -> Stats:
    """
    Level-scaled base stats plus skill-tree stat nodes.

    max_hp node deltas are also added to hp.
    """
    factor = growth_factor(level)
    values = {name: math.floor(getattr(base, name) * factor) for name in STAT_FIELDS}

    tree = db.skill_trees.get(species_id)
    if tree:
        for node_id in node_ids:
            node = tree.node(node_id)
            if node is None or node.effect.type != "stat" or node.effect.stats is None:
                continue
            delta = node.effect.stats
            for name in STAT_FIELDS:
                if name == "hp":
                    continue
                values[name] += getattr(delta, name)
            values["hp"] += delta.max_hp

    return Stats(**values)


def enhance_stats(stats: Stats, enhancement_level: int) -> Stats:
    """
    Scale every field by 1.03^level, guaranteeing at least +level per field.
    """
    if enhancement_level <= 0:
        return stats.clone()

    multiplier = ENHANCEMENT_GROWTH ** enhancement_level
    return Stats(**{
        name: max(math.floor(value * multiplier), value + enhancement_level)
        for name, value in stats.model_dump().items()
    })


def held_item_bonus(item_id: str | None, db: GameDatabase) -> dict[str, int]:
    """Flat stat bonus of a held item (empty if none or not equipment)."""
    if not item_id:
        return {}
    item = db.items.get(item_id)
    if item is None or item.stats is None:
        return {}
    return item.stats.as_dict()


def recalculate_stats(creature: CreatureInstance, db: GameDatabase) -> Stats:
    """
    Full pipeline for a creature.

    Unknown species returns the creature's current stats unchanged.
    """
    species = db.species.get(creature.species_id)
    if species is None:
        return creature.current_stats.clone()

    stats = calculate_stats(
        species.base_stats,
        creature.level,
        creature.unlocked_nodes,
        creature.species_id,
        db,
    )
    stats = enhance_stats(stats, creature.enhancement_level)
    return stats.plus(held_item_bonus(creature.held_item_id, db))


def with_recalculated_stats(creature: CreatureInstance, db: GameDatabase, **changes) -> CreatureInstance:
    """
    Copy of a creature with fields changed and stats rebuilt.

    current_hp is clamped to the new max_hp.
    """
    updated = creature.evolve(**changes)
    stats = recalculate_stats(updated, db)
    return updated.evolve(
        current_stats=stats,
        current_hp=min(updated.current_hp, stats.max_hp),
    )


def tamer_bonus(tamer: Tamer, db: GameDatabase) -> Stats:
    """
    Tamer-wide stat bonus: character starting bonus plus equipped gear.
    """
    total = Stats()
    character = db.characters.get(tamer.character_id or "")
    if character and character.starting_bonus:
        total = total.plus(character.starting_bonus.as_dict())
    for gear_id in tamer.equipped_items.values():
        gear = db.gear.get(gear_id)
        if gear:
            total = total.plus(gear.stats.as_dict())
    return total
