"""
Species skill trees and skill availability.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eontamers.components.creature import CreatureInstance
from eontamers.progression.stats import recalculate_stats

if TYPE_CHECKING:
    from eontamers.data.definitions import Species
    from eontamers.data.registry import GameDatabase


def can_unlock_node(creature: CreatureInstance, node_id: str, db: GameDatabase) -> bool:
    node = db.node(creature.species_id, node_id)
    if node is None:
        return False
    if node_id in creature.unlocked_nodes:
        return False
    if creature.skill_points < node.cost:
        return False
    return all(p in creature.unlocked_nodes for p in node.prerequisites)


def unlock_node(creature: CreatureInstance, node_id: str, db: GameDatabase) -> CreatureInstance:
    """
    Spend skill points on a tree node.

    Returns the same creature object when the node cannot be unlocked
    (unknown, already owned, too expensive or missing prerequisites), so
    callers can detect a no-op with an identity check.
    """
    if not can_unlock_node(creature, node_id, db):
        return creature

    node = db.node(creature.species_id, node_id)
    updated = creature.evolve(
        skill_points=creature.skill_points - node.cost,
        unlocked_nodes=[*creature.unlocked_nodes, node_id],
    )
    stats = recalculate_stats(updated, db)
    return updated.evolve(
        current_stats=stats,
        current_hp=min(updated.current_hp, stats.max_hp),
    )


def tree_completed(creature: CreatureInstance, db: GameDatabase) -> bool:
    """Whether every node of the creature's tree is unlocked."""
    tree = db.skill_trees.get(creature.species_id)
    return bool(tree) and len(creature.unlocked_nodes) >= len(tree.nodes)


def available_skill_ids(
    level: int,
    unlocked_nodes: list[str],
    species: Species | None,
    db: GameDatabase,
) -> list[str]:
    """
    Battle skills a creature can use.

    Order: level-1 skills, then skills learned by level (ascending), then
    skills granted by unlocked tree nodes. Duplicates are dropped.
    """
    if species is None:
        return []

    base = [ls.skill_id for ls in species.learnable_skills if ls.level == 1]
    learned = [
        ls.skill_id
        for ls in sorted(species.learnable_skills, key=lambda ls: ls.level)
        if ls.level > 1 and level >= ls.level
    ]

    from_tree = []
    tree = db.skill_trees.get(species.id)
    if tree:
        for node_id in unlocked_nodes:
            node = tree.node(node_id)
            if node and node.effect.type == "skill" and node.effect.skill_id:
                from_tree.append(node.effect.skill_id)

    return list(dict.fromkeys([*base, *learned, *from_tree]))
