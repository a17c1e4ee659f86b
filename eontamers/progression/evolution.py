"""
Evolution eligibility and transformation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eontamers.components.creature import CreatureInstance
from eontamers.progression.stats import recalculate_stats

if TYPE_CHECKING:
    from eontamers.components.state import GameState
    from eontamers.data.definitions import EvolutionRule
    from eontamers.data.registry import GameDatabase


def rule_is_met(rule: EvolutionRule, creature: CreatureInstance, state: GameState) -> bool:
    """All specified requirements hold; unspecified ones count as met."""
    if creature.level < rule.level_threshold:
        return False
    if rule.required_node_id and rule.required_node_id not in creature.unlocked_nodes:
        return False
    if rule.required_item_id and state.tamer.item_quantity(rule.required_item_id) <= 0:
        return False
    if rule.required_flag and not state.flags.get(rule.required_flag):
        return False
    return True


def check_evolution(
    creature: CreatureInstance,
    state: GameState,
    db: GameDatabase,
) -> list[EvolutionRule]:
    """Evolution rules of the creature's species that are currently met."""
    species = db.species.get(creature.species_id)
    if species is None:
        return []
    return [rule for rule in species.evolutions if rule_is_met(rule, creature, state)]


def transform_creature(
    creature: CreatureInstance,
    target_species_id: str,
    db: GameDatabase,
) -> CreatureInstance:
    """
    Turn a creature into another species.

    The old species is appended to evolution_history, skill-tree nodes are
    cleared (trees are species-scoped) and the creature is fully healed.
    Unknown targets return the creature unchanged.
    """
    if target_species_id not in db.species:
        return creature

    evolved = creature.evolve(
        species_id=target_species_id,
        evolution_history=[*creature.evolution_history, creature.species_id],
        unlocked_nodes=[],
    )
    stats = recalculate_stats(evolved, db)
    return evolved.evolve(current_stats=stats, current_hp=stats.max_hp)
