"""
Creature creation and spawn rules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eontamers.components.creature import CreatureInstance, new_uid
from eontamers.progression.stats import calculate_stats

if TYPE_CHECKING:
    from eontamers.components.state import GameState
    from eontamers.components.tamer import Tamer
    from eontamers.data.definitions import Species
    from eontamers.data.registry import GameDatabase


NIGHT_START_HOUR = 18
NIGHT_END_HOUR = 6


def create_creature(
    species_id: str,
    level: int,
    db: GameDatabase,
    uid: str | None = None,
) -> CreatureInstance:
    """
    Instantiate a fresh, fully healed creature.

    Raises:
        UnknownSpeciesError: if species_id is not registered
    """
    species = db.require_species(species_id)
    stats = calculate_stats(species.base_stats, level, [], species_id, db)
    return CreatureInstance(
        uid=uid or new_uid(),
        species_id=species_id,
        level=level,
        current_hp=stats.max_hp,
        current_stats=stats,
    )


def place_creature(tamer: Tamer, creature: CreatureInstance) -> bool:
    """
    Add a new creature to the party, else to storage, and register its
    species in the collection. False (nothing changed) if both are full.
    """
    if len(tamer.party) < tamer.unlocked_party_slots:
        tamer.party.append(creature)
    elif len(tamer.storage) < tamer.unlocked_storage_slots:
        tamer.storage.append(creature)
    else:
        return False
    if creature.species_id not in tamer.collection:
        tamer.collection.append(creature.species_id)
    return True


def hour_of_day(game_time: float) -> float:
    """game_time runs 0..2400 (100 per hour)."""
    return game_time / 100


def is_night(game_time: float) -> bool:
    hour = hour_of_day(game_time)
    return hour < NIGHT_END_HOUR or hour > NIGHT_START_HOUR


def validate_spawn(species: Species | None, state: GameState) -> bool:
    """Whether every spawn condition of a species holds right now."""
    if species is None:
        return False

    for condition in species.spawn_conditions:
        if condition.type == "LEVEL_MIN":
            if state.tamer.level < int(condition.value):
                return False
        elif condition.type == "QUEST_FLAG":
            if not state.flags.get(str(condition.value)):
                return False
        elif condition.type == "TIME_OF_DAY":
            if condition.value == "NIGHT" and not is_night(state.game_time):
                return False
            if condition.value == "DAY" and is_night(state.game_time):
                return False
    return True
