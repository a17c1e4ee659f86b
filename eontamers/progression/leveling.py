"""
Experience and level progression for creatures and the tamer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from eontamers.components.creature import MAX_LEVEL, CreatureInstance
from eontamers.components.tamer import Tamer
from eontamers.progression.stats import recalculate_stats

if TYPE_CHECKING:
    from eontamers.components.state import GameState
    from eontamers.data.registry import GameDatabase


CREATURE_EXP_PER_LEVEL = 100
TAMER_EXP_PER_LEVEL = 500
TAMER_MAX_LEVEL = 50


class CreatureExpResult(NamedTuple):
    creature: CreatureInstance
    leveled_up: bool


class TamerExpResult(NamedTuple):
    tamer: Tamer
    leveled_up: bool


class TamerProgression(NamedTuple):
    party_slots: int
    support_skills: list[str]


def add_exp_to_creature(
    creature: CreatureInstance,
    amount: int,
    state: GameState,
    db: GameDatabase,
) -> CreatureExpResult:
    """
    Grant experience to a creature.

    Every 100 exp is one level (cap 80, exp reset to 0 at the cap), with a
    skill point on each even level. On level-up the creature is healed to
    full; otherwise current_hp grows by any max_hp change.
    """
    exp = creature.exp + amount
    level = creature.level
    skill_points = creature.skill_points
    leveled_up = False

    while exp >= CREATURE_EXP_PER_LEVEL and level < MAX_LEVEL:
        exp -= CREATURE_EXP_PER_LEVEL
        level += 1
        leveled_up = True
        if level % 2 == 0:
            skill_points += 1

    if level >= MAX_LEVEL:
        level = MAX_LEVEL
        exp = 0

    updated = creature.evolve(level=level, exp=exp, skill_points=skill_points)
    stats = recalculate_stats(updated, db)

    if leveled_up:
        current_hp = stats.max_hp
    else:
        delta = stats.max_hp - creature.current_stats.max_hp
        current_hp = max(0, min(creature.current_hp + delta, stats.max_hp))

    return CreatureExpResult(updated.evolve(current_stats=stats, current_hp=current_hp), leveled_up)


def tamer_progression(level: int, character_id: str | None, db: GameDatabase) -> TamerProgression:
    """
    Unlocks granted by the milestone table at a tamer level.

    Keeps the highest party-slot threshold met and the union of every
    support skill met. Per-character skills apply only to that character.
    """
    party_slots = 1
    skills: list[str] = []

    for milestone in db.ordered_milestones():
        if level < milestone.level:
            continue
        if milestone.party_slots:
            party_slots = milestone.party_slots
        unlock = milestone.unlock_skill
        if isinstance(unlock, str):
            skill_id = unlock
        elif isinstance(unlock, dict) and character_id:
            skill_id = unlock.get(character_id)
        else:
            skill_id = None
        if skill_id and skill_id not in skills:
            skills.append(skill_id)

    return TamerProgression(party_slots, skills)


def add_exp_to_tamer(tamer: Tamer, amount: int, db: GameDatabase) -> TamerExpResult:
    """Grant experience to the tamer (500 per level, cap 50)."""
    exp = tamer.exp + amount
    level = tamer.level
    leveled_up = False

    while exp >= TAMER_EXP_PER_LEVEL and level < TAMER_MAX_LEVEL:
        exp -= TAMER_EXP_PER_LEVEL
        level += 1
        leveled_up = True

    if level >= TAMER_MAX_LEVEL:
        level = TAMER_MAX_LEVEL
        exp = 0

    progression = tamer_progression(level, tamer.character_id, db)
    updated = tamer.evolve(
        level=level,
        exp=exp,
        unlocked_party_slots=progression.party_slots,
        unlocked_support_skills=progression.support_skills,
    )
    return TamerExpResult(updated, leveled_up)
