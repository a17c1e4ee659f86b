"""
Progression module - stats, levels, evolution, skill trees, quests,
achievements.

Provides:
- The stat pipeline (base -> level -> nodes -> enhancement -> held item)
- Experience and milestone unlocks
- Evolution checks and transformation
- Skill-tree node unlocking
- Quest tracking and objectives
"""

from eontamers.progression.stats import (
    calculate_stats,
    enhance_stats,
    recalculate_stats,
    with_recalculated_stats,
    tamer_bonus,
)
from eontamers.progression.leveling import (
    add_exp_to_creature,
    add_exp_to_tamer,
    tamer_progression,
)
from eontamers.progression.species import create_creature, validate_spawn
from eontamers.progression.evolution import check_evolution, transform_creature
from eontamers.progression.skills import unlock_node, available_skill_ids
from eontamers.progression.achievements import (
    track_achievement,
    record_achievement,
    claim_achievement_reward,
)
from eontamers.progression.quests import QuestService

__all__ = [
    # Stats
    "calculate_stats",
    "enhance_stats",
    "recalculate_stats",
    "with_recalculated_stats",
    "tamer_bonus",
    # Leveling
    "add_exp_to_creature",
    "add_exp_to_tamer",
    "tamer_progression",
    "create_creature",
    "validate_spawn",
    # Evolution / skills
    "check_evolution",
    "transform_creature",
    "unlock_node",
    "available_skill_ids",
    # Achievements
    "track_achievement",
    "record_achievement",
    "claim_achievement_reward",
    # Quests
    "QuestService",
]
