"""
Battle module - applying battle results to the game state.
"""

from eontamers.battle.outcome import (
    BattleOutcomeService,
    BattleRewards,
    RewardResult,
)

__all__ = [
    "BattleOutcomeService",
    "BattleRewards",
    "RewardResult",
]
