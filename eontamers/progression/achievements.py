"""
Achievement counters and reward claims.

Progress lives in tamer.achievement_progress (achievement id -> counter).
Counters stop at the achievement target; reaching it publishes
ACHIEVEMENT_UNLOCKED once. Rewards are claimed separately, at most once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from eonengine.core.events import GameEvent
from eontamers.inventory.items import merge_items

if TYPE_CHECKING:
    from eonengine.core.events import EventBus
    from eontamers.components.state import GameState
    from eontamers.data.definitions import Reward
    from eontamers.data.registry import GameDatabase


logger = logging.getLogger(__name__)


class ClaimResult(NamedTuple):
    success: bool
    reward: Reward | None = None
    message: str = ""


def _set_progress(
    state: GameState,
    achievement_id: str,
    value: int,
    db: GameDatabase,
    bus: EventBus | None,
) -> bool:
    achievement = db.achievements.get(achievement_id)
    if achievement is None:
        return False

    progress = state.tamer.achievement_progress
    before = progress.get(achievement_id, 0)
    after = min(value, achievement.target)
    if after <= before:
        return False

    progress[achievement_id] = after
    unlocked = before < achievement.target <= after
    if unlocked:
        logger.info(f"Achievement unlocked: {achievement_id}")
        if bus is not None:
            bus.publish(GameEvent.ACHIEVEMENT_UNLOCKED, achievement_id=achievement_id)
    return unlocked


def track_achievement(
    state: GameState,
    achievement_id: str,
    db: GameDatabase,
    bus: EventBus | None = None,
    amount: int = 1,
) -> bool:
    """
    Increment a counter while it is below its target.

    Returns:
        True if this call reached the target
    """
    current = state.tamer.achievement_progress.get(achievement_id, 0)
    return _set_progress(state, achievement_id, current + amount, db, bus)


def record_achievement(
    state: GameState,
    achievement_id: str,
    value: int,
    db: GameDatabase,
    bus: EventBus | None = None,
) -> bool:
    """Raise a counter to an observed value (levels, collection size...)."""
    return _set_progress(state, achievement_id, value, db, bus)


def is_unlocked(state: GameState, achievement_id: str, db: GameDatabase) -> bool:
    achievement = db.achievements.get(achievement_id)
    if achievement is None:
        return False
    return state.tamer.achievement_progress.get(achievement_id, 0) >= achievement.target


def claim_achievement_reward(state: GameState, achievement_id: str, db: GameDatabase) -> ClaimResult:
    """Grant an unlocked achievement's reward once."""
    achievement = db.achievements.get(achievement_id)
    if achievement is None:
        return ClaimResult(False, message="Unknown achievement")
    if achievement_id in state.tamer.claimed_achievements:
        return ClaimResult(False, message="Already claimed")
    if not is_unlocked(state, achievement_id, db):
        return ClaimResult(False, message="Not yet unlocked")

    tamer = state.tamer
    tamer.gold += achievement.reward.gold
    tamer.inventory = merge_items(tamer.inventory, achievement.reward.items)
    tamer.claimed_achievements.append(achievement_id)
    return ClaimResult(True, achievement.reward, f"Claimed {achievement.name}")
