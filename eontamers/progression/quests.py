"""
Quest system - tracking, objectives, rewards.

Two kinds of progress coexist:
- Counter quests compare flags["quest_progress_<id>"] against progress_max
  (the counters are bumped by battle, capture and shop code)
- Objective quests copy their template objectives into
  state.active_quest_objectives and advance them from game events

A quest moves active -> pending (complete, reward unclaimed) -> completed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, NamedTuple

from eonengine.core.events import Event, GameEvent
from eontamers.components.state import ObjectiveProgress
from eontamers.data.definitions import QuestCategory
from eontamers.inventory.items import merge_items
from eontamers.progression.leveling import add_exp_to_tamer
from eontamers.progression.skills import tree_completed

if TYPE_CHECKING:
    from eonengine.core.events import EventBus
    from eonengine.core.rng import RNG
    from eontamers.components.state import GameState
    from eontamers.data.definitions import QuestDefinition, Reward
    from eontamers.data.registry import GameDatabase


logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
WEEK_MS = 7 * DAY_MS

STORY_INTRO_QUEST = "story_act1_intro"
REROLL_FLAG = "rerolled_today"


def progress_key(quest_id: str) -> str:
    """Flag key holding a counter quest's progress."""
    return f"quest_progress_{quest_id}"


class QuestClaim(NamedTuple):
    success: bool
    rewards: Reward | None = None
    tamer_leveled_up: bool = False


class QuestService:
    """
    Evaluates and advances quest state.

    All methods mutate the GameState passed in; the caller commits.
    """

    def __init__(self, db: GameDatabase, bus: EventBus, rng: RNG):
        self.db = db
        self.bus = bus
        self.rng = rng
        self._get_state: Callable[[], GameState] | None = None
        self._on_change: Callable[[], None] | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    # -------------------------------------------------------------------------
    # Completion checks
    # -------------------------------------------------------------------------

    def _inline_check(self, quest_id: str, state: GameState) -> bool:
        """Hardcoded conditions for specific quest ids."""
        tamer = state.tamer
        collection = len(tamer.collection)
        reputation = state.reputation.values()

        if quest_id == "first_capture":
            return bool(state.flags.get("first_capture_done"))
        if quest_id == "collector_beginner":
            return collection >= 3
        if quest_id == "collector_pro":
            return collection >= 20
        if quest_id == "collector_master":
            return collection >= 50
        if quest_id == "story_capture_5":
            return collection >= 5
        if quest_id == "gold_saver":
            return tamer.gold >= 1000
        if quest_id == "gold_millionaire":
            return tamer.gold >= 100000
        if quest_id == "rare_hunter":
            return bool(state.flags.get("captured_rare_or_higher"))
        if quest_id == "legendary_hunter":
            return bool(state.flags.get("captured_legendary"))
        if quest_id == "faction_friend":
            return any(r >= 100 for r in reputation)
        if quest_id == "faction_hero":
            return any(r >= 500 for r in reputation)
        if quest_id == "skill_unlock_all":
            return any(tree_completed(c, self.db) for c in tamer.party)
        return True

    def is_satisfied(self, quest: QuestDefinition, state: GameState) -> bool:
        """Whether a quest's completion conditions all hold."""
        if quest.requires_level and state.tamer.level < quest.requires_level:
            return False
        if any(p not in state.completed_quests for p in quest.prerequisites):
            return False
        if quest.required_flag and not state.flags.get(quest.required_flag):
            return False
        if not self._inline_check(quest.id, state):
            return False
        if quest.progress_max and state.counter(progress_key(quest.id)) < quest.progress_max:
            return False
        if quest.objectives:
            objectives = state.active_quest_objectives.get(quest.id)
            if not objectives or not all(o.is_complete for o in objectives):
                return False
        return True

    def check_quests(self, state: GameState) -> list[str]:
        """
        Complete every active quest whose conditions now hold.

        Returns:
            Newly completed quest ids
        """
        completed = []
        for quest_id in list(state.active_quests):
            if quest_id in state.pending_rewards or quest_id in state.completed_quests:
                continue
            quest = self.db.quests.get(quest_id)
            if quest is None:
                continue
            if self.is_satisfied(quest, state):
                self.complete_quest(state, quest_id)
                completed.append(quest_id)
        return completed

    def complete_quest(self, state: GameState, quest_id: str) -> None:
        """Move a quest to pending rewards (idempotent)."""
        if quest_id in state.pending_rewards or quest_id in state.completed_quests:
            return

        state.pending_rewards.append(quest_id)

        if quest_id == STORY_INTRO_QUEST:
            if quest_id not in state.story_progress.main_quests_completed:
                state.story_progress.main_quests_completed.append(quest_id)
            state.story_progress.current_act = 2

        state.bump(progress_key("total_completed"))
        logger.info(f"Quest completed: {quest_id}")
        self.bus.publish(GameEvent.QUEST_COMPLETED, quest_id=quest_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def accept_quest(self, state: GameState, quest_id: str) -> bool:
        """Add a known quest to the active list."""
        quest = self.db.quests.get(quest_id)
        if quest is None:
            return False
        if (
            quest_id in state.active_quests
            or quest_id in state.pending_rewards
            or quest_id in state.completed_quests
        ):
            return False

        state.active_quests.append(quest_id)
        if quest.objectives:
            state.active_quest_objectives[quest_id] = self._copy_objectives(quest)
        return True

    def claim_quest_reward(self, state: GameState, quest_id: str) -> QuestClaim:
        """Grant a pending quest's reward block and mark it completed."""
        quest = self.db.quests.get(quest_id)
        if quest is None or quest_id not in state.pending_rewards:
            return QuestClaim(False)

        state.pending_rewards = [q for q in state.pending_rewards if q != quest_id]
        state.active_quests = [q for q in state.active_quests if q != quest_id]
        state.active_quest_objectives.pop(quest_id, None)
        if quest_id not in state.completed_quests:
            state.completed_quests.append(quest_id)

        rewards = quest.rewards
        result = add_exp_to_tamer(state.tamer, rewards.exp, self.db)
        tamer = result.tamer
        tamer.gold += rewards.gold
        tamer.inventory = merge_items(tamer.inventory, rewards.items)
        state.tamer = tamer

        return QuestClaim(True, rewards, result.leveled_up)

    def reroll_quest(self, state: GameState, quest_id: str) -> bool:
        """
        Swap an active non-main quest for a random eligible one.

        Allowed once per day; draws from the injected RNG.
        """
        if quest_id not in state.active_quests:
            return False
        if state.flags.get(REROLL_FLAG):
            return False

        current = self.db.quests.get(quest_id)
        if current is None or current.category == QuestCategory.MAIN:
            return False

        candidates = [
            q.id for q in self.db.quests.values()
            if q.category != QuestCategory.MAIN
            and q.id not in state.active_quests
            and q.id not in state.completed_quests
            and q.id not in state.pending_rewards
        ]
        if not candidates:
            return False

        replacement = self.rng.pick(candidates)
        state.active_quests = [replacement if q == quest_id else q for q in state.active_quests]
        state.active_quest_objectives.pop(quest_id, None)
        state.flags[REROLL_FLAG] = True
        logger.debug(f"Rerolled {quest_id} -> {replacement}")
        return True

    def refresh_daily_quests(self, state: GameState, now: float) -> bool:
        """
        Daily / weekly rollover.

        Daily: more than 24h since the last refresh resets the reroll flag
        and the counters of daily quests (which become repeatable).
        Weekly: never refreshed, or more than 7 days, does the same for
        weekly quests.

        Returns:
            Whether either rollover fired
        """
        changed = False

        if now - state.last_quest_refresh > DAY_MS:
            state.last_quest_refresh = now
            state.flags[REROLL_FLAG] = False
            self._reset_category(state, QuestCategory.DAILY)
            changed = True

        if state.last_weekly_refresh is None or now - state.last_weekly_refresh > WEEK_MS:
            state.last_weekly_refresh = now
            self._reset_category(state, QuestCategory.WEEKLY)
            changed = True

        return changed

    def _reset_category(self, state: GameState, category: QuestCategory) -> None:
        ids = {q.id for q in self.db.quests.values() if q.category == category}
        for quest_id in ids:
            if progress_key(quest_id) in state.flags:
                state.flags[progress_key(quest_id)] = 0
        state.completed_quests = [q for q in state.completed_quests if q not in ids]

    # -------------------------------------------------------------------------
    # Objectives
    # -------------------------------------------------------------------------

    @staticmethod
    def _copy_objectives(quest: QuestDefinition) -> list[ObjectiveProgress]:
        return [
            ObjectiveProgress(type=o.type, target=o.target, count=o.count)
            for o in quest.objectives
        ]

    def update_objective_progress(self, state: GameState, kind: str, target: str, amount: int = 1) -> bool:
        """
        Advance matching objectives of every active quest.

        Objectives are capped at their count; a quest whose objectives are
        all met is completed.

        Returns:
            Whether any state changed
        """
        for quest_id in state.active_quests:
            if quest_id not in state.active_quest_objectives:
                quest = self.db.quests.get(quest_id)
                if quest and quest.objectives:
                    state.active_quest_objectives[quest_id] = self._copy_objectives(quest)

        updated = False
        for quest_id, objectives in state.active_quest_objectives.items():
            if quest_id not in state.active_quests:
                continue

            for objective in objectives:
                if objective.type == kind and objective.target == target and objective.current < objective.count:
                    objective.current = min(objective.current + amount, objective.count)
                    updated = True

            if (
                objectives
                and all(o.is_complete for o in objectives)
                and quest_id not in state.pending_rewards
                and quest_id not in state.completed_quests
            ):
                self.complete_quest(state, quest_id)
                updated = True

        return updated

    # -------------------------------------------------------------------------
    # Event hooks
    # -------------------------------------------------------------------------

    def attach(
        self,
        bus: EventBus,
        get_state: Callable[[], GameState],
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """
        Feed objectives from game events.

        Args:
            bus: Event bus to listen on
            get_state: Returns the live state
            on_change: Called after an event changed quest state
        """
        self.detach()
        self._get_state = get_state
        self._on_change = on_change
        self._unsubscribers = [
            bus.subscribe(GameEvent.MONSTER_DEFEATED, self._on_monster_defeated),
            bus.subscribe(GameEvent.ITEM_COLLECTED, self._on_item_collected),
            bus.subscribe(GameEvent.REGION_ENTERED, self._on_region_entered),
            bus.subscribe(GameEvent.MONSTER_CAPTURED, self._on_monster_captured),
        ]
        logger.debug("Quest objective hooks attached")

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _apply(self, kind: str, target: str | None, amount: int) -> None:
        if self._get_state is None or not target:
            return
        if self.update_objective_progress(self._get_state(), kind, target, amount) and self._on_change:
            self._on_change()

    def _on_monster_defeated(self, event: Event) -> None:
        self._apply("defeat", event.get("species_id"), 1)

    def _on_item_collected(self, event: Event) -> None:
        self._apply("collect", event.get("item_id"), event.get("quantity", 1))

    def _on_region_entered(self, event: Event) -> None:
        self._apply("explore", event.get("region_id"), 1)

    def _on_monster_captured(self, event: Event) -> None:
        creature = event.get("creature")
        self._apply("capture", creature.species_id if creature else None, 1)
