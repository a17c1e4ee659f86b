"""
Battle outcome service - loot, rewards, capture and post-battle effects.

The turn-by-turn battle itself runs outside the core; this module only
applies its result to the GameState.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Literal, NamedTuple

from eonengine.core.events import GameEvent
from eontamers.data.definitions import Element, ItemStack, Rarity
from eontamers.inventory.items import consume_item, has_item, merge_items
from eontamers.progression.achievements import record_achievement, track_achievement
from eontamers.progression.evolution import check_evolution
from eontamers.progression.leveling import add_exp_to_creature, add_exp_to_tamer
from eontamers.progression.species import create_creature, place_creature

if TYPE_CHECKING:
    from eonengine.core.events import EventBus
    from eonengine.core.rng import RNG
    from eontamers.components.state import GameState
    from eontamers.data.registry import GameDatabase


logger = logging.getLogger(__name__)

Winner = Literal["PLAYER", "ENEMY", "CAPTURED"]

CAPTURE_ORB = "capture_orb"
EGG_DROP_CHANCE = 0.05
CAPTURE_REPUTATION = 5

RARITY_MULTIPLIER = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 0.6,
    Rarity.RARE: 0.3,
    Rarity.LEGENDARY: 0.1,
}
RARE_OR_HIGHER = (Rarity.RARE, Rarity.LEGENDARY)

WIN_COUNTERS = (
    "daily_win_3",
    "daily_win_5",
    "weekly_win_20",
    "weekly_win_50",
    "win_streak_10",
    "win_streak_50",
)
STREAK_COUNTERS = ("win_streak_10", "win_streak_50")
CAPTURE_COUNTERS = ("daily_capture_1", "daily_capture_3", "weekly_monster_collector")

ELEMENT_COUNTERS = {
    Element.FIRE: "daily_win_fire",
    Element.WATER: "daily_win_water",
    Element.GRASS: "daily_win_grass",
    Element.ELECTRIC: "daily_win_electric",
    Element.NEUTRAL: "daily_win_neutral",
    Element.DARK: "daily_win_dark_light",
    Element.LIGHT: "daily_win_dark_light",
}

BOSS_FLAGS = {
    "flarelion": "boss_flarelion_defeated",
    "krakenwhale": "boss_krakenwhale_defeated",
}

COMBAT_ACHIEVEMENTS = (
    "combat_first_victory",
    "combat_10_victories",
    "combat_50_victories",
    "combat_100_victories",
)


class BattleRewards(NamedTuple):
    exp: int
    gold: int
    items: list[ItemStack]


class RewardResult(NamedTuple):
    rewards: BattleRewards
    tamer_leveled_up: bool


def _bump_quest(state: GameState, quest_id: str, amount: int = 1) -> None:
    state.bump(f"quest_progress_{quest_id}", amount)


class BattleOutcomeService:
    """
    Applies battle results.

    Methods mutate the GameState passed in; the caller commits.
    """

    def __init__(self, db: GameDatabase, rng: RNG, bus: EventBus):
        self.db = db
        self.rng = rng
        self.bus = bus

    # -------------------------------------------------------------------------
    # Loot
    # -------------------------------------------------------------------------

    def roll_loot(self, species_id: str) -> BattleRewards:
        """
        Base rewards for defeating a species.

        Unknown species yield a fixed {exp 25, gold 10} without drawing.
        """
        species = self.db.species.get(species_id)
        if species is None:
            return BattleRewards(25, 10, [])

        exp = 75 if species.is_special else 25
        gold = self.rng.range(5, 15)

        items: list[ItemStack] = []
        for entry in species.loot_table:
            if self.rng.chance(entry.chance):
                quantity = self.rng.range(entry.min_quantity, entry.max_quantity)
                items.append(ItemStack(item_id=entry.item_id, quantity=quantity))

        if self.rng.chance(EGG_DROP_CHANCE):
            egg_id = f"{species.element.value.lower()}_egg"
            if egg_id in self.db.items:
                items.append(ItemStack(item_id=egg_id, quantity=1))

        return BattleRewards(exp, gold, items)

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    def grant_exp(self, state: GameState, uid: str, amount: int) -> bool:
        """
        Give exp to a party creature.

        Publishes EVOLUTION_READY when a level-up makes an evolution
        available. Returns whether the creature leveled up.
        """
        party = state.tamer.party
        for index, creature in enumerate(party):
            if creature.uid != uid:
                continue

            result = add_exp_to_creature(creature, amount, state, self.db)
            party[index] = result.creature
            if result.leveled_up:
                options = check_evolution(result.creature, state, self.db)
                if options:
                    self.bus.publish(
                        GameEvent.EVOLUTION_READY,
                        creature_uid=uid,
                        options=options,
                    )
            return result.leveled_up
        return False

    def grant_rewards(
        self,
        state: GameState,
        enemy_species_id: str,
        enemy_level: int,
        is_boss: bool = False,
    ) -> RewardResult:
        """
        Roll loot for a defeated enemy and apply it.

        Exp and gold scale by 1 + (level - 1) * 0.1. The lead creature
        and the tamer both receive the exp.
        """
        loot = self.roll_loot(enemy_species_id)
        multiplier = 1 + (enemy_level - 1) * 0.1
        rewards = BattleRewards(
            math.floor(loot.exp * multiplier),
            math.floor(loot.gold * multiplier),
            loot.items,
        )

        if state.tamer.party:
            self.grant_exp(state, state.tamer.party[0].uid, rewards.exp)

        result = add_exp_to_tamer(state.tamer, rewards.exp, self.db)
        tamer = result.tamer
        tamer.gold += rewards.gold
        tamer.inventory = merge_items(tamer.inventory, rewards.items)
        state.tamer = tamer

        for quest_id in WIN_COUNTERS:
            _bump_quest(state, quest_id)

        species = self.db.species.get(enemy_species_id)
        if species:
            _bump_quest(state, ELEMENT_COUNTERS[species.element])
            if enemy_species_id == "puffle":
                _bump_quest(state, "pesticide_specialist")

        if is_boss:
            _bump_quest(state, "weekly_boss_slayer_3")

        _bump_quest(state, "daily_earn_500", rewards.gold)
        _bump_quest(state, "weekly_earn_5000", rewards.gold)

        self.bus.publish(GameEvent.REWARD_EARNED, rewards=rewards)
        return RewardResult(rewards, result.leveled_up)

    def handle_battle_end(
        self,
        state: GameState,
        winner: Winner,
        enemy_species_id: str,
        enemy_level: int,
        is_boss: bool = False,
    ) -> RewardResult | None:
        """
        Apply a finished battle.

        PLAYER wins grant rewards, boss flags and combat achievements;
        ENEMY wins reset the win streaks; CAPTURED was already handled by
        attempt_capture.
        """
        if winner == "PLAYER":
            result = self.grant_rewards(state, enemy_species_id, enemy_level, is_boss)

            if is_boss and enemy_species_id in BOSS_FLAGS:
                state.flags[BOSS_FLAGS[enemy_species_id]] = True

            for achievement_id in COMBAT_ACHIEVEMENTS:
                track_achievement(state, achievement_id, self.db, self.bus)
            return result

        if winner == "ENEMY":
            for quest_id in STREAK_COUNTERS:
                state.flags[f"quest_progress_{quest_id}"] = 0
        return None

    # -------------------------------------------------------------------------
    # Capture
    # -------------------------------------------------------------------------

    def capture_chance(self, species_id: str, current_hp: int, max_hp: int) -> float:
        """
        Probability of a capture succeeding, in [0, 1].

        base (0.2, or 0.1 for special species) plus up to 0.7 for missing
        HP, scaled by rarity. Unknown species cannot be captured.
        """
        species = self.db.species.get(species_id)
        if species is None:
            return 0.0

        base = 0.1 if species.is_special else 0.2
        hp_ratio = current_hp / max_hp if max_hp > 0 else 1.0
        chance = base + (1 - hp_ratio) * 0.7 * RARITY_MULTIPLIER[species.rarity]
        return max(0.0, min(1.0, chance))

    def attempt_capture(
        self,
        state: GameState,
        species_id: str,
        level: int,
        current_hp: int,
        max_hp: int,
        update_reputation: Callable[[str, int], None],
    ) -> bool:
        """
        Throw a capture orb.

        The orb is consumed whether or not the capture succeeds. A
        successful capture with party and storage both full loses the
        creature and returns False.
        """
        if not has_item(state.tamer.inventory, CAPTURE_ORB):
            return False

        tamer = state.tamer
        tamer.inventory = consume_item(tamer.inventory, CAPTURE_ORB, 1)

        if not self.rng.chance(self.capture_chance(species_id, current_hp, max_hp)):
            return False

        species = self.db.species.get(species_id)
        if species is None:
            return False
        creature = create_creature(species_id, level, self.db)

        if not place_creature(tamer, creature):
            logger.warning(f"Storage full, captured {species_id} escaped")
            self.bus.publish(
                GameEvent.LOG_MESSAGE,
                message="Storage is full! Captured monster escaped.",
            )
            return False

        update_reputation(species.faction.value, CAPTURE_REPUTATION)

        rare = species.rarity in RARE_OR_HIGHER
        if rare:
            state.flags["captured_rare_or_higher"] = True
        if species.rarity == Rarity.LEGENDARY:
            state.flags["captured_legendary"] = True
        state.flags["first_capture_done"] = True

        for quest_id in CAPTURE_COUNTERS:
            _bump_quest(state, quest_id)
        if rare:
            _bump_quest(state, "weekly_capture_5_rare")
        # captures count as wins for streaks
        for quest_id in WIN_COUNTERS:
            _bump_quest(state, quest_id)

        count = len(tamer.collection)
        track_achievement(state, "collection_first_capture", self.db, self.bus)
        record_achievement(state, "collection_5_species", count, self.db, self.bus)
        record_achievement(state, "collection_10_species", count, self.db, self.bus)

        logger.info(f"Captured {species_id} (level {level})")
        self.bus.publish(GameEvent.MONSTER_CAPTURED, creature=creature)
        return True
