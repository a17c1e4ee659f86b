"""
Game state manager - the single owner and mutator of GameState.

Every public mutating operation finishes with _commit(), which:
    1. completes quests whose conditions now hold
    2. records level-based achievements
    3. writes the autosave
    4. publishes exactly one STATE_UPDATED carrying the state

Creatures are never patched in place: logic functions return updated
copies and the manager swaps them in through _replace_creature().

Usage:
    manager = GameStateManager(db, bus, rng, autosave, timers, slots=slots)
    manager.start_new_game("leo", "pyrocat", "Ash")
    result = manager.enhance_creature(uid, "power_clone_d", use_backup=False)
    if not result.success:
        show(result.message)
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterator, NamedTuple

from eonengine.core.events import GameEvent
from eontamers.battle.outcome import BattleOutcomeService, RewardResult, Winner
from eontamers.components.creature import MAX_ENHANCEMENT, CreatureInstance
from eontamers.components.state import GameState, IncubatorSlot
from eontamers.components.tamer import ActiveExpedition, InventoryItem, Tamer
from eontamers.data.definitions import ItemCategory, QuestCategory
from eontamers.inventory.items import add_to_inventory, consume_item, has_item, merge_items
from eontamers.inventory.shop import ShopService
from eontamers.progression import achievements
from eontamers.progression.evolution import check_evolution, transform_creature
from eontamers.progression.leveling import add_exp_to_creature, tamer_progression
from eontamers.progression.quests import QuestService
from eontamers.progression.skills import unlock_node
from eontamers.progression.species import create_creature, place_creature
from eontamers.progression.stats import recalculate_stats, with_recalculated_stats

if TYPE_CHECKING:
    from eonengine.core.events import EventBus
    from eonengine.core.rng import RNG
    from eonengine.core.timers import TimerQueue
    from eontamers.data.registry import GameDatabase
    from eontamers.save.autosave import AutoSave
    from eontamers.save.slots import SlotManager


logger = logging.getLogger(__name__)

STARTER_LEVEL = 5
STARTING_GOLD = 150
STARTING_ITEMS = (("capture_orb", 5), ("potion", 3))

DAY_CYCLE = 2400

BACKUP_DISK = "backup_disk"
MIN_ENHANCE_CHANCE = 0.25
ENHANCE_CHANCE_STEP = 0.05

# enhancement level below which each clone tier applies
CLONE_TIERS = (
    (3, "D"),
    (6, "C"),
    (9, "B"),
    (12, "A"),
    (15, "S"),
)

DEFAULT_BUFF_DURATION = 10_000
BUFF_STATS = {
    "BUFF_ATK": "attack",
    "BUFF_DEF": "defense",
    "BUFF_SPD": "speed",
}

EVOLVED_FLAG = "evolved_once"


class ActionResult(NamedTuple):
    success: bool
    message: str = ""


def required_clone_tier(enhancement_level: int) -> str | None:
    for upper, tier in CLONE_TIERS:
        if enhancement_level < upper:
            return tier
    return None


def enhancement_chance(enhancement_level: int) -> float:
    return max(MIN_ENHANCE_CHANCE, 1.0 - ENHANCE_CHANCE_STEP * enhancement_level)


class GameStateManager:
    """
    Owns the GameState and exposes every gameplay operation.

    Interactive operations return ActionResult; the rest return a bool
    or the value the caller needs. Unknown ids never raise: they come
    back as a failed result.
    """

    def __init__(
        self,
        db: GameDatabase,
        bus: EventBus,
        rng: RNG,
        autosave: AutoSave,
        timers: TimerQueue,
        slots: SlotManager | None = None,
        quests: QuestService | None = None,
        battle: BattleOutcomeService | None = None,
        shop: ShopService | None = None,
        state: GameState | None = None,
    ):
        self.db = db
        self.bus = bus
        self.rng = rng
        self.autosave = autosave
        self.timers = timers
        self.slots = slots
        self.quests = quests or QuestService(db, bus, rng)
        self.battle = battle or BattleOutcomeService(db, rng, bus)
        self.shop = shop or ShopService(db, rng)

        self.state = state or GameState()

        # support skill id -> game-clock ms when usable again (runtime only)
        self._cooldowns: dict[str, float] = {}
        self._publishing_depth = 0

        self.quests.attach(bus, self.get_state, self._on_quest_progress)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self) -> None:
        """Finish a mutation: quests, achievements, autosave, one notification."""
        self.quests.check_quests(self.state)
        self._record_level_achievements()

        result = self.autosave.save(self.state)
        if not result.ok:
            logger.warning(f"Autosave failed: {result.reason}")

        self.bus.publish(GameEvent.STATE_UPDATED, state=self.state)

    @contextmanager
    def _publishing(self) -> Iterator[None]:
        """Defer quest-driven commits while an operation publishes events."""
        self._publishing_depth += 1
        try:
            yield
        finally:
            self._publishing_depth -= 1

    def _on_quest_progress(self) -> None:
        # Events published by outside collaborators still need a commit
        if self._publishing_depth == 0:
            self._commit()

    def _record_level_achievements(self) -> None:
        tamer = self.state.tamer
        for achievement_id in ("progression_tamer_5", "progression_tamer_10"):
            achievements.record_achievement(self.state, achievement_id, tamer.level, self.db, self.bus)

        creatures = [*tamer.party, *tamer.storage]
        if creatures:
            highest = max(c.level for c in creatures)
            achievements.record_achievement(
                self.state, "progression_monster_lvl_20", highest, self.db, self.bus
            )

    def _find_creature(self, uid: str) -> CreatureInstance | None:
        return self.state.tamer.find_creature(uid)

    def _replace_creature(self, uid: str, creature: CreatureInstance) -> bool:
        """Swap the creature with this uid in party or storage."""
        tamer = self.state.tamer
        for container in (tamer.party, tamer.storage):
            for index, existing in enumerate(container):
                if existing.uid == uid:
                    container[index] = creature
                    return True
        return False

    def _apply_reputation(self, faction: str, delta: int) -> int:
        value = self.state.reputation.get(faction, 0) + delta
        self.state.reputation[faction] = value
        self.bus.publish(GameEvent.REPUTATION_CHANGED, faction=faction, value=value)
        return value

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def get_state(self) -> GameState:
        return self.state

    def start_new_game(self, character_id: str, starter_species_id: str, name: str = "Tamer") -> ActionResult:
        """Replace the state with a fresh game."""
        if character_id not in self.db.characters:
            return ActionResult(False, f"Unknown character: {character_id}")
        if starter_species_id not in self.db.species:
            return ActionResult(False, f"Unknown species: {starter_species_id}")

        starter = create_creature(starter_species_id, STARTER_LEVEL, self.db)
        progression = tamer_progression(1, character_id, self.db)
        inventory: list[InventoryItem] = []
        for item_id, quantity in STARTING_ITEMS:
            inventory = add_to_inventory(inventory, item_id, quantity)

        tamer = Tamer(
            name=name,
            character_id=character_id,
            gold=STARTING_GOLD,
            party=[starter],
            inventory=inventory,
            unlocked_party_slots=progression.party_slots,
            unlocked_support_skills=progression.support_skills,
            collection=[starter_species_id],
        )
        self.state = GameState(tamer=tamer)
        self._cooldowns.clear()

        for quest in self.db.quests.values():
            if quest.category == QuestCategory.MAIN:
                self.quests.accept_quest(self.state, quest.id)

        logger.info(f"New game: {name} ({character_id}) with {starter_species_id}")
        self._commit()
        return ActionResult(True, f"Welcome, {name}!")

    def update(self, dt: float) -> None:
        """
        Per-frame tick (dt in seconds).

        Advances the timer queue, play time and the slot autosave timer.
        Clock ticks are not commits.
        """
        self.timers.advance(dt * 1000)
        self.state.play_time += dt
        if self.slots:
            self.slots.update(dt)

    def update_time(self, delta: float) -> None:
        """Advance the day/night clock (0..2400, wrapping)."""
        self.state.game_time = (self.state.game_time + delta) % DAY_CYCLE

    def set_language(self, language: str) -> None:
        self.state.language = language
        self._commit()

    def update_reputation(self, faction: str, delta: int) -> int:
        value = self._apply_reputation(faction, delta)
        self._commit()
        return value

    def return_to_title(self) -> None:
        """Persist and ask the host to show the title screen."""
        self.autosave.save(self.state)
        self.bus.publish(GameEvent.RETURN_TO_TITLE)

    # -------------------------------------------------------------------------
    # Battle
    # -------------------------------------------------------------------------

    def grant_exp(self, uid: str, amount: int) -> bool:
        """Give exp to a party creature. False for unknown uids."""
        if not any(c.uid == uid for c in self.state.tamer.party):
            return False
        self.battle.grant_exp(self.state, uid, amount)
        self._commit()
        return True

    def grant_rewards(self, enemy_species_id: str, enemy_level: int, is_boss: bool = False) -> RewardResult:
        result = self.battle.grant_rewards(self.state, enemy_species_id, enemy_level, is_boss)
        self._after_rewards(result)
        self._commit()
        return result

    def _after_rewards(self, result: RewardResult) -> None:
        if result.tamer_leveled_up:
            self.bus.publish(GameEvent.TAMER_LEVEL_UP, level=self.state.tamer.level)
        for achievement_id in ("economy_earn_1000", "economy_earn_10000"):
            achievements.track_achievement(
                self.state, achievement_id, self.db, self.bus, amount=result.rewards.gold
            )

    def handle_battle_end(
        self,
        winner: Winner,
        enemy_species_id: str,
        enemy_level: int,
        is_boss: bool = False,
    ) -> RewardResult | None:
        with self._publishing():
            result = self.battle.handle_battle_end(
                self.state, winner, enemy_species_id, enemy_level, is_boss
            )
            if result is not None:
                self._after_rewards(result)
            if winner == "PLAYER":
                self.bus.publish(GameEvent.MONSTER_DEFEATED, species_id=enemy_species_id)
        self._commit()
        return result

    def attempt_capture(self, species_id: str, level: int, current_hp: int, max_hp: int) -> bool:
        with self._publishing():
            captured = self.battle.attempt_capture(
                self.state, species_id, level, current_hp, max_hp, self._apply_reputation
            )
        self._commit()
        return captured

    # -------------------------------------------------------------------------
    # Creatures
    # -------------------------------------------------------------------------

    def unlock_skill_node(self, uid: str, node_id: str) -> bool:
        creature = self._find_creature(uid)
        if creature is None:
            return False

        updated = unlock_node(creature, node_id, self.db)
        if updated is creature:
            return False

        self._replace_creature(uid, updated)
        self.bus.publish(GameEvent.SKILL_UNLOCKED, creature_uid=uid, node_id=node_id)
        self._commit()
        return True

    def evolve_creature(self, uid: str, target_species_id: str) -> ActionResult:
        creature = self._find_creature(uid)
        if creature is None:
            return ActionResult(False, "Monster not found")

        rule = next(
            (r for r in check_evolution(creature, self.state, self.db)
             if r.target_species_id == target_species_id),
            None,
        )
        if rule is None:
            return ActionResult(False, "Evolution requirements not met")

        tamer = self.state.tamer
        if rule.required_item_id:
            tamer.inventory = consume_item(tamer.inventory, rule.required_item_id, 1)

        self._replace_creature(uid, transform_creature(creature, target_species_id, self.db))
        if target_species_id not in tamer.collection:
            tamer.collection.append(target_species_id)

        self.state.flags[EVOLVED_FLAG] = True
        achievements.track_achievement(self.state, "progression_first_evolution", self.db, self.bus)

        name = self.db.species[target_species_id].name
        logger.info(f"{creature.species_id} evolved into {target_species_id}")
        self._commit()
        return ActionResult(True, f"Evolved into {name}!")

    def enhance_creature(self, uid: str, clone_item_id: str, use_backup: bool = False) -> ActionResult:
        """
        Try to raise a creature's enhancement level with a Power Clone.

        The clone is consumed whatever the outcome. On failure a Backup
        Disk (if requested) is consumed instead of losing a level.
        """
        creature = self._find_creature(uid)
        if creature is None:
            return ActionResult(False, "Monster not found")

        level = creature.enhancement_level
        if level >= MAX_ENHANCEMENT:
            return ActionResult(False, "Already at maximum enhancement")

        tier = required_clone_tier(level)
        clone = self.db.items.get(clone_item_id)
        if clone is None or clone.category != ItemCategory.ENHANCEMENT or clone.tier is None:
            return ActionResult(False, "Not a Power Clone")
        if clone.tier != tier:
            return ActionResult(False, f"Requires Power Clone [{tier}]")

        tamer = self.state.tamer
        if not has_item(tamer.inventory, clone_item_id):
            return ActionResult(False, f"No Power Clone [{tier}] in inventory")
        if use_backup and not has_item(tamer.inventory, BACKUP_DISK):
            return ActionResult(False, "No Backup Disk in inventory")

        tamer.inventory = consume_item(tamer.inventory, clone_item_id, 1)

        if self.rng.chance(enhancement_chance(level)):
            new_level = level + 1
            self._replace_creature(
                uid, with_recalculated_stats(creature, self.db, enhancement_level=new_level)
            )
            for achievement_id in ("progression_enhance_3", "progression_enhance_5"):
                achievements.record_achievement(self.state, achievement_id, new_level, self.db, self.bus)
            self._commit()
            return ActionResult(True, f"Enhancement succeeded! Now +{new_level}")

        if use_backup:
            tamer.inventory = consume_item(tamer.inventory, BACKUP_DISK, 1)
            self._commit()
            return ActionResult(False, f"Enhancement failed. Protected by Backup Disk (+{level})")

        new_level = max(0, level - 1)
        self._replace_creature(
            uid, with_recalculated_stats(creature, self.db, enhancement_level=new_level)
        )
        self._commit()
        return ActionResult(False, f"Enhancement failed. Dropped to +{new_level}")

    def equip_item(self, uid: str, item_id: str) -> ActionResult:
        """Give a creature a held item, returning any previous one to the bag."""
        creature = self._find_creature(uid)
        if creature is None:
            return ActionResult(False, "Monster not found")

        item = self.db.items.get(item_id)
        if item is None:
            return ActionResult(False, f"Unknown item: {item_id}")
        if item.category != ItemCategory.EQUIPMENT:
            return ActionResult(False, "Not an equipment")

        tamer = self.state.tamer
        if not has_item(tamer.inventory, item_id):
            return ActionResult(False, "Item not in inventory")

        inventory = consume_item(tamer.inventory, item_id, 1)
        if creature.held_item_id:
            inventory = add_to_inventory(inventory, creature.held_item_id, 1)
        tamer.inventory = inventory

        updated = creature.evolve(held_item_id=item_id)
        stats = recalculate_stats(updated, self.db)
        gained = max(stats.max_hp - creature.current_stats.max_hp, 0)
        updated = updated.evolve(
            current_stats=stats,
            current_hp=min(creature.current_hp + gained, stats.max_hp),
        )
        self._replace_creature(uid, updated)
        self._commit()
        return ActionResult(True, f"Equipped {item.name}")

    def unequip_item(self, uid: str) -> ActionResult:
        creature = self._find_creature(uid)
        if creature is None:
            return ActionResult(False, "Monster not found")
        if not creature.held_item_id:
            return ActionResult(False, "No item equipped")

        tamer = self.state.tamer
        tamer.inventory = add_to_inventory(tamer.inventory, creature.held_item_id, 1)
        self._replace_creature(uid, with_recalculated_stats(creature, self.db, held_item_id=None))
        self._commit()
        return ActionResult(True, "Item unequipped")

    def use_item(self, item_id: str, uid: str) -> ActionResult:
        """Use a healing item on a creature."""
        item = self.db.items.get(item_id)
        if item is None:
            return ActionResult(False, f"Unknown item: {item_id}")
        if item.category != ItemCategory.HEALING:
            return ActionResult(False, "This item cannot be used here")

        creature = self._find_creature(uid)
        if creature is None:
            return ActionResult(False, "Monster not found")

        tamer = self.state.tamer
        if not has_item(tamer.inventory, item_id):
            return ActionResult(False, "Item not in inventory")

        max_hp = creature.current_stats.max_hp
        if creature.current_hp >= max_hp:
            return ActionResult(False, "HP is already full")

        healed = min(creature.current_hp + int(item.power), max_hp)
        tamer.inventory = consume_item(tamer.inventory, item_id, 1)
        self._replace_creature(uid, creature.evolve(current_hp=healed))
        self._commit()
        return ActionResult(True, f"Restored {healed - creature.current_hp} HP")

    def heal_party(self) -> None:
        party = self.state.tamer.party
        for index, creature in enumerate(party):
            party[index] = creature.evolve(current_hp=creature.current_stats.max_hp)
        self._commit()

    def move_to_storage(self, uid: str) -> ActionResult:
        tamer = self.state.tamer
        creature = next((c for c in tamer.party if c.uid == uid), None)
        if creature is None:
            return ActionResult(False, "Monster not in party")
        if len(tamer.party) <= 1:
            return ActionResult(False, "Party cannot be empty")
        if len(tamer.storage) >= tamer.unlocked_storage_slots:
            return ActionResult(False, "Storage is full")

        tamer.party = [c for c in tamer.party if c.uid != uid]
        tamer.storage = [*tamer.storage, creature]
        self._commit()
        return ActionResult(True, "Moved to storage")

    def move_to_party(self, uid: str) -> ActionResult:
        tamer = self.state.tamer
        creature = next((c for c in tamer.storage if c.uid == uid), None)
        if creature is None:
            return ActionResult(False, "Monster not in storage")
        if len(tamer.party) >= tamer.unlocked_party_slots:
            return ActionResult(False, "Party is full")

        tamer.storage = [c for c in tamer.storage if c.uid != uid]
        tamer.party = [*tamer.party, creature]
        self._commit()
        return ActionResult(True, "Moved to party")

    # -------------------------------------------------------------------------
    # Support skills
    # -------------------------------------------------------------------------

    def use_support_skill(self, skill_id: str) -> ActionResult:
        """
        Use a tamer support skill on the lead creature.

        Buffs revert on the timer queue after their duration.
        """
        skill = self.db.support_skills.get(skill_id)
        if skill is None:
            return ActionResult(False, f"Unknown skill: {skill_id}")

        tamer = self.state.tamer
        if skill_id not in tamer.unlocked_support_skills:
            return ActionResult(False, "Skill not unlocked")

        now = self.timers.now
        ready_at = self._cooldowns.get(skill_id, 0.0)
        if now < ready_at:
            remaining = math.ceil((ready_at - now) / 1000)
            return ActionResult(False, f"On cooldown ({remaining}s)")

        if not tamer.party:
            return ActionResult(False, "No monster in party")

        lead = tamer.party[0]
        if skill.effect == "HEAL":
            max_hp = lead.current_stats.max_hp
            updated = lead.evolve(current_hp=min(lead.current_hp + skill.power, max_hp))
            message = f"{skill.name}: healed {updated.current_hp - lead.current_hp} HP"
        elif skill.effect in BUFF_STATS:
            stat = BUFF_STATS[skill.effect]
            stats = lead.current_stats.plus({stat: skill.power})
            updated = lead.evolve(current_stats=stats)
            self.timers.schedule(
                skill.duration or DEFAULT_BUFF_DURATION,
                self._make_buff_revert(lead.uid, stat, skill.power),
            )
            message = f"{skill.name}: {stat} +{skill.power}"
        else:
            # CLEANSE: back to the unmodified stat pipeline
            updated = with_recalculated_stats(lead, self.db)
            message = f"{skill.name}: stat changes cleared"

        tamer.party[0] = updated
        self._cooldowns[skill_id] = now + skill.cooldown
        self._commit()
        return ActionResult(True, message)

    def _make_buff_revert(self, uid: str, stat: str, power: int):
        def revert() -> None:
            creature = self._find_creature(uid)
            if creature is None:
                return
            baseline = getattr(recalculate_stats(creature, self.db), stat)
            value = max(getattr(creature.current_stats, stat) - power, baseline)
            stats = creature.current_stats.evolve(**{stat: value})
            self._replace_creature(uid, creature.evolve(current_stats=stats))
            self._commit()
        return revert

    def support_skill_cooldown(self, skill_id: str) -> float:
        """Milliseconds until a support skill is usable (0 when ready)."""
        return max(0.0, self._cooldowns.get(skill_id, 0.0) - self.timers.now)

    # -------------------------------------------------------------------------
    # Shop and items
    # -------------------------------------------------------------------------

    def buy_item(self, item_id: str, quantity: int = 1) -> ActionResult:
        gold_before = self.state.tamer.gold
        ok, message = self.shop.buy(self.state, item_id, quantity)
        if not ok:
            return ActionResult(False, message)

        spent = gold_before - self.state.tamer.gold
        achievements.track_achievement(self.state, "economy_spend_5000", self.db, self.bus, amount=spent)
        self._commit()
        return ActionResult(True, message)

    def sell_item(self, item_id: str, quantity: int = 1) -> ActionResult:
        ok, message = self.shop.sell(self.state, item_id, quantity)
        if ok:
            self._commit()
        return ActionResult(ok, message)

    def check_shop_refresh(self, now: float) -> bool:
        if not self.shop.check_refresh(self.state, now):
            return False
        self._commit()
        return True

    def collect_item(self, item_id: str, quantity: int = 1) -> bool:
        """Pick up an item in the world."""
        if self.db.item_or_gear(item_id) is None or quantity < 1:
            return False

        tamer = self.state.tamer
        tamer.inventory = add_to_inventory(tamer.inventory, item_id, quantity)
        with self._publishing():
            self.bus.publish(GameEvent.ITEM_COLLECTED, item_id=item_id, quantity=quantity)
        self._commit()
        return True

    def enter_region(self, region_id: str) -> None:
        self.state.current_region = region_id
        with self._publishing():
            self.bus.publish(GameEvent.REGION_ENTERED, region_id=region_id)
        self._commit()

    def equip_gear(self, gear_id: str) -> ActionResult:
        """Equip tamer gear from the inventory into its slot."""
        gear = self.db.gear.get(gear_id)
        if gear is None:
            return ActionResult(False, f"Unknown gear: {gear_id}")

        tamer = self.state.tamer
        if not has_item(tamer.inventory, gear_id):
            return ActionResult(False, "Item not in inventory")
        if tamer.level < gear.required_level:
            return ActionResult(False, f"Requires tamer level {gear.required_level}")

        inventory = consume_item(tamer.inventory, gear_id, 1)
        previous = tamer.equipped_items.get(gear.slot)
        if previous:
            inventory = add_to_inventory(inventory, previous, 1)
        tamer.inventory = inventory
        tamer.equipped_items = {**tamer.equipped_items, gear.slot: gear_id}
        self._commit()
        return ActionResult(True, f"Equipped {gear.name}")

    def unequip_gear(self, slot: str) -> ActionResult:
        tamer = self.state.tamer
        gear_id = tamer.equipped_items.get(slot)
        if not gear_id:
            return ActionResult(False, "Nothing equipped in that slot")

        tamer.inventory = add_to_inventory(tamer.inventory, gear_id, 1)
        tamer.equipped_items = {k: v for k, v in tamer.equipped_items.items() if k != slot}
        self._commit()
        return ActionResult(True, "Gear unequipped")

    # -------------------------------------------------------------------------
    # Quests and achievements
    # -------------------------------------------------------------------------

    def accept_quest(self, quest_id: str) -> bool:
        if not self.quests.accept_quest(self.state, quest_id):
            return False
        self._commit()
        return True

    def claim_quest_reward(self, quest_id: str) -> ActionResult:
        claim = self.quests.claim_quest_reward(self.state, quest_id)
        if not claim.success:
            return ActionResult(False, "No reward to claim")
        if claim.tamer_leveled_up:
            self.bus.publish(GameEvent.TAMER_LEVEL_UP, level=self.state.tamer.level)
        self._commit()
        return ActionResult(True, f"Claimed {claim.rewards.gold} gold and {claim.rewards.exp} exp")

    def reroll_quest(self, quest_id: str) -> bool:
        if not self.quests.reroll_quest(self.state, quest_id):
            return False
        self._commit()
        return True

    def refresh_daily_quests(self, now: float) -> bool:
        if not self.quests.refresh_daily_quests(self.state, now):
            return False
        self._commit()
        return True

    def claim_achievement_reward(self, achievement_id: str) -> ActionResult:
        result = achievements.claim_achievement_reward(self.state, achievement_id, self.db)
        if result.success:
            self._commit()
        return ActionResult(result.success, result.message)

    def claim_daily_login(self, today: str) -> ActionResult:
        """
        Claim the login reward for a calendar day (ISO "YYYY-MM-DD").

        Consecutive days extend the streak; a gap restarts it at day 1.
        Days on or before the last claim are refused.
        Rewards cycle through the 7-day table.
        """
        try:
            day = date.fromisoformat(today)
        except ValueError:
            return ActionResult(False, f"Invalid date: {today}")

        claim_date = day.isoformat()
        record = self.state.daily_login
        last = record.last_claim_date
        if last == claim_date:
            return ActionResult(False, "Already claimed today")
        # ISO dates order as strings
        if last and claim_date < last:
            return ActionResult(False, "Date is before the last claim")

        yesterday = (day - timedelta(days=1)).isoformat()
        streak = record.streak + 1 if last == yesterday else 1

        reward = self.db.daily_reward(streak)
        tamer = self.state.tamer
        if reward:
            tamer.gold += reward.gold
            tamer.inventory = merge_items(tamer.inventory, reward.items)

        self.state.daily_login = record.evolve(
            last_claim_date=claim_date,
            streak=streak,
            total_claims=record.total_claims + 1,
        )
        self._commit()
        return ActionResult(True, f"Day {((streak - 1) % 7) + 1} reward claimed")

    # -------------------------------------------------------------------------
    # Incubation
    # -------------------------------------------------------------------------

    def start_incubation(self, egg_id: str, now: float) -> ActionResult:
        egg = self.db.items.get(egg_id)
        if egg is None or egg.category != ItemCategory.EGG:
            return ActionResult(False, "Not an egg")

        tamer = self.state.tamer
        if not has_item(tamer.inventory, egg_id):
            return ActionResult(False, "Egg not in inventory")

        incubators = self.state.incubators
        index = next((i for i, slot in enumerate(incubators) if slot.egg_id is None), None)
        if index is None:
            return ActionResult(False, "No free incubator")

        tamer.inventory = consume_item(tamer.inventory, egg_id, 1)
        incubators[index] = IncubatorSlot(egg_id=egg_id, started_at=now)
        self._commit()
        return ActionResult(True, f"{egg.name} placed in incubator {index + 1}")

    def hatch_egg(self, slot_index: int, now: float) -> ActionResult:
        incubators = self.state.incubators
        if not 0 <= slot_index < len(incubators):
            return ActionResult(False, "Invalid incubator")

        slot = incubators[slot_index]
        egg = self.db.items.get(slot.egg_id or "")
        if egg is None:
            return ActionResult(False, "Incubator is empty")
        if now - slot.started_at < (egg.hatch_time or 0):
            return ActionResult(False, "Egg is not ready to hatch")

        pool = [s for s in egg.hatch_pool if s in self.db.species]
        if not pool:
            return ActionResult(False, "Nothing hatched")

        creature = create_creature(self.rng.pick(pool), 1, self.db)
        if not place_creature(self.state.tamer, creature):
            return ActionResult(False, "Party and storage are full")

        incubators[slot_index] = IncubatorSlot()
        for achievement_id in ("collection_hatch_first", "collection_hatch_5"):
            achievements.track_achievement(self.state, achievement_id, self.db, self.bus)

        name = self.db.species[creature.species_id].name
        logger.info(f"Hatched {creature.species_id} from {egg.id}")
        self._commit()
        return ActionResult(True, f"{name} hatched!")

    # -------------------------------------------------------------------------
    # Expeditions
    # -------------------------------------------------------------------------

    def start_expedition(self, expedition_id: str, uids: list[str], now: float) -> ActionResult:
        expedition = self.db.expeditions.get(expedition_id)
        if expedition is None:
            return ActionResult(False, f"Unknown expedition: {expedition_id}")

        tamer = self.state.tamer
        if any(a.expedition_id == expedition_id for a in tamer.active_expeditions):
            return ActionResult(False, "Expedition already in progress")

        requirements = expedition.requirements
        unique = list(dict.fromkeys(uids))
        if len(unique) < requirements.party_size:
            return ActionResult(False, f"Requires {requirements.party_size} monsters")

        busy = {uid for a in tamer.active_expeditions for uid in a.creature_uids}
        for uid in unique:
            creature = tamer.find_creature(uid)
            if creature is None:
                return ActionResult(False, "Monster not found")
            if uid in busy:
                return ActionResult(False, "Monster is already on an expedition")
            if creature.level < requirements.min_level:
                return ActionResult(False, f"Requires level {requirements.min_level}")
            if requirements.element:
                species = self.db.species.get(creature.species_id)
                if species is None or species.element != requirements.element:
                    return ActionResult(False, f"Requires {requirements.element.value} monsters")

        tamer.active_expeditions = [
            *tamer.active_expeditions,
            ActiveExpedition(expedition_id=expedition_id, creature_uids=unique, started_at=now),
        ]
        self._commit()
        return ActionResult(True, f"{expedition.name} started")

    def claim_expedition(self, expedition_id: str, now: float) -> ActionResult:
        tamer = self.state.tamer
        active = next((a for a in tamer.active_expeditions if a.expedition_id == expedition_id), None)
        if active is None:
            return ActionResult(False, "Expedition not in progress")

        expedition = self.db.expeditions.get(expedition_id)
        if expedition is None:
            return ActionResult(False, f"Unknown expedition: {expedition_id}")
        if now - active.started_at < expedition.duration:
            return ActionResult(False, "Expedition still in progress")

        rewards = expedition.rewards
        for uid in active.creature_uids:
            creature = tamer.find_creature(uid)
            if creature is not None:
                result = add_exp_to_creature(creature, rewards.exp, self.state, self.db)
                self._replace_creature(uid, result.creature)

        tamer.gold += rewards.gold
        found = []
        for drop in rewards.items:
            if self.rng.chance(drop.chance):
                tamer.inventory = add_to_inventory(tamer.inventory, drop.item_id, 1)
                found.append(drop.item_id)

        tamer.active_expeditions = [a for a in tamer.active_expeditions if a is not active]
        self._commit()
        suffix = f" and {', '.join(found)}" if found else ""
        return ActionResult(True, f"Expedition complete: {rewards.gold} gold{suffix}")

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def manual_save(self, slot_id: int) -> bool:
        if self.slots is None:
            return False
        return self.slots.save_to_slot(slot_id, self.state)

    def manual_load(self, slot_id: int) -> bool:
        if self.slots is None:
            return False
        state = self.slots.load_from_slot(slot_id)
        if state is None:
            return False
        self.state = state
        self._cooldowns.clear()
        self._commit()
        return True

    def load_autosave(self) -> bool:
        state = self.autosave.load()
        if state is None:
            return False
        self.state = state
        self._cooldowns.clear()
        self._commit()
        return True
