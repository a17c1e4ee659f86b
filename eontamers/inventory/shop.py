"""
Shop - stock rotation, faction-discounted prices, buying and selling.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from eontamers.data.definitions import Item, ItemCategory
from eontamers.inventory.items import add_to_inventory, consume_item, has_item

if TYPE_CHECKING:
    from eonengine.core.rng import RNG
    from eontamers.components.state import GameState
    from eontamers.data.registry import GameDatabase


logger = logging.getLogger(__name__)

STOCK_SIZE = 6
REFRESH_INTERVAL_MS = 4 * 60 * 60 * 1000
ALWAYS_STOCKED = ("storage_license",)

FACTION_LOCK_REPUTATION = 100
STORAGE_LICENSE = "storage_license"
STORAGE_SLOTS_PER_LICENSE = 10
SELL_RATIO = 0.5

# reputation threshold -> discount, highest first
DISCOUNT_TIERS = (
    (500, 0.2),
    (250, 0.1),
    (100, 0.05),
)

SPEND_COUNTERS = (
    "quest_progress_daily_spend_100",
    "quest_progress_daily_spend_500",
    "quest_progress_weekly_spend_5000",
)


def faction_discount(reputation: int) -> float:
    for threshold, discount in DISCOUNT_TIERS:
        if reputation >= threshold:
            return discount
    return 0.0


class ShopService:
    """
    Buys and sells against the tamer's gold.

    Methods mutate the GameState passed in; the caller commits.
    """

    def __init__(self, db: GameDatabase, rng: RNG):
        self.db = db
        self.rng = rng

    def refresh_stock(self, state: GameState, now: float) -> list[str]:
        """Roll a new stock list and schedule the next rotation."""
        pool = [i.id for i in self.db.items.values() if i.category != ItemCategory.MATERIAL]
        gear_ids = list(self.db.gear)
        pool.extend(gear_ids)

        # Partial Fisher-Yates on the injected RNG
        for i in range(min(STOCK_SIZE, len(pool))):
            j = self.rng.range(i, len(pool) - 1)
            pool[i], pool[j] = pool[j], pool[i]
        selected = [s for s in pool[:STOCK_SIZE] if s not in ALWAYS_STOCKED]

        if gear_ids and selected and not any(s in gear_ids for s in selected):
            selected[0] = self.rng.pick(gear_ids)

        for item_id in ALWAYS_STOCKED:
            if item_id in self.db.items:
                selected.append(item_id)

        state.shop_stock = selected
        state.shop_next_refresh = now + REFRESH_INTERVAL_MS
        return selected

    def check_refresh(self, state: GameState, now: float) -> bool:
        """Rotate stock when the refresh time has passed (or was never set)."""
        if state.shop_next_refresh is None or now > state.shop_next_refresh:
            self.refresh_stock(state, now)
            return True
        return False

    def effective_price(self, state: GameState, item_id: str) -> int:
        """Listed price minus the best faction discount (0 for unknown ids)."""
        item = self.db.item_or_gear(item_id)
        if item is None:
            return 0
        discount = max((faction_discount(r) for r in state.reputation.values()), default=0.0)
        return math.floor(item.price * (1 - discount))

    def buy(self, state: GameState, item_id: str, quantity: int = 1) -> tuple[bool, str]:
        """
        Purchase an item.

        Checks faction lock, crafting materials and gold, in that order.
        Storage licenses are applied immediately instead of stored.
        """
        item = self.db.item_or_gear(item_id)
        if item is None:
            return False, f"Unknown item: {item_id}"
        if quantity < 1:
            return False, "Invalid quantity"

        tamer = state.tamer
        is_item = isinstance(item, Item)

        if is_item and item.faction_lock:
            if state.reputation.get(item.faction_lock.value, 0) < FACTION_LOCK_REPUTATION:
                return False, f"Requires {item.faction_lock.value} reputation"

        materials = item.required_materials if is_item else []
        for mat in materials:
            if not has_item(tamer.inventory, mat.item_id, mat.quantity * quantity):
                return False, f"Missing material: {mat.item_id}"

        total = self.effective_price(state, item_id) * quantity
        if tamer.gold < total:
            return False, "Not enough gold"

        tamer.gold -= total
        inventory = tamer.inventory
        for mat in materials:
            inventory = consume_item(inventory, mat.item_id, mat.quantity * quantity)

        if item_id == STORAGE_LICENSE:
            tamer.unlocked_storage_slots += STORAGE_SLOTS_PER_LICENSE * quantity
        else:
            inventory = add_to_inventory(inventory, item_id, quantity)
        tamer.inventory = inventory

        for key in SPEND_COUNTERS:
            state.bump(key, total)

        logger.debug(f"Bought {quantity}x {item_id} for {total}")
        return True, f"Bought {item.name} x{quantity}"

    def sell(self, state: GameState, item_id: str, quantity: int = 1) -> tuple[bool, str]:
        """Sell owned items for half their listed price."""
        item = self.db.item_or_gear(item_id)
        if item is None:
            return False, f"Unknown item: {item_id}"
        if quantity < 1 or not has_item(state.tamer.inventory, item_id, quantity):
            return False, "Not enough items"

        earned = math.floor(item.price * SELL_RATIO) * quantity
        tamer = state.tamer
        tamer.inventory = consume_item(tamer.inventory, item_id, quantity)
        tamer.gold += earned
        return True, f"Sold {item.name} x{quantity} for {earned}"
