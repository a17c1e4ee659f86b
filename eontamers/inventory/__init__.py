"""
Inventory module - item quantities and the shop.
"""

from eontamers.inventory.items import (
    item_quantity,
    has_item,
    add_to_inventory,
    consume_item,
    merge_items,
)
from eontamers.inventory.shop import ShopService, faction_discount

__all__ = [
    "item_quantity",
    "has_item",
    "add_to_inventory",
    "consume_item",
    "merge_items",
    "ShopService",
    "faction_discount",
]
