"""
Inventory quantity helpers.

Inventories are ordered lists of InventoryItem stacks, one per item id.
Helpers return new lists; stacks that reach zero are pruned.
"""

from __future__ import annotations

from typing import Iterable

from eontamers.components.tamer import InventoryItem


def item_quantity(inventory: list[InventoryItem], item_id: str) -> int:
    for stack in inventory:
        if stack.item_id == item_id:
            return stack.quantity
    return 0


def has_item(inventory: list[InventoryItem], item_id: str, quantity: int = 1) -> bool:
    return item_quantity(inventory, item_id) >= quantity


def add_to_inventory(inventory: list[InventoryItem], item_id: str, quantity: int) -> list[InventoryItem]:
    """Add quantity to the matching stack, appending a new stack if needed."""
    if quantity <= 0:
        return list(inventory)

    result = []
    found = False
    for stack in inventory:
        if stack.item_id == item_id:
            result.append(InventoryItem(item_id=item_id, quantity=stack.quantity + quantity))
            found = True
        else:
            result.append(stack)
    if not found:
        result.append(InventoryItem(item_id=item_id, quantity=quantity))
    return result


def consume_item(inventory: list[InventoryItem], item_id: str, quantity: int = 1) -> list[InventoryItem]:
    """
    Remove quantity from a stack.

    Quantities never go negative: consuming more than owned empties the
    stack. Callers check has_item() first when the shortfall matters.
    """
    result = []
    for stack in inventory:
        if stack.item_id == item_id:
            remaining = stack.quantity - quantity
            if remaining > 0:
                result.append(InventoryItem(item_id=item_id, quantity=remaining))
        elif stack.quantity > 0:
            result.append(stack)
    return result


def merge_items(inventory: list[InventoryItem], stacks: Iterable) -> list[InventoryItem]:
    """Add every (item_id, quantity) stack to the inventory."""
    result = list(inventory)
    for stack in stacks:
        result = add_to_inventory(result, stack.item_id, stack.quantity)
    return result
