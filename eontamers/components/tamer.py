"""
Player aggregate: the tamer, their creatures and belongings.
"""

from __future__ import annotations

from pydantic import Field

from eonengine.core.component import Component
from eontamers.components.creature import CreatureInstance


class InventoryItem(Component):
    """A stack of one item id. Stored stacks always have quantity > 0."""
    item_id: str
    quantity: int = Field(default=1, ge=0)


class ActiveExpedition(Component):
    """Creatures currently away on an expedition."""
    expedition_id: str
    creature_uids: list[str] = Field(default_factory=list)
    started_at: float = 0.0


class Tamer(Component):
    """
    The player character.

    Attributes:
        party: Active creatures, at most unlocked_party_slots
        storage: Overflow creatures, at most unlocked_storage_slots
        collection: Species ids ever owned
        achievement_progress: Achievement id -> counter
        equipped_items: Gear slot -> gear id
    """
    name: str = "Tamer"
    level: int = Field(default=1, ge=1)
    exp: int = Field(default=0, ge=0)
    character_id: str | None = None
    gold: int = Field(default=0, ge=0)
    spirit_points: int = 0
    party: list[CreatureInstance] = Field(default_factory=list)
    storage: list[CreatureInstance] = Field(default_factory=list)
    inventory: list[InventoryItem] = Field(default_factory=list)
    unlocked_party_slots: int = 1
    unlocked_storage_slots: int = 30
    unlocked_support_skills: list[str] = Field(default_factory=list)
    collection: list[str] = Field(default_factory=list)
    achievement_progress: dict[str, int] = Field(default_factory=dict)
    claimed_achievements: list[str] = Field(default_factory=list)
    active_expeditions: list[ActiveExpedition] = Field(default_factory=list)
    equipped_items: dict[str, str] = Field(default_factory=dict)

    def item_quantity(self, item_id: str) -> int:
        """Owned quantity of an item (0 if absent)."""
        for stack in self.inventory:
            if stack.item_id == item_id:
                return stack.quantity
        return 0

    def find_creature(self, uid: str) -> CreatureInstance | None:
        """Look up a creature in party or storage."""
        for creature in (*self.party, *self.storage):
            if creature.uid == uid:
                return creature
        return None
