"""
Multi-slot saves with metadata, integrity checksum and import/export.

Provides:
- A fixed number of save slots (3 by default), each empty or holding
  exactly one {metadata, snapshot} pair
- Checksum validation of the tamer's critical data on load and import
- Portable base64 export strings
- An autosave timer that asks the game to save the last played slot
- One-time migration of the legacy single-key save into slot 0

Everything lives in one storage document:
    {"slots": [...], "last_played_slot": 0, "auto_save_enabled": true,
     "auto_save_interval": 300.0}
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError

from eonengine.core.component import Component
from eonengine.core.events import SaveEvent
from eontamers.components.state import GameState
from eontamers.save.autosave import DEFAULT_KEY as LEGACY_KEY
from eontamers.save.autosave import AutoSave

if TYPE_CHECKING:
    from eonengine.core.events import EventBus
    from eonengine.resources.storage import Storage


logger = logging.getLogger(__name__)

SAVE_VERSION = "1.0.0"
DEFAULT_KEY = "eontamers_saves"
MAX_SLOTS = 3
AUTO_SAVE_INTERVAL = 300.0
EXPORT_KEYS = {"version", "metadata", "snapshot"}


class SlotMetadata(Component):
    """Summary shown on the load screen."""
    slot_id: int
    timestamp: float
    playtime: int = 0
    tamer_name: str = ""
    tamer_level: int = 1
    current_location: str = "Unknown"
    party_size: int = 0
    gold: int = 0
    version: str = SAVE_VERSION
    checksum: str | None = None


class SaveSlot(Component):
    metadata: SlotMetadata | None = None
    snapshot: GameState | None = None

    @property
    def is_empty(self) -> bool:
        return self.metadata is None or self.snapshot is None


class SaveIndex(Component):
    slots: list[SaveSlot] = Field(default_factory=list)
    last_played_slot: int | None = None
    auto_save_enabled: bool = True
    auto_save_interval: float = AUTO_SAVE_INTERVAL


def calculate_checksum(state: GameState) -> str:
    """Base64 of the canonical JSON of the tamer's critical data."""
    critical = {
        "tamer": state.tamer.name,
        "level": state.tamer.level,
        "gold": state.tamer.gold,
        "party": [c.uid for c in state.tamer.party],
    }
    canonical = json.dumps(critical, sort_keys=True, separators=(',', ':'))
    return base64.b64encode(canonical.encode('utf-8')).decode('ascii')


def document_digest(document: dict[str, Any]) -> str:
    """SHA-256 (base64) of a document's canonical JSON."""
    canonical = json.dumps(document, sort_keys=True, separators=(',', ':'))
    return base64.b64encode(hashlib.sha256(canonical.encode('utf-8')).digest()).decode('ascii')


def verify_checksum(metadata: SlotMetadata, state: GameState) -> bool:
    # Saves written before checksums existed carry none
    if not metadata.checksum:
        return True
    return calculate_checksum(state) == metadata.checksum


class SlotManager:
    """
    Manages the save slots.

    Usage:
        slots = SlotManager(storage, event_bus)
        slots.save_to_slot(0, state)
        state = slots.load_from_slot(0)

        # Each frame
        slots.update(dt)
    """

    def __init__(
        self,
        storage: Storage,
        event_bus: EventBus | None = None,
        key: str = DEFAULT_KEY,
        max_slots: int = MAX_SLOTS,
        autosave_interval: float = AUTO_SAVE_INTERVAL,
        legacy_key: str = LEGACY_KEY,
    ):
        self.storage = storage
        self.event_bus = event_bus
        self.key = key
        self.max_slots = max_slots
        self.legacy_key = legacy_key
        self._default_interval = autosave_interval
        self._auto_save_timer = 0.0

        self._index = self._read_index()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _empty_index(self) -> SaveIndex:
        return SaveIndex(
            slots=[SaveSlot() for _ in range(self.max_slots)],
            auto_save_interval=self._default_interval,
        )

    def _read_index(self) -> SaveIndex:
        try:
            raw = self.storage.get(self.key)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read save slots: {e}")
            return self._empty_index()

        if raw is None:
            return self._migrate_legacy()

        try:
            index = SaveIndex.model_validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Save slot document is corrupted: {e}")
            return self._empty_index()

        # Pad or trim to the configured slot count
        slots = index.slots[:self.max_slots]
        slots += [SaveSlot() for _ in range(self.max_slots - len(slots))]
        index.slots = slots
        return index

    def _migrate_legacy(self) -> SaveIndex:
        """Move a legacy single-key save into slot 0."""
        index = self._empty_index()
        legacy = AutoSave(self.storage, self.legacy_key)
        if not legacy.has_save():
            return index

        state = legacy.load()
        if state is None:
            return index

        index.slots[0] = SaveSlot(metadata=self._create_metadata(0, state), snapshot=state)
        index.last_played_slot = 0
        logger.info("Migrated legacy save into slot 0")
        self._index = index
        self._write()
        return index

    def _write(self) -> bool:
        try:
            self.storage.set(self.key, self._index.model_dump_json())
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to write save slots: {e}")
            return False

    def _publish(self, event_type: SaveEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)

    def _valid_slot(self, slot_id: int) -> bool:
        if 0 <= slot_id < self.max_slots:
            return True
        logger.error(f"Invalid slot id: {slot_id}")
        return False

    @staticmethod
    def _create_metadata(slot_id: int, state: GameState) -> SlotMetadata:
        return SlotMetadata(
            slot_id=slot_id,
            timestamp=time.time(),
            playtime=int(state.play_time),
            tamer_name=state.tamer.name,
            tamer_level=state.tamer.level,
            current_location=state.current_region or "Unknown",
            party_size=len(state.tamer.party),
            gold=state.tamer.gold,
            version=SAVE_VERSION,
            checksum=calculate_checksum(state),
        )

    # -------------------------------------------------------------------------
    # Slots
    # -------------------------------------------------------------------------

    def save_to_slot(self, slot_id: int, state: GameState) -> bool:
        """Write a snapshot of the state into a slot."""
        if not self._valid_slot(slot_id):
            return False

        previous = self._index.model_copy(deep=True)
        self._index.slots[slot_id] = SaveSlot(
            metadata=self._create_metadata(slot_id, state),
            snapshot=state.model_copy(deep=True),
        )
        self._index.last_played_slot = slot_id

        if not self._write():
            self._index = previous
            self._publish(SaveEvent.SAVE_FAILED, slot_id=slot_id)
            return False

        logger.info(f"Saved to slot {slot_id}")
        self._publish(SaveEvent.SAVE_COMPLETED, slot_id=slot_id)
        return True

    def load_from_slot(self, slot_id: int) -> GameState | None:
        """
        Read a slot's snapshot.

        Returns None for empty slots and refuses snapshots whose checksum
        does not match their metadata.
        """
        if not self._valid_slot(slot_id):
            return None

        slot = self._index.slots[slot_id]
        if slot.is_empty:
            return None

        if not verify_checksum(slot.metadata, slot.snapshot):
            logger.error(f"Slot {slot_id} is corrupted: checksum mismatch")
            self._publish(SaveEvent.LOAD_FAILED, slot_id=slot_id, error="checksum_mismatch")
            return None

        self._index.last_played_slot = slot_id
        self._write()
        self._publish(SaveEvent.LOAD_COMPLETED, slot_id=slot_id)
        return slot.snapshot.model_copy(deep=True)

    def delete_slot(self, slot_id: int) -> bool:
        if not self._valid_slot(slot_id):
            return False

        self._index.slots[slot_id] = SaveSlot()
        if self._index.last_played_slot == slot_id:
            self._index.last_played_slot = None
        return self._write()

    def get_all_slots(self) -> list[SaveSlot]:
        return list(self._index.slots)

    def get_slot_metadata(self, slot_id: int) -> SlotMetadata | None:
        if not self._valid_slot(slot_id):
            return None
        return self._index.slots[slot_id].metadata

    def last_played_slot(self) -> int | None:
        return self._index.last_played_slot

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_slot(self, slot_id: int) -> str | None:
        """Encode a slot as a portable base64 string."""
        if not self._valid_slot(slot_id):
            return None
        slot = self._index.slots[slot_id]
        if slot.is_empty:
            return None

        document = {
            "version": SAVE_VERSION,
            "metadata": slot.metadata.model_dump(mode="json"),
            "snapshot": slot.snapshot.model_dump(mode="json"),
        }
        document["digest"] = document_digest(document)
        return base64.b64encode(json.dumps(document).encode('utf-8')).decode('ascii')

    def import_slot(self, slot_id: int, encoded: str) -> bool:
        """
        Decode an exported string into a slot.

        The string must be canonical base64, the document must match its
        digest (when present) and the snapshot its metadata checksum;
        corrupted or undecodable input leaves the slot untouched.
        """
        if not self._valid_slot(slot_id):
            return False

        try:
            raw = base64.b64decode(encoded, validate=True)
            # Padding bits are ignored by the decoder; only the canonical encoding is accepted
            if base64.b64encode(raw).decode('ascii') != encoded.strip():
                raise ValueError("export is not canonical base64")
            document = json.loads(raw.decode('utf-8'))
            if not isinstance(document, dict):
                raise ValueError("export is not a JSON object")
            digest = document.pop("digest", None)
            unknown = set(document) - EXPORT_KEYS
            if unknown:
                raise ValueError(f"unexpected export keys: {sorted(unknown)}")
            if digest is not None and digest != document_digest(document):
                logger.error("Imported save is corrupted: digest mismatch")
                return False
            if document.get("version") != SAVE_VERSION:
                logger.warning(f"Imported save version mismatch: {document.get('version')}")
            metadata = SlotMetadata.model_validate(document["metadata"])
            snapshot = GameState.model_validate(document["snapshot"])
        except (binascii.Error, ValueError, KeyError, AttributeError, ValidationError) as e:
            logger.error(f"Import failed: {e}")
            return False

        if not verify_checksum(metadata, snapshot):
            logger.error("Imported save is corrupted: checksum mismatch")
            return False

        self._index.slots[slot_id] = SaveSlot(
            metadata=metadata.evolve(slot_id=slot_id),
            snapshot=snapshot,
        )
        return self._write()

    # -------------------------------------------------------------------------
    # Auto-save
    # -------------------------------------------------------------------------

    @property
    def auto_save_enabled(self) -> bool:
        return self._index.auto_save_enabled

    def enable_auto_save(self, enabled: bool = True) -> None:
        self._index.auto_save_enabled = enabled
        self._auto_save_timer = 0.0
        self._write()

    def update(self, dt: float) -> None:
        """
        Advance the autosave timer (call each frame, dt in seconds).

        Publishes AUTOSAVE_REQUESTED for the last played slot once per
        interval; the game decides what to save.
        """
        interval = self._index.auto_save_interval
        if not self._index.auto_save_enabled or interval <= 0:
            return

        self._auto_save_timer += dt
        if self._auto_save_timer < interval:
            return

        self._auto_save_timer = 0.0
        slot_id = self._index.last_played_slot
        if slot_id is not None:
            self._publish(SaveEvent.AUTOSAVE_REQUESTED, slot_id=slot_id)
