"""
Save module - single-key autosave and multi-slot saves.
"""

from eontamers.save.autosave import AutoSave, SaveResult, migrate
from eontamers.save.slots import (
    SlotManager,
    SlotMetadata,
    SaveSlot,
    calculate_checksum,
    document_digest,
    verify_checksum,
)

__all__ = [
    "AutoSave",
    "SaveResult",
    "migrate",
    "SlotManager",
    "SlotMetadata",
    "SaveSlot",
    "calculate_checksum",
    "document_digest",
    "verify_checksum",
]
