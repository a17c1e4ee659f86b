"""
Single-slot autosave with a versioned envelope.

Document format:
    {"version": 1, "saved_at": "<ISO timestamp>", "data": {...GameState...}}

Older documents are still accepted on load:
- legacy: a bare GameState dump that carries "version"
- ancient: a bare GameState dump without "version"
Both pass through migrate().
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, NamedTuple

from pydantic import ValidationError

from eontamers.components.state import STATE_VERSION, GameState

if TYPE_CHECKING:
    from eonengine.resources.storage import Storage


logger = logging.getLogger(__name__)

DEFAULT_KEY = "eontamers_save_v1"


class SaveResult(NamedTuple):
    ok: bool
    reason: str | None = None


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Upgrade an unversioned or older state dump to the current version."""
    migrated = dict(data)
    migrated["version"] = STATE_VERSION
    return migrated


class AutoSave:
    """
    Persists the whole GameState under one storage key.

    Usage:
        autosave = AutoSave(FileStorage("saves"))
        autosave.save(state)
        state = autosave.load()
    """

    def __init__(self, storage: Storage, key: str = DEFAULT_KEY):
        self.storage = storage
        self.key = key

    def save(self, state: GameState) -> SaveResult:
        try:
            envelope = {
                "version": STATE_VERSION,
                "saved_at": datetime.now().isoformat(),
                "data": state.model_dump(mode="json"),
            }
            payload = json.dumps(envelope)
        except (TypeError, ValueError) as e:
            logger.warning(f"Autosave serialization failed: {e}")
            return SaveResult(False, "serialization_error")

        try:
            self.storage.set(self.key, payload)
        except (OSError, ValueError) as e:
            logger.warning(f"Autosave write failed: {e}")
            return SaveResult(False, "storage_error")

        logger.debug("Autosave written")
        return SaveResult(True)

    def load(self) -> GameState | None:
        """
        Read the saved state.

        Returns:
            The state, or None when there is no save, the document is
            corrupted, or its envelope carries another version
        """
        try:
            raw = self.storage.get(self.key)
        except (OSError, ValueError) as e:
            logger.warning(f"Autosave read failed: {e}")
            return None
        if raw is None:
            return None

        try:
            document = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Autosave is not valid JSON: {e}")
            return None
        if not isinstance(document, dict):
            logger.warning("Autosave document is not an object")
            return None

        if "version" in document and "data" in document:
            if document["version"] != STATE_VERSION:
                logger.warning(
                    f"Autosave version mismatch: expected {STATE_VERSION}, got {document['version']}"
                )
                return None
            data = document["data"]
        elif "version" in document:
            logger.info("Loading legacy save format")
            data = migrate(document)
        else:
            logger.info("Loading unversioned save format")
            data = migrate(document)

        if not isinstance(data, dict) or "tamer" not in data:
            logger.warning("Autosave is missing required fields")
            return None

        try:
            return GameState.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Autosave failed validation: {e}")
            return None

    def has_save(self) -> bool:
        try:
            return self.storage.get(self.key) is not None
        except (OSError, ValueError):
            return False

    def clear(self) -> None:
        try:
            self.storage.remove(self.key)
        except OSError as e:
            logger.warning(f"Failed to clear autosave: {e}")
