"""
Composition root.

Builds every collaborator once, from a GameConfig, and wires them
together. Hosts keep the returned Game and pass its parts where needed.

Usage:
    game = create_game(GameConfig(save_dir="saves"))
    if not game.manager.load_autosave():
        game.manager.start_new_game("leo", "pyrocat", "Ash")

    # Each frame
    game.manager.update(dt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eonengine.config import GameConfig
from eonengine.core.events import Event, EventBus, SaveEvent
from eonengine.core.rng import RNG
from eonengine.core.timers import TimerQueue
from eonengine.resources.storage import FileStorage, MemoryStorage, Storage
from eontamers.data.registry import BUNDLED_DATA_DIR, GameDatabase
from eontamers.save.autosave import AutoSave
from eontamers.save.slots import SlotManager
from eontamers.state.manager import GameStateManager


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Everything the host needs to drive the core."""
    config: GameConfig
    db: GameDatabase
    rng: RNG
    bus: EventBus
    timers: TimerQueue
    storage: Storage
    autosave: AutoSave
    slots: SlotManager
    manager: GameStateManager

    def on_autosave_requested(self, event: Event) -> None:
        """Persist the live state into the slot the timer asked for."""
        slot_id = event.get("slot_id")
        if slot_id is None:
            return
        if not self.slots.save_to_slot(slot_id, self.manager.get_state()):
            logger.warning(f"Scheduled save to slot {slot_id} failed")


def create_game(config: GameConfig | None = None) -> Game:
    """
    Build a ready-to-use game core.

    Raises:
        DataLoadError: if the configured data directory does not exist
    """
    config = config or GameConfig()

    db = GameDatabase.load(config.data_dir or BUNDLED_DATA_DIR, config.extra_data_dirs)
    logger.info(
        f"Loaded {len(db.species)} species, {len(db.items)} items, {len(db.quests)} quests"
    )

    rng = RNG(config.rng_seed)
    bus = EventBus()
    timers = TimerQueue()

    if config.save_dir is not None:
        storage: Storage = FileStorage(config.save_dir)
    else:
        storage = MemoryStorage()

    autosave = AutoSave(storage)
    slots = SlotManager(
        storage,
        bus,
        max_slots=config.max_slots,
        autosave_interval=config.autosave_interval,
    )
    manager = GameStateManager(db, bus, rng, autosave, timers, slots=slots)

    game = Game(
        config=config,
        db=db,
        rng=rng,
        bus=bus,
        timers=timers,
        storage=storage,
        autosave=autosave,
        slots=slots,
        manager=manager,
    )
    # Game owns the handler, so a weak subscription lives as long as it does
    bus.subscribe(SaveEvent.AUTOSAVE_REQUESTED, game.on_autosave_requested)
    return game
