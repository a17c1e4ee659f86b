import os
import sys
import pytest

# Ensure packages can be imported without installing
sys.path.append(os.getcwd())

from eonengine.core.events import EventBus
from eonengine.core.rng import RNG
from eonengine.core.timers import TimerQueue
from eonengine.resources.storage import MemoryStorage


class EventRecorder:
    """Collects published events. Keep a reference: the bus holds it weakly."""

    def __init__(self, bus, *event_types):
        self.events = []
        for event_type in event_types:
            bus.subscribe(event_type, self.handle)

    def handle(self, event):
        self.events.append(event)

    def of(self, event_type):
        return [e for e in self.events if e.type == event_type]

    def clear(self):
        self.events.clear()


@pytest.fixture
def db():
    """Bundled game data (fresh per test, tables may be edited)."""
    from eontamers.data.registry import GameDatabase
    return GameDatabase.load()


@pytest.fixture
def rng():
    return RNG(12345)


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def autosave(storage):
    from eontamers.save.autosave import AutoSave
    return AutoSave(storage)


@pytest.fixture
def slots(storage, event_bus):
    from eontamers.save.slots import SlotManager
    return SlotManager(storage, event_bus)


@pytest.fixture
def manager(db, event_bus, rng, autosave, timers, slots):
    """Manager with a fresh game: Leo, a level 5 Pyrocat, named Ash."""
    from eontamers.state.manager import GameStateManager
    mgr = GameStateManager(db, event_bus, rng, autosave, timers, slots=slots)
    result = mgr.start_new_game("leo", "pyrocat", "Ash")
    assert result.success
    return mgr


@pytest.fixture
def recorder_factory(event_bus):
    def make(*event_types):
        return EventRecorder(event_bus, *event_types)
    return make
