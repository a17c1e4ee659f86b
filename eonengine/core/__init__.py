"""
Core engine module.

Exports:
- RNG: Seeded linear congruential generator
- EventBus, Event, GameEvent, SaveEvent: Event system
- TimerQueue: Delayed callbacks on the game clock
- Component, Definition: Pydantic model bases
"""

from eonengine.core.rng import RNG, DEFAULT_SEED
from eonengine.core.events import EventBus, Event, GameEvent, SaveEvent
from eonengine.core.timers import TimerQueue
from eonengine.core.component import Component, Definition

__all__ = [
    "RNG",
    "DEFAULT_SEED",
    # Events
    "EventBus",
    "Event",
    "GameEvent",
    "SaveEvent",
    "TimerQueue",
    # Models
    "Component",
    "Definition",
]
