"""
Eon Engine

Game-agnostic runtime pieces shared by the Eon Tamers core: seeded RNG,
event bus, timer queue, pydantic component base, JSON data loading and
key/value storage.
"""

__version__ = "0.1.0"
