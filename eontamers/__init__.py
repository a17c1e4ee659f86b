"""
Eon Tamers game core.

Deterministic game-state simulation for a monster-collecting RPG:
progression math, capture and enhancement outcomes, quests, and
persistence. Rendering and input live outside this package and talk to
it through GameStateManager and the event bus.

Quick Start:
    from eontamers.bootstrap import create_game

    game = create_game()
    game.manager.start_new_game("leo", "pyrocat", "Ash")
"""

__version__ = "0.1.0"
