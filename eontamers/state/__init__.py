"""
State module - the game state manager.
"""

from eontamers.state.manager import ActionResult, GameStateManager

__all__ = [
    "ActionResult",
    "GameStateManager",
]
