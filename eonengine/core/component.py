"""
Component base class for data-only models.

Components are pure data containers with NO game logic.
All rules live in the progression/battle/quest modules. This separation
makes:
- Serialization trivial (save files are model dumps)
- Testing easier (logic functions take and return components)

Usage:
    class Stats(Component):
        hp: int = 0
        max_hp: int = 0

    class Position(Component):
        x: float = 0.0
        y: float = 0.0
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all runtime state components.

    Components are data-only containers using Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    IMPORTANT: Do NOT add methods that modify state.
    """

    model_config = ConfigDict(
        # Validate on assignment
        validate_assignment=True,
        # Save files must match the schema exactly
        extra='forbid',
    )

    # Class variable: component type name (used for serialization)
    _type_name: ClassVar[str] = ""

    @classmethod
    def get_type_name(cls) -> str:
        """Get the component type name for serialization."""
        return cls._type_name or cls.__name__

    def clone(self) -> Component:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)

    def evolve(self, **changes: Any) -> Component:
        """
        Return a deep copy with fields replaced and re-validated.

        Logic functions use this instead of mutating their inputs.
        """
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


class Definition(BaseModel):
    """
    Base class for static reference data (species, items, quests...).

    Definitions are immutable once loaded; unknown keys in data files
    are ignored so content can carry presentation-only fields.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='ignore',
    )

