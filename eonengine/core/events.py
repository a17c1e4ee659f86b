"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The game state
manager publishes a full-state notification after every mutation, plus
narrower notifications for domain moments.

Usage:
    # Subscribe
    event_bus.subscribe(GameEvent.STATE_UPDATED, on_state_updated)

    # Publish
    event_bus.publish(GameEvent.REWARD_EARNED, rewards=rewards)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


class GameEvent(Enum):
    """Notifications published by the game core."""
    # Full snapshot, once per mutation
    STATE_UPDATED = auto()

    # Progression
    EVOLUTION_READY = auto()
    SKILL_UNLOCKED = auto()
    TAMER_LEVEL_UP = auto()
    ACHIEVEMENT_UNLOCKED = auto()

    # Battle / world
    REWARD_EARNED = auto()
    MONSTER_CAPTURED = auto()
    MONSTER_DEFEATED = auto()
    ITEM_COLLECTED = auto()
    REGION_ENTERED = auto()
    REPUTATION_CHANGED = auto()

    # Quests
    QUEST_COMPLETED = auto()

    # Misc
    LOG_MESSAGE = auto()
    RETURN_TO_TITLE = auto()


class SaveEvent(Enum):
    """Save system events."""
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()
    AUTOSAVE_REQUESTED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)

    Handler exceptions are logged and never propagate to the publisher.
    """

    def __init__(self):
        # Map of event type -> list of (priority, handler, one_shot)
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        # Queue for events published during handling
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, use weak reference (handler auto-removed if deleted)

        Returns:
            A callable that removes this subscription
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        # Insert sorted by priority (highest first)
        handlers = self._handlers[event_type]
        entry = (priority, handler_ref, one_shot)

        insert_idx = 0
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break
            insert_idx = i + 1

        handlers.insert(insert_idx, entry)

        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Unsubscribe a handler from an event type."""
        if event_type not in self._handlers:
            return

        handlers = self._handlers[event_type]
        self._handlers[event_type] = [
            (p, h, o) for p, h, o in handlers
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            # Delivered after the current dispatch finishes
            self._event_queue.append(event)
        else:
            self._dispatch(event)

        return event

    def has_subscribers(self, event_type: Enum) -> bool:
        """Check whether any live handler listens for an event type."""
        return any(
            self._get_handler(h) is not None
            for _, h, _ in self._handlers.get(event_type, [])
        )

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._handlers.clear()
        elif event_type in self._handlers:
            del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers."""
        if event.type not in self._handlers:
            return

        self._is_publishing = True
        # Snapshot: handlers may subscribe or unsubscribe while running
        handlers = list(self._handlers[event.type])
        to_remove: list[tuple[int, Any, bool]] = []

        try:
            for entry in handlers:
                handler = self._get_handler(entry[1])

                if handler is None:
                    # Weak reference was garbage collected
                    to_remove.append(entry)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception("Error in event handler for %s", event.type)

                if entry[2]:
                    to_remove.append(entry)

                if event.consumed:
                    break

            if to_remove:
                self._handlers[event.type] = [
                    e for e in self._handlers.get(event.type, [])
                    if not any(e is r for r in to_remove)
                ]
        finally:
            self._is_publishing = False

        while self._event_queue:
            queued = self._event_queue.pop(0)
            self._dispatch(queued)

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if callable(handler_ref) and not isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref

        return handler_ref()
