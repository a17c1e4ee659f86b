"""
Fire-and-forget delayed callbacks.

The host application drives the queue from its frame loop with
advance(dt_ms). Scheduled callbacks cannot be cancelled, so callbacks
must tolerate their target no longer existing when they fire.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Callable


logger = logging.getLogger(__name__)


@dataclass(order=True)
class _Timer:
    due: float
    order: int
    callback: Callable[[], None] = field(compare=False)


class TimerQueue:
    """
    Game-clock timer queue.

    Usage:
        timers = TimerQueue()
        timers.schedule(10_000, revert_buff)
        timers.advance(dt_ms)   # each frame
    """

    def __init__(self):
        self._now: float = 0.0
        self._timers: list[_Timer] = []
        self._counter = 0

    @property
    def now(self) -> float:
        """Elapsed game-clock milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of timers not yet fired."""
        return len(self._timers)

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        """Run callback once, delay_ms from now."""
        self._counter += 1
        heapq.heappush(self._timers, _Timer(self._now + max(0.0, delay_ms), self._counter, callback))

    def advance(self, dt_ms: float) -> int:
        """
        Advance the clock and fire every due timer in schedule order.

        Returns:
            Number of callbacks fired
        """
        self._now += dt_ms
        fired = 0
        while self._timers and self._timers[0].due <= self._now:
            timer = heapq.heappop(self._timers)
            try:
                timer.callback()
            except Exception:
                logger.exception("Timer callback failed")
            fired += 1
        return fired
