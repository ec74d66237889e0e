"""
Guided Breathing - Session Clock

Owns the session lifecycle and the absolute timestamps needed to compute
elapsed time with paused spans excluded. Elapsed time is always derived
from ``now - start - paused_total``; nothing is accumulated per tick.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Lifecycle(str, Enum):
    """Session lifecycle states"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETING = "completing"
    ENDED = "ended"


# Allowed (from, to) pairs. start() is allowed from every state.
_TRANSITIONS = {
    Lifecycle.IDLE: {Lifecycle.RUNNING},
    Lifecycle.RUNNING: {Lifecycle.RUNNING, Lifecycle.PAUSED, Lifecycle.COMPLETING, Lifecycle.IDLE},
    Lifecycle.PAUSED: {Lifecycle.RUNNING, Lifecycle.IDLE},
    Lifecycle.COMPLETING: {Lifecycle.RUNNING, Lifecycle.ENDED, Lifecycle.IDLE},
    Lifecycle.ENDED: {Lifecycle.RUNNING, Lifecycle.IDLE},
}


class SessionClock:
    """
    Monotonic session clock with pause accounting

    Usage:
        clock = SessionClock()
        clock.start()
        clock.toggle_pause()    # paused
        clock.toggle_pause()    # running again, paused span excluded
        clock.elapsed()         # ms since start, minus pauses

    Invalid calls (pausing while idle, finishing while running, ...) are
    ignored and return False.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic):
        """
        Args:
            time_source: Monotonic clock returning seconds
        """
        self._time_source = time_source
        self._state = Lifecycle.IDLE
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._paused_total = 0.0

    @property
    def state(self) -> Lifecycle:
        return self._state

    @property
    def started_at(self) -> Optional[float]:
        """Start timestamp in ms, None when idle"""
        return self._started_at

    @property
    def paused_at(self) -> Optional[float]:
        return self._paused_at

    @property
    def paused_total(self) -> float:
        """Accumulated paused time in ms"""
        return self._paused_total

    def now(self) -> float:
        """Current time source reading in ms"""
        return self._time_source() * 1000.0

    def _transition(self, target: Lifecycle) -> bool:
        if target not in _TRANSITIONS[self._state]:
            logger.debug("Ignoring transition %s -> %s", self._state.value, target.value)
            return False
        logger.debug("Clock %s -> %s", self._state.value, target.value)
        self._state = target
        return True

    # -------------------------------------------------------------------------
    # Controls
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """Begin a fresh run from any state"""
        self._transition(Lifecycle.RUNNING)
        self._started_at = self.now()
        self._paused_at = None
        self._paused_total = 0.0
        return True

    def toggle_pause(self) -> bool:
        """
        Pause a running session or resume a paused one

        Returns:
            True if the state changed
        """
        if self._state is Lifecycle.RUNNING:
            self._transition(Lifecycle.PAUSED)
            self._paused_at = self.now()
            return True

        if self._state is Lifecycle.PAUSED:
            if self._paused_at is not None:
                self._paused_total += self.now() - self._paused_at
            self._paused_at = None
            self._transition(Lifecycle.RUNNING)
            return True

        return False

    def complete(self) -> bool:
        """Running -> completing (fade-out)"""
        return self._transition(Lifecycle.COMPLETING)

    def finish(self) -> bool:
        """Completing -> ended"""
        return self._transition(Lifecycle.ENDED)

    def reset(self) -> None:
        """Return to idle and forget all timestamps"""
        if self._state is not Lifecycle.IDLE:
            self._transition(Lifecycle.IDLE)
        self._started_at = None
        self._paused_at = None
        self._paused_total = 0.0

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def elapsed(self) -> float:
        """
        Elapsed session time in ms, paused spans excluded

        Returns 0 before start(). While paused the value is frozen at the
        moment the pause began.
        """
        if self._started_at is None:
            return 0.0
        now = self._paused_at if self._paused_at is not None else self.now()
        return max(0.0, now - self._started_at - self._paused_total)
