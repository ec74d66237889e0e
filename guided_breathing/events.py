"""
Guided Breathing - Session events

Small event bus used to notify presentation code (terminal view, lens
pacer, screen-reader announcer) of session changes without coupling them
to the tick loop.

Usage:
    emitter = SessionEventEmitter()
    emitter.subscribe(SessionEventType.PHASE_CHANGE, lambda evt: print(evt.data["label"]))
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class SessionEventType(Enum):
    """Things a breathing session reports"""
    SESSION_START = auto()
    SESSION_PAUSE = auto()
    SESSION_RESUME = auto()
    SESSION_RESET = auto()
    SESSION_COMPLETING = auto()  # Completion point reached, fade-out running
    SESSION_END = auto()         # Fade-out finished
    CYCLE_START = auto()
    PHASE_CHANGE = auto()
    SNAPSHOT = auto()            # Every published frame
    AUDIO_CUE_FAILED = auto()


@dataclass
class SessionEvent:
    """An event and its optional payload"""
    event_type: SessionEventType
    data: Optional[Dict[str, Any]] = None
    timestamp: Optional[float] = None

    def __str__(self):
        if self.data:
            data_str = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"SessionEvent({self.event_type.name}, {data_str})"
        return f"SessionEvent({self.event_type.name})"


Listener = Callable[[SessionEvent], None]


class SessionEventEmitter:
    """
    Per-type subscriber lists

    A subscriber that raises is logged and skipped; it never interrupts the
    session that emitted the event.
    """

    def __init__(self):
        self._subscribers: Dict[SessionEventType, List[Listener]] = {}

    def subscribe(self, event_type: SessionEventType, callback: Listener) -> None:
        callbacks = self._subscribers.setdefault(event_type, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, event_type: SessionEventType, callback: Listener) -> None:
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: SessionEvent) -> None:
        if event.timestamp is None:
            event.timestamp = time.time()

        if event.event_type is not SessionEventType.SNAPSHOT:
            logger.debug("Emitting %s", event)

        for callback in list(self._subscribers.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception("Subscriber failed for %s", event.event_type.name)

    def clear_all(self) -> None:
        self._subscribers.clear()
