"""
Guided Breathing - Session

Ties the session clock to the phase engine. The tick path only reads the
clock; the controls (start, pause/resume, reset) are the only writers.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Optional, Union

from .audio import CompletionCue, SilentCue
from .clock import Lifecycle, SessionClock
from .engine import (
    COMPLETION_TOLERANCE_MS,
    CycleTracker,
    Phase,
    Snapshot,
    derive_snapshot,
    idle_snapshot,
    is_completion_point,
    phase_label,
)
from .events import SessionEvent, SessionEventEmitter, SessionEventType
from .techniques import Technique, duration_ms, get_technique, total_cycles

logger = logging.getLogger(__name__)


FADE_DELAY = 10.0   # seconds between the completion point and the end state
FRAME_RATE = 60

# (delay seconds, callback) -> handle with cancel()
Scheduler = Callable[[float, Callable[[], None]], Any]


def call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Default scheduler: a one-shot timer on the running event loop"""
    return asyncio.get_running_loop().call_later(delay, callback)


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class BreathingSession:
    """
    A guided breathing session

    Usage:
        session = BreathingSession("balanced", duration=60)
        session.events.subscribe(SessionEventType.SNAPSHOT, draw)
        session.start()
        await session.run()

    Or drive the ticks yourself (one per rendered frame). Without a running
    event loop the default scheduler cannot set the fade timer, so tick()
    also ends the session once the fade delay has passed:
        session.start()
        while session.state is not Lifecycle.ENDED:
            draw(session.tick())
    """

    def __init__(
        self,
        technique: Union[str, Technique] = "balanced",
        duration: float = 60,
        *,
        time_source: Callable[[], float] = time.monotonic,
        audio: Optional[CompletionCue] = None,
        scheduler: Optional[Scheduler] = None,
        fade_delay: float = FADE_DELAY,
        tolerance_ms: float = COMPLETION_TOLERANCE_MS,
        frame_rate: float = FRAME_RATE,
        events: Optional[SessionEventEmitter] = None
    ):
        """
        Args:
            technique: Technique name or instance
            duration: Target session length in seconds
            time_source: Monotonic clock returning seconds
            audio: Completion cue collaborator
            scheduler: One-shot timer factory for the fade-out
            fade_delay: Seconds from completion point to end state
            tolerance_ms: Allowed distance from the exhale boundary
            frame_rate: Ticks per second for run()
            events: Event bus to publish on
        """
        duration_ms(duration)
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {frame_rate!r}")

        self._technique = get_technique(technique)
        self._duration = float(duration)
        self.clock = SessionClock(time_source)
        self.audio = audio or SilentCue()
        self.events = events or SessionEventEmitter()
        self.fade_delay = fade_delay
        self.tolerance_ms = tolerance_ms
        self.frame_rate = frame_rate

        self._scheduler = scheduler or call_later
        self._fade_handle = None
        self._generation = 0
        self._fade_deadline: Optional[float] = None
        self._tracker = CycleTracker()
        self._last_phase: Optional[Phase] = None
        self._snapshot = idle_snapshot()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        """Most recently published snapshot"""
        return self._snapshot

    @property
    def state(self) -> Lifecycle:
        return self.clock.state

    @property
    def technique(self) -> Technique:
        return self._technique

    @property
    def duration(self) -> float:
        """Target duration in seconds"""
        return self._duration

    @property
    def target_ms(self) -> float:
        return duration_ms(self._duration)

    @property
    def total_cycles(self) -> int:
        return total_cycles(self._technique, self._duration)

    @property
    def cycles_started(self) -> int:
        """1-based cycle in progress, 0 before the session starts"""
        return self._tracker.cycles_started

    @property
    def remaining_ms(self) -> float:
        return max(0.0, self.target_ms - self._snapshot.elapsed_ms)

    @property
    def announcement(self) -> str:
        """Text for a screen-reader live region"""
        if self.state in (Lifecycle.COMPLETING, Lifecycle.ENDED):
            return ""
        return phase_label(self._snapshot.phase, self._technique)

    # -------------------------------------------------------------------------
    # Controls
    # -------------------------------------------------------------------------

    def start(
        self,
        technique: Union[str, Technique, None] = None,
        duration: Optional[float] = None
    ) -> Snapshot:
        """
        Start a fresh session

        Cancels a pending fade from a previous run, zeroes the clock and
        publishes the first frame.

        Raises:
            UnknownTechniqueError: If the technique name is unknown
            InvalidDurationError: If the duration is not positive
        """
        if technique is not None:
            self._technique = get_technique(technique)
        if duration is not None:
            duration_ms(duration)
            self._duration = float(duration)

        self._cancel_fade()
        self._tracker.reset()
        self._last_phase = None
        self.clock.start()

        logger.info(
            "Session started: %s, %gs, %d cycles",
            self._technique.name, self._duration, self.total_cycles
        )
        self._emit(SessionEventType.SESSION_START, {
            "technique": self._technique.name,
            "duration": self._duration,
            "total_cycles": self.total_cycles,
        })
        return self.tick()

    def pause_or_resume(self) -> bool:
        """
        Toggle pause. Ignored unless running or paused.

        Returns:
            True if the session was paused or resumed
        """
        if not self.clock.toggle_pause():
            return False

        if self.state is Lifecycle.PAUSED:
            logger.info("Session paused at %.0f ms", self.clock.elapsed())
            self._publish(derive_snapshot(self._technique, self.clock.elapsed(), Lifecycle.PAUSED))
            self._emit(SessionEventType.SESSION_PAUSE, {"elapsed_ms": self.clock.elapsed()})
        else:
            logger.info("Session resumed (paused %.0f ms in total)", self.clock.paused_total)
            self._emit(SessionEventType.SESSION_RESUME, {"paused_ms": self.clock.paused_total})
            self.tick()
        return True

    def reset(self) -> None:
        """Cancel everything and return to idle"""
        self._cancel_fade()
        self.clock.reset()
        self._tracker.reset()
        self._last_phase = None
        logger.info("Session reset")
        self._publish(idle_snapshot())
        self._emit(SessionEventType.SESSION_RESET)

    def select_technique(self, technique: Union[str, Technique]) -> None:
        """Switch technique; the session is reset if it changes"""
        technique = get_technique(technique)
        if technique != self._technique:
            self._technique = technique
            self.reset()

    def set_duration(self, duration: float) -> None:
        """Change the target duration; the session is reset if it changes"""
        duration_ms(duration)
        if float(duration) != self._duration:
            self._duration = float(duration)
            self.reset()

    # -------------------------------------------------------------------------
    # Tick loop
    # -------------------------------------------------------------------------

    def tick(self) -> Snapshot:
        """
        Re-derive the snapshot from the clock

        Does nothing unless the session is running, apart from ending a
        fade-out that has no timer behind it.
        """
        if self.state is Lifecycle.COMPLETING:
            self._check_fade_deadline()
        if self.state is not Lifecycle.RUNNING:
            return self._snapshot

        snapshot = derive_snapshot(self._technique, self.clock.elapsed())

        # The completion frame carries no cycle or phase events
        if is_completion_point(self._technique, snapshot.elapsed_ms, self.target_ms, self.tolerance_ms):
            self._complete(snapshot)
            return self._snapshot

        if self._tracker.observe(snapshot.cycle_count):
            logger.debug("Cycle %d of %d", self.cycles_started, self.total_cycles)
            self._emit(SessionEventType.CYCLE_START, {
                "cycle": self.cycles_started,
                "total_cycles": self.total_cycles,
            })

        if snapshot.phase is not self._last_phase:
            self._last_phase = snapshot.phase
            self._emit(SessionEventType.PHASE_CHANGE, {
                "phase": snapshot.phase.value,
                "label": phase_label(snapshot.phase, self._technique),
            })

        self._publish(snapshot)
        return self._snapshot

    async def run(self, until_ended: bool = False) -> Snapshot:
        """
        Tick once per frame while the session is running or paused

        Args:
            until_ended: Also wait through the fade-out until the end state
                (or a reset)

        Returns:
            The last published snapshot
        """
        frame = 1.0 / self.frame_rate
        while self.state in (Lifecycle.RUNNING, Lifecycle.PAUSED):
            self.tick()
            await asyncio.sleep(frame)

        while until_ended and self.state is Lifecycle.COMPLETING:
            self.tick()
            await asyncio.sleep(frame)

        return self._snapshot

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def _complete(self, snapshot: Snapshot) -> None:
        self._schedule_fade()
        self._play_cue()
        self.clock.complete()
        logger.info(
            "Completion point at %.0f ms (%d cycles), fading out for %gs",
            snapshot.elapsed_ms, snapshot.cycle_count, self.fade_delay
        )
        self._publish(replace(snapshot, lifecycle=Lifecycle.COMPLETING))
        self._emit(SessionEventType.SESSION_COMPLETING, {
            "elapsed_ms": snapshot.elapsed_ms,
            "cycles": snapshot.cycle_count,
        })

    def _schedule_fade(self) -> None:
        if self._scheduler is call_later and not _loop_running():
            logger.debug("No running event loop, fade-out ends on a later tick")
            self._fade_deadline = self.clock.now() + self.fade_delay * 1000.0
            return
        generation = self._generation
        self._fade_handle = self._scheduler(
            self.fade_delay, lambda: self._on_fade_elapsed(generation)
        )

    def _check_fade_deadline(self) -> None:
        if self._fade_deadline is not None and self.clock.now() >= self._fade_deadline:
            self._fade_deadline = None
            self._on_fade_elapsed(self._generation)

    def _play_cue(self) -> None:
        try:
            self.audio.play_completion_cue()
        except Exception as e:
            logger.warning("Completion cue failed: %s", e)
            self._emit(SessionEventType.AUDIO_CUE_FAILED, {"error": str(e)})

    def _on_fade_elapsed(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._fade_handle = None
        if self.clock.finish():
            logger.info("Session ended")
            self._publish(replace(self._snapshot, lifecycle=Lifecycle.ENDED))
            self._emit(SessionEventType.SESSION_END, {"cycles": self._snapshot.cycle_count})

    def _cancel_fade(self) -> None:
        self._generation += 1
        self._fade_deadline = None
        if self._fade_handle is not None:
            self._fade_handle.cancel()
            self._fade_handle = None

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def _publish(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._emit(SessionEventType.SNAPSHOT, {"snapshot": snapshot})

    def _emit(self, event_type: SessionEventType, data: Optional[dict] = None) -> None:
        self.events.emit(SessionEvent(event_type, data))
