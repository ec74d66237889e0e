"""
Guided Breathing - Decorative oscillators

Resting-circle pulse and start-button highlight sweep. They run on their own
fixed 50 ms ticks and never read or write session timing; losing ticks only
makes them less smooth. With reduced motion they hold fixed values.
"""

import asyncio
import logging
import math
import os
from typing import Callable, List, Optional, Tuple

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


OSCILLATOR_INTERVAL = 0.05  # seconds
IDLE_STEP = 0.012           # radians per tick
REDUCED_MOTION_ENV = "GUIDED_BREATHING_REDUCED_MOTION"

_TRUTHY = {"1", "true", "yes", "on", "reduce"}
_FALSY = {"0", "false", "no", "off", "no-preference", ""}


def parse_reduced_motion(raw: str) -> bool:
    """
    Read a reduced-motion flag

    Accepts the usual booleans and the CSS media values "reduce" and
    "no-preference".

    Raises:
        ConfigError: On anything else
    """
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{REDUCED_MOTION_ENV} must be a boolean or \"reduce\", got {raw!r}")


class MotionPreference:
    """
    The user's reduced-motion preference

    Read from the environment at startup; callers that learn about a change
    (a settings toggle, an OS notification) call set().
    """

    def __init__(self, reduced: bool = False):
        self._reduced = bool(reduced)
        self._listeners: List[Callable[[bool], None]] = []

    @classmethod
    def from_env(cls, environ=None) -> "MotionPreference":
        environ = os.environ if environ is None else environ
        return cls(parse_reduced_motion(environ.get(REDUCED_MOTION_ENV, "")))

    @property
    def reduced(self) -> bool:
        return self._reduced

    def set(self, reduced: bool) -> None:
        reduced = bool(reduced)
        if reduced == self._reduced:
            return
        self._reduced = reduced
        logger.debug("Reduced motion %s", "on" if reduced else "off")
        for listener in list(self._listeners):
            listener(reduced)

    def on_change(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)


class IdlePulse:
    """Slow sinusoidal pulse of the resting circle shown before a session"""

    def __init__(self, preference: Optional[MotionPreference] = None):
        self.preference = preference or MotionPreference()
        self.theta = 0.0

    def step(self) -> None:
        self.theta = (self.theta + IDLE_STEP) % (2 * math.pi)

    @property
    def pulse(self) -> float:
        return 0.5 + math.sin(self.theta) * 0.12

    def circle(self, completed: bool = False) -> Tuple[float, float]:
        """
        Resting circle geometry

        Returns:
            (radius, opacity)
        """
        if completed:
            return 30.0, 0.0
        if self.preference.reduced:
            return 55.0, 0.75
        return 30.0 + self.pulse * 50.0, 0.65 + math.sin(self.theta) * 0.1


class ButtonShimmer:
    """Highlight position (percent) sweeping across the start button"""

    def __init__(self, preference: Optional[MotionPreference] = None):
        self.preference = preference or MotionPreference()
        self.position = 0

    def step(self) -> None:
        self.position = (self.position + 1) % 100

    @property
    def percent(self) -> Optional[int]:
        """Current sweep position, None when the sweep is disabled"""
        if self.preference.reduced:
            return None
        return self.position


class OscillatorTask:
    """
    Steps an oscillator every 50 ms on the event loop

    Usage:
        task = OscillatorTask(IdlePulse(pref), pref)
        task.start()
        ...
        await task.stop()
    """

    def __init__(
        self,
        oscillator,
        preference: Optional[MotionPreference] = None,
        interval: float = OSCILLATOR_INTERVAL
    ):
        self.oscillator = oscillator
        self.preference = preference or getattr(oscillator, "preference", None) or MotionPreference()
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

    async def _loop(self) -> None:
        while True:
            if not self.preference.reduced:
                self.oscillator.step()
            await asyncio.sleep(self.interval)
