"""
Guided Breathing - Settings

Defaults for a session, overridable through GUIDED_BREATHING_* environment
variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .engine import COMPLETION_TOLERANCE_MS
from .exceptions import ConfigError
from .oscillators import REDUCED_MOTION_ENV, parse_reduced_motion
from .session import FADE_DELAY, FRAME_RATE
from .techniques import duration_ms, get_technique

ENV_PREFIX = "GUIDED_BREATHING_"


def _as_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    """Session and runtime settings"""
    technique: str = "balanced"
    duration: float = 60.0        # seconds
    frame_rate: float = FRAME_RATE
    fade_delay: float = FADE_DELAY
    tolerance_ms: float = COMPLETION_TOLERANCE_MS
    reduced_motion: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    glasses_address: Optional[str] = None

    def validate(self) -> "Settings":
        """
        Check values that would otherwise fail later

        Raises:
            ConfigError: On any invalid value
        """
        try:
            self.technique = get_technique(self.technique).name
            duration_ms(self.duration)
        except (KeyError, ValueError) as e:
            raise ConfigError(str(e))
        if self.frame_rate <= 0:
            raise ConfigError(f"frame_rate must be positive, got {self.frame_rate!r}")
        if self.fade_delay < 0:
            raise ConfigError(f"fade_delay must not be negative, got {self.fade_delay!r}")
        if self.tolerance_ms < 0:
            raise ConfigError(f"tolerance_ms must not be negative, got {self.tolerance_ms!r}")
        return self

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from the environment

        Recognised variables (all optional):
            GUIDED_BREATHING_TECHNIQUE, GUIDED_BREATHING_DURATION,
            GUIDED_BREATHING_FRAME_RATE, GUIDED_BREATHING_FADE_DELAY,
            GUIDED_BREATHING_TOLERANCE_MS, GUIDED_BREATHING_REDUCED_MOTION,
            GUIDED_BREATHING_LOG_LEVEL, GUIDED_BREATHING_LOG_FILE,
            GUIDED_BREATHING_GLASSES_ADDRESS
        """
        environ = os.environ if environ is None else environ
        settings = cls()

        def get(key):
            return environ.get(ENV_PREFIX + key)

        if get("TECHNIQUE"):
            settings.technique = get("TECHNIQUE")
        for key, attr in (
            ("DURATION", "duration"),
            ("FRAME_RATE", "frame_rate"),
            ("FADE_DELAY", "fade_delay"),
            ("TOLERANCE_MS", "tolerance_ms"),
        ):
            raw = get(key)
            if raw is not None:
                setattr(settings, attr, _as_float(ENV_PREFIX + key, raw))

        raw = environ.get(REDUCED_MOTION_ENV)
        if raw is not None:
            settings.reduced_motion = parse_reduced_motion(raw)
        if get("LOG_LEVEL"):
            settings.log_level = get("LOG_LEVEL").upper()
        if get("LOG_FILE"):
            settings.log_file = get("LOG_FILE")
        if get("GLASSES_ADDRESS"):
            settings.glasses_address = get("GLASSES_ADDRESS")

        return settings.validate()
