"""
Guided Breathing
Timing engine for paced breathing sessions, with terminal and smart-glasses
output
"""

from .audio import CompletionCue, SilentCue, TerminalBellCue
from .clock import Lifecycle, SessionClock
from .config import Settings
from .engine import (
    CycleTracker,
    Marker,
    Phase,
    Snapshot,
    derive_snapshot,
    ease_in_out,
    idle_snapshot,
    is_completion_point,
    locate_phase,
    opacity_for,
    phase_label,
    progress_markers,
    radius_for,
    size_progress,
)
from .events import SessionEvent, SessionEventEmitter, SessionEventType
from .exceptions import (
    BreathingError,
    UnknownTechniqueError,
    InvalidDurationError,
    ConfigError,
    ConnectionError,
    DeviceNotFoundError,
    CommandError,
    TimeoutError
)
from .lens import Glasses, LensPacer, ScanResult, idle_preview, opacity_to_lens
from .logging_utils import setup_logging
from .oscillators import ButtonShimmer, IdlePulse, MotionPreference, OscillatorTask
from .session import BreathingSession
from .techniques import (
    BALANCED,
    LONG_EXHALE,
    TECHNIQUES,
    Technique,
    get_technique,
    total_cycles,
)

__version__ = "1.0.0"
__all__ = [
    "BreathingSession",
    "SessionClock",
    "Lifecycle",
    "Technique",
    "TECHNIQUES",
    "BALANCED",
    "LONG_EXHALE",
    "get_technique",
    "total_cycles",
    "Phase",
    "Snapshot",
    "Marker",
    "CycleTracker",
    "derive_snapshot",
    "idle_snapshot",
    "ease_in_out",
    "locate_phase",
    "size_progress",
    "radius_for",
    "opacity_for",
    "is_completion_point",
    "phase_label",
    "progress_markers",
    "SessionEvent",
    "SessionEventEmitter",
    "SessionEventType",
    "CompletionCue",
    "SilentCue",
    "TerminalBellCue",
    "MotionPreference",
    "IdlePulse",
    "ButtonShimmer",
    "OscillatorTask",
    "Settings",
    "setup_logging",
    "Glasses",
    "LensPacer",
    "ScanResult",
    "opacity_to_lens",
    "idle_preview",
    "BreathingError",
    "UnknownTechniqueError",
    "InvalidDurationError",
    "ConfigError",
    "ConnectionError",
    "DeviceNotFoundError",
    "CommandError",
    "TimeoutError"
]
