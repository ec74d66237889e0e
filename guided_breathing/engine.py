"""
Guided Breathing - Phase Engine

Pure functions from (technique, elapsed ms) to the visual snapshot the
presentation layer reads. Every tick re-derives the whole snapshot from the
absolute elapsed time, so missed frames never cause drift.
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import List, Tuple

from .clock import Lifecycle
from .techniques import Technique, get_technique, total_cycles


MIN_RADIUS = 30.0
MAX_RADIUS = 120.0
MIN_AREA = MIN_RADIUS * MIN_RADIUS
MAX_AREA = MAX_RADIUS * MAX_RADIUS

OPACITY_BASE = 0.25
OPACITY_RANGE = 0.35
OPACITY_MIN = 0.20
OPACITY_MAX = 0.65
HOLD_PULSE = 0.08

COMPLETION_TOLERANCE_MS = 100.0
PHASES_PER_CYCLE = 4


class Phase(str, Enum):
    """Breathing phases, in cycle order"""
    IDLE = "idle"
    INHALE = "inhale"
    HOLD_IN = "hold1"
    EXHALE = "exhale"
    HOLD_OUT = "hold2"

    @property
    def is_hold(self) -> bool:
        return self in (Phase.HOLD_IN, Phase.HOLD_OUT)


CYCLE_ORDER = (Phase.INHALE, Phase.HOLD_IN, Phase.EXHALE, Phase.HOLD_OUT)


@dataclass(frozen=True)
class Snapshot:
    """Read-only visual state published once per frame"""
    lifecycle: Lifecycle
    phase: Phase
    phase_index: int
    phase_progress: float
    size_progress: float
    radius: float
    opacity: float
    cycle_count: int
    elapsed_ms: float

    def as_dict(self) -> dict:
        data = asdict(self)
        data["lifecycle"] = self.lifecycle.value
        data["phase"] = self.phase.value
        return data


# -------------------------------------------------------------------------
# Curves
# -------------------------------------------------------------------------

def ease_in_out(t: float) -> float:
    """Symmetric quadratic ease-in-out on [0, 1]"""
    if t < 0.5:
        return 2 * t * t
    return 1 - ((-2 * t + 2) ** 2) / 2


def size_progress(phase: Phase, linear_progress: float) -> float:
    """Normalized circle size for a phase position"""
    if phase is Phase.INHALE:
        return ease_in_out(linear_progress)
    if phase is Phase.HOLD_IN:
        return 1.0
    if phase is Phase.EXHALE:
        return 1.0 - ease_in_out(linear_progress)
    return 0.0


def radius_for(progress: float) -> float:
    """
    Circle radius for a size progress

    Interpolates the area rather than the radius so growth looks uniform.
    """
    if progress <= 0:
        return MIN_RADIUS
    if progress >= 1:
        return MAX_RADIUS
    return math.sqrt(MIN_AREA + progress * (MAX_AREA - MIN_AREA))


def opacity_for(phase: Phase, progress: float, linear_progress: float) -> float:
    """Circle opacity, with a small pulse on holds, clamped to [0.20, 0.65]"""
    opacity = OPACITY_BASE + progress * OPACITY_RANGE
    if phase.is_hold:
        opacity += math.sin(linear_progress * 2 * math.pi) * HOLD_PULSE
    return max(OPACITY_MIN, min(OPACITY_MAX, opacity))


# -------------------------------------------------------------------------
# Phase arithmetic
# -------------------------------------------------------------------------

def cycle_position(technique: Technique, elapsed_ms: float) -> float:
    return max(0.0, elapsed_ms) % technique.cycle_time


def cycle_number(technique: Technique, elapsed_ms: float) -> int:
    """Completed cycles at ``elapsed_ms``"""
    return int(max(0.0, elapsed_ms) // technique.cycle_time)


def locate_phase(technique: Technique, elapsed_ms: float) -> Tuple[Phase, int, float]:
    """
    Find the phase at an elapsed time

    Returns:
        (phase, phase index, linear progress through that phase in [0, 1))
    """
    position = cycle_position(technique, elapsed_ms)
    phase_start = 0
    for index, (phase, length) in enumerate(zip(CYCLE_ORDER, technique.durations)):
        if length > 0 and position < phase_start + length:
            return phase, index, (position - phase_start) / length
        phase_start += length

    # Only reachable through float rounding at the very end of a cycle
    return Phase.HOLD_OUT, 3, 1.0


def derive_snapshot(
    technique: Technique,
    elapsed_ms: float,
    lifecycle: Lifecycle = Lifecycle.RUNNING
) -> Snapshot:
    """Build the full snapshot for an elapsed time"""
    elapsed_ms = max(0.0, elapsed_ms)
    phase, index, linear = locate_phase(technique, elapsed_ms)
    progress = size_progress(phase, linear)
    return Snapshot(
        lifecycle=lifecycle,
        phase=phase,
        phase_index=index,
        phase_progress=linear,
        size_progress=progress,
        radius=radius_for(progress),
        opacity=opacity_for(phase, progress, linear),
        cycle_count=cycle_number(technique, elapsed_ms),
        elapsed_ms=elapsed_ms,
    )


def idle_snapshot() -> Snapshot:
    return Snapshot(
        lifecycle=Lifecycle.IDLE,
        phase=Phase.IDLE,
        phase_index=0,
        phase_progress=0.0,
        size_progress=0.0,
        radius=MIN_RADIUS,
        opacity=OPACITY_MIN,
        cycle_count=0,
        elapsed_ms=0.0,
    )


def is_completion_point(
    technique: Technique,
    elapsed_ms: float,
    target_ms: float,
    tolerance_ms: float = COMPLETION_TOLERANCE_MS
) -> bool:
    """
    True once the target is reached and the breath is at the end of an exhale

    The session keeps running past ``target_ms`` until the cycle position
    lands within ``tolerance_ms`` of the exhale boundary.
    """
    if elapsed_ms < target_ms:
        return False
    cycle = technique.cycle_time
    distance = abs(cycle_position(technique, elapsed_ms) - technique.exhale_end) % cycle
    return min(distance, cycle - distance) <= tolerance_ms


def phase_label(phase: Phase, technique: Technique) -> str:
    """Text announced for a phase"""
    if phase is Phase.IDLE:
        return "Ready"
    if phase is Phase.INHALE:
        return "Inhale"
    if phase is Phase.EXHALE:
        return "Exhale"
    if technique.holds_carry_label:
        return "Inhale" if phase is Phase.HOLD_IN else "Exhale"
    return "Hold"


class CycleTracker:
    """Reports each new cycle number exactly once, whatever the tick rate"""

    def __init__(self):
        self.last_seen = -1

    def observe(self, number: int) -> bool:
        if number > self.last_seen:
            self.last_seen = number
            return True
        return False

    @property
    def cycles_started(self) -> int:
        """1-based number of the cycle in progress (0 before the first tick)"""
        return self.last_seen + 1

    def reset(self) -> None:
        self.last_seen = -1


# -------------------------------------------------------------------------
# Progress ring
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class Marker:
    """One bead on the progress ring, one per phase of each planned cycle"""
    index: int
    angle: float
    kind: str   # "breath" or "hold"
    state: str  # "done", "active" or "pending"


def progress_markers(
    technique,
    duration_seconds: float,
    elapsed_ms: float,
    phase_index: int
) -> List[Marker]:
    """
    Lay out the progress ring for the current position

    Angles are degrees clockwise from twelve o'clock.
    """
    technique = get_technique(technique)
    count = total_cycles(technique, duration_seconds) * PHASES_PER_CYCLE
    active = cycle_number(technique, elapsed_ms) * PHASES_PER_CYCLE + phase_index

    markers = []
    for i in range(count):
        if i < active:
            state = "done"
        elif i == active:
            state = "active"
        else:
            state = "pending"
        markers.append(Marker(
            index=i,
            angle=i / count * 360.0,
            kind="hold" if i % PHASES_PER_CYCLE in (1, 3) else "breath",
            state=state,
        ))
    return markers
