"""
Guided Breathing - Techniques

The two built-in breathing patterns. Each technique is a fixed sequence of
four phase durations in milliseconds: inhale, hold after inhale, exhale,
hold after exhale.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple, Union

from .exceptions import InvalidDurationError, UnknownTechniqueError


@dataclass(frozen=True)
class Technique:
    """An immutable breathing pattern (durations in ms)"""
    name: str
    inhale: int
    hold_in: int
    exhale: int
    hold_out: int
    # Near-instant holds keep showing the label of the phase before them
    holds_carry_label: bool = False

    @property
    def durations(self) -> Tuple[int, int, int, int]:
        return (self.inhale, self.hold_in, self.exhale, self.hold_out)

    @property
    def cycle_time(self) -> int:
        """Length of one full inhale/hold/exhale/hold traversal"""
        return sum(self.durations)

    @property
    def boundaries(self) -> Tuple[int, int, int, int]:
        """Cumulative end of each phase within a cycle"""
        ends = []
        total = 0
        for d in self.durations:
            total += d
            ends.append(total)
        return tuple(ends)

    @property
    def exhale_end(self) -> int:
        """Position in the cycle where the exhale finishes"""
        return self.inhale + self.hold_in + self.exhale

    def __str__(self):
        return f"{self.name} ({'/'.join(str(d) for d in self.durations)} ms)"


BALANCED = Technique("balanced", 4000, 4000, 4000, 4000)
LONG_EXHALE = Technique("longExhale", 4000, 500, 8000, 500, holds_carry_label=True)

TECHNIQUES: Dict[str, Technique] = {
    BALANCED.name: BALANCED,
    LONG_EXHALE.name: LONG_EXHALE,
}

_ALIASES = {
    "balanced": BALANCED.name,
    "box": BALANCED.name,
    "longexhale": LONG_EXHALE.name,
    "long_exhale": LONG_EXHALE.name,
    "long-exhale": LONG_EXHALE.name,
}


def get_technique(technique: Union[str, Technique]) -> Technique:
    """
    Resolve a technique by name

    Args:
        technique: Technique name (or alias), or a Technique instance

    Returns:
        The matching built-in Technique

    Raises:
        UnknownTechniqueError: If the name is not a known technique
    """
    if isinstance(technique, Technique):
        return technique

    key = _ALIASES.get(str(technique).strip().lower())
    if key is None:
        raise UnknownTechniqueError(
            f"Unknown technique: {technique!r}. Options: {', '.join(TECHNIQUES)}"
        )
    return TECHNIQUES[key]


def duration_ms(duration_seconds: float) -> float:
    """
    Validate a session duration and convert it to milliseconds

    Raises:
        InvalidDurationError: If the duration is not a positive number
    """
    if isinstance(duration_seconds, bool):
        raise InvalidDurationError(f"Invalid duration: {duration_seconds!r}")
    try:
        seconds = float(duration_seconds)
    except (TypeError, ValueError):
        raise InvalidDurationError(f"Invalid duration: {duration_seconds!r}")
    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidDurationError(f"Duration must be positive, got {duration_seconds!r}")
    return seconds * 1000.0


def total_cycles(technique: Union[str, Technique], duration_seconds: float) -> int:
    """
    Number of cycles planned for a session

    Example:
        total_cycles("balanced", 60)  # ceil(60000 / 16000) == 4
    """
    technique = get_technique(technique)
    return math.ceil(duration_ms(duration_seconds) / technique.cycle_time)
