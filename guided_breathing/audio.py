"""
Guided Breathing - Completion cue

The session only ever asks its audio collaborator for one thing: play the
completion cue. Anything implementing ``play_completion_cue()`` will do.
"""

import sys
from typing import IO, Optional


class CompletionCue:
    """Interface for the end-of-session cue"""

    def play_completion_cue(self) -> None:
        raise NotImplementedError


class SilentCue(CompletionCue):
    """Cue that does nothing (headless runs, tests)"""

    def play_completion_cue(self) -> None:
        pass


class TerminalBellCue(CompletionCue):
    """Rings the terminal bell"""

    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream

    def play_completion_cue(self) -> None:
        stream = self.stream or sys.stdout
        stream.write("\a")
        stream.flush()
