"""pytest configuration and shared fixtures."""

import logging

import pytest


class FakeClock:
    """Manually advanced monotonic clock (seconds)"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class FakeTimer:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """
    Collects one-shot timers; advance() fires the ones that came due.

    Cancelled timers are still fired when ``fire_cancelled`` is set, to
    check that a stale callback has no effect.
    """

    def __init__(self):
        self.elapsed = 0.0
        self.timers = []
        self.fire_cancelled = False

    def __call__(self, delay, callback):
        timer = FakeTimer(self.elapsed + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.elapsed += seconds
        due = [t for t in self.timers if t.due <= self.elapsed]
        for timer in due:
            self.timers.remove(timer)
            if self.fire_cancelled or not timer.cancelled:
                timer.callback()


class RecordingCue:
    def __init__(self):
        self.plays = 0

    def play_completion_cue(self):
        self.plays += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def cue():
    return RecordingCue()


@pytest.fixture(autouse=True)
def _quiet_logs():
    logging.getLogger("guided_breathing").setLevel(logging.DEBUG)
    logging.getLogger("asyncio").setLevel(logging.ERROR)
    yield
