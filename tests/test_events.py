"""Tests for the session event bus and completion cues."""

import io

from guided_breathing import (
    SessionEvent,
    SessionEventEmitter,
    SessionEventType,
    SilentCue,
    TerminalBellCue,
)


class TestSessionEventEmitter:

    def test_event_string(self):
        assert str(SessionEvent(SessionEventType.SESSION_START)) == "SessionEvent(SESSION_START)"
        event = SessionEvent(SessionEventType.CYCLE_START, data={"cycle": 2})
        assert "cycle=2" in str(event)

    def test_subscribe_and_emit(self):
        emitter = SessionEventEmitter()
        received = []
        emitter.subscribe(SessionEventType.PHASE_CHANGE, received.append)
        emitter.emit(SessionEvent(SessionEventType.PHASE_CHANGE, {"label": "Inhale"}))
        emitter.emit(SessionEvent(SessionEventType.SESSION_END))
        assert len(received) == 1
        assert received[0].timestamp is not None

    def test_duplicate_subscription_is_ignored(self):
        emitter = SessionEventEmitter()
        received = []
        emitter.subscribe(SessionEventType.SNAPSHOT, received.append)
        emitter.subscribe(SessionEventType.SNAPSHOT, received.append)
        emitter.emit(SessionEvent(SessionEventType.SNAPSHOT))
        assert len(received) == 1

    def test_unsubscribe_and_clear(self):
        emitter = SessionEventEmitter()
        received = []
        emitter.subscribe(SessionEventType.SNAPSHOT, received.append)
        emitter.unsubscribe(SessionEventType.SNAPSHOT, received.append)
        emitter.emit(SessionEvent(SessionEventType.SNAPSHOT))
        emitter.subscribe(SessionEventType.SESSION_END, received.append)
        emitter.clear_all()
        emitter.emit(SessionEvent(SessionEventType.SESSION_END))
        assert received == []

    def test_failing_subscriber_does_not_stop_others(self, caplog):
        emitter = SessionEventEmitter()
        received = []

        def explode(event):
            raise RuntimeError("boom")

        emitter.subscribe(SessionEventType.SESSION_END, explode)
        emitter.subscribe(SessionEventType.SESSION_END, received.append)
        emitter.emit(SessionEvent(SessionEventType.SESSION_END))
        assert len(received) == 1
        assert "SESSION_END" in caplog.text


class TestCues:

    def test_terminal_bell(self):
        stream = io.StringIO()
        TerminalBellCue(stream).play_completion_cue()
        assert stream.getvalue() == "\a"

    def test_silent(self):
        SilentCue().play_completion_cue()
