#!/usr/bin/env python3
"""
Guided Breathing CLI
Run a guided breathing session in the terminal or on smart glasses

Usage:
    guided-breathing techniques               # List breathing patterns
    guided-breathing run balanced 1           # 1-min session in the terminal
    guided-breathing glasses longExhale 5     # 5-min session on the glasses
    guided-breathing label longExhale 4200    # Phase at 4200 ms
    guided-breathing scan                     # Find glasses
"""

import asyncio
import sys
from typing import IO, Optional

from guided_breathing import (
    BreathingSession,
    Glasses,
    LensPacer,
    MotionPreference,
    SessionEventType,
    Settings,
    TerminalBellCue,
    TECHNIQUES,
    derive_snapshot,
    get_technique,
    idle_preview,
    phase_label,
    setup_logging,
)

BAR_WIDTH = 30


class TerminalView:
    """Prints a session's progress: one line per phase, a live size bar"""

    def __init__(self, session: BreathingSession, stream: Optional[IO[str]] = None):
        self.session = session
        self.stream = stream or sys.stdout
        events = session.events
        events.subscribe(SessionEventType.CYCLE_START, self.on_cycle)
        events.subscribe(SessionEventType.PHASE_CHANGE, self.on_phase)
        events.subscribe(SessionEventType.SNAPSHOT, self.on_snapshot)
        events.subscribe(SessionEventType.SESSION_PAUSE, lambda e: self.line("Paused"))
        events.subscribe(SessionEventType.SESSION_COMPLETING, self.on_completing)
        events.subscribe(SessionEventType.SESSION_END, lambda e: self.line("Session ended"))
        self._label = ""

    def line(self, text: str) -> None:
        self.stream.write(f"\r{text:<{BAR_WIDTH + 24}}\n")
        self.stream.flush()

    def on_cycle(self, event):
        self.line(f"Breath {event.data['cycle']} of {event.data['total_cycles']}")

    def on_phase(self, event):
        label = event.data["label"]
        # Long-exhale holds repeat the previous label; don't print it twice
        if label != self._label:
            self._label = label
            self.line(f"  {label}")

    def on_snapshot(self, event):
        snapshot = event.data["snapshot"]
        filled = int(round(snapshot.size_progress * BAR_WIDTH))
        bar = "#" * filled + "." * (BAR_WIDTH - filled)
        remaining = self.session.remaining_ms / 1000
        self.stream.write(f"\r  [{bar}] {remaining:5.0f}s left")
        self.stream.flush()

    def on_completing(self, event):
        self.line("Session complete")
        self.line("Take a moment for yourself...")


def cmd_techniques():
    """List techniques"""
    for technique in TECHNIQUES.values():
        print(f"  {technique.name:<12} {technique}  cycle {technique.cycle_time / 1000:g}s")


def cmd_label(technique_name: str, elapsed_ms: float):
    """Show the phase at an elapsed time"""
    technique = get_technique(technique_name)
    snapshot = derive_snapshot(technique, elapsed_ms)
    print(f"Phase:    {snapshot.phase.value} (index {snapshot.phase_index})")
    print(f"Label:    {phase_label(snapshot.phase, technique)}")
    print(f"Progress: {snapshot.phase_progress:.3f}")
    print(f"Radius:   {snapshot.radius:.2f}")
    print(f"Opacity:  {snapshot.opacity:.3f}")
    print(f"Cycles:   {snapshot.cycle_count}")


async def cmd_scan():
    """Scan for glasses"""
    print("Scanning for glasses...")
    devices = await Glasses.scan(timeout=5.0)

    if not devices:
        print("No devices found.")
        return

    print(f"Found {len(devices)} device(s):")
    for i, d in enumerate(devices):
        print(f"  {i+1}. {d}")


def _build_session(settings: Settings, technique_name: str, minutes: float) -> BreathingSession:
    return BreathingSession(
        technique_name,
        duration=minutes * 60,
        audio=TerminalBellCue(),
        fade_delay=settings.fade_delay,
        tolerance_ms=settings.tolerance_ms,
        frame_rate=settings.frame_rate,
    )


async def _run_session(session: BreathingSession):
    session.start()
    try:
        await session.run(until_ended=True)
    except asyncio.CancelledError:
        session.reset()
        raise


async def cmd_run(settings: Settings, technique_name: str, minutes: float):
    """Run a session in the terminal"""
    session = _build_session(settings, technique_name, minutes)
    TerminalView(session)
    print(f"{session.technique} - {session.total_cycles} breaths")
    await _run_session(session)


def _stop_if_failed(task: asyncio.Task, session: BreathingSession):
    # The pump logs the error itself; it is raised again when awaited
    if not task.cancelled() and task.exception() is not None:
        session.reset()


async def cmd_glasses(settings: Settings, technique_name: str, minutes: float):
    """Run a session on the glasses"""
    session = _build_session(settings, technique_name, minutes)
    TerminalView(session)

    async with Glasses(settings.glasses_address) as glasses:
        print(f"Connected to {glasses.address}")
        print("Get ready...")
        await idle_preview(glasses, MotionPreference(settings.reduced_motion))

        pacer = LensPacer(glasses)
        pacer.attach(session)
        pump = asyncio.create_task(pacer.run())
        pump.add_done_callback(lambda task: _stop_if_failed(task, session))
        try:
            await _run_session(session)
        finally:
            pacer.stop()
            await pump


def print_help():
    print(__doc__)
    print("Commands:")
    print("  techniques                      List breathing techniques")
    print("  run [technique] [minutes]       Session in the terminal")
    print("  glasses [technique] [minutes]   Session on the glasses")
    print("  label <technique> <ms>          Phase at an elapsed time")
    print("  scan                            Scan for glasses")
    print()
    print("Ctrl-C stops the session.")


async def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print_help()
        return

    cmd = argv[0].lower()

    try:
        settings = Settings.from_env()
        setup_logging(settings.log_level, settings.log_file)

        if cmd == "techniques":
            cmd_techniques()

        elif cmd == "label":
            if len(argv) < 3:
                print("Usage: guided-breathing label <technique> <ms>")
                return
            cmd_label(argv[1], float(argv[2]))

        elif cmd in ("run", "glasses"):
            technique_name = argv[1] if len(argv) > 1 else settings.technique
            minutes = float(argv[2]) if len(argv) > 2 else settings.duration / 60
            if cmd == "run":
                await cmd_run(settings, technique_name, minutes)
            else:
                await cmd_glasses(settings, technique_name, minutes)

        elif cmd == "scan":
            await cmd_scan()

        elif cmd in ("help", "-h", "--help"):
            print_help()

        else:
            print(f"Unknown command: {cmd}")
            print_help()

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


def cli_main():
    """Synchronous entry point for CLI"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nStopped!")


if __name__ == "__main__":
    cli_main()
