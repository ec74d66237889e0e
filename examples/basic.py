"""
Basic Guided Breathing Example
One-minute balanced session printed to the terminal
"""

import asyncio
from guided_breathing import BreathingSession, SessionEventType, TerminalBellCue


async def main():
    session = BreathingSession("balanced", duration=60, audio=TerminalBellCue())
    print(f"{session.technique} - {session.total_cycles} breaths")

    session.events.subscribe(
        SessionEventType.CYCLE_START,
        lambda e: print(f"\nBreath {e.data['cycle']} of {e.data['total_cycles']}")
    )
    session.events.subscribe(
        SessionEventType.PHASE_CHANGE,
        lambda e: print(f"  {e.data['label']}")
    )
    session.events.subscribe(
        SessionEventType.SESSION_COMPLETING,
        lambda e: print("\nSession complete. Take a moment for yourself...")
    )

    session.start()
    await session.run(until_ended=True)
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
