"""
Glasses Breathing Example
Guide a long-exhale session on EDGE glasses

The lenses darken while you breathe in and clear while you breathe out.
Before the session starts they pulse gently, like the resting circle;
set GUIDED_BREATHING_REDUCED_MOTION=1 to keep them still.

Requires:
    pip install guided-breathing
"""

import asyncio
from guided_breathing import (
    BreathingSession,
    Glasses,
    LensPacer,
    MotionPreference,
    SessionEventType,
    Settings,
    idle_preview,
)


async def main():
    print("Guided Breathing - Long exhale on glasses")
    print("=" * 40)

    settings = Settings.from_env()
    minutes = input("Duration in minutes (default 2): ").strip()
    minutes = float(minutes) if minutes else 2.0

    session = BreathingSession("longExhale", duration=minutes * 60)
    session.events.subscribe(
        SessionEventType.PHASE_CHANGE, lambda e: print(f"  {e.data['label']}")
    )

    async with Glasses(settings.glasses_address) as glasses:
        print(f"Connected to {glasses.address}")
        await idle_preview(glasses, MotionPreference(settings.reduced_motion))

        pacer = LensPacer(glasses)
        pacer.attach(session)
        pump = asyncio.create_task(pacer.run())

        session.start()
        try:
            await session.run(until_ended=True)
        except asyncio.CancelledError:
            print("\nStopped!")
            session.reset()
            raise
        finally:
            pacer.stop()
            await pump

    print(f"\nSession complete! {session.snapshot.cycle_count} breaths")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
