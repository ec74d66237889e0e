"""
Guided Breathing - Smart glasses output

Mirrors the breathing circle on EDGE-style LCD glasses over Bluetooth Low
Energy: the lenses darken as the circle grows and clear as it shrinks.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError

from .clock import Lifecycle
from .engine import OPACITY_MAX, OPACITY_MIN, Snapshot
from .events import SessionEvent, SessionEventType
from .exceptions import (
    CommandError,
    ConnectionError,
    DeviceNotFoundError,
    TimeoutError
)
from .oscillators import OSCILLATOR_INTERVAL, IdlePulse, MotionPreference, OscillatorTask

logger = logging.getLogger(__name__)


# BLE UUIDs
SERVICE_UUID = "000000ff-0000-1000-8000-00805f9b34fb"
CHAR_UUID = "0000ff01-0000-1000-8000-00805f9b34fb"
DEVICE_NAME = "Smart_Glasses"

LENS_CLEAR = 0
LENS_DARK = 255
IDLE_PREVIEW = 3.0  # seconds


@dataclass
class ScanResult:
    """A pair of glasses seen while scanning"""
    name: str
    address: str
    rssi: int

    def __str__(self):
        return f"{self.name} ({self.address}) RSSI: {self.rssi}"


def opacity_to_lens(opacity: float) -> int:
    """
    Map circle opacity onto a lens level

    Args:
        opacity: Circle opacity, nominally 0.20-0.65

    Returns:
        Lens level 0 (clear) - 255 (dark)
    """
    fraction = (opacity - OPACITY_MIN) / (OPACITY_MAX - OPACITY_MIN)
    fraction = max(0.0, min(1.0, fraction))
    return int(round(fraction * LENS_DARK))


class Glasses:
    """
    BLE connection to the glasses

    Usage:
        async with Glasses() as glasses:
            await glasses.set_opacity(128)
    """

    def __init__(self, address: Optional[str] = None):
        """
        Args:
            address: BLE address. If None, the strongest device found is used.
        """
        self._address = address
        self._client: Optional[BleakClient] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    @property
    def address(self) -> Optional[str]:
        return self._address

    @staticmethod
    async def scan(timeout: float = 5.0) -> List[ScanResult]:
        """
        Look for glasses nearby

        Returns:
            Devices found, strongest signal first
        """
        found = []
        for device in await BleakScanner.discover(timeout=timeout):
            if device.name and DEVICE_NAME in device.name:
                found.append(ScanResult(
                    name=device.name,
                    address=device.address,
                    rssi=getattr(device, "rssi", None) or -100
                ))
        return sorted(found, key=lambda d: d.rssi, reverse=True)

    async def connect(self, timeout: float = 10.0) -> None:
        """
        Raises:
            DeviceNotFoundError: If scanning finds nothing
            ConnectionError: If the BLE connection fails
            TimeoutError: If connecting takes longer than ``timeout``
        """
        if not self._address:
            devices = await self.scan()
            if not devices:
                raise DeviceNotFoundError("No glasses found. Are they switched on?")
            self._address = devices[0].address

        client = BleakClient(self._address, timeout=timeout)
        try:
            await client.connect()
        except BleakError as e:
            raise ConnectionError(f"Failed to connect to {self._address}: {e}")
        except asyncio.TimeoutError:
            raise TimeoutError(f"Connection to {self._address} timed out after {timeout}s")
        self._client = client
        logger.info("Connected to glasses at %s", self._address)

    async def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.disconnect()
        except BleakError as e:
            logger.debug("Ignoring disconnect error: %s", e)
        finally:
            self._client = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
        return False

    async def set_opacity(self, level: int) -> None:
        """
        Set lens darkness

        Args:
            level: 0 (clear) - 255 (dark); out of range values are clamped

        Raises:
            ConnectionError: If not connected
            CommandError: If the write fails
        """
        if not self.is_connected:
            raise ConnectionError("Not connected. Call connect() first.")

        level = max(LENS_CLEAR, min(LENS_DARK, int(level)))
        try:
            await self._client.write_gatt_char(CHAR_UUID, bytes([level]), response=True)
        except BleakError as e:
            raise CommandError(f"Lens write failed: {e}")

    async def clear(self) -> None:
        await self.set_opacity(LENS_CLEAR)


async def idle_preview(
    glasses: Glasses,
    preference: Optional[MotionPreference] = None,
    seconds: float = IDLE_PREVIEW
) -> None:
    """Pulse the lenses like the resting circle, then clear them"""
    pulse = IdlePulse(preference)
    task = OscillatorTask(pulse)
    task.start()
    try:
        for _ in range(int(round(seconds / OSCILLATOR_INTERVAL))):
            _, opacity = pulse.circle()
            await glasses.set_opacity(int(opacity * LENS_DARK))
            await asyncio.sleep(OSCILLATOR_INTERVAL)
    finally:
        await task.stop()
    await glasses.clear()


class LensPacer:
    """
    Follows a session's snapshots on the glasses

    Snapshots arrive once per frame; BLE writes are slower, so the pacer
    keeps only the latest level and writes it at most ``update_hz`` times a
    second, skipping writes when the level has not changed.

    Usage:
        pacer = LensPacer(glasses)
        pacer.attach(session)
        pump = asyncio.create_task(pacer.run())
        await session.run(until_ended=True)
        pacer.stop()
        await pump
    """

    def __init__(self, glasses: Glasses, update_hz: float = 30):
        self.glasses = glasses
        self.update_hz = update_hz
        self.pending = LENS_CLEAR
        self.sent: Optional[int] = None
        self._stop_requested = False
        self._stopped: Optional[asyncio.Event] = None

    def attach(self, session) -> None:
        session.events.subscribe(SessionEventType.SNAPSHOT, self._on_snapshot)

    def detach(self, session) -> None:
        session.events.unsubscribe(SessionEventType.SNAPSHOT, self._on_snapshot)

    def _on_snapshot(self, event: SessionEvent) -> None:
        snapshot: Snapshot = event.data["snapshot"]
        if snapshot.lifecycle in (Lifecycle.IDLE, Lifecycle.ENDED):
            self.pending = LENS_CLEAR
        else:
            self.pending = opacity_to_lens(snapshot.opacity)

    async def flush(self) -> bool:
        """
        Write the latest level if it changed

        Returns:
            True if a write was made
        """
        level = self.pending
        if level == self.sent:
            return False
        await self.glasses.set_opacity(level)
        self.sent = level
        return True

    async def run(self) -> None:
        """Write levels until stop(), then clear the lenses"""
        self._stopped = asyncio.Event()
        if self._stop_requested:
            self._stopped.set()
        interval = 1.0 / self.update_hz
        failed = False
        try:
            while not self._stopped.is_set():
                try:
                    await self.flush()
                except (CommandError, ConnectionError) as e:
                    logger.error("Lens update failed, pacer stopped: %s", e)
                    failed = True
                    raise
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._stop_requested = False
            if self.glasses.is_connected and not failed:
                await self.glasses.clear()
                self.sent = LENS_CLEAR

    def stop(self) -> None:
        self._stop_requested = True
        if self._stopped is not None:
            self._stopped.set()
