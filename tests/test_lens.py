"""Tests for the glasses output, with bleak mocked out."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bleak.exc import BleakError

from guided_breathing import (
    BreathingSession,
    CommandError,
    ConnectionError,
    DeviceNotFoundError,
    Glasses,
    LensPacer,
    MotionPreference,
    TimeoutError,
    idle_preview,
    opacity_to_lens,
)
from guided_breathing.lens import CHAR_UUID


def make_client(connected=True):
    client = MagicMock()
    client.is_connected = connected
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    client.write_gatt_char = AsyncMock()
    return client


def written_levels(client):
    return [c.args[1][0] for c in client.write_gatt_char.await_args_list]


class TestOpacityToLens:

    def test_range(self):
        assert opacity_to_lens(0.20) == 0
        assert opacity_to_lens(0.65) == 255
        assert opacity_to_lens(0.30) == 57

    def test_clamped(self):
        assert opacity_to_lens(0.0) == 0
        assert opacity_to_lens(1.0) == 255


class TestGlasses:

    @pytest.mark.asyncio
    async def test_scan_filters_and_sorts(self):
        devices = [
            SimpleNamespace(name="Smart_Glasses_A", address="A", rssi=-70),
            SimpleNamespace(name="Headphones", address="B", rssi=-30),
            SimpleNamespace(name="Smart_Glasses_C", address="C", rssi=-40),
            SimpleNamespace(name=None, address="D", rssi=-20),
        ]
        with patch("guided_breathing.lens.BleakScanner.discover", AsyncMock(return_value=devices)):
            found = await Glasses.scan(timeout=0.1)
        assert [d.address for d in found] == ["C", "A"]
        assert "RSSI: -40" in str(found[0])

    @pytest.mark.asyncio
    async def test_connect_scans_when_no_address(self):
        client = make_client()
        with patch("guided_breathing.lens.BleakScanner.discover",
                   AsyncMock(return_value=[SimpleNamespace(name="Smart_Glasses", address="X", rssi=-50)])), \
             patch("guided_breathing.lens.BleakClient", return_value=client) as factory:
            glasses = Glasses()
            await glasses.connect()
        assert glasses.address == "X"
        assert factory.call_args.args[0] == "X"
        assert glasses.is_connected

    @pytest.mark.asyncio
    async def test_connect_without_devices(self):
        with patch("guided_breathing.lens.BleakScanner.discover", AsyncMock(return_value=[])):
            with pytest.raises(DeviceNotFoundError):
                await Glasses().connect()

    @pytest.mark.asyncio
    async def test_connect_errors_are_wrapped(self):
        client = make_client()
        client.connect.side_effect = BleakError("refused")
        with patch("guided_breathing.lens.BleakClient", return_value=client):
            with pytest.raises(ConnectionError):
                await Glasses("AA").connect()

        client.connect.side_effect = asyncio.TimeoutError()
        with patch("guided_breathing.lens.BleakClient", return_value=client):
            with pytest.raises(TimeoutError):
                await Glasses("AA").connect()

    @pytest.mark.asyncio
    async def test_set_opacity_writes_clamped_byte(self):
        client = make_client()
        with patch("guided_breathing.lens.BleakClient", return_value=client):
            async with Glasses("AA") as glasses:
                await glasses.set_opacity(300)
                await glasses.clear()
        client.write_gatt_char.assert_any_await(CHAR_UUID, bytes([255]), response=True)
        assert written_levels(client) == [255, 0]
        client.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_requires_connection(self):
        with pytest.raises(ConnectionError):
            await Glasses("AA").set_opacity(10)

    @pytest.mark.asyncio
    async def test_write_failure(self):
        client = make_client()
        client.write_gatt_char.side_effect = BleakError("gatt")
        with patch("guided_breathing.lens.BleakClient", return_value=client):
            glasses = Glasses("AA")
            await glasses.connect()
            with pytest.raises(CommandError):
                await glasses.set_opacity(10)

    @pytest.mark.asyncio
    async def test_disconnect_ignores_ble_errors(self):
        client = make_client()
        client.disconnect.side_effect = BleakError("gone")
        with patch("guided_breathing.lens.BleakClient", return_value=client):
            glasses = Glasses("AA")
            await glasses.connect()
            await glasses.disconnect()
        assert not glasses.is_connected


class TestLensPacer:

    @pytest.fixture
    def connected(self):
        client = make_client()
        glasses = Glasses("AA")
        glasses._client = client
        return glasses, client

    @pytest.mark.asyncio
    async def test_follows_snapshots_and_skips_repeats(self, connected, clock, scheduler):
        glasses, client = connected
        session = BreathingSession("balanced", 60, time_source=clock, scheduler=scheduler)
        pacer = LensPacer(glasses)
        pacer.attach(session)

        session.start()
        assert await pacer.flush() is True       # E=0 -> opacity 0.25
        assert await pacer.flush() is False
        clock.advance_ms(5000)
        session.tick()                           # hold after inhale, dark
        assert await pacer.flush() is True
        assert written_levels(client) == [opacity_to_lens(0.25), 255]

        session.reset()
        await pacer.flush()
        assert written_levels(client)[-1] == 0

    @pytest.mark.asyncio
    async def test_detach(self, connected, clock, scheduler):
        glasses, client = connected
        session = BreathingSession("balanced", 60, time_source=clock, scheduler=scheduler)
        pacer = LensPacer(glasses)
        pacer.attach(session)
        pacer.detach(session)
        session.start()
        assert pacer.pending == 0

    @pytest.mark.asyncio
    async def test_run_clears_lenses_on_stop(self, connected):
        glasses, client = connected
        pacer = LensPacer(glasses, update_hz=100)
        pacer.pending = 200
        pump = asyncio.create_task(pacer.run())
        await asyncio.sleep(0.05)
        pacer.stop()
        await asyncio.wait_for(pump, timeout=1)
        assert written_levels(client) == [200, 0]

    @pytest.mark.asyncio
    async def test_run_logs_write_failure(self, connected, caplog):
        glasses, client = connected
        client.write_gatt_char.side_effect = BleakError("gatt")
        pacer = LensPacer(glasses, update_hz=100)
        pacer.pending = 200
        with caplog.at_level(logging.ERROR, logger="guided_breathing"):
            with pytest.raises(CommandError):
                await asyncio.wait_for(pacer.run(), timeout=1)
        assert "Lens update failed" in caplog.text
        assert client.write_gatt_char.await_count == 1


class TestIdlePreview:

    @pytest.mark.asyncio
    async def test_reduced_motion_holds_a_steady_level(self):
        client = make_client()
        glasses = Glasses("AA")
        glasses._client = client
        await idle_preview(glasses, MotionPreference(reduced=True), seconds=0.1)
        assert written_levels(client) == [191, 191, 0]
