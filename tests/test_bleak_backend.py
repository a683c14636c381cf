from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from ble_led_link import bleak_backend
from ble_led_link.adapter import select_adapter
from ble_led_link.bleak_backend import BleakAdapter, BleakBackend, BleakPeripheral
from ble_led_link.exceptions import AdapterUnavailableError

from conftest import ADDRESS, FFF3


class FakeBleakClient:
    instances: list["FakeBleakClient"] = []

    def __init__(self, device, timeout: float = 10.0) -> None:
        self.device = device
        self.timeout = timeout
        self.is_connected = False
        self.services = SimpleNamespace(
            characteristics={
                12: SimpleNamespace(uuid=FFF3, properties=["write-without-response", "write"]),
                14: SimpleNamespace(uuid="00002a00-0000-1000-8000-00805f9b34fb", properties=["read"]),
            }
        )
        self.writes: list[tuple[object, bytes, bool]] = []
        FakeBleakClient.instances.append(self)

    async def connect(self) -> None:
        self.is_connected = True

    async def disconnect(self) -> None:
        self.is_connected = False

    async def write_gatt_char(self, char, data: bytes, response: bool = False) -> None:
        self.writes.append((char, data, response))


class FakeBleakScanner:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.discovered_devices_and_advertisement_data: dict = {}
        self.running = False

    async def start(self) -> None:
        self.running = True

    async def stop(self) -> None:
        self.running = False


def _device(address: str = ADDRESS.lower(), name: str = "LED") -> SimpleNamespace:
    return SimpleNamespace(address=address, name=name)


@pytest.fixture
def fake_bleak(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeBleakClient.instances.clear()
    monkeypatch.setattr(bleak_backend, "BleakClient", FakeBleakClient)
    monkeypatch.setattr(bleak_backend, "BleakScanner", FakeBleakScanner)


def test_peripheral_properties_prefer_advertisement() -> None:
    peripheral = BleakPeripheral(_device(), SimpleNamespace(local_name="Triones-1", rssi=-71))
    props = asyncio.run(peripheral.properties())
    assert props.name == "Triones-1"
    assert props.rssi == -71
    assert peripheral.address == ADDRESS


def test_peripheral_without_advertisement_has_no_rssi() -> None:
    props = asyncio.run(BleakPeripheral(_device()).properties())
    assert props.name == "LED"
    assert props.rssi is None


def test_peripheral_connect_discover_write(fake_bleak) -> None:
    peripheral = BleakPeripheral(_device(), timeout=4.0)

    async def scenario():
        await peripheral.connect()
        await peripheral.discover_services()
        chars = peripheral.characteristics()
        await peripheral.write(chars[0], b"\xcc\x23\x33")
        return chars

    chars = asyncio.run(scenario())

    client = FakeBleakClient.instances[0]
    assert client.timeout == 4.0
    assert chars[0].uuid == FFF3
    assert chars[0].supports_write
    assert not chars[1].supports_write
    assert client.writes == [(chars[0].handle, b"\xcc\x23\x33", False)]


def test_discover_requires_connection(fake_bleak) -> None:
    with pytest.raises(BleakError):
        asyncio.run(BleakPeripheral(_device()).discover_services())


def test_reconnect_reuses_client(fake_bleak) -> None:
    peripheral = BleakPeripheral(_device())

    async def scenario() -> bool:
        await peripheral.connect()
        await peripheral.disconnect()
        await peripheral.connect()
        return await peripheral.is_connected()

    assert asyncio.run(scenario()) is True
    assert len(FakeBleakClient.instances) == 1


def test_adapter_remembers_scanned_peripherals(fake_bleak) -> None:
    adapter = BleakAdapter("hci0")

    async def scenario():
        before = await adapter.peripherals()
        await adapter.start_scan()
        adapter._scanner.discovered_devices_and_advertisement_data = {
            ADDRESS: (_device(), SimpleNamespace(local_name="LED", rssi=-60)),
        }
        await adapter.stop_scan()
        after_scan = await adapter.peripherals()
        adapter._scanner.discovered_devices_and_advertisement_data = {}
        later = await adapter.peripherals()
        return before, after_scan, later

    before, after_scan, later = asyncio.run(scenario())

    assert before == []
    assert [p.address for p in after_scan] == [ADDRESS]
    assert later[0] is after_scan[0]
    assert adapter._scanner.running is False


def test_linux_adapter_is_passed_to_scanner(fake_bleak, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bleak_backend, "sys", SimpleNamespace(platform="linux"))
    adapter = BleakAdapter("hci1")
    asyncio.run(adapter.start_scan())
    assert adapter._scanner.kwargs == {"adapter": "hci1"}


def test_backend_lists_linux_controllers(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bleak_backend, "sys", SimpleNamespace(platform="linux"))
    for name in ("hci10", "hci0", "hci0:256", "hci2"):
        (tmp_path / name).mkdir()

    adapters = asyncio.run(BleakBackend(sysfs_path=tmp_path).adapters())

    assert [a.name for a in adapters] == ["hci0", "hci2", "hci10"]


def test_backend_without_controllers(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bleak_backend, "sys", SimpleNamespace(platform="linux"))
    backend = BleakBackend(sysfs_path=tmp_path / "missing")

    with pytest.raises(AdapterUnavailableError):
        asyncio.run(select_adapter(backend))


def test_backend_on_other_platforms(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bleak_backend, "sys", SimpleNamespace(platform="darwin"))
    adapters = asyncio.run(BleakBackend().adapters())
    assert [a.name for a in adapters] == ["default"]
