from __future__ import annotations

import pytest

from ble_led_link import adapter as adapter_module
from ble_led_link.adapter import CharacteristicInfo, PeripheralProperties
from ble_led_link.events import EventBus

ADDRESS = "BE:32:03:82:3C:B1"

FFE9 = "0000ffe9-0000-1000-8000-00805f9b34fb"
FFF3 = "0000fff3-0000-1000-8000-00805f9b34fb"
FFD9 = "0000ffd9-0000-1000-8000-00805f9b34fb"


class FakePeripheral:
    def __init__(
        self,
        address: str = ADDRESS,
        *,
        name: str | None = "LED",
        rssi: int | None = -60,
        characteristics: list[CharacteristicInfo] | None = None,
        connected: bool = False,
        connect_failures: int = 0,
        discover_failures: int = 0,
        write_failures: int = 0,
        properties_error: Exception | None = None,
    ) -> None:
        self._address = address
        self.name = name
        self.rssi = rssi
        self._characteristics = characteristics if characteristics is not None else [
            CharacteristicInfo(FFF3, frozenset({"write-without-response"}))
        ]
        self.connected = connected
        self.connect_failures = connect_failures
        self.discover_failures = discover_failures
        self.write_failures = write_failures
        self.properties_error = properties_error
        self.calls: list[str] = []
        self.writes: list[tuple[CharacteristicInfo, bytes, bool]] = []

    @property
    def address(self) -> str:
        return self._address

    async def properties(self) -> PeripheralProperties:
        if self.properties_error is not None:
            raise self.properties_error
        return PeripheralProperties(name=self.name, rssi=self.rssi)

    async def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        self.calls.append("connect")
        if self.connect_failures > 0:
            self.connect_failures -= 1
            raise RuntimeError("connect refused")
        self.connected = True

    async def disconnect(self) -> None:
        self.calls.append("disconnect")
        self.connected = False

    async def discover_services(self) -> None:
        self.calls.append("discover_services")
        if self.discover_failures > 0:
            self.discover_failures -= 1
            raise RuntimeError("GATT table not ready")

    def characteristics(self) -> list[CharacteristicInfo]:
        return list(self._characteristics)

    async def write(self, characteristic: CharacteristicInfo, data: bytes, response: bool = False) -> None:
        self.calls.append("write")
        if self.write_failures > 0:
            self.write_failures -= 1
            raise RuntimeError("write rejected")
        if not self.connected:
            raise RuntimeError("not connected")
        self.writes.append((characteristic, bytes(data), response))


class FakeAdapter:
    """Adapter whose peripheral list grows when a scan runs."""

    def __init__(
        self,
        known: list[FakePeripheral] | None = None,
        advertised: list[FakePeripheral] | None = None,
        *,
        name: str = "hci0",
        scan_error: Exception | None = None,
    ) -> None:
        self._name = name
        self.known = list(known or [])
        self.advertised = list(advertised or [])
        self.scan_error = scan_error
        self.scanning = False
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    async def peripherals(self) -> list[FakePeripheral]:
        self.calls.append("peripherals")
        return list(self.known)

    async def start_scan(self) -> None:
        self.calls.append("start_scan")
        if self.scan_error is not None:
            raise self.scan_error
        self.scanning = True
        for peripheral in self.advertised:
            if peripheral not in self.known:
                self.known.append(peripheral)

    async def stop_scan(self) -> None:
        self.calls.append("stop_scan")
        self.scanning = False


class FakeBackend:
    def __init__(self, adapters: list[FakeAdapter]) -> None:
        self._adapters = adapters

    async def adapters(self) -> list[FakeAdapter]:
        return list(self._adapters)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def events() -> tuple[EventBus, list]:
    bus = EventBus()
    received: list = []
    bus.add_callback(received.append)
    return bus, received


@pytest.fixture(autouse=True)
def _reset_default_adapter():
    adapter_module.reset_default_adapter()
    yield
    adapter_module.reset_default_adapter()
