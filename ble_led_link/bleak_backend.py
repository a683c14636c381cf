"""
Bleak Backend

Implements the adapter capability on top of the bleak library, which
supports BlueZ (Linux), CoreBluetooth (macOS) and WinRT (Windows).
"""

import logging
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from .adapter import CharacteristicInfo, PeripheralProperties

logger = logging.getLogger(__name__)

SYSFS_BLUETOOTH = Path("/sys/class/bluetooth")
_HCI_NAME = re.compile(r"^hci\d+$")

# Name used for the single OS managed adapter on macOS and Windows
DEFAULT_ADAPTER_NAME = "default"


class BleakPeripheral:
    """A remote device wrapped around a bleak BLEDevice and BleakClient."""

    def __init__(self, device: BLEDevice, advertisement: Optional[AdvertisementData] = None,
                 timeout: float = 10.0):
        """
        Initialize the peripheral.

        Args:
            device: Device reported by the scanner
            advertisement: Latest advertisement data, if any
            timeout: Connection timeout in seconds
        """
        self._device = device
        self._advertisement = advertisement
        self._timeout = timeout
        self._client: Optional[BleakClient] = None
        self._characteristics: List[CharacteristicInfo] = []

    def __repr__(self):
        return f"<BleakPeripheral addr={self.address} name={self._device.name}>"

    @property
    def address(self) -> str:
        return self._device.address.upper()

    def update(self, device: BLEDevice, advertisement: Optional[AdvertisementData]) -> None:
        """Refresh the device and advertisement after a new scan."""
        self._device = device
        self._advertisement = advertisement

    async def properties(self) -> PeripheralProperties:
        adv = self._advertisement
        if adv is None:
            return PeripheralProperties(name=self._device.name)
        return PeripheralProperties(name=adv.local_name or self._device.name, rssi=adv.rssi)

    async def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    async def connect(self) -> None:
        if self._client is None:
            self._client = BleakClient(self._device, timeout=self._timeout)
        await self._client.connect()

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.disconnect()

    async def discover_services(self) -> None:
        """
        Collect the GATT table.

        bleak resolves services while connecting, so this only reads the
        resolved collection.

        Raises:
            BleakError: If not connected or services are not available
        """
        if self._client is None or not self._client.is_connected:
            raise BleakError("Not connected to device")

        services = self._client.services
        if services is None:
            raise BleakError("Service discovery has not been performed")

        self._characteristics = [
            CharacteristicInfo(
                uuid=str(char.uuid),
                properties=frozenset(char.properties),
                handle=char,
            )
            for char in services.characteristics.values()
        ]
        logger.debug(f"{self.address}: {len(self._characteristics)} characteristics")

    def characteristics(self) -> List[CharacteristicInfo]:
        return list(self._characteristics)

    async def write(self, characteristic: CharacteristicInfo, data: bytes,
                    response: bool = False) -> None:
        if self._client is None:
            raise BleakError("Not connected to device")

        target = characteristic.handle if characteristic.handle is not None else characteristic.uuid
        await self._client.write_gatt_char(target, data, response=response)


class BleakAdapter:
    """
    A local adapter driven through BleakScanner.

    Peripherals seen by any scan are remembered, so a device found once can
    be looked up again without scanning.
    """

    def __init__(self, name: str = DEFAULT_ADAPTER_NAME, timeout: float = 10.0):
        self._name = name
        self._timeout = timeout
        self._scanner: Optional[BleakScanner] = None
        self._known: Dict[str, BleakPeripheral] = {}

    def __repr__(self):
        return f"<BleakAdapter name={self._name} known={len(self._known)}>"

    @property
    def name(self) -> str:
        return self._name

    def _get_scanner(self) -> BleakScanner:
        if self._scanner is None:
            kwargs = {}
            if sys.platform.startswith("linux") and self._name != DEFAULT_ADAPTER_NAME:
                kwargs["adapter"] = self._name
            self._scanner = BleakScanner(**kwargs)
        return self._scanner

    async def start_scan(self) -> None:
        await self._get_scanner().start()

    async def stop_scan(self) -> None:
        if self._scanner is not None:
            await self._scanner.stop()

    async def peripherals(self) -> List[BleakPeripheral]:
        if self._scanner is not None:
            seen = self._scanner.discovered_devices_and_advertisement_data
            for device, advertisement in seen.values():
                address = device.address.upper()
                if address in self._known:
                    self._known[address].update(device, advertisement)
                else:
                    self._known[address] = BleakPeripheral(device, advertisement, self._timeout)
        return list(self._known.values())


class BleakBackend:
    """Enumerates the host's Bluetooth adapters."""

    def __init__(self, timeout: float = 10.0, sysfs_path: Path = SYSFS_BLUETOOTH):
        self._timeout = timeout
        self._sysfs_path = sysfs_path

    async def adapters(self) -> List[BleakAdapter]:
        """
        List the available adapters.

        On Linux the BlueZ controllers (hci0, hci1, ...) are read from sysfs.
        Other platforms expose a single OS managed adapter.

        Returns:
            Adapters in controller order (may be empty on Linux)
        """
        if not sys.platform.startswith("linux"):
            return [BleakAdapter(DEFAULT_ADAPTER_NAME, self._timeout)]

        if not self._sysfs_path.exists():
            return []

        names = sorted(
            (entry.name for entry in self._sysfs_path.iterdir() if _HCI_NAME.match(entry.name)),
            key=lambda n: int(n[3:]),
        )
        return [BleakAdapter(name, self._timeout) for name in names]
