"""
Device Locator

Finds the target peripheral by address: first among the peripherals the
adapter already knows, then with a timed scan. Profiles with an RSSI
threshold refuse devices found by scan whose signal is too weak to connect.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from .adapter import BLEAdapter, BLEPeripheral
from .constants import RSSI_UNKNOWN
from .events import EventBus, EventType, LinkEvent
from .exceptions import DeviceNotFoundError, ScanError, SignalTooWeakError
from .profiles import ProtocolProfile

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _find(peripherals: List[BLEPeripheral], address: str) -> Optional[BLEPeripheral]:
    for peripheral in peripherals:
        if peripheral.address.upper() == address:
            return peripheral
    return None


class DeviceLocator:
    """
    Locates a peripheral for a profile.

    Usage:
        locator = DeviceLocator(adapter, PROTOCOL_A)
        peripheral = await locator.locate("BE:32:03:82:3C:B1")
    """

    def __init__(self, adapter: BLEAdapter, profile: ProtocolProfile,
                 events: Optional[EventBus] = None, sleep: Sleep = asyncio.sleep):
        self.adapter = adapter
        self.profile = profile
        self.events = events or EventBus()
        self._sleep = sleep

    async def locate(self, address: str, scan_duration: Optional[float] = None) -> BLEPeripheral:
        """
        Find the peripheral with the given address.

        Args:
            address: Upper case MAC address
            scan_duration: Scan window in seconds (profile default if None)

        Returns:
            The matching peripheral

        Raises:
            DeviceNotFoundError: If the address is not seen after scanning
            SignalTooWeakError: If the profile gates on RSSI and the signal is weak
            ScanError: If the adapter cannot scan
        """
        address = address.upper()

        try:
            peripherals = await self.adapter.peripherals()
        except Exception as e:
            raise ScanError(f"Failed to get peripherals: {e}") from e
        logger.debug(f"Found {len(peripherals)} peripherals before scan")

        peripheral = _find(peripherals, address)
        if peripheral is not None:
            logger.info(f"Found known device {address}")
            self._emit_found(address)
            return peripheral

        duration = scan_duration if scan_duration is not None else self.profile.scan_duration
        peripherals = await self._scan(duration)
        logger.debug(f"Found {len(peripherals)} peripherals after scan")

        if logger.isEnabledFor(logging.DEBUG):
            for p in peripherals:
                try:
                    props = await p.properties()
                except Exception as e:
                    logger.debug(f"Device: {p.address} - properties unavailable: {e}")
                    continue
                logger.debug(f"Device: {p.address} - Name: {props.name} - RSSI: {props.rssi}")

        peripheral = _find(peripherals, address)
        if peripheral is None:
            raise DeviceNotFoundError(f"Device {address} not found after {duration}s scan")

        rssi = None
        if self.profile.rssi_threshold is not None:
            try:
                props = await peripheral.properties()
            except Exception as e:
                raise ScanError(f"Failed to read properties of {address}: {e}") from e
            rssi = props.rssi if props.rssi is not None else RSSI_UNKNOWN
            if rssi < self.profile.rssi_threshold:
                logger.warning(f"Device {address} signal too weak: {rssi} dBm")
                raise SignalTooWeakError(address, rssi, self.profile.rssi_threshold)

        logger.info(f"Found device in scan: {address}")
        self._emit_found(address, rssi)
        return peripheral

    async def _scan(self, duration: float) -> List[BLEPeripheral]:
        logger.info(f"Device not known, scanning for {duration} seconds...")
        try:
            await self.adapter.start_scan()
        except Exception as e:
            raise ScanError(f"Failed to start scan: {e}") from e

        try:
            await self._sleep(duration)
        finally:
            # Scanning must be off before any connect attempt
            try:
                await self.adapter.stop_scan()
            except Exception as e:
                raise ScanError(f"Failed to stop scan: {e}") from e

        try:
            return await self.adapter.peripherals()
        except Exception as e:
            raise ScanError(f"Failed to get peripherals: {e}") from e

    def _emit_found(self, address: str, rssi: Optional[int] = None) -> None:
        self.events.emit(LinkEvent(EventType.DEVICE_FOUND, address, rssi=rssi))
