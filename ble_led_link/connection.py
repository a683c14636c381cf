"""
Connection Manager

Turns an address into a ready-to-write link: locate the peripheral,
connect, discover services and select the write characteristic. The
connect-to-select span is retried a bounded number of times with settle
delays between steps, because several controller firmwares reject a
connect while already connected or publish their GATT table late.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .adapter import BLEAdapter, BLEPeripheral, CharacteristicInfo
from .config import ConnectionConfig
from .events import EventBus, EventType, LinkEvent
from .exceptions import ConnectionFailedError, LEDLinkError, ScanError
from .locator import DeviceLocator, Sleep
from .profiles import ProtocolProfile, select_write_characteristic

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    IDLE = "idle"
    LOCATING = "locating"
    CONNECTING = "connecting"
    DISCOVERING_SERVICES = "discovering_services"
    SELECTING_CHARACTERISTIC = "selecting_characteristic"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Link:
    """A connected peripheral and its selected write characteristic."""
    peripheral: BLEPeripheral
    characteristic: CharacteristicInfo


class ConnectionManager:
    """
    Drives the connection state machine for one device.

    Usage:
        manager = ConnectionManager("BE:32:03:82:3C:B1", PROTOCOL_A, adapter)
        link = await manager.establish()
    """

    def __init__(self, address: str, profile: ProtocolProfile, adapter: BLEAdapter,
                 config: Optional[ConnectionConfig] = None,
                 events: Optional[EventBus] = None,
                 sleep: Sleep = asyncio.sleep):
        """
        Initialize the manager.

        Args:
            address: Upper case MAC address
            profile: Protocol profile deciding characteristic selection
            adapter: Adapter to locate and connect through
            config: Retry and settle timings
            events: Event bus for state and retry notifications
            sleep: Coroutine used for every deliberate delay
        """
        self.address = address
        self.profile = profile
        self.adapter = adapter
        self.config = config or ConnectionConfig()
        self.events = events or EventBus()
        self._sleep = sleep
        self._locator = DeviceLocator(adapter, profile, self.events, sleep)
        self._state = ConnectionState.IDLE
        self._link: Optional[Link] = None

    def __repr__(self):
        return f"<ConnectionManager addr={self.address} profile={self.profile.name} state={self._state.value}>"

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def link(self) -> Optional[Link]:
        return self._link

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.debug(f"{self.address}: {self._state.value} -> {state.value}")
        self._state = state
        self.events.emit(LinkEvent(EventType.STATE_CHANGED, self.address, state=state))

    async def establish(self) -> Link:
        """
        Locate, connect and select the write characteristic.

        Returns:
            The ready link

        Raises:
            DeviceNotFoundError, SignalTooWeakError, ScanError: From the locator
            ConnectionFailedError: If every attempt failed
        """
        self._link = None
        self._set_state(ConnectionState.LOCATING)
        try:
            peripheral = await self._locator.locate(self.address, self.config.scan_duration)
        except LEDLinkError:
            self._set_state(ConnectionState.FAILED)
            raise
        except Exception as e:
            self._set_state(ConnectionState.FAILED)
            raise ScanError(f"Failed to locate {self.address}: {e}") from e

        attempts = self.config.max_attempts
        last_error: Optional[Exception] = None
        logger.info(f"Connecting to {self.address}...")

        for attempt in range(1, attempts + 1):
            logger.info(f"Connection attempt {attempt} of {attempts}...")
            self.events.emit(LinkEvent(EventType.ATTEMPT_STARTED, self.address, attempt=attempt))
            try:
                characteristic = await self._attempt(peripheral)
            except Exception as e:
                last_error = e
                logger.warning(f"Connection attempt {attempt} failed: {e}")
                self.events.emit(LinkEvent(
                    EventType.ATTEMPT_FAILED, self.address, attempt=attempt, error=str(e)
                ))
                await self._safe_disconnect(peripheral)
                if attempt < attempts:
                    logger.info("Waiting before next attempt...")
                    await self._sleep(self.config.retry_backoff)
                continue

            self._link = Link(peripheral, characteristic)
            self._set_state(ConnectionState.READY)
            logger.info(f"Ready to send commands via {characteristic.uuid}")
            return self._link

        self._set_state(ConnectionState.FAILED)
        raise ConnectionFailedError(self.address, attempts) from last_error

    async def _attempt(self, peripheral: BLEPeripheral) -> CharacteristicInfo:
        if await peripheral.is_connected():
            # Some firmwares refuse a connect while a stale link is open
            await peripheral.disconnect()
            await self._sleep(self.config.pre_connect_settle)

        self._set_state(ConnectionState.CONNECTING)
        await peripheral.connect()
        logger.info(f"Connected to {self.address}")
        await self._sleep(self.config.post_connect_settle)

        self._set_state(ConnectionState.DISCOVERING_SERVICES)
        await peripheral.discover_services()
        await self._sleep(self.config.post_discovery_settle)

        self._set_state(ConnectionState.SELECTING_CHARACTERISTIC)
        characteristics = peripheral.characteristics()
        logger.debug(f"Found {len(characteristics)} characteristics")
        return select_write_characteristic(self.profile, characteristics)

    async def _safe_disconnect(self, peripheral: BLEPeripheral) -> None:
        try:
            await peripheral.disconnect()
        except Exception as e:
            logger.warning(f"Error during disconnect: {e}")

    async def ensure_connected(self) -> bool:
        """
        Reconnect the established link if it reports disconnected.

        Only the connect call is repeated; the cached characteristic is kept.

        Returns:
            True if a reconnect was performed

        Raises:
            ConnectionFailedError: If no link has been established
        """
        if self._link is None:
            raise ConnectionFailedError(self.address, 0, f"No link established with {self.address}")

        if await self._link.peripheral.is_connected():
            return False

        await self.reconnect()
        return True

    async def reconnect(self) -> None:
        """Issue a single connect call on the established peripheral."""
        if self._link is None:
            raise ConnectionFailedError(self.address, 0, f"No link established with {self.address}")

        logger.info(f"Reconnecting to {self.address}")
        self.events.emit(LinkEvent(EventType.RECONNECTING, self.address))
        await self._link.peripheral.connect()

    async def close(self) -> None:
        """Disconnect and return to idle."""
        if self._link is not None:
            await self._safe_disconnect(self._link.peripheral)
            logger.info(f"Disconnected from {self.address}")
        self._link = None
        self._set_state(ConnectionState.IDLE)
