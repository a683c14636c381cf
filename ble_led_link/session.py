"""
Device Session

Public entry point: one session controls one LED controller with one
protocol profile. Commands are encoded and written with
write-without-response over the link established by the ConnectionManager.
"""

import asyncio
import logging
from typing import Optional, Tuple, Union

from .adapter import BLEAdapter, default_adapter
from .commands import (
    SetBrightness,
    SetColor,
    SetEffect,
    SetMode,
    SetPower,
    SetWarmWhite,
)
from .config import ConnectionConfig
from .connection import ConnectionManager, ConnectionState, Link
from .constants import ADDRESS_PATTERN, COMMON_COLORS, SPEED_MEDIUM
from .encoder import encode
from .events import EventBus, EventType, LinkEvent
from .exceptions import WriteFailedError
from .locator import Sleep
from .profiles import ProtocolKind, ProtocolProfile, get_profile

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """
    Validate and upper-case a MAC address.

    Raises:
        ValueError: If the address is not six colon separated hex octets
    """
    normalized = address.strip().upper()
    if not ADDRESS_PATTERN.match(normalized):
        raise ValueError(f"Invalid Bluetooth address: {address!r}")
    return normalized


class DeviceSession:
    """
    Controls one BLE LED controller.

    Usage:
        session = DeviceSession("BE:32:03:82:3C:B1", PROTOCOL_A)
        await session.connect()
        await session.set_color(255, 0, 0)
        await session.disconnect()

    or:
        async with DeviceSession("BE:32:03:82:3C:B1", PROTOCOL_B) as session:
            await session.turn_on()
    """

    def __init__(self, address: str, profile: Union[ProtocolProfile, ProtocolKind, str],
                 adapter: Optional[BLEAdapter] = None,
                 config: Optional[ConnectionConfig] = None,
                 events: Optional[EventBus] = None,
                 sleep: Sleep = asyncio.sleep):
        """
        Initialize the session.

        Args:
            address: Bluetooth MAC address (e.g., "XX:XX:XX:XX:XX:XX")
            profile: ProtocolProfile, or a kind accepted by get_profile()
            adapter: Adapter to use (process default adapter if None)
            config: Retry and settle timings
            events: Event bus receiving state, retry and write events
            sleep: Coroutine used for every deliberate delay
        """
        self.address = normalize_address(address)
        if not isinstance(profile, ProtocolProfile):
            profile = get_profile(profile)
        self.profile = profile
        self.config = config or ConnectionConfig()
        self.events = events or EventBus()
        self._adapter = adapter
        self._sleep = sleep
        self._manager: Optional[ConnectionManager] = None

    def __repr__(self):
        return f"<DeviceSession addr={self.address} profile={self.profile.name} state={self.state.value}>"

    async def __aenter__(self) -> "DeviceSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    @property
    def state(self) -> ConnectionState:
        if self._manager is None:
            return ConnectionState.IDLE
        return self._manager.state

    @property
    def link(self) -> Optional[Link]:
        return self._manager.link if self._manager else None

    async def is_connected(self) -> bool:
        """Check whether the underlying link reports connected."""
        link = self.link
        if link is None:
            return False
        return await link.peripheral.is_connected()

    async def connect(self) -> Link:
        """
        Establish the link.

        Raises:
            AdapterUnavailableError: If no adapter exists
            DeviceNotFoundError: If the device is not found
            SignalTooWeakError: If the signal is below the profile threshold
            ConnectionFailedError: If every connection attempt failed
        """
        if self._adapter is None:
            self._adapter = await default_adapter()

        if self._manager is None:
            self._manager = ConnectionManager(
                self.address,
                self.profile,
                self._adapter,
                config=self.config,
                events=self.events,
                sleep=self._sleep,
            )
        return await self._manager.establish()

    async def disconnect(self) -> None:
        """Disconnect from the device."""
        if self._manager is not None:
            await self._manager.close()

    async def send(self, command) -> None:
        """
        Encode and write a command.

        Multi-frame commands are written in order and stop at the first
        frame that fails.

        Args:
            command: One of the command dataclasses

        Raises:
            UnsupportedCommandError: If the profile cannot encode the command
            WriteFailedError: If a frame cannot be written
        """
        frames = encode(self.profile, command)

        link = self.link
        if link is None or self._manager.state is not ConnectionState.READY:
            raise WriteFailedError(f"Not connected to {self.address}")

        reconnected = False
        if self.profile.reconnect_on_write:
            try:
                reconnected = await self._manager.ensure_connected()
            except Exception as e:
                self._emit_write_failed(frames[0], e)
                raise WriteFailedError(f"Reconnect to {self.address} failed: {e}") from e

        # At most one reconnect per send
        retry = self.profile.reconnect_on_write and not reconnected
        for frame in frames:
            await self._write_frame(link, frame, retry)

    async def _write_frame(self, link: Link, frame: bytes, retry: bool) -> None:
        try:
            await link.peripheral.write(link.characteristic, frame, response=False)
        except Exception as e:
            if not retry:
                self._emit_write_failed(frame, e)
                raise WriteFailedError(f"Write failed: {e}") from e

            logger.warning(f"Write to {self.address} failed ({e}), reconnecting once")
            try:
                await self._manager.reconnect()
                await link.peripheral.write(link.characteristic, frame, response=False)
            except Exception as retry_error:
                self._emit_write_failed(frame, retry_error)
                raise WriteFailedError(f"Write failed after reconnect: {retry_error}") from retry_error

        logger.debug(f"Written: {frame.hex()}")
        self.events.emit(LinkEvent(EventType.WRITE_SUCCEEDED, self.address, payload=frame))

    def _emit_write_failed(self, frame: bytes, error: Exception) -> None:
        logger.error(f"Write of {frame.hex()} to {self.address} failed: {error}")
        self.events.emit(LinkEvent(
            EventType.WRITE_FAILED, self.address, payload=frame, error=str(error)
        ))

    async def set_power(self, on: bool) -> None:
        """Turn the LEDs on or off."""
        logger.info(f"Setting power: {'ON' if on else 'OFF'}")
        await self.send(SetPower(on))

    async def turn_on(self) -> None:
        await self.set_power(True)

    async def turn_off(self) -> None:
        await self.set_power(False)

    async def set_color(self, red: int, green: int, blue: int) -> None:
        """
        Set an RGB color.

        Args:
            red: Red value (0-255)
            green: Green value (0-255)
            blue: Blue value (0-255)
        """
        logger.info(f"Setting color to RGB({red}, {green}, {blue})")
        await self.send(SetColor(red, green, blue))

    async def set_named_color(self, name: str) -> Tuple[int, int, int]:
        """
        Set one of the COMMON_COLORS by name.

        Returns:
            The RGB triple that was sent

        Raises:
            KeyError: If the color name is unknown
        """
        rgb = COMMON_COLORS[name.lower()]
        await self.set_color(*rgb)
        return rgb

    async def set_brightness(self, brightness: int) -> None:
        """
        Set brightness.

        Args:
            brightness: Percentage (0-100); ProtocolA clamps larger values to 100
        """
        logger.info(f"Setting brightness to {brightness}")
        await self.send(SetBrightness(brightness))

    async def set_warm_white(self, level: int) -> None:
        """Switch to warm white at the given intensity (0-255)."""
        logger.info(f"Setting warm white to {level}")
        await self.send(SetWarmWhite(level))

    async def set_effect(self, code: int, speed: int = SPEED_MEDIUM) -> None:
        """
        Start a custom effect (ProtocolA only).

        Args:
            code: Effect code (see constants.EFFECTS)
            speed: Animation speed (0-100, clamped)

        Raises:
            UnsupportedCommandError: On a ProtocolB session
        """
        logger.info(f"Setting custom effect: 0x{code:02x} with speed: {speed}")
        await self.send(SetEffect(code, speed))

    async def set_mode(self, code: int) -> None:
        """
        Start a built-in mode (ProtocolB only).

        Raises:
            UnsupportedCommandError: On a ProtocolA session
        """
        logger.info(f"Setting mode: 0x{code:02x}")
        await self.send(SetMode(code))
