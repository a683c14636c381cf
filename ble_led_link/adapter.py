"""
BLE Adapter Capability

The radio stack is provided by the host. This module describes the small
surface the link needs from it (adapter enumeration, scanning, peripheral
listing, connect/disconnect, service discovery and writes) so the rest of
the package can run against bleak or against an in-memory fake.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional, Protocol

from .constants import WRITE_PROPERTIES
from .exceptions import AdapterUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacteristicInfo:
    """A GATT characteristic: UUID plus property flags."""
    uuid: str
    properties: FrozenSet[str] = frozenset()
    handle: Any = field(default=None, compare=False, repr=False)

    @property
    def supports_write(self) -> bool:
        """True if the characteristic accepts write or write-without-response."""
        return bool(self.properties & WRITE_PROPERTIES)


@dataclass(frozen=True)
class PeripheralProperties:
    """Advertised properties of a remote device."""
    name: Optional[str] = None
    rssi: Optional[int] = None


class BLEPeripheral(Protocol):
    """A remote device as seen by an adapter."""

    @property
    def address(self) -> str:
        ...

    async def properties(self) -> PeripheralProperties:
        ...

    async def is_connected(self) -> bool:
        ...

    async def connect(self) -> None:
        ...

    async def disconnect(self) -> None:
        ...

    async def discover_services(self) -> None:
        ...

    def characteristics(self) -> List[CharacteristicInfo]:
        ...

    async def write(self, characteristic: CharacteristicInfo, data: bytes,
                    response: bool = False) -> None:
        ...


class BLEAdapter(Protocol):
    """A local radio adapter."""

    @property
    def name(self) -> str:
        ...

    async def peripherals(self) -> List[BLEPeripheral]:
        ...

    async def start_scan(self) -> None:
        ...

    async def stop_scan(self) -> None:
        ...


class BLEBackend(Protocol):
    """Entry point of a radio stack: enumerates adapters."""

    async def adapters(self) -> List[BLEAdapter]:
        ...


# Process-wide adapter, selected once
_default_adapter: Optional[BLEAdapter] = None


async def select_adapter(backend: BLEBackend) -> BLEAdapter:
    """
    Pick the first adapter reported by a backend.

    Args:
        backend: Radio stack to enumerate

    Returns:
        The first adapter

    Raises:
        AdapterUnavailableError: If the backend has no adapters
    """
    try:
        adapters = await backend.adapters()
    except Exception as e:
        raise AdapterUnavailableError(f"Failed to get adapters: {e}") from e

    if not adapters:
        raise AdapterUnavailableError("No Bluetooth adapters found")

    adapter = adapters[0]
    logger.info(f"Using Bluetooth adapter {adapter.name}")
    return adapter


async def default_adapter(backend: Optional[BLEBackend] = None) -> BLEAdapter:
    """
    Get the process-wide adapter, selecting it on first use.

    The adapter is never re-enumerated once selected.

    Args:
        backend: Radio stack to enumerate on first use (bleak if omitted)
    """
    global _default_adapter
    if _default_adapter is None:
        if backend is None:
            from .bleak_backend import BleakBackend
            backend = BleakBackend()
        _default_adapter = await select_adapter(backend)
    return _default_adapter


def reset_default_adapter() -> None:
    """Forget the process-wide adapter."""
    global _default_adapter
    _default_adapter = None
