"""
BLE LED Link Python Module

This module establishes a reliable GATT link to Bluetooth Low Energy (BLE)
RGB LED controllers and sends their binary command frames.

Supported firmware families:
- Protocol A: 9 byte 0x7E ... 0xEF frames, write characteristic FFE9/FFF3,
  RSSI gated discovery
- Protocol B: 0x56 / 0xCC / 0xBB command frames, write characteristic FFF3
  with a write property, transparent reconnect before writing

Version: 1.0.0
"""

from .session import DeviceSession, normalize_address
from .connection import ConnectionManager, ConnectionState, Link
from .locator import DeviceLocator
from .profiles import (
    PROTOCOL_A,
    PROTOCOL_B,
    ProtocolKind,
    ProtocolProfile,
    get_profile,
    select_write_characteristic,
)
from .commands import (
    SetBrightness,
    SetColor,
    SetEffect,
    SetMode,
    SetPower,
    SetWarmWhite,
)
from .encoder import encode
from .adapter import (
    BLEAdapter,
    BLEBackend,
    BLEPeripheral,
    CharacteristicInfo,
    PeripheralProperties,
    default_adapter,
    select_adapter,
)
from .events import EventBus, EventType, LinkEvent
from .config import ConnectionConfig, configure_logging, load_config
from .exceptions import (
    LEDLinkError,
    AdapterUnavailableError,
    CharacteristicNotFoundError,
    ConfigurationError,
    ConnectionFailedError,
    DeviceNotFoundError,
    ScanError,
    SignalTooWeakError,
    UnsupportedCommandError,
    WriteFailedError,
)
from .constants import (
    COMMON_COLORS,
    EFFECTS,
    MODES,
    get_effect_name,
    get_mode_name,
)

__version__ = "1.0.0"
__all__ = [
    'DeviceSession',
    'normalize_address',
    'ConnectionManager',
    'ConnectionState',
    'Link',
    'DeviceLocator',
    'PROTOCOL_A',
    'PROTOCOL_B',
    'ProtocolKind',
    'ProtocolProfile',
    'get_profile',
    'select_write_characteristic',
    'SetBrightness',
    'SetColor',
    'SetEffect',
    'SetMode',
    'SetPower',
    'SetWarmWhite',
    'encode',
    'BLEAdapter',
    'BLEBackend',
    'BLEPeripheral',
    'CharacteristicInfo',
    'PeripheralProperties',
    'default_adapter',
    'select_adapter',
    'EventBus',
    'EventType',
    'LinkEvent',
    'ConnectionConfig',
    'configure_logging',
    'load_config',
    'LEDLinkError',
    'AdapterUnavailableError',
    'CharacteristicNotFoundError',
    'ConfigurationError',
    'ConnectionFailedError',
    'DeviceNotFoundError',
    'ScanError',
    'SignalTooWeakError',
    'UnsupportedCommandError',
    'WriteFailedError',
    'COMMON_COLORS',
    'EFFECTS',
    'MODES',
    'get_effect_name',
    'get_mode_name',
]
