"""
Custom exceptions for the BLE LED link module.
"""

from typing import Optional


class LEDLinkError(Exception):
    """Base exception for LED link errors."""
    pass


class ConfigurationError(LEDLinkError):
    """Exception raised for invalid connection settings."""
    pass


class AdapterUnavailableError(LEDLinkError):
    """Exception raised when no Bluetooth adapter can be found."""
    pass


class ScanError(LEDLinkError):
    """Exception raised when the adapter fails to start or stop scanning."""
    pass


class DeviceNotFoundError(LEDLinkError):
    """Exception raised when the target address is not seen by the adapter."""
    pass


class SignalTooWeakError(LEDLinkError):
    """
    Exception raised when the device advertises below the RSSI threshold.

    Move closer to the controller (or reset it into pairing mode) and retry.
    """

    def __init__(self, address: str, rssi: int, threshold: int):
        super().__init__(
            f"Signal from {address} too weak ({rssi} dBm < {threshold} dBm). "
            "Reset the device or move closer and try again."
        )
        self.address = address
        self.rssi = rssi
        self.threshold = threshold


class CharacteristicNotFoundError(LEDLinkError):
    """Exception raised when no characteristic matches the profile's write rule."""
    pass


class ConnectionFailedError(LEDLinkError):
    """Exception raised when every connection attempt has failed."""

    def __init__(self, address: str, attempts: int, message: Optional[str] = None):
        super().__init__(message or f"Failed to connect to {address} after {attempts} attempts")
        self.address = address
        self.attempts = attempts


class WriteFailedError(LEDLinkError):
    """Exception raised when a command frame cannot be written."""
    pass


class UnsupportedCommandError(LEDLinkError):
    """Exception raised when a command does not exist in the active protocol."""
    pass
