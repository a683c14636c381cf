"""
BLE LED Link Constants

Contains the protocol constants, UUID markers, timing values and
palettes used when talking to the two LED controller firmware families.
"""

import re

# Write characteristic UUID markers
# Matched against the upper-cased 128-bit UUID string of every characteristic
PROTOCOL_A_CHAR_MARKERS = ("FFE9", "FFF3")
PROTOCOL_B_CHAR_MARKERS = ("FFF3",)

# GATT property names (as reported by bleak) that allow writing
WRITE_PROPERTIES = frozenset({"write", "write-without-response"})

# Address format: six colon separated hex octets
ADDRESS_PATTERN = re.compile(r"^[0-9A-F]{2}(:[0-9A-F]{2}){5}$")

# Signal strength gate (ProtocolA only)
RSSI_THRESHOLD = -90
RSSI_UNKNOWN = -100  # assumed when an advertisement carries no RSSI

# Scan windows in seconds
SCAN_DURATION_GATED = 5.0
SCAN_DURATION = 3.0

# ProtocolA frame delimiters
# Frame layout: [0x7E, 0x00, TAG, p0, p1, p2, p3, p4, 0xEF]
FRAME_START = 0x7E
FRAME_PAD = 0x00
FRAME_END = 0xEF
FRAME_PAYLOAD_SIZE = 5

FRAME_TAG = {
    "BRIGHTNESS": 0x01,
    "SPEED": 0x02,
    "EFFECT": 0x03,
    "POWER": 0x04,
    "COLOR": 0x05,
}

# Sub-selectors carried in the first payload byte of a COLOR frame
COLOR_RGB = 0x03
COLOR_WARM_WHITE = 0x02
EFFECT_SELECTOR = 0x03

POWER_ON_PAYLOAD = (0xF0, 0x00, 0x01, 0xFF, 0x00)
POWER_OFF_PAYLOAD = (0x00, 0x00, 0x00, 0xFF, 0x00)

# ProtocolB command prefixes and terminators
COMMAND_PREFIX = {
    "SET_COLOR": 0x56,
    "POWER": 0xCC,
    "SET_MODE": 0xBB,
}

COMMAND_TAIL = {
    "COLOR": 0xAA,
    "COLOR_EXT": 0xF0,
    "WARM_EXT": 0x0F,
    "POWER": 0x33,
    "MODE": 0x44,
}

POWER_ON = 0x23
POWER_OFF = 0x24

# Maximum value for percentage style arguments (brightness, speed)
PERCENT_MAX = 100

# ProtocolA custom effects (sent with SetEffect)
EFFECTS = {
    0x87: "Jump RGB",
    0x88: "Jump RGBYCMW",
    0x89: "Crossfade RGB",
    0x8a: "Crossfade RGBYCMW",
    0x95: "Blink RGBYCMW",
}

# ProtocolB built-in modes (sent with SetMode)
MODES = {
    0x25: "Seven color cross fade",
    0x26: "Red gradual change",
    0x27: "Green gradual change",
    0x28: "Blue gradual change",
    0x29: "Yellow gradual change",
    0x2a: "Cyan gradual change",
    0x2b: "Purple gradual change",
    0x2c: "White gradual change",
    0x2d: "Red green cross fade",
    0x2e: "Red blue cross fade",
    0x2f: "Green blue cross fade",
    0x30: "Seven color strobe flash",
    0x31: "Red strobe flash",
    0x32: "Green strobe flash",
    0x33: "Blue strobe flash",
    0x34: "Yellow strobe flash",
    0x35: "Cyan strobe flash",
    0x36: "Purple strobe flash",
    0x37: "White strobe flash",
    0x38: "Seven color jumping change",
}


def get_effect_name(code: int) -> str:
    """Get the name of a ProtocolA effect by code."""
    return EFFECTS.get(code, f"Unknown (0x{code:02x})")


def get_mode_name(code: int) -> str:
    """Get the name of a ProtocolB mode by code."""
    return MODES.get(code, f"Unknown (0x{code:02x})")


# Color palette offered by the control menu
COMMON_COLORS = {
    "white": (255, 255, 255),
    "blue": (0, 0, 255),
    "purple": (128, 0, 128),
    "pink": (255, 192, 203),
    "turquoise": (64, 224, 208),
    "green": (0, 255, 0),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "red": (255, 0, 0),
}

# Default animation speed
SPEED_MEDIUM = 50

# Default connection parameters (seconds unless noted)
DEFAULT_CONNECTION_PARAMS = {
    "max_attempts": 3,  # count
    "pre_connect_settle": 1.0,
    "post_connect_settle": 2.0,
    "post_discovery_settle": 1.0,
    "retry_backoff": 2.0,
    "scan_duration": None,  # None uses the profile's scan window
}

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_DEFAULT = "INFO"
