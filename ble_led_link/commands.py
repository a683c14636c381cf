"""
LED Commands

Logical commands understood by both firmware families. Each command is a
small dataclass; byte sized fields are clamped to 0-255 on creation so an
encoder never has to reject a value.
"""

from dataclasses import dataclass


def _byte(value: int) -> int:
    return max(0, min(255, int(value)))


@dataclass
class SetPower:
    """Turn the LEDs on or off."""
    on: bool = True

    def __post_init__(self):
        self.on = bool(self.on)


@dataclass
class SetColor:
    """Set an RGB color."""
    red: int = 0    # 0-255
    green: int = 0  # 0-255
    blue: int = 0   # 0-255

    def __post_init__(self):
        self.red = _byte(self.red)
        self.green = _byte(self.green)
        self.blue = _byte(self.blue)

    @classmethod
    def from_hex(cls, value: str) -> "SetColor":
        """Create a color command from a '#rrggbb' string."""
        value = value.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


@dataclass
class SetBrightness:
    """Set the brightness percentage (0-100)."""
    level: int = 100

    def __post_init__(self):
        self.level = _byte(self.level)


@dataclass
class SetWarmWhite:
    """Switch to the warm white channel at the given intensity (0-255)."""
    level: int = 255

    def __post_init__(self):
        self.level = _byte(self.level)


@dataclass
class SetEffect:
    """Start a ProtocolA custom effect with an animation speed (0-100)."""
    code: int
    speed: int = 100

    def __post_init__(self):
        self.code = _byte(self.code)
        self.speed = _byte(self.speed)


@dataclass
class SetMode:
    """Start a ProtocolB built-in mode."""
    code: int

    def __post_init__(self):
        self.code = _byte(self.code)
